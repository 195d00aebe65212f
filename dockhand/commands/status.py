"""'status' command: one table for the proxy and every registered service."""

import asyncio
import logging

from dockhand.commands import make_context, print_header
from dockhand.lifecycle.status import status

logger = logging.getLogger(__name__)

COLUMNS = "{:<3} {:<20} {:<10} {:<10} {:<12} {:<8} {}"


def _proxy_line(proxy):
    if proxy.running:
        return f"✓ Traefik: running ({proxy.version}, up {proxy.uptime()})"
    if proxy.status == "not found":
        return "✗ Traefik: not found. Run 'dockhand setup' to start it."
    return f"! Traefik: {proxy.status}"


def format_report(report):
    """Render a StatusReport as a list of output lines."""
    lines = [_proxy_line(report.proxy), ""]
    if not report.services:
        lines.append("No services found. Use 'dockhand add' to add one.")
    else:
        lines.append(COLUMNS.format("#", "SERVICE", "STATUS", "HEALTH", "VERSION", "UPTIME", "HOSTNAME"))
        for i, svc in enumerate(report.services, start=1):
            c = svc.container
            status_text = "error" if svc.error else c.status
            lines.append(
                COLUMNS.format(i, svc.name, status_text, c.health, c.version, c.uptime(), svc.hostname or "-")
            )
    if report.orphans:
        lines.append("")
        lines.append("! Managed containers without a registered service:")
        lines.extend(f"  - {name}" for name in report.orphans)
    return lines


def handle_status(args):
    """Handle the status command."""
    ctx = make_context(args)
    print_header("Service Status")
    report = asyncio.run(status(ctx))
    for line in format_report(report):
        logger.info(line)


def register_status_command(subparsers):
    """Register the status subcommand."""
    parser = subparsers.add_parser("status", help="Show the proxy and all services")
    parser.set_defaults(func=handle_status)
