"""'restart', 'logs' and 'versions' commands."""

import asyncio
import logging

from dockhand.commands import make_context, print_header
from dockhand.commands.upgrade import pick_service
from dockhand.lifecycle.ops import logs, restart, versions

logger = logging.getLogger(__name__)


def handle_restart(args):
    ctx = make_context(args)
    name = pick_service(args, ctx.registry, "restart")
    if name is None:
        return
    logger.info(f"→ Restarting {name}...")
    if asyncio.run(restart(ctx, name)):
        logger.info(f"✓ Service '{name}' restarted")
    else:
        logger.warning(f"! Service '{name}' did not come back up")


def handle_logs(args):
    ctx = make_context(args)
    name = pick_service(args, ctx.registry, "view logs for")
    if name is None:
        return
    asyncio.run(logs(ctx, name, tail=args.tail))


def handle_versions(args):
    ctx = make_context(args)
    print_header("Versions")
    report = asyncio.run(versions(ctx))
    logger.info(f"Docker:  {report.docker}")
    logger.info(f"Compose: {report.compose}")
    logger.info("")
    for entry in report.entries:
        running = entry.running_image or "-"
        marker = "" if running in ("-", entry.configured_image) else "  (differs)"
        logger.info(f"  {entry.name:<20} {entry.status:<10} configured={entry.configured_image} running={running}{marker}")


def register_service_ops_commands(subparsers):
    """Register restart, logs and versions."""
    restart_parser = subparsers.add_parser("restart", help="Restart a service")
    restart_parser.add_argument("name", nargs="?", default=None, help="Service name (prompted if omitted)")
    restart_parser.set_defaults(func=handle_restart)

    logs_parser = subparsers.add_parser("logs", help="Show recent log lines of a service")
    logs_parser.add_argument("name", nargs="?", default=None, help="Service name (prompted if omitted)")
    logs_parser.add_argument("--tail", type=int, default=100, help="Number of lines to show (default: 100)")
    logs_parser.set_defaults(func=handle_logs)

    versions_parser = subparsers.add_parser("versions", help="Show Docker, compose and image versions")
    versions_parser.set_defaults(func=handle_versions)
