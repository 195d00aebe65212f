"""'upgrade' command: refresh secrets, pull the latest image, restart."""

import asyncio
import logging

from dockhand.commands import ask_yes_no, display_service_info, make_context, print_header, select_service
from dockhand.lifecycle.upgrade import upgrade

logger = logging.getLogger(__name__)


def pick_service(args, registry, action):
    """Service name from the positional arg, or an interactive selection.

    Returns None when there is nothing to pick or the operator quits.
    """
    if args.name:
        return args.name
    names = registry.list()
    if not names:
        logger.warning("! No services found. Use 'dockhand add' to add a service first.")
        return None
    logger.info(f"Select a service to {action}:")
    return select_service(names)


def handle_upgrade(args):
    """Handle the upgrade command."""
    ctx = make_context(args)
    print_header("Upgrade Service")

    name = pick_service(args, ctx.registry, "upgrade")
    if name is None:
        logger.info("→ Upgrade cancelled.")
        return
    record = ctx.registry.read(name)
    logger.info(f"→ Selected: {record.name}")

    if not args.yes and not ask_yes_no(f"Upgrade {record.name}?", default=True):
        logger.info("→ Upgrade cancelled.")
        return

    result = asyncio.run(upgrade(ctx, record.name))

    container = asyncio.run(ctx.runtime.container_status(record.name))
    display_service_info(result.record, container)
    if result.port_changed:
        logger.info(f"Routing updated: backend port {result.old_port} → {result.new_port}")
    if result.verified:
        logger.info(f"✓ Service '{record.name}' upgraded successfully!")
    else:
        logger.warning(f"! Service '{record.name}' was upgraded but is not running yet.")


def register_upgrade_command(subparsers):
    """Register the upgrade subcommand."""
    parser = subparsers.add_parser("upgrade", help="Refresh secrets, pull the latest image and restart a service")
    parser.add_argument("name", nargs="?", default=None, help="Service name (prompted if omitted)")
    parser.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    parser.set_defaults(func=handle_upgrade)
