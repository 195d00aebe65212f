"""'remove' command: irreversible removal behind a double confirmation."""

import asyncio
import logging

from dockhand.commands import ask, ask_yes_no, display_service_info, make_context, print_header
from dockhand.commands.upgrade import pick_service
from dockhand.lifecycle.remove import remove

logger = logging.getLogger(__name__)


def make_confirm(args, container=None):
    """Confirmation callback: yes/no, then the service name typed back.

    ``--yes`` answers the first question and ``--confirm-name`` the second;
    anything not given on the command line is prompted for.
    """

    def confirm(record):
        logger.warning("! This will permanently remove the service and all its configuration.")
        display_service_info(record, container)
        yes = args.yes or ask_yes_no(f"Are you sure you want to remove '{record.name}'?", default=False)
        if not yes:
            return False, ""
        typed = args.confirm_name if args.confirm_name is not None else ask("Type the service name to confirm removal")
        return True, typed

    return confirm


def handle_remove(args):
    """Handle the remove command."""
    ctx = make_context(args)
    print_header("Remove Service")

    name = pick_service(args, ctx.registry, "remove")
    if name is None:
        logger.info("→ Removal cancelled.")
        return

    ctx.registry.read(name)
    container = asyncio.run(ctx.runtime.container_status(name))
    asyncio.run(remove(ctx, name, make_confirm(args, container)))
    logger.info("✓ Service removed successfully!")


def register_remove_command(subparsers):
    """Register the remove subcommand."""
    parser = subparsers.add_parser("remove", help="Permanently remove a service and its configuration")
    parser.add_argument("name", nargs="?", default=None, help="Service name (prompted if omitted)")
    parser.add_argument("-y", "--yes", action="store_true", help="Answer yes to the first confirmation")
    parser.add_argument("--confirm-name", default=None, help="Service name typed back as the second confirmation")
    parser.set_defaults(func=handle_remove)
