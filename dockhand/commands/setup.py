"""'setup' command: create the shared network and start the Traefik proxy."""

import asyncio
import logging

from dockhand.commands import make_context, print_header
from dockhand.errors import DockhandError
from dockhand.lifecycle.bootstrap import ensure_proxy

logger = logging.getLogger(__name__)


def handle_setup(args):
    """Handle the setup command."""
    ctx = make_context(args, acme_email=args.acme_email)
    print_header("Proxy Setup")
    logger.info(f"Network:     {ctx.settings.network}")
    logger.info(f"Proxy:       {ctx.settings.proxy_container} ({ctx.settings.proxy_image})")
    logger.info(f"ACME email:  {ctx.settings.acme_email}")
    logger.info("")
    if not asyncio.run(ensure_proxy(ctx)):
        raise DockhandError(
            "Traefik failed to start",
            hint=f"Check the logs with: cd {ctx.settings.proxy_dir} && docker compose logs",
        )
    logger.info("✓ Proxy is ready")


def register_setup_command(subparsers):
    """Register the setup subcommand."""
    parser = subparsers.add_parser("setup", help="Create the shared network and start Traefik")
    parser.add_argument("--acme-email", default=None, help="Email for Let's Encrypt registration")
    parser.set_defaults(func=handle_setup)
