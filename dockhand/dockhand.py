#!/usr/bin/env python3
"""Dockhand: Docker services behind Traefik with secrets from Doppler. CLI entrypoint."""

import argparse
import logging
import sys

from dockhand.commands.add import register_add_command
from dockhand.commands.remove import register_remove_command
from dockhand.commands.service_ops import register_service_ops_commands
from dockhand.commands.setup import register_setup_command
from dockhand.commands.status import register_status_command
from dockhand.commands.upgrade import register_upgrade_command
from dockhand.errors import DockhandError
from dockhand.logging_setup import setup_cli_logging

logger = logging.getLogger("dockhand")


def build_parser():
    parser = argparse.ArgumentParser(description="Manage Docker services behind Traefik with secrets from Doppler")
    parser.add_argument("--config", default=None, help="Path to a dockhand.yaml settings file")
    parser.add_argument("--dry-run", action="store_true", help="Print docker commands instead of running them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_add_command(subparsers)
    register_upgrade_command(subparsers)
    register_remove_command(subparsers)
    register_status_command(subparsers)
    register_setup_command(subparsers)
    register_service_ops_commands(subparsers)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_cli_logging(verbose=args.verbose)
    try:
        args.func(args)
    except DockhandError as e:
        logger.error(f"✗ {e}")
        if e.hint:
            logger.error(f"→ {e.hint}")
        sys.exit(1)
    except EOFError:
        logger.error("✗ Input closed")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("")
        logger.error("✗ Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
