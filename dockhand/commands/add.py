"""'add' command: register and start a new service."""

import asyncio
import logging
import os

from dockhand.commands import (
    ask,
    ask_secret,
    display_service_info,
    make_context,
    print_header,
    useful_commands,
)
from dockhand.errors import AuthError, ValidationError
from dockhand.lifecycle.add import AddRequest, add
from dockhand.redact import register_secret
from dockhand.registry.types import (
    validate_health_path,
    validate_hostname,
    validate_image,
    validate_service_name,
)

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_PATH = "/health"
MAX_TOKEN_ATTEMPTS = 3


def _resolve_name(args, registry):
    if not args.name:
        logger.info("Enter a name for this service (used for the container name, e.g. 'billing_api'):")
    name = args.name or ask("Service name")
    validate_service_name(name)
    if registry.exists(name):
        raise ValidationError(f"Service '{name}' already exists", hint=f"Use 'dockhand upgrade {name}' to update it.")
    return name


def _resolve_hostname(args, registry):
    if not args.hostname:
        logger.info("Enter the public hostname for this service (e.g. 'api.example.com'):")
    hostname = args.hostname or ask("Hostname")
    validate_hostname(hostname)
    owner = registry.hostname_owner(hostname)
    if owner is not None:
        raise ValidationError(
            f"Hostname '{hostname}' is already routed to service '{owner}'",
            hint="Choose a different hostname or remove the other service first.",
        )
    return hostname


def _resolve_image(args):
    if not args.image:
        logger.info("Enter the Docker image (e.g. 'docker.io/username/image:latest'):")
    image = args.image or ask("Docker image")
    validate_image(image)
    return image


def _resolve_health_path(args):
    if args.no_health:
        return None
    if args.health_path:
        validate_health_path(args.health_path)
        return args.health_path
    logger.info("Health check configuration:")
    logger.info(f"  1) Use {DEFAULT_HEALTH_PATH} endpoint")
    logger.info("  2) Skip health check")
    choice = ask("Select [1-2]")
    return DEFAULT_HEALTH_PATH if choice == "1" else None


def _resolve_token(args, ctx):
    """Token from --token / $DOPPLER_TOKEN, or prompted with bounded retries."""
    token = args.token or os.environ.get("DOPPLER_TOKEN", "")
    if token:
        register_secret(token)
        return token

    logger.info("Enter the Doppler service token for this service.")
    logger.info("Create one at: Doppler Dashboard → Project → Config → Access → Service Tokens")
    for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
        token = ask_secret("Doppler service token")
        if not token:
            logger.error("✗ Token cannot be empty")
            continue
        register_secret(token)
        logger.info("→ Validating token...")
        if asyncio.run(ctx.secrets.validate(token)):
            return token
        logger.error("✗ Invalid token. Please check and try again.")
    raise AuthError(f"No valid Doppler token after {MAX_TOKEN_ATTEMPTS} attempts")


def handle_add(args):
    """Handle the add command."""
    ctx = make_context(args)
    registry = ctx.registry

    print_header("Add New Service")
    logger.info("This will add a new Docker service with:")
    logger.info("  - Automatic SSL certificate via Let's Encrypt")
    logger.info("  - Environment variables from Doppler")
    logger.info("  - Traefik routing by hostname")
    logger.info("")

    name = _resolve_name(args, registry)
    hostname = _resolve_hostname(args, registry)
    image = _resolve_image(args)
    health_path = _resolve_health_path(args)
    token = _resolve_token(args, ctx)

    request = AddRequest(name=name, hostname=hostname, image=image, token=token, health_path=health_path)
    result = asyncio.run(add(ctx, request))

    record = result.record
    container = asyncio.run(ctx.runtime.container_status(record.name))
    display_service_info(record, container)
    logger.info("Access your service at:")
    logger.info(f"  https://{record.hostname}/")
    logger.info("")
    logger.info("Note: SSL certificate may take a minute to be issued.")
    logger.info("")
    useful_commands(registry.service_dir(record.name))
    logger.info(f"✓ Service '{record.name}' added successfully!")


def register_add_command(subparsers):
    """Register the add subcommand."""
    parser = subparsers.add_parser("add", help="Add a new service behind Traefik")
    parser.add_argument("--name", default=None, help="Service name (letters, digits, underscore; starts with a letter)")
    parser.add_argument("--hostname", default=None, help="Public hostname routed to the service")
    parser.add_argument("--image", default=None, help="Docker image reference")
    health = parser.add_mutually_exclusive_group()
    health.add_argument("--health-path", default=None, help="HTTP health-check path (e.g. /health)")
    health.add_argument("--no-health", action="store_true", help="Skip the health check")
    parser.add_argument("--token", default=None, help="Doppler service token (default: $DOPPLER_TOKEN)")
    parser.set_defaults(func=handle_add)
