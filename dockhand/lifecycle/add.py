"""Add workflow: Absent → Registered → Running.

Every fallible check (shape, uniqueness, token, fetch, PORT) runs before
anything is written. The write phase itself is rolled back on failure, and
the registry record is written last.
"""

import logging
from dataclasses import dataclass

from dockhand.environment.merge import env_value, load_defaults, merge, write_env_file, write_private_file
from dockhand.errors import AuthError, DockhandError, RequiredFieldMissing, ValidationError
from dockhand.lifecycle.bootstrap import ensure_proxy
from dockhand.lifecycle.verify import wait_and_verify
from dockhand.proxy.compose import generate_service_compose
from dockhand.registry.types import (
    ServiceRecord,
    ServiceState,
    parse_port,
    utc_now,
    validate_health_path,
    validate_hostname,
    validate_image,
    validate_service_name,
)

logger = logging.getLogger(__name__)

REQUIRED_PORT_KEY = "PORT"


@dataclass(frozen=True)
class AddRequest:
    """Operator input for a new service."""

    name: str
    hostname: str
    image: str
    token: str
    health_path: str | None = None


@dataclass(frozen=True)
class AddResult:
    record: ServiceRecord
    environment: dict
    state: ServiceState
    verified: bool


def check_new_service(registry, name, hostname, image, health_path=None):
    """Validate operator input for a new service against the registry."""
    validate_service_name(name)
    if registry.exists(name):
        raise ValidationError(
            f"Service '{name}' already exists",
            hint=f"Use 'dockhand upgrade {name}' to update it.",
        )
    validate_hostname(hostname)
    owner = registry.hostname_owner(hostname)
    if owner is not None:
        raise ValidationError(
            f"Hostname '{hostname}' is already routed to service '{owner}'",
            hint="Choose a different hostname or remove the other service first.",
        )
    validate_image(image)
    if health_path:
        validate_health_path(health_path)


def require_port(environment, name):
    """PORT from a raw merged environment, decoded and range-checked."""
    raw = env_value(environment.get(REQUIRED_PORT_KEY, ""))
    if not raw:
        raise RequiredFieldMissing(f"PORT environment variable not found in Doppler secrets for '{name}'")
    return parse_port(raw)


async def prepare_environment(ctx, name, token):
    """Validate the token, fetch secrets and merge with declared defaults."""
    logger.info("→ Validating token...")
    if not await ctx.secrets.validate(token):
        raise AuthError("Invalid Doppler token")
    logger.info("✓ Token validated successfully")

    logger.info("→ Fetching secrets from Doppler...")
    secrets = await ctx.secrets.fetch_secrets(token)
    environment = merge(load_defaults(ctx.settings, name), secrets)
    port = require_port(environment, name)
    logger.info(f"✓ Found PORT={port}")
    return environment, port


def persist_service(ctx, record, environment, token):
    """Write env file, compose file, token and record; undo all on failure."""
    registry = ctx.registry
    registry.ensure_dirs()
    try:
        write_env_file(registry.env_path(record.name), environment)
        write_private_file(registry.compose_path(record.name), generate_service_compose(record, ctx.settings))
        ctx.tokens.save(record.name, token)
        registry.write(record)
    except BaseException:
        logger.error(f"✗ Failed to write configuration for '{record.name}', rolling back")
        registry.delete(record.name)
        raise


async def add(ctx, request: AddRequest) -> AddResult:
    """Register and start a new service."""
    registry = ctx.registry
    settings = ctx.settings

    validate_service_name(request.name)
    with registry.lock(request.name):
        check_new_service(registry, request.name, request.hostname, request.image, request.health_path)

        if not await ensure_proxy(ctx):
            raise DockhandError(
                "Failed to set up Traefik. Cannot continue.",
                hint=f"Inspect {settings.proxy_dir} and run 'dockhand setup'.",
            )

        environment, port = await prepare_environment(ctx, request.name, request.token)

        record = ServiceRecord(
            name=request.name,
            hostname=request.hostname,
            image=request.image,
            port=port,
            health_path=request.health_path or None,
            created_at=utc_now(),
        )
        persist_service(ctx, record, environment, request.token)
        logger.info("✓ Service configuration created")

        service_dir = registry.service_dir(record.name)
        if not await ctx.runtime.pull(service_dir):
            logger.warning("! Image pull failed; trying to start with a cached image")
        if not await ctx.runtime.up(service_dir):
            logger.warning("! docker compose up reported an error")

        verified = await wait_and_verify(ctx.runtime, record.name, settings.verify_wait, settings.verify_interval)
        if not verified:
            logger.warning("! Service may still be starting. Check logs:")
            logger.info(f"  cd {service_dir} && docker compose logs")

    state = ServiceState.RUNNING if verified else ServiceState.REGISTERED
    return AddResult(record=record, environment=environment, state=state, verified=verified)
