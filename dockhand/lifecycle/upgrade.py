"""Upgrade workflow: refresh secrets, propagate PORT changes, pull and restart."""

import logging
from dataclasses import dataclass

from dockhand.environment.merge import (
    backup_env_file,
    discard_backup,
    load_defaults,
    merge,
    restore_env_file,
    write_env_file,
    write_private_file,
)
from dockhand.errors import AuthError, DockhandError, TransportError
from dockhand.lifecycle.add import require_port
from dockhand.lifecycle.verify import wait_and_verify
from dockhand.proxy.compose import generate_service_compose
from dockhand.registry.types import ServiceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeResult:
    record: ServiceRecord
    old_port: int
    new_port: int
    secrets_updated: bool
    verified: bool

    @property
    def port_changed(self) -> bool:
        return self.old_port != self.new_port


async def refresh_environment(ctx, record):
    """Re-fetch secrets with the stored token and rewrite the env file.

    Returns ``(record, secrets_updated)``. Without a usable token the env
    file is left untouched. On fetch failure the previous env file is
    restored from backup. A missing PORT restores the backup and raises.
    """
    name = record.name
    token = ctx.tokens.load(name)
    if token is None:
        logger.warning("! No Doppler token found, skipping environment update")
        return record, False

    if not await ctx.secrets.validate(token):
        logger.warning(f"! Saved token for {name} is invalid or expired, skipping environment update")
        logger.info("  Run 'dockhand remove' and 'dockhand add' with a new token to rotate it.")
        return record, False

    env_path = ctx.registry.env_path(name)
    backup_env_file(env_path)

    logger.info("→ Fetching latest secrets from Doppler...")
    try:
        secrets = await ctx.secrets.fetch_secrets(token)
    except (AuthError, TransportError) as e:
        restore_env_file(env_path)
        logger.warning(f"! {e}, using existing environment")
        return record, False

    environment = merge(load_defaults(ctx.settings, name), secrets)
    try:
        new_port = require_port(environment, name)
    except DockhandError as e:
        restore_env_file(env_path)
        e.hint = f"{e.hint} The previous environment was kept.".strip()
        raise

    write_env_file(env_path, environment)
    discard_backup(env_path)
    logger.info("✓ Environment variables updated")

    if new_port != record.port:
        logger.warning(f"! PORT changed: {record.port} → {new_port}")
        record = record.with_port(new_port)
    return record, True


async def upgrade(ctx, name) -> UpgradeResult:
    """Upgrade a registered service in place."""
    registry = ctx.registry
    settings = ctx.settings

    with registry.lock(name):
        previous = registry.read(name)
        record, secrets_updated = await refresh_environment(ctx, previous)

        # Record first; compose is always regenerated from it
        if record != previous:
            registry.write(record)
        write_private_file(registry.compose_path(name), generate_service_compose(record, settings))

        service_dir = registry.service_dir(name)
        if not await ctx.runtime.pull(service_dir):
            logger.warning("! Image pull failed; restarting with the cached image")
        await ctx.runtime.down(service_dir)
        if not await ctx.runtime.up(service_dir):
            logger.warning("! docker compose up reported an error")

        verified = await wait_and_verify(ctx.runtime, name, settings.verify_wait, settings.verify_interval)
        if not verified:
            logger.warning("! Service may not have started correctly. Check logs:")
            logger.info(f"  cd {service_dir} && docker compose logs")

    return UpgradeResult(
        record=record,
        old_port=previous.port,
        new_port=record.port,
        secrets_updated=secrets_updated,
        verified=verified,
    )
