"""Remove workflow: two confirmations, then stop, drop volumes, delete artifacts."""

import logging

from dockhand.errors import RemovalAborted

logger = logging.getLogger(__name__)


async def remove(ctx, name, confirm):
    """Irreversibly remove ``name``.

    Args:
        confirm: callable(record) -> (yes: bool, typed_name: str). Both an
            affirmative answer and an exact re-typing of the name are
            required before anything is touched.
    """
    registry = ctx.registry
    record = registry.read(name)

    yes, typed_name = confirm(record)
    if not yes:
        raise RemovalAborted("Removal cancelled.")
    if typed_name != name:
        raise RemovalAborted("Service name does not match. Removal cancelled.")

    with registry.lock(name):
        # Re-read under the lock in case another process removed it meanwhile
        registry.read(name)
        service_dir = registry.service_dir(name)
        if await ctx.runtime.down(service_dir, volumes=True):
            logger.info("✓ Container stopped and removed")
        else:
            logger.warning("! docker compose down failed; removing configuration anyway")
            logger.info(f"  Check for a leftover container with: docker ps -a --filter name={name}")
        registry.delete(name)

    logger.info(f"Service '{name}' has been removed.")
    logger.info("Note: the TLS certificate may stay cached in Traefik until it expires.")
    return record
