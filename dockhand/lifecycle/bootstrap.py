"""One-time infrastructure bring-up: shared network and the Traefik container."""

import logging

from dockhand.environment.merge import write_private_file
from dockhand.lifecycle.verify import wait_and_verify
from dockhand.proxy.compose import generate_proxy_compose
from dockhand.registry.store import COMPOSE_FILENAME

logger = logging.getLogger(__name__)


async def ensure_network(ctx):
    network = ctx.settings.network
    if await ctx.runtime.network_exists(network):
        return True
    logger.info(f"→ Creating docker network {network}...")
    return await ctx.runtime.create_network(network)


async def ensure_proxy(ctx):
    """Make sure the proxy is running, installing it if needed.

    Idempotent: returns immediately when the proxy container is already
    running. Returns False if it could not be started.
    """
    settings = ctx.settings
    runtime = ctx.runtime

    if await runtime.is_running(settings.proxy_container):
        logger.info("✓ Traefik is already running")
        return True

    logger.info("→ Installing Traefik...")
    ctx.registry.ensure_dirs()
    if not await ensure_network(ctx):
        logger.error(f"✗ Failed to create docker network {settings.network}")
        return False

    compose_path = settings.proxy_dir / COMPOSE_FILENAME
    write_private_file(compose_path, generate_proxy_compose(settings))

    if not await runtime.up(settings.proxy_dir):
        logger.error("✗ Failed to start Traefik")
        return False

    if await wait_and_verify(runtime, settings.proxy_container, settings.verify_wait, settings.verify_interval):
        logger.info("✓ Traefik installed and running")
        return True
    logger.error("✗ Failed to start Traefik")
    logger.info(f"  Check logs: cd {settings.proxy_dir} && docker compose logs")
    return False
