"""Bounded wait-and-poll for a container to reach the running state."""

import asyncio
import logging

logger = logging.getLogger(__name__)


async def wait_and_verify(runtime, name, wait_seconds=5.0, interval=1.0):
    """Poll until ``name`` is running or ``wait_seconds`` elapse.

    Returns:
        True if the container is running, False when the window elapsed.
        A False result is a warning for the caller, not an error.
    """
    logger.info("→ Waiting for service to start...")
    if runtime.dry_run:
        return True

    loop = asyncio.get_running_loop()
    deadline = loop.time() + wait_seconds
    while True:
        if await runtime.is_running(name):
            logger.info("✓ Service is running")
            return True
        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        await asyncio.sleep(min(interval, remaining))

    status = await runtime.container_status(name)
    logger.warning(f"! Service status: {status.status}")
    return False
