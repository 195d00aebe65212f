"""Day-two operations on a registered service: restart, logs, version info."""

import logging
from dataclasses import dataclass, field

from dockhand.lifecycle.verify import wait_and_verify

logger = logging.getLogger(__name__)


async def restart(ctx, name):
    """Restart the service's container and verify it comes back.

    When it does not, the compose project's ``ps`` listing is logged.
    """
    registry = ctx.registry
    registry.read(name)
    with registry.lock(name):
        service_dir = registry.service_dir(name)
        if not await ctx.runtime.restart(service_dir):
            logger.warning("! docker compose restart reported an error")
        verified = await wait_and_verify(ctx.runtime, name, ctx.settings.verify_wait, ctx.settings.verify_interval)
        if not verified:
            listing = await ctx.runtime.ps(service_dir)
            for line in listing.splitlines():
                logger.info(f"  {line}")
        return verified


async def logs(ctx, name, tail=100):
    """Stream the last ``tail`` log lines of the service."""
    ctx.registry.read(name)
    return await ctx.runtime.logs(ctx.registry.service_dir(name), tail=tail)


@dataclass(frozen=True)
class VersionEntry:
    name: str
    configured_image: str
    running_image: str | None
    status: str


@dataclass(frozen=True)
class VersionsReport:
    docker: str
    compose: str
    entries: list[VersionEntry] = field(default_factory=list)


async def versions(ctx) -> VersionsReport:
    """Docker / compose versions plus configured vs running image per service."""
    runtime = ctx.runtime
    settings = ctx.settings
    entries = []

    proxy = await runtime.container_status(settings.proxy_container)
    entries.append(VersionEntry(settings.proxy_container, settings.proxy_image, proxy.image, proxy.status))

    for record in ctx.registry.records():
        container = await runtime.container_status(record.name)
        entries.append(VersionEntry(record.name, record.image, container.image, container.status))

    return VersionsReport(
        docker=await runtime.docker_version(),
        compose=await runtime.compose_version(),
        entries=entries,
    )
