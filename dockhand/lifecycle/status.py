"""Read-only status aggregation across the proxy and all registered services."""

import logging
from dataclasses import dataclass, field

from dockhand.errors import DockhandError
from dockhand.registry.types import ServiceRecord, ServiceState
from dockhand.runtime.compose import MANAGED_LABEL, ContainerStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceStatus:
    """One registered service joined with its container's runtime status."""

    name: str
    record: ServiceRecord | None
    container: ContainerStatus
    error: str | None = None

    @property
    def state(self) -> ServiceState:
        if self.container.running:
            return ServiceState.RUNNING
        if self.container.status == "exited" or self.container.status == "created":
            return ServiceState.STOPPED
        return ServiceState.REGISTERED

    @property
    def hostname(self) -> str:
        return self.record.hostname if self.record else ""


@dataclass(frozen=True)
class StatusReport:
    proxy: ContainerStatus
    services: list[ServiceStatus] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)


async def status(ctx) -> StatusReport:
    """Collect status without mutating anything.

    A registered service whose container is missing reports ``not found``.
    Containers carrying the managed label without a record are orphans.
    """
    registry = ctx.registry
    runtime = ctx.runtime

    proxy = await runtime.container_status(ctx.settings.proxy_container)

    names = registry.list()
    services = []
    for name in names:
        record, error = None, None
        try:
            record = registry.read(name)
        except DockhandError as e:
            error = str(e)
            logger.warning(f"! {name}: {e}")
        container = await runtime.container_status(name)
        services.append(ServiceStatus(name=name, record=record, container=container, error=error))

    labelled = await runtime.container_names(label=f"{MANAGED_LABEL}=true")
    orphans = sorted(set(labelled) - set(names))
    return StatusReport(proxy=proxy, services=services, orphans=orphans)
