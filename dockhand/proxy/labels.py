"""Traefik routing directives derived from a ServiceRecord.

``emit`` is pure: same record and settings in, identical directives out.
"""

from dataclasses import dataclass

from dockhand.registry.types import validate_health_path, validate_hostname, validate_service_name
from dockhand.runtime.compose import MANAGED_LABEL

SERVICE_LABEL = "dockhand.service"
HEALTHCHECK_INTERVAL = "30s"


@dataclass(frozen=True)
class RoutingDirectives:
    """Labels and optional container healthcheck for one service."""

    router: str
    labels: tuple[str, ...]
    healthcheck: dict | None = None


def container_healthcheck(port, path):
    """Compose healthcheck block probing ``http://localhost:<port><path>``."""
    return {
        "test": ["CMD", "curl", "-f", f"http://localhost:{port}{path}"],
        "interval": HEALTHCHECK_INTERVAL,
        "timeout": "15s",
        "retries": 3,
        "start_period": "30s",
    }


def emit(record, settings) -> RoutingDirectives:
    """Build routing directives for ``record``.

    The router and backend service share the record's name, which the
    registry keeps unique. Name, hostname and health path are re-validated
    here so no template-breaking characters reach the labels.
    """
    validate_service_name(record.name)
    validate_hostname(record.hostname)
    router = record.name
    labels = [
        "traefik.enable=true",
        f"traefik.docker.network={settings.network}",
        f"traefik.http.routers.{router}.rule=Host(`{record.hostname}`)",
        f"traefik.http.routers.{router}.entrypoints={settings.entrypoint}",
        f"traefik.http.routers.{router}.tls.certresolver={settings.cert_resolver}",
        f"traefik.http.services.{router}.loadbalancer.server.port={int(record.port)}",
    ]
    healthcheck = None
    if record.health_path:
        validate_health_path(record.health_path)
        labels += [
            f"traefik.http.services.{router}.loadbalancer.healthcheck.path={record.health_path}",
            f"traefik.http.services.{router}.loadbalancer.healthcheck.interval={HEALTHCHECK_INTERVAL}",
        ]
        healthcheck = container_healthcheck(int(record.port), record.health_path)
    labels += [
        f"{MANAGED_LABEL}=true",
        f"{SERVICE_LABEL}={record.name}",
    ]
    return RoutingDirectives(router=router, labels=tuple(labels), healthcheck=healthcheck)
