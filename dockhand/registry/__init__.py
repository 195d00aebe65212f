"""Service registry: record types and the filesystem store."""

from dockhand.registry.store import COMPOSE_FILENAME, METADATA_FILENAME, ServiceRegistry
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

__all__ = [
    "COMPOSE_FILENAME",
    "METADATA_FILENAME",
    "ServiceRecord",
    "ServiceRegistry",
    "ServiceState",
    "parse_port",
    "utc_now",
    "validate_health_path",
    "validate_hostname",
    "validate_image",
    "validate_service_name",
]
