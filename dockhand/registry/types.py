"""ServiceRecord dataclass and field validation."""

import re
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum

from dockhand.errors import ValidationError

SERVICE_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9_]*")
HOSTNAME_LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
HOSTNAME_RE = re.compile(rf"{HOSTNAME_LABEL}(?:\.{HOSTNAME_LABEL})*")
HEALTH_PATH_RE = re.compile(r"/[A-Za-z0-9._~/%-]*")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ServiceState(Enum):
    """Lifecycle states of one service."""

    ABSENT = "absent"
    REGISTERED = "registered"
    RUNNING = "running"
    STOPPED = "stopped"
    REMOVING = "removing"


def validate_service_name(name: str) -> None:
    if not name:
        raise ValidationError("Service name cannot be empty", hint="Pick a name such as 'billing_api'.")
    if not SERVICE_NAME_RE.fullmatch(name):
        raise ValidationError(
            f"Invalid service name '{name}'",
            hint="Service name must start with a letter and contain only letters, numbers, and underscores.",
        )


def validate_hostname(hostname: str) -> None:
    if not hostname:
        raise ValidationError("Hostname cannot be empty", hint="Enter the public hostname, e.g. 'api.example.com'.")
    if len(hostname) > 253 or not HOSTNAME_RE.fullmatch(hostname):
        raise ValidationError(
            f"Invalid hostname '{hostname}'",
            hint="Use a plain DNS name: letters, digits, hyphens and dots only.",
        )


def validate_image(image: str) -> None:
    if not image:
        raise ValidationError("Docker image cannot be empty", hint="Enter an image such as 'docker.io/user/app:latest'.")
    if any(c.isspace() for c in image):
        raise ValidationError(f"Invalid Docker image '{image}'", hint="Image references cannot contain whitespace.")


def validate_health_path(path: str) -> None:
    # Keep it a path, not a URL, since it is interpolated into the healthcheck command.
    if "://" in path or ".." in path or not HEALTH_PATH_RE.fullmatch(path):
        raise ValidationError(
            f"Invalid health-check path '{path}'",
            hint="Use a simple absolute path such as '/health'.",
        )


def parse_port(raw) -> int:
    """Parse a PORT value from the environment into a positive integer."""
    try:
        port = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"PORT must be an integer, got {raw!r}", hint="Fix PORT in the service's Doppler config.")
    if not 0 < port < 65536:
        raise ValidationError(f"PORT out of range: {port}", hint="Use a port between 1 and 65535.")
    return port


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class ServiceRecord:
    """Registry entry describing one deployed container's routing and identity."""

    name: str
    hostname: str
    image: str
    port: int
    health_path: str | None = None
    created_at: str = ""

    def validate(self) -> None:
        validate_service_name(self.name)
        validate_hostname(self.hostname)
        validate_image(self.image)
        parse_port(self.port)
        if self.health_path:
            validate_health_path(self.health_path)

    def with_port(self, port: int) -> "ServiceRecord":
        return replace(self, port=port)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "ServiceRecord":
        """Build a record from its persisted mapping."""
        try:
            return cls(
                name=d["name"],
                hostname=d["hostname"],
                image=d["image"],
                port=int(d["port"]),
                health_path=d.get("health_path") or None,
                created_at=str(d.get("created_at", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Corrupt service metadata: {e}", hint="Restore the service.yaml file or remove the service.")
