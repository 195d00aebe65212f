"""Container runtime adapter: docker compose and docker inspect via run_cmd.

All operations go through the named compose/docker subcommands; nothing
reaches into a running container directly.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from dockhand.runtime.shell import make_run_cmd

logger = logging.getLogger(__name__)

MANAGED_LABEL = "dockhand.managed"
NOT_FOUND = "not found"
NO_HEALTHCHECK = "no healthcheck"
UNAVAILABLE = "N/A"
_ZERO_TIME = "0001-01-01T00:00:00Z"


@dataclass(frozen=True)
class ContainerStatus:
    """Runtime view of one container, as reported by docker inspect."""

    name: str
    status: str = NOT_FOUND
    health: str = UNAVAILABLE
    image: str | None = None
    started_at: str | None = None

    @property
    def running(self) -> bool:
        return self.status == "running"

    @property
    def version(self) -> str:
        return image_tag(self.image)

    def uptime(self, now=None) -> str:
        return format_uptime(self.started_at, now=now)


def image_tag(image):
    """Tag portion of an image reference; 'latest' when untagged."""
    if not image:
        return UNAVAILABLE
    if "@" in image:
        return image.rsplit("@", 1)[1][:19]
    last = image.rsplit("/", 1)[-1]
    if ":" in last:
        return last.rsplit(":", 1)[1]
    return "latest"


def _parse_docker_time(value):
    # Docker reports RFC 3339 with nanoseconds, e.g. 2024-05-01T10:00:00.123456789Z
    base = value.split(".", 1)[0].rstrip("Z")
    return datetime.strptime(base, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=timezone.utc)


def format_uptime(started_at, now=None):
    """Human uptime: 42s, 5m, 3h 12m, 2d 4h."""
    if not started_at or started_at.startswith(_ZERO_TIME[:10]):
        return UNAVAILABLE
    try:
        start = _parse_docker_time(started_at)
    except ValueError:
        return UNAVAILABLE
    now = now or datetime.now(timezone.utc)
    diff = max(0, int((now - start).total_seconds()))
    if diff < 60:
        return f"{diff}s"
    if diff < 3600:
        return f"{diff // 60}m"
    if diff < 86400:
        return f"{diff // 3600}h {diff % 3600 // 60}m"
    return f"{diff // 86400}d {diff % 86400 // 3600}h"


class ComposeRuntime:
    """Compose-file-per-service runtime.

    Args:
        run_cmd: async callable as built by ``make_run_cmd``
        dry_run: when True, mutating commands are only logged
    """

    def __init__(self, run_cmd=None, dry_run=False):
        self.run_cmd = run_cmd or make_run_cmd(dry_run=dry_run)
        self.dry_run = dry_run
        self._compose_cmd = None

    # ── compose ───────────────────────────────────────────────────

    async def compose_cmd(self):
        """``docker compose`` (v2) if available, else ``docker-compose`` (v1)."""
        if self._compose_cmd is None:
            rc, _, _ = await self.run_cmd(["docker", "compose", "version"], timeout=30)
            self._compose_cmd = ["docker", "compose"] if rc == 0 else ["docker-compose"]
        return self._compose_cmd

    async def compose(self, project_dir, *args, timeout=600, log_output=False):
        cmd = await self.compose_cmd()
        return await self.run_cmd([*cmd, *args], cwd=str(project_dir), timeout=timeout, log_output=log_output)

    async def build(self, project_dir):
        """Build images declared in the project. Workflows pull published images instead."""
        rc, _, _ = await self.compose(project_dir, "build", timeout=1800, log_output=True)
        return rc == 0

    async def pull(self, project_dir):
        logger.info("→ Pulling latest image...")
        rc, _, _ = await self.compose(project_dir, "pull", timeout=1800, log_output=True)
        return rc == 0

    async def up(self, project_dir):
        logger.info("→ Starting container...")
        rc, _, _ = await self.compose(project_dir, "up", "-d", timeout=600, log_output=True)
        return rc == 0

    async def down(self, project_dir, volumes=False):
        if volumes:
            logger.info("→ Stopping and removing container...")
            args = ("down", "--volumes", "--remove-orphans")
        else:
            logger.info("→ Stopping container...")
            args = ("down",)
        rc, _, _ = await self.compose(project_dir, *args, timeout=300, log_output=True)
        return rc == 0

    async def restart(self, project_dir):
        logger.info("→ Restarting container...")
        rc, _, _ = await self.compose(project_dir, "restart", timeout=300, log_output=True)
        return rc == 0

    async def ps(self, project_dir):
        rc, stdout, _ = await self.compose(project_dir, "ps", timeout=60)
        return stdout if rc == 0 else ""

    async def logs(self, project_dir, tail=100):
        rc, _, _ = await self.compose(project_dir, "logs", f"--tail={tail}", timeout=120, log_output=True)
        return rc == 0

    # ── docker inspect ────────────────────────────────────────────

    async def container_names(self, label=None):
        """Names of all containers (running or not), optionally filtered by label."""
        cmd = ["docker", "ps", "-a", "--format", "{{.Names}}"]
        if label:
            cmd += ["--filter", f"label={label}"]
        rc, stdout, _ = await self.run_cmd(cmd, timeout=60)
        if rc != 0:
            return []
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def _inspect(self, name, template):
        rc, stdout, _ = await self.run_cmd(["docker", "inspect", f"--format={template}", name], timeout=60)
        if rc != 0:
            return None
        return stdout.strip() or None

    async def container_status(self, name) -> ContainerStatus:
        """Full status for ``name``; a missing container reports ``not found``."""
        if name not in await self.container_names():
            return ContainerStatus(name=name)
        status = await self._inspect(name, "{{.State.Status}}") or UNAVAILABLE
        health = await self._inspect(
            name, f"{{{{if .State.Health}}}}{{{{.State.Health.Status}}}}{{{{else}}}}{NO_HEALTHCHECK}{{{{end}}}}"
        )
        image = await self._inspect(name, "{{.Config.Image}}")
        started_at = await self._inspect(name, "{{.State.StartedAt}}")
        return ContainerStatus(
            name=name,
            status=status,
            health=health or UNAVAILABLE,
            image=image,
            started_at=started_at,
        )

    async def is_running(self, name):
        names = await self.container_names()
        if name not in names:
            return False
        return await self._inspect(name, "{{.State.Status}}") == "running"

    # ── networks / versions ──────────────────────────────────────

    async def network_exists(self, network):
        rc, stdout, _ = await self.run_cmd(["docker", "network", "ls", "--format", "{{.Name}}"], timeout=60)
        return rc == 0 and network in stdout.split()

    async def create_network(self, network):
        rc, _, stderr = await self.run_cmd(["docker", "network", "create", network], timeout=60)
        if rc != 0:
            logger.debug(f"docker network create {network} failed: {stderr.strip()}")
        return rc == 0

    async def docker_version(self):
        rc, stdout, _ = await self.run_cmd(["docker", "version", "--format", "{{.Server.Version}}"], timeout=30)
        return stdout.strip() if rc == 0 and stdout.strip() else UNAVAILABLE

    async def compose_version(self):
        cmd = await self.compose_cmd()
        rc, stdout, _ = await self.run_cmd([*cmd, "version", "--short"], timeout=30)
        return stdout.strip() if rc == 0 and stdout.strip() else UNAVAILABLE
