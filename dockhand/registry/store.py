"""Filesystem-backed service registry.

Layout under ``settings.services_dir``::

    <name>/service.yaml         record metadata (written last, defines "registered")
    <name>/.env                 merged environment
    <name>/docker-compose.yml   container definition with routing labels

A directory without ``service.yaml`` is not a record.
"""

import contextlib
import fcntl
import logging
import os
import shutil

import yaml

from dockhand.environment.merge import ENV_FILENAME, write_private_file
from dockhand.errors import LockError, ServiceNotFoundError, ValidationError
from dockhand.registry.types import ServiceRecord, validate_service_name
from dockhand.secret_store.tokens import TokenStore

logger = logging.getLogger(__name__)

METADATA_FILENAME = "service.yaml"
COMPOSE_FILENAME = "docker-compose.yml"


class ServiceRegistry:
    """Durable record of known services. The single source of truth for existence."""

    def __init__(self, settings, tokens=None):
        self.settings = settings
        self.root = settings.services_dir
        self.tokens = tokens or TokenStore(settings)

    # ── paths ─────────────────────────────────────────────────────

    def service_dir(self, name):
        return self.root / name

    def metadata_path(self, name):
        return self.service_dir(name) / METADATA_FILENAME

    def env_path(self, name):
        return self.service_dir(name) / ENV_FILENAME

    def compose_path(self, name):
        return self.service_dir(name) / COMPOSE_FILENAME

    def ensure_dirs(self):
        """Create the config tree; the token dir is owner-only."""
        self.root.mkdir(parents=True, exist_ok=True)
        self.settings.proxy_dir.mkdir(parents=True, exist_ok=True)
        self.settings.locks_dir.mkdir(parents=True, exist_ok=True)
        self.tokens.ensure_dir()

    # ── queries ───────────────────────────────────────────────────

    def list(self):
        """Sorted names of all registered services."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir() and (p / METADATA_FILENAME).is_file())

    def exists(self, name):
        return self.metadata_path(name).is_file()

    def read(self, name):
        path = self.metadata_path(name)
        if not path.is_file():
            raise ServiceNotFoundError(f"Service '{name}' not found")
        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValidationError(f"Corrupt metadata for '{name}': {e}", hint=f"Inspect {path}.")
        return ServiceRecord.from_dict(data)

    def records(self):
        return [self.read(name) for name in self.list()]

    def hostname_owner(self, hostname, exclude=None):
        """Name of the record that claims ``hostname``, if any."""
        wanted = hostname.lower()
        for record in self.records():
            if record.name != exclude and record.hostname.lower() == wanted:
                return record.name
        return None

    # ── mutations ─────────────────────────────────────────────────

    def write(self, record):
        """Persist ``record`` atomically (temp file + rename)."""
        record.validate()
        self.service_dir(record.name).mkdir(parents=True, exist_ok=True)
        content = yaml.safe_dump(record.to_dict(), sort_keys=False)
        write_private_file(self.metadata_path(record.name), content)
        logger.debug(f"Registry record written: {record.name}")

    def delete(self, name):
        """Remove a record and everything it owns. Safe to call twice."""
        validate_service_name(name)
        removed_token = self.tokens.delete(name)
        service_dir = self.service_dir(name)
        removed_dir = service_dir.is_dir()
        if removed_dir:
            # Metadata first so a crash mid-delete never leaves a visible record
            self.metadata_path(name).unlink(missing_ok=True)
            shutil.rmtree(service_dir)
        if removed_token:
            logger.info("✓ Doppler token removed")
        if removed_dir:
            logger.info("✓ Service configuration removed")
        return removed_token or removed_dir

    @contextlib.contextmanager
    def lock(self, name):
        """Advisory per-service lock; fails fast if another process holds it."""
        validate_service_name(name)
        self.settings.locks_dir.mkdir(parents=True, exist_ok=True)
        lock_path = self.settings.locks_dir / f"{name}.lock"
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
        try:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                raise LockError(f"Service '{name}' is locked by another dockhand process")
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
