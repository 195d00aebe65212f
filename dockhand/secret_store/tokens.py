"""Per-service Doppler token storage: one 0600 file per service in a 0700 dir."""

import logging
import os

from dockhand.environment.merge import write_private_file
from dockhand.redact import register_secret

logger = logging.getLogger(__name__)


class TokenStore:
    """Filesystem token store rooted at ``settings.tokens_dir``."""

    def __init__(self, settings):
        self.dir = settings.tokens_dir

    def ensure_dir(self):
        self.dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.dir, 0o700)

    def path(self, name):
        return self.dir / name

    def save(self, name, token):
        self.ensure_dir()
        register_secret(token)
        write_private_file(self.path(name), token + "\n")

    def load(self, name):
        """Return the stored token, or None when there is none."""
        path = self.path(name)
        if not path.is_file():
            return None
        token = path.read_text().strip()
        if not token:
            return None
        register_secret(token)
        return token

    def delete(self, name):
        """Remove the token. Returns True if a file was deleted."""
        path = self.path(name)
        if path.is_file():
            path.unlink()
            logger.debug(f"Removed token for {name}")
            return True
        return False
