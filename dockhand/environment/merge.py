"""Env file parsing, precedence merge, and owner-only atomic persistence."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"
BACKUP_SUFFIX = ".backup"
DEFAULTS_FILENAME = ".env.defaults"

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


def _unescape(body):
    out = []
    chars = iter(body)
    for c in chars:
        if c == "\\":
            nxt = next(chars, "")
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
        else:
            out.append(c)
    return "".join(out)


def env_value(raw):
    """Decode the right-hand side of an env line into its value.

    Double-quoted values have their quotes removed and ``\\n``-style escapes
    decoded; single-quoted values are taken literally.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return _unescape(raw[1:-1])
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    return raw


def parse_env_lines(text):
    """Parse KEY=VALUE lines into a dict of key -> raw right-hand side.

    Values are kept exactly as written, quotes and escapes included, so they
    can be written back without changing what compose reads. Blank lines,
    ``#`` comments and lines without ``=`` are skipped. When a key repeats,
    the last occurrence wins.
    """
    result = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        result[key] = value
    return result


def parse_env(text):
    """Parse KEY=VALUE lines into a dict of decoded values."""
    return {key: env_value(raw) for key, raw in parse_env_lines(text).items()}


def merge(defaults, overrides):
    """Merge two env mappings. Keys in ``overrides`` always win."""
    result = dict(overrides)
    for key, value in defaults.items():
        if key not in result:
            result[key] = value
    return result


def render_env(mapping):
    """Serialise a raw mapping (as from ``parse_env_lines``) to KEY=VALUE lines, sorted by key."""
    return "".join(f"{key}={mapping[key]}\n" for key in sorted(mapping))


def write_private_file(path, content):
    """Atomically write ``content`` to ``path`` with mode 0600.

    The temp file is created owner-only, so the data is never
    world-readable, then renamed over the target.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def write_env_file(path, mapping):
    """Persist a merged environment owner-only."""
    write_private_file(path, render_env(mapping))
    logger.debug(f"Environment file written: {path}")


def read_env_lines(path):
    """Raw right-hand sides of an env file; a missing file yields {}."""
    path = Path(path)
    if not path.is_file():
        return {}
    return parse_env_lines(path.read_text())


def read_env_file(path):
    """Decoded values of an env file; a missing file yields {}."""
    return {key: env_value(raw) for key, raw in read_env_lines(path).items()}


def load_defaults(settings, name):
    """Declared defaults for a service, raw: ``<defaults_dir>/<name>/.env.defaults``."""
    return read_env_lines(Path(settings.defaults_dir) / name / DEFAULTS_FILENAME)


def backup_env_file(path):
    """Copy the env file to its ``.backup`` sibling. Returns the backup path or None."""
    path = Path(path)
    if not path.is_file():
        return None
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copy2(path, backup)
    os.chmod(backup, 0o600)
    return backup


def restore_env_file(path):
    """Move the ``.backup`` sibling back over the env file. Returns True if restored."""
    path = Path(path)
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    if not backup.is_file():
        return False
    os.replace(backup, path)
    logger.debug(f"Restored {path} from backup")
    return True


def discard_backup(path):
    Path(path).with_name(Path(path).name + BACKUP_SUFFIX).unlink(missing_ok=True)
