"""Settings loading: dataclass defaults, optional YAML file, env overrides."""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import yaml

from dockhand.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "dockhand.yaml"
DEFAULT_SECRETS_URL = "https://api.doppler.com/v3/configs/config/secrets/download"

# Env var -> (field name, converter)
_ENV_OVERRIDES = {
    "DOCKHAND_CONFIG_DIR": ("config_dir", str),
    "DOCKHAND_NETWORK": ("network", str),
    "DOCKHAND_SECRETS_URL": ("secrets_url", str),
    "DOCKHAND_ACME_EMAIL": ("acme_email", str),
    "DOCKHAND_VERIFY_WAIT": ("verify_wait", float),
}


@dataclass(frozen=True)
class Settings:
    """Resolved tool configuration. Paths are relative to the working directory unless absolute."""

    config_dir: str = "config-generated"
    defaults_dir: str = "default-config"
    network: str = "dockhand_network"
    proxy_container: str = "traefik"
    proxy_image: str = "traefik:latest"
    cert_resolver: str = "letsencrypt"
    entrypoint: str = "websecure"
    acme_email: str = "admin@example.com"
    secrets_url: str = DEFAULT_SECRETS_URL
    http_timeout: float = 30.0
    verify_wait: float = 5.0
    verify_interval: float = 1.0

    @property
    def root(self) -> Path:
        return Path(self.config_dir)

    @property
    def services_dir(self) -> Path:
        return self.root / "services"

    @property
    def proxy_dir(self) -> Path:
        return self.root / "proxy"

    @property
    def tokens_dir(self) -> Path:
        return self.root / ".doppler-tokens"

    @property
    def locks_dir(self) -> Path:
        return self.root / "locks"

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        """Build Settings from a config dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValidationError(
                f"Unknown config key(s): {', '.join(unknown)}",
                hint=f"Valid keys: {', '.join(sorted(known))}",
            )
        return cls(**d)


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def _load_yaml(config_path):
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValidationError(f"Error parsing YAML config {config_path}: {e}", hint="Fix the YAML syntax and retry.")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {config_path} must contain a mapping", hint="Use 'key: value' pairs.")
    return data


def _apply_env(settings: Settings, environ) -> Settings:
    overrides = {}
    for var, (name, convert) in _ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            overrides[name] = convert(raw)
        except ValueError:
            raise ValidationError(f"Invalid value for {var}: {raw!r}", hint=f"Unset {var} or give it a valid value.")
    return replace(settings, **overrides) if overrides else settings


def load_settings(config_path=None, environ=None) -> Settings:
    """Resolve settings from defaults, a YAML file, and DOCKHAND_* env vars.

    The YAML file is ``config_path`` if given, else ``$DOCKHAND_CONFIG``,
    else ``dockhand.yaml`` in the working directory when it exists.
    An explicitly named file that does not exist is an error.
    """
    environ = os.environ if environ is None else environ
    explicit = config_path or environ.get("DOCKHAND_CONFIG")

    data = {}
    if explicit:
        path = _expand_path(explicit)
        if not os.path.isfile(path):
            raise ValidationError(f"Config file '{path}' not found.", hint="Pass an existing file to --config.")
        data = _load_yaml(path)
        logger.debug(f"Loaded config from {path}")
    elif os.path.isfile(DEFAULT_CONFIG_FILE):
        data = _load_yaml(DEFAULT_CONFIG_FILE)
        logger.debug(f"Loaded config from {DEFAULT_CONFIG_FILE}")

    settings = Settings.from_dict(data)
    settings = _apply_env(settings, environ)
    return replace(
        settings,
        config_dir=_expand_path(settings.config_dir),
        defaults_dir=_expand_path(settings.defaults_dir),
    )
