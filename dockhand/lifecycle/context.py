"""Explicit collaborators passed to every lifecycle workflow."""

from dataclasses import dataclass

from dockhand.config import Settings
from dockhand.registry.store import ServiceRegistry
from dockhand.runtime.compose import ComposeRuntime
from dockhand.secret_store.client import SecretStoreClient
from dockhand.secret_store.tokens import TokenStore


@dataclass
class LifecycleContext:
    """Settings plus the registry, token store, secret client and runtime."""

    settings: Settings
    registry: ServiceRegistry
    tokens: TokenStore
    secrets: SecretStoreClient
    runtime: ComposeRuntime

    @classmethod
    def build(cls, settings, dry_run=False, run_cmd=None, transport=None) -> "LifecycleContext":
        """Wire default collaborators from ``settings``.

        ``run_cmd`` and ``transport`` replace the subprocess runner and the
        HTTP transport respectively (used by tests).
        """
        tokens = TokenStore(settings)
        return cls(
            settings=settings,
            registry=ServiceRegistry(settings, tokens=tokens),
            tokens=tokens,
            secrets=SecretStoreClient(settings.secrets_url, timeout=settings.http_timeout, transport=transport),
            runtime=ComposeRuntime(run_cmd=run_cmd, dry_run=dry_run),
        )
