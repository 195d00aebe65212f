"""Lifecycle workflows: add, upgrade, remove, status, plus proxy bootstrap."""

from dockhand.lifecycle.add import AddRequest, AddResult, add
from dockhand.lifecycle.bootstrap import ensure_network, ensure_proxy
from dockhand.lifecycle.context import LifecycleContext
from dockhand.lifecycle.ops import VersionEntry, VersionsReport, logs, restart, versions
from dockhand.lifecycle.remove import remove
from dockhand.lifecycle.status import ServiceStatus, StatusReport, status
from dockhand.lifecycle.upgrade import UpgradeResult, upgrade
from dockhand.lifecycle.verify import wait_and_verify

__all__ = [
    "AddRequest",
    "AddResult",
    "LifecycleContext",
    "ServiceStatus",
    "StatusReport",
    "UpgradeResult",
    "VersionEntry",
    "VersionsReport",
    "add",
    "ensure_network",
    "ensure_proxy",
    "logs",
    "remove",
    "restart",
    "status",
    "upgrade",
    "versions",
    "wait_and_verify",
]
