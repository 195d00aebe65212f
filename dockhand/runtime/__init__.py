"""Container runtime access: subprocess runner and compose adapter."""

from dockhand.runtime.compose import (
    MANAGED_LABEL,
    NOT_FOUND,
    ComposeRuntime,
    ContainerStatus,
    format_uptime,
    image_tag,
)
from dockhand.runtime.shell import make_run_cmd

__all__ = [
    "MANAGED_LABEL",
    "NOT_FOUND",
    "ComposeRuntime",
    "ContainerStatus",
    "format_uptime",
    "image_tag",
    "make_run_cmd",
]
