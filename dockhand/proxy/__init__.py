"""Reverse-proxy config emission: Traefik labels and compose files."""

from dockhand.proxy.compose import build_service_compose, generate_proxy_compose, generate_service_compose
from dockhand.proxy.labels import RoutingDirectives, container_healthcheck, emit

__all__ = [
    "RoutingDirectives",
    "build_service_compose",
    "container_healthcheck",
    "emit",
    "generate_proxy_compose",
    "generate_service_compose",
]
