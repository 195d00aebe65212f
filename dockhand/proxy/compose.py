"""Docker Compose generation for services and the Traefik proxy.

Compose documents are built as dicts and serialised with yaml.safe_dump, so
hostnames and names are always quoted correctly.
"""

import yaml

from dockhand.proxy.labels import emit

LOGGING = {
    "driver": "json-file",
    "options": {"max-size": "10m", "max-file": "3"},
}


def _dump(header, document):
    return f"# {header}\n" + yaml.safe_dump(document, sort_keys=False, default_flow_style=False)


def build_service_compose(record, settings):
    """Compose document (dict) for one service."""
    directives = emit(record, settings)
    service = {
        "image": record.image,
        "container_name": record.name,
        "restart": "unless-stopped",
        "env_file": [".env"],
        "labels": list(directives.labels),
    }
    if directives.healthcheck:
        service["healthcheck"] = directives.healthcheck
    service["networks"] = [settings.network]
    service["logging"] = LOGGING
    return {
        "services": {record.name: service},
        "networks": {settings.network: {"external": True}},
    }


def generate_service_compose(record, settings):
    """Build the docker-compose.yml text for one service."""
    return _dump(f"{record.name} - generated by dockhand", build_service_compose(record, settings))


def generate_proxy_compose(settings):
    """Build the docker-compose.yml text for the shared Traefik container."""
    command = [
        "--api.dashboard=false",
        "--api.insecure=false",
        "--providers.docker=true",
        "--providers.docker.exposedbydefault=false",
        f"--providers.docker.network={settings.network}",
        "--entrypoints.web.address=:80",
        f"--entrypoints.{settings.entrypoint}.address=:443",
        f"--entrypoints.web.http.redirections.entrypoint.to={settings.entrypoint}",
        "--entrypoints.web.http.redirections.entrypoint.scheme=https",
        f"--certificatesresolvers.{settings.cert_resolver}.acme.httpchallenge=true",
        f"--certificatesresolvers.{settings.cert_resolver}.acme.httpchallenge.entrypoint=web",
        f"--certificatesresolvers.{settings.cert_resolver}.acme.email={settings.acme_email}",
        f"--certificatesresolvers.{settings.cert_resolver}.acme.storage=/data/acme.json",
        "--log.level=INFO",
    ]
    data_volume = f"{settings.network}_proxy_data"
    document = {
        "services": {
            settings.proxy_container: {
                "image": settings.proxy_image,
                "container_name": settings.proxy_container,
                "restart": "unless-stopped",
                "command": command,
                "ports": ["80:80", "443:443"],
                "volumes": [
                    "/var/run/docker.sock:/var/run/docker.sock:ro",
                    "proxy_data:/data",
                ],
                "networks": [settings.network],
                "logging": LOGGING,
            }
        },
        "volumes": {"proxy_data": {"name": data_volume}},
        "networks": {settings.network: {"name": settings.network, "external": True}},
    }
    return _dump("Traefik - reverse proxy & TLS termination (generated by dockhand)", document)
