"""Doppler secrets-download client over httpx.

Contract: ``GET <url>?format=env`` with basic auth (token as username, empty
password). Only HTTP 200 is success; the body is then a set of KEY=VALUE
lines. Any other status is a failure and the body is discarded.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import httpx

from dockhand.config import DEFAULT_SECRETS_URL
from dockhand.environment.merge import parse_env_lines
from dockhand.errors import AuthError, TransportError

logger = logging.getLogger(__name__)

HTTP_OK = 200
AUTH_REJECTED = (401, 403)
STATUS_UNREACHABLE = 0


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a download. ``status`` is 0 when the server was unreachable."""

    status: int
    byte_count: int = 0

    @property
    def ok(self) -> bool:
        return self.status == HTTP_OK


class SecretStoreClient:
    """Thin async client for the secrets download endpoint.

    Args:
        url: download endpoint
        timeout: per-request timeout in seconds
        transport: optional httpx transport (tests inject ``httpx.MockTransport``)
    """

    def __init__(self, url=DEFAULT_SECRETS_URL, timeout=30.0, transport=None):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    def _client(self):
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _request_kwargs(self, token):
        return {"params": {"format": "env"}, "auth": (token, "")}

    async def validate(self, token) -> bool:
        """Probe the endpoint with ``token``. Never raises; False on any failure."""
        if not token:
            return False
        try:
            async with self._client() as client:
                resp = await client.get(self.url, **self._request_kwargs(token))
        except httpx.HTTPError as e:
            logger.debug(f"Token validation request failed: {e}")
            return False
        if resp.status_code in AUTH_REJECTED:
            logger.debug(f"Token rejected (HTTP {resp.status_code})")
        return resp.status_code == HTTP_OK

    async def fetch(self, token, destination) -> FetchResult:
        """Stream the secret set into ``destination`` (mode 0600).

        The destination is only replaced when the server answers 200. Callers
        must check ``result.ok``.
        """
        destination = Path(destination)
        tmp_path = destination.with_name(f".{destination.name}.download")
        try:
            async with self._client() as client:
                async with client.stream("GET", self.url, **self._request_kwargs(token)) as resp:
                    if resp.status_code != HTTP_OK:
                        return FetchResult(status=resp.status_code)
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
                    written = 0
                    with os.fdopen(fd, "wb") as f:
                        async for chunk in resp.aiter_bytes():
                            f.write(chunk)
                            written += len(chunk)
            os.replace(tmp_path, destination)
            return FetchResult(status=HTTP_OK, byte_count=written)
        except httpx.HTTPError as e:
            logger.debug(f"Secret download failed: {e}")
            tmp_path.unlink(missing_ok=True)
            return FetchResult(status=STATUS_UNREACHABLE)

    async def fetch_secrets(self, token) -> dict:
        """Download the secret set as key -> raw right-hand side.

        Values keep the quoting and escapes the server sent, so writing them
        back with ``render_env`` reproduces each line unchanged.

        Raises:
            AuthError: the token was rejected (401/403)
            TransportError: unreachable, or any other non-200 status
        """
        try:
            async with self._client() as client:
                resp = await client.get(self.url, **self._request_kwargs(token))
        except httpx.HTTPError as e:
            raise TransportError(f"Secret store unreachable: {e}")
        if resp.status_code in AUTH_REJECTED:
            raise AuthError(f"Secret store rejected the token (HTTP {resp.status_code})")
        if resp.status_code != HTTP_OK:
            raise TransportError(f"Failed to fetch secrets (HTTP {resp.status_code})")
        return parse_env_lines(resp.text)
