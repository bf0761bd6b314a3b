from __future__ import annotations

import atexit
import logging
import weakref
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx
from flask import Flask, current_app

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
    # Every proxied read must hit the backend.
    "Cache-Control": "no-cache",
}


@dataclass(frozen=True)
class UpstreamResult:
    ok: bool
    status_code: int | None
    body: Any = None
    error_message: str | None = None


class Upstream:
    """
    Shared HTTP client for the remote marketplace backend.

    - One httpx.Client per app (connection pooling).
    - No retries, no caching.
    - Never raises; failures come back as UpstreamResult(ok=False).
    """

    def __init__(self, app: Flask | None = None):
        # clients of every app built on this instance; closed once at exit
        self._clients: "weakref.WeakSet[httpx.Client]" = weakref.WeakSet()
        atexit.register(self.close)
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        # UPSTREAM_TRANSPORT lets tests swap in an httpx.MockTransport.
        client = httpx.Client(
            base_url=app.config["UPSTREAM_BASE_URL"],
            timeout=httpx.Timeout(app.config.get("UPSTREAM_TIMEOUT", 10.0)),
            headers=DEFAULT_HEADERS,
            transport=app.config.get("UPSTREAM_TRANSPORT"),
            # relay what the backend finally serves, like a browser fetch
            follow_redirects=True,
        )
        app.extensions["upstream"] = client
        self._clients.add(client)

    def close(self) -> None:
        for client in list(self._clients):
            client.close()

    @staticmethod
    def _client() -> httpx.Client:
        return current_app.extensions["upstream"]

    def get_json(self, path: str, params: Optional[Mapping[str, str]] = None) -> UpstreamResult:
        client = self._client()
        try:
            resp = client.get(path, params=dict(params or {}))
        except httpx.RequestError as e:
            # DNS errors, connection refused, timeouts, TLS, etc.
            logger.warning("upstream GET %s failed: %s", path, e)
            return UpstreamResult(ok=False, status_code=None, error_message=str(e))

        if not resp.is_success:
            logger.warning("upstream GET %s returned status %s", path, resp.status_code)
            return UpstreamResult(
                ok=False,
                status_code=resp.status_code,
                error_message=f"API returned {resp.status_code}",
            )

        try:
            body = resp.json()
        except ValueError as e:
            logger.warning("upstream GET %s returned unparseable body: %s", path, e)
            return UpstreamResult(ok=False, status_code=None, error_message="invalid JSON")

        return UpstreamResult(ok=True, status_code=resp.status_code, body=body)
