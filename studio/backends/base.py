"""Shared HTTP plumbing for the generation proxy server."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import requests

from config.settings import AppConfig
from studio.session.errors import ErrorKind, GenerationError, classify_message
from studio.session.generation_session import BackendResponse, RemoteCall
from studio.utils.cache import TTLCache

logger = logging.getLogger(__name__)


class ProxyBackend:
    """Base class for backends reached through the local proxy server.

    Subclasses build a JSON payload and call ``_post``. Timeouts and
    connection errors are retried with a linear backoff; everything else
    fails on the first attempt.
    """

    name = "proxy"

    def __init__(
        self,
        config: AppConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        health_cache: Optional[TTLCache[str, bool]] = None,
    ) -> None:
        self.config = config
        self.http = session or requests.Session()
        self._sleep = sleep
        self._health_cache = health_cache or TTLCache(ttl_seconds=config.health_cache_seconds)

    @property
    def base_url(self) -> str:
        return self.config.proxy_url.rstrip("/")

    def check_health(self) -> None:
        """Raise ``GenerationError`` when the proxy does not answer /health."""
        if self._health_cache.get(self.base_url):
            return
        try:
            response = self.http.get(f"{self.base_url}/health", timeout=10)
        except requests.RequestException as exc:
            raise GenerationError(
                f"The {self.name} proxy server is not available at {self.base_url}: {exc}"
            ) from exc
        if not response.ok:
            raise GenerationError(
                f"The {self.name} proxy server is not responding ({response.status_code})."
            )
        self._health_cache.set(self.base_url, True)

    def _post(self, path: str, payload: Dict[str, Any]) -> BackendResponse:
        self.check_health()
        url = f"{self.base_url}{path}"
        attempts = max(1, self.config.retries)
        for attempt in range(1, attempts + 1):
            logger.debug("POST %s (attempt %s/%s)", url, attempt, attempts)
            try:
                response = self.http.post(url, json=payload, timeout=self.config.request_timeout)
            except (requests.Timeout, requests.ConnectionError) as exc:
                if attempt < attempts:
                    delay = attempt * self.config.retry_delay
                    logger.warning("%s request failed (%s), retrying in %.1fs", self.name, exc, delay)
                    self._sleep(delay)
                    continue
                self._health_cache.invalidate(self.base_url)
                raise GenerationError(f"{self.name} request failed: {exc}") from exc
            return self._parse(response)
        raise AssertionError("unreachable")  # pragma: no cover

    def _parse(self, response: requests.Response) -> BackendResponse:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if not response.ok:
            message = str(body.get("error") or f"HTTP {response.status_code}: {response.reason}")
            raise GenerationError(f"{self.name} failed: {message}", classify_message(message))

        if not body.get("success") or not body.get("imageUrl"):
            message = str(body.get("error") or "Unexpected response format from proxy server")
            kind = classify_message(message) if body.get("error") else ErrorKind.INVALID_RESULT
            raise GenerationError(f"{self.name} failed: {message}", kind)

        return BackendResponse(success=True, result_reference=str(body["imageUrl"]), data=body.get("data"))

    def _as_call(self, func: Callable[..., BackendResponse], *args: Any) -> RemoteCall:
        """Wrap a blocking request so a session can await it."""

        async def _call() -> BackendResponse:
            return await asyncio.to_thread(func, *args)

        return _call
