"""Shared HTTP helper for the telematics auth endpoints.

Uses `httpx.AsyncClient` with:
* Base URL from env vars (see `integrations.telematics`)
* The fixed client User-Agent the vendor requires on every call
* An explicit timeout (never the transport default)
* Prometheus counters + histogram (labels: endpoint, method, status)

Every request is a single attempt; there is no retry loop. Tests inject
`MockTransport`.
"""
from __future__ import annotations

import logging
import time
from typing import Optional

import httpx
from prometheus_client import Counter, Histogram

from . import BASE_URL, TIMEOUT_SECONDS, USER_AGENT

__all__ = ["TelematicsHTTP"]

_LOG = logging.getLogger(__name__)

_REQUESTS_TOTAL = Counter(
    "telematics_http_requests_total",
    "HTTP requests to the telematics auth API",
    labelnames=["endpoint", "method", "status"],
)
_LATENCY_SEC = Histogram(
    "telematics_http_latency_seconds",
    "Latency for telematics auth HTTP requests",
    labelnames=["endpoint"],
)


class TelematicsHTTP:
    def __init__(
        self,
        *,
        base_url: str = BASE_URL,
        timeout: float = TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            transport=transport,
        )
        _LOG.debug("telematics http: base_url=%s timeout=%ss", base_url, timeout)

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        endpoint_label = url.split("?", 1)[0]
        start = time.perf_counter()
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.RequestError:
            _REQUESTS_TOTAL.labels(endpoint_label, method.lower(), "error").inc()
            raise
        finally:
            _LATENCY_SEC.labels(endpoint_label).observe(time.perf_counter() - start)
        _REQUESTS_TOTAL.labels(endpoint_label, method.lower(), resp.status_code).inc()
        _LOG.debug("%s %s -> %s", method, endpoint_label, resp.status_code)
        return resp

    async def get(self, url: str, **kw) -> httpx.Response:
        return await self._request("GET", url, **kw)

    async def post(self, url: str, **kw) -> httpx.Response:
        return await self._request("POST", url, **kw)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
