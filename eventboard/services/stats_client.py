"""Client for the stats service (hit recording and view aggregation).

Uses synchronous httpx with a bounded timeout. Every transport failure,
non-2xx answer or malformed body is raised as ``StatsServiceError`` so
callers can degrade without knowing about httpx.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx

from eventboard.config import settings

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH = datetime(1970, 1, 1)


class StatsServiceError(Exception):
    """The stats service could not be reached or answered with an error."""


@dataclass(frozen=True)
class ViewStats:
    app: str
    uri: str
    hits: int


class StatsClient:
    """Synchronous client for the stats service HTTP API."""

    def __init__(self, base_url: str, timeout: float = 2.0, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def record_hit(self, app: str, uri: str, ip: str, timestamp: datetime) -> None:
        payload = {
            "app": app,
            "uri": uri,
            "ip": ip,
            "timestamp": timestamp.strftime(DATE_FORMAT),
        }
        try:
            with self._client() as client:
                response = client.post("/hit", json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StatsServiceError(f"Failed to record hit for {uri}: {exc}") from exc

    def query_views(
        self,
        start: datetime,
        end: datetime,
        uris: list[str],
        unique_only: bool = True,
    ) -> list[ViewStats]:
        params: dict = {
            "start": start.strftime(DATE_FORMAT),
            "end": end.strftime(DATE_FORMAT),
        }
        if unique_only:
            params["unique"] = "true"
        if uris:
            params["uris"] = uris
        try:
            with self._client() as client:
                response = client.get("/stats", params=params)
                response.raise_for_status()
                return [
                    ViewStats(app=item["app"], uri=item["uri"], hits=int(item["hits"]))
                    for item in response.json()
                ]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            raise StatsServiceError(f"Failed to query views: {exc!r}") from exc


_stats_client = StatsClient(settings.STATS_SERVICE_URL, timeout=settings.STATS_TIMEOUT_SECONDS)


def get_stats_client() -> StatsClient:
    """FastAPI dependency returning the shared stats client."""
    return _stats_client


def record_hit_quietly(stats, app: str, uri: str, ip: str, timestamp: datetime) -> None:
    """Record a hit, logging instead of failing when the stats service is down."""
    try:
        stats.record_hit(app, uri, ip, timestamp)
    except StatsServiceError as exc:
        logger.warning("Hit for %s not recorded: %s", uri, exc)
