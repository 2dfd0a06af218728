"""HTTP source for lobby snapshots.

The game-stats service publishes the current snapshot as JSON. Any failure
to fetch or parse it yields an "unavailable" snapshot, which the board shows
as a notice instead of stale numbers.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from lobbyboard.models.lobby import LobbySnapshot

logger = logging.getLogger(__name__)


class HttpSnapshotSource:
    """Fetches ``LobbySnapshot`` JSON from a URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport

    async def fetch(self) -> LobbySnapshot:
        if not self.url:
            logger.warning("snapshot_source_unconfigured")
            return LobbySnapshot.unavailable()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
                return LobbySnapshot.model_validate_json(resp.content)
        except httpx.HTTPError as exc:
            logger.warning("snapshot_fetch_failed url=%s err=%s", self.url, exc)
        except ValidationError as exc:
            logger.warning(
                "snapshot_invalid url=%s errors=%d", self.url, exc.error_count()
            )
        return LobbySnapshot.unavailable()
