"""Tests for the HTTP lobby snapshot source."""

from __future__ import annotations

import httpx

from lobbyboard.core.snapshot_source import HttpSnapshotSource

URL = "http://stats.test/lobbies"

PAYLOAD = {
    "player_count": 13,
    "lobby_counts": {
        "matchmaking_lobbies": 2,
        "matchmaking_players": 9,
        "custom_game_lobbies": 1,
        "custom_game_players": 4,
    },
    "lobbies": [
        {"id": 1, "name": "Quick race", "type": 0, "state": 2, "player_count": 5},
        {"id": 2, "name": "Arena", "type": 1, "state": 0, "player_count": 4},
    ],
}


def source_for(handler) -> HttpSnapshotSource:
    return HttpSnapshotSource(URL, transport=httpx.MockTransport(handler))


class TestHttpSnapshotSource:
    async def test_fetches_snapshot(self) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=PAYLOAD)

        snapshot = await source_for(handler).fetch()

        assert str(requests[0].url) == URL
        assert snapshot.is_available
        assert snapshot.lobby_counts.matchmaking_players == 9
        assert [lobby.name for lobby in snapshot.lobbies] == ["Quick race", "Arena"]

    async def test_server_error_is_unavailable(self) -> None:
        snapshot = await source_for(lambda request: httpx.Response(500)).fetch()
        assert not snapshot.is_available

    async def test_connection_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        snapshot = await source_for(handler).fetch()

        assert not snapshot.is_available

    async def test_invalid_body_is_unavailable(self) -> None:
        snapshot = await source_for(lambda request: httpx.Response(200, text="<html>")).fetch()
        assert not snapshot.is_available

    async def test_schema_mismatch_is_unavailable(self) -> None:
        body = {"player_count": "lots", "lobbies": []}
        snapshot = await source_for(lambda request: httpx.Response(200, json=body)).fetch()
        assert not snapshot.is_available

    async def test_unconfigured_url(self) -> None:
        snapshot = await HttpSnapshotSource("").fetch()
        assert not snapshot.is_available
        assert snapshot.lobbies == []
