"""Shared test fixtures.

``FakePlatform`` is an in-memory ``ChatPlatformClient``: guilds, channels and
bot-authored messages live in dicts, every call is recorded, and failures
can be injected per operation and target id.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import discord
import pytest

from lobbyboard.config import Settings
from lobbyboard.core.errors import RemoteOperationError, SessionLoginError
from lobbyboard.discord.platform import SessionEvent, SessionEventType, SessionListener
from lobbyboard.models.board import ChannelRef, GuildRef, MessageRef
from lobbyboard.models.lobby import LobbyCounts, LobbyInfo, LobbySnapshot, LobbyState, LobbyType

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeMessage:
    id: int
    channel_id: int
    created_at: datetime
    text: str
    embed: discord.Embed | None = None

    def ref(self) -> MessageRef:
        return MessageRef(id=self.id, channel_id=self.channel_id, created_at=self.created_at)


class FakePlatform:
    """In-memory chat platform."""

    def __init__(self) -> None:
        self.guilds: list[GuildRef] = []
        self.channels: dict[int, list[ChannelRef]] = {}
        self.messages: dict[int, list[FakeMessage]] = {}
        self.calls: list[tuple[str, int]] = []
        self.failures: dict[tuple[str, int], RemoteOperationError] = {}
        self.listeners: list[SessionListener] = []
        self.login_tokens: list[str] = []
        self.login_error: SessionLoginError | None = None
        self.logouts = 0
        self._ids = itertools.count(1000)
        self._clock = itertools.count(1)

    # --- setup helpers ---------------------------------------------------

    def add_guild(self, guild_id: int, name: str = "") -> GuildRef:
        guild = GuildRef(id=guild_id, name=name or f"guild-{guild_id}")
        self.guilds.append(guild)
        self.channels[guild_id] = []
        return guild

    def add_channel(self, guild_id: int, name: str, messages: int = 0) -> ChannelRef:
        channel = ChannelRef(id=next(self._ids), name=name, guild_id=guild_id)
        self.channels[guild_id].append(channel)
        self.messages[channel.id] = []
        for n in range(messages):
            self._store(channel.id, f"old message {n}")
        return channel

    def fail(self, operation: str, target_id: int, code: int, message: str = "boom") -> None:
        self.failures[(operation, target_id)] = RemoteOperationError(code, message, operation)

    def board(self, channel_id: int) -> list[FakeMessage]:
        return sorted(self.messages[channel_id], key=lambda m: (m.created_at, m.id))

    def channel(self, channel_id: int) -> ChannelRef:
        for channels in self.channels.values():
            for channel in channels:
                if channel.id == channel_id:
                    return channel
        raise KeyError(channel_id)

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def _store(self, channel_id: int, text: str, embed: discord.Embed | None = None) -> FakeMessage:
        message = FakeMessage(
            id=next(self._ids),
            channel_id=channel_id,
            created_at=BASE_TIME + timedelta(seconds=next(self._clock)),
            text=text,
            embed=embed,
        )
        self.messages[channel_id].append(message)
        return message

    def _check(self, operation: str, target_id: int) -> None:
        self.calls.append((operation, target_id))
        error = self.failures.get((operation, target_id))
        if error is not None:
            raise error

    # --- ChatPlatformClient ----------------------------------------------

    async def list_guilds(self) -> list[GuildRef]:
        self._check("list_guilds", 0)
        return list(self.guilds)

    async def list_text_channels(self, guild_id: int) -> list[ChannelRef]:
        self._check("list_text_channels", guild_id)
        return list(self.channels[guild_id])

    async def create_text_channel(self, guild_id: int, name: str) -> ChannelRef:
        self._check("create_text_channel", guild_id)
        return self.add_channel(guild_id, name)

    async def list_messages_authored_by_self(self, channel_id: int) -> list[MessageRef]:
        self._check("list_messages", channel_id)
        return [m.ref() for m in self.messages[channel_id]]

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        self._check("delete_messages", channel_id)
        doomed = set(message_ids)
        self.messages[channel_id] = [m for m in self.messages[channel_id] if m.id not in doomed]

    async def rename_channel(self, channel_id: int, name: str) -> ChannelRef:
        self._check("rename_channel", channel_id)
        old = self.channel(channel_id)
        renamed = ChannelRef(id=old.id, name=name, guild_id=old.guild_id)
        channels = self.channels[old.guild_id]
        channels[channels.index(old)] = renamed
        return renamed

    async def send_message(
        self, channel_id: int, text: str, embed: discord.Embed | None = None
    ) -> MessageRef:
        self._check("send_message", channel_id)
        return self._store(channel_id, text, embed).ref()

    async def edit_message(
        self,
        channel_id: int,
        message_id: int,
        text: str,
        embed: discord.Embed | None = None,
    ) -> None:
        self._check("edit_message", message_id)
        for message in self.messages[channel_id]:
            if message.id == message_id:
                message.text = text
                message.embed = embed
                return
        raise RemoteOperationError(10008, "Unknown Message", "edit_message")

    async def login(self, token: str) -> None:
        self.login_tokens.append(token)
        if self.login_error is not None:
            raise self.login_error
        await self.emit(SessionEvent(type=SessionEventType.LOGGED_IN))

    async def logout(self) -> None:
        self.logouts += 1

    def add_session_listener(self, listener: SessionListener) -> None:
        self.listeners.append(listener)

    async def emit(self, event: SessionEvent) -> None:
        for listener in list(self.listeners):
            await listener(event)


def make_lobby(lobby_id: int = 1, **overrides) -> LobbyInfo:
    data = {
        "id": lobby_id,
        "name": f"Lobby {lobby_id}",
        "type": LobbyType.MATCHMAKING_RACE,
        "player_count": 4,
        "state": LobbyState.RACING,
        "race_progress": 40,
        "countdown": 0,
        "match_mode": 2,
        "difficulty": 1,
    }
    data.update(overrides)
    return LobbyInfo(**data)


def make_snapshot(lobbies: int = 0, **overrides) -> LobbySnapshot:
    """Snapshot with ``lobbies`` public matchmaking lobbies."""
    data = {
        "player_count": 4 * lobbies,
        "lobby_counts": LobbyCounts(
            matchmaking_lobbies=lobbies,
            matchmaking_players=4 * lobbies,
            custom_game_lobbies=0,
            custom_game_players=0,
        ),
        "lobbies": [make_lobby(i + 1) for i in range(lobbies)],
    }
    data.update(overrides)
    return LobbySnapshot(**data)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Test settings with defaults."""
    return Settings(lobbyboard_env="development", discord_bot_token="", discord_enabled=False)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()
