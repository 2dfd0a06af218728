"""Tests for board models and the guild registry."""

from __future__ import annotations

import pytest
from conftest import BASE_TIME

from lobbyboard.core.registry import GuildRegistry
from lobbyboard.models.board import (
    BLANK_SLOT,
    ChannelRef,
    GuildStatusEntry,
    MessageRef,
    Slot,
    status_channel_name,
)


def make_entry(guild_id: int) -> GuildStatusEntry:
    return GuildStatusEntry(
        guild_id=guild_id,
        guild_name=f"guild-{guild_id}",
        channel=ChannelRef(id=guild_id * 10, name="xx-in-matchmaking", guild_id=guild_id),
    )


class TestStatusChannelName:
    @pytest.mark.parametrize(
        ("players", "name"),
        [(0, "0-in-matchmaking"), (37, "37-in-matchmaking"), (-1, "xx-in-matchmaking")],
    )
    def test_name(self, players: int, name: str) -> None:
        assert status_channel_name(players) == name


class TestSlot:
    def test_empty_text_rejected(self) -> None:
        with pytest.raises(ValueError):
            Slot(text="")

    def test_blank_slot(self) -> None:
        assert BLANK_SLOT.text == "** **"
        assert BLANK_SLOT.embed is None


class TestGuildRegistry:
    def test_put_and_get(self) -> None:
        registry = GuildRegistry()
        entry = make_entry(1)

        registry.put(entry)

        assert registry.get(1) is entry
        assert 1 in registry
        assert len(registry) == 1

    def test_drop(self) -> None:
        registry = GuildRegistry()
        registry.put(make_entry(1))

        assert registry.drop(1) is True
        assert registry.drop(1) is False
        assert registry.get(1) is None

    def test_iteration_tolerates_drops(self) -> None:
        registry = GuildRegistry()
        for guild_id in (1, 2, 3):
            registry.put(make_entry(guild_id))

        for entry in registry:
            registry.drop(entry.guild_id)

        assert len(registry) == 0

    def test_pool_size(self) -> None:
        entry = make_entry(1)
        entry.messages.append(MessageRef(id=5, channel_id=10, created_at=BASE_TIME))
        assert entry.pool_size == 1
