"""Status board models: slots, platform handles and per-guild pool state.

Handles are plain values so the core never holds on to live discord.py
objects between passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import discord

STATUS_POOL_CAPACITY = 10
STATUS_CHANNEL_SUFFIX = "-in-matchmaking"
UNKNOWN_COUNT_LABEL = "xx"

# Discord rejects empty message bodies; this renders as an empty line.
BLANK_PLACEHOLDER = "** **"


def status_channel_name(matchmaking_players: int) -> str:
    """Channel name encoding the live matchmaking player count."""
    label = str(matchmaking_players) if matchmaking_players >= 0 else UNKNOWN_COUNT_LABEL
    return f"{label}{STATUS_CHANNEL_SUFFIX}"


@dataclass(frozen=True)
class Slot:
    """One unit of board content at a stable index."""

    text: str
    embed: discord.Embed | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("Slot text must not be empty")


BLANK_SLOT = Slot(text=BLANK_PLACEHOLDER)


@dataclass(frozen=True)
class GuildRef:
    id: int
    name: str


@dataclass(frozen=True)
class ChannelRef:
    id: int
    name: str
    guild_id: int


@dataclass(frozen=True)
class MessageRef:
    id: int
    channel_id: int
    created_at: datetime


@dataclass
class GuildStatusEntry:
    """A guild's status channel and the ordered pool of bot messages in it.

    ``messages[i]`` displays slot ``i``. The pool only grows during a sync;
    it is reset by compaction when the guild is (re)discovered.
    """

    guild_id: int
    guild_name: str
    channel: ChannelRef
    messages: list[MessageRef] = field(default_factory=list)
    capacity: int = STATUS_POOL_CAPACITY

    @property
    def pool_size(self) -> int:
        return len(self.messages)
