"""In-memory registry of status channels, one entry per guild.

The registry is the only mutable state of the reconciliation core. It is
owned by ``ReconciliationState`` and only touched while the engine holds its
pass lock.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from lobbyboard.models.board import GuildStatusEntry

logger = logging.getLogger(__name__)


class GuildRegistry:
    """Map of guild id to its known status channel and message pool."""

    def __init__(self) -> None:
        self._entries: dict[int, GuildStatusEntry] = {}

    def get(self, guild_id: int) -> GuildStatusEntry | None:
        return self._entries.get(guild_id)

    def put(self, entry: GuildStatusEntry) -> None:
        self._entries[entry.guild_id] = entry

    def drop(self, guild_id: int) -> bool:
        """Forget a guild so it is rediscovered on the next pass.

        Returns True if an entry was removed.
        """
        removed = self._entries.pop(guild_id, None)
        if removed is not None:
            logger.info(
                "registry_entry_dropped guild=%s (%s) channel=%s",
                removed.guild_name,
                guild_id,
                removed.channel.id,
            )
        return removed is not None

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._entries

    def __iter__(self) -> Iterator[GuildStatusEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class ReconciliationState:
    """Process-wide reconciliation state.

    ``last_desired_slot_count`` remembers how many slots a previous pass may
    have left on screen so a shrinking board blanks the leftovers.
    """

    registry: GuildRegistry = field(default_factory=GuildRegistry)
    last_desired_slot_count: int = 0
