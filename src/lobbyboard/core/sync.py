"""Converge a status channel onto the desired slots, then rename it.

Slot ``i`` always lives in pool message ``i``. Existing messages are edited
in place and missing ones are sent and appended, so the pool only grows.
Indices past the desired slots are overwritten with a blank placeholder,
which is how content from a larger earlier board disappears.
"""

from __future__ import annotations

import logging

from lobbyboard.discord.platform import ChatPlatformClient
from lobbyboard.models.board import BLANK_SLOT, GuildStatusEntry, Slot, status_channel_name

logger = logging.getLogger(__name__)


def sync_count_for(
    entry: GuildStatusEntry,
    desired: int,
    last_desired_slot_count: int,
    fresh: bool,
) -> int:
    """How many pool indices a sync must write.

    A freshly set up entry is provisioned to full capacity so later passes
    only ever edit.
    """
    if fresh:
        return max(entry.capacity, desired)
    return max(desired, last_desired_slot_count)


async def sync_slots(
    client: ChatPlatformClient,
    entry: GuildStatusEntry,
    slots: list[Slot],
    *,
    last_desired_slot_count: int,
    matchmaking_players: int,
    fresh: bool = False,
) -> None:
    """Write ``slots`` into the entry's pool and rename its channel.

    The first failing call raises ``RemoteOperationError`` and leaves the
    rest of this guild's work for the next pass. Messages already edited or
    sent stay as they are; sends are appended to ``entry.messages`` as soon
    as they succeed.
    """
    count = sync_count_for(entry, len(slots), last_desired_slot_count, fresh)
    channel_id = entry.channel.id

    for index in range(count):
        slot = slots[index] if index < len(slots) else BLANK_SLOT
        if index < len(entry.messages):
            await client.edit_message(
                channel_id, entry.messages[index].id, slot.text, slot.embed
            )
        else:
            message = await client.send_message(channel_id, slot.text, slot.embed)
            entry.messages.append(message)

    # Compared against the name cached at discovery or at our last rename. A
    # manual rename stays until the player count next changes or the guild is
    # rediscovered; channel names are too rate-limited to re-read every pass.
    name = status_channel_name(matchmaking_players)
    if entry.channel.name != name:
        entry.channel = await client.rename_channel(channel_id, name)

    logger.debug(
        "slots_synced guild=%s (%s) written=%d pool=%d",
        entry.guild_name,
        entry.guild_id,
        count,
        len(entry.messages),
    )
