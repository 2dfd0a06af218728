"""Repair an inherited message pool to a canonical size.

A status channel found on startup may hold any number of bot messages from a
previous run. Only a pool of exactly ``capacity`` messages is trusted to keep
its slot order; anything shorter is wiped and rebuilt by the next sync.
"""

from __future__ import annotations

import logging

from lobbyboard.discord.platform import ChatPlatformClient
from lobbyboard.models.board import STATUS_POOL_CAPACITY, ChannelRef, MessageRef

logger = logging.getLogger(__name__)


def order_pool(messages: list[MessageRef]) -> list[MessageRef]:
    """Oldest first; snowflake ids break timestamp ties."""
    return sorted(messages, key=lambda m: (m.created_at, m.id))


async def compact_pool(
    client: ChatPlatformClient,
    channel: ChannelRef,
    capacity: int = STATUS_POOL_CAPACITY,
) -> list[MessageRef]:
    """Return the canonical pool for ``channel``, deleting what does not fit.

    - more than ``capacity`` messages: keep the oldest ``capacity``
    - fewer than ``capacity``: delete them all, return an empty pool
    - exactly ``capacity``: keep them as they are
    """
    pool = order_pool(await client.list_messages_authored_by_self(channel.id))

    if len(pool) > capacity:
        excess = pool[capacity:]
        await client.delete_messages(channel.id, [m.id for m in excess])
        logger.info(
            "pool_compacted channel=%s kept=%d deleted=%d",
            channel.id,
            capacity,
            len(excess),
        )
        return pool[:capacity]

    if len(pool) < capacity:
        if pool:
            await client.delete_messages(channel.id, [m.id for m in pool])
        logger.info("pool_reset channel=%s deleted=%d", channel.id, len(pool))
        return []

    return pool
