"""Locate or create a guild's status channel."""

from __future__ import annotations

import logging

from lobbyboard.discord.platform import ChatPlatformClient
from lobbyboard.models.board import (
    STATUS_CHANNEL_SUFFIX,
    ChannelRef,
    GuildRef,
    status_channel_name,
)

logger = logging.getLogger(__name__)

# Name given to a status channel before any player count is known.
NEW_CHANNEL_NAME = status_channel_name(-1)


async def discover_status_channel(
    client: ChatPlatformClient,
    guild: GuildRef,
) -> tuple[ChannelRef, bool]:
    """Return the guild's status channel and whether it was just created.

    The first text channel whose name ends with ``-in-matchmaking`` wins, in
    whatever order the platform lists them. Platform failures propagate as
    ``RemoteOperationError`` for the caller to classify.
    """
    channels = await client.list_text_channels(guild.id)
    for channel in channels:
        if channel.name.endswith(STATUS_CHANNEL_SUFFIX):
            logger.info(
                "status_channel_found guild=%s (%s) channel=%s",
                guild.name,
                guild.id,
                channel.name,
            )
            return channel, False

    channel = await client.create_text_channel(guild.id, NEW_CHANNEL_NAME)
    logger.info(
        "status_channel_created guild=%s (%s) channel=%s",
        guild.name,
        guild.id,
        channel.id,
    )
    return channel, True
