"""Discord gateway client for the lobby board.

The bot has no slash commands and reads no message content: it only needs
the guilds intent to see its guilds and their channels. Gateway lifecycle
events are forwarded to a reporter so the session manager can log them.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

import discord
from discord import Intents

logger = logging.getLogger(__name__)

GatewayReporter = Callable[[str], Awaitable[None]]


class StatusBoardClient(discord.Client):
    """discord.Client that reports gateway lifecycle to the platform adapter."""

    def __init__(self, reporter: GatewayReporter) -> None:
        intents = Intents.none()
        intents.guilds = True
        super().__init__(intents=intents)
        self._reporter = reporter

    async def on_ready(self) -> None:
        """Called on every (re)connect, not just the first one."""
        user = self.user
        name = user.name if user else "unknown"
        await self._reporter(f"gateway ready as {name} guilds={len(self.guilds)}")

    async def on_disconnect(self) -> None:
        await self._reporter("gateway disconnected")

    async def on_resumed(self) -> None:
        await self._reporter("gateway session resumed")
