"""Chat platform port and its discord.py adapter.

``ChatPlatformClient`` is everything the reconciliation core and the session
manager need from the chat platform. ``DiscordPlatformClient`` implements it
on top of discord.py: every call gets a timeout, and every failure surfaces
as ``RemoteOperationError`` carrying Discord's JSON error code so the
classifier can decide what to do with the guild.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Protocol, TypeVar

import aiohttp
import discord

from lobbyboard.core.errors import (
    LOCAL_FAILURE,
    UNKNOWN_CHANNEL,
    RemoteOperationError,
    SessionLoginError,
)
from lobbyboard.discord.bot import StatusBoardClient
from lobbyboard.models.board import ChannelRef, GuildRef, MessageRef

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Discord refuses to bulk-delete messages older than two weeks.
BULK_DELETE_MAX_AGE = timedelta(days=14)
BULK_DELETE_MAX_COUNT = 100


class SessionEventType(str, Enum):
    LOGGED_IN = "logged_in"
    LOGGED_OUT = "logged_out"
    LOG = "log"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    message: str = ""


SessionListener = Callable[[SessionEvent], Awaitable[None]]


class ChatPlatformClient(Protocol):
    """Port to the chat platform. All calls may raise ``RemoteOperationError``."""

    async def list_guilds(self) -> list[GuildRef]: ...

    async def list_text_channels(self, guild_id: int) -> list[ChannelRef]: ...

    async def create_text_channel(self, guild_id: int, name: str) -> ChannelRef: ...

    async def list_messages_authored_by_self(self, channel_id: int) -> list[MessageRef]: ...

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None: ...

    async def rename_channel(self, channel_id: int, name: str) -> ChannelRef: ...

    async def send_message(
        self, channel_id: int, text: str, embed: discord.Embed | None = None
    ) -> MessageRef: ...

    async def edit_message(
        self,
        channel_id: int,
        message_id: int,
        text: str,
        embed: discord.Embed | None = None,
    ) -> None: ...

    async def login(self, token: str) -> None:
        """Log in; raises ``SessionLoginError`` on failure."""
        ...

    async def logout(self) -> None: ...

    def add_session_listener(self, listener: SessionListener) -> None: ...


def _channel_ref(channel: discord.abc.GuildChannel) -> ChannelRef:
    return ChannelRef(id=channel.id, name=channel.name, guild_id=channel.guild.id)


def _message_ref(message: discord.Message) -> MessageRef:
    return MessageRef(id=message.id, channel_id=message.channel.id, created_at=message.created_at)


class DiscordPlatformClient:
    """``ChatPlatformClient`` backed by a discord.py client.

    The gateway connection runs as a background task after ``login``. If it
    ends without ``logout`` having been called, listeners receive
    ``LOGGED_OUT``.
    """

    def __init__(
        self,
        *,
        timeout: float = 15.0,
        client: discord.Client | None = None,
    ) -> None:
        self._client = client or StatusBoardClient(self._report_gateway)
        self._timeout = timeout
        self._listeners: list[SessionListener] = []
        self._gateway_task: asyncio.Task[None] | None = None
        self._closing = False
        self._has_session = False

    # --- Session lifecycle -------------------------------------------------

    def add_session_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    async def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            await listener(event)

    async def _report_gateway(self, message: str) -> None:
        await self._emit(SessionEvent(SessionEventType.LOG, message))

    async def login(self, token: str) -> None:
        """Authenticate and start the gateway; emits ``LOGGED_IN`` on success."""
        if self._has_session:
            # A previous session ended; discord.py needs a clean client to log in again.
            await self._shutdown_client()
            self._client.clear()
        self._closing = False
        try:
            await self._client.login(token)
        except (discord.DiscordException, aiohttp.ClientError, OSError) as exc:
            raise SessionLoginError(str(exc)) from exc
        self._has_session = True
        self._gateway_task = asyncio.create_task(self._run_gateway(), name="discord-gateway")
        await self._emit(SessionEvent(SessionEventType.LOGGED_IN))

    async def _run_gateway(self) -> None:
        try:
            await self._client.connect(reconnect=True)
        except asyncio.CancelledError:
            raise
        except Exception:  # connect raises auth, intent and socket errors
            logger.exception("discord_gateway_error")
        if not self._closing:
            await self._emit(SessionEvent(SessionEventType.LOGGED_OUT))

    async def logout(self) -> None:
        """Close the session without triggering a relogin."""
        await self._shutdown_client()
        self._has_session = False

    async def _shutdown_client(self) -> None:
        self._closing = True
        if not self._client.is_closed():
            await self._client.close()
        task = self._gateway_task
        self._gateway_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    @property
    def is_logged_in(self) -> bool:
        return self._client.user is not None and not self._client.is_closed()

    # --- Remote operations -------------------------------------------------

    async def _call(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run one remote operation with a timeout, mapping failures."""
        if not self.is_logged_in:
            raise RemoteOperationError(LOCAL_FAILURE, "not logged in", operation)
        try:
            return await asyncio.wait_for(func(), timeout=self._timeout)
        except TimeoutError as exc:
            raise RemoteOperationError(
                LOCAL_FAILURE, f"timed out after {self._timeout:g}s", operation
            ) from exc
        except discord.HTTPException as exc:
            raise RemoteOperationError(exc.code, exc.text or str(exc), operation) from exc
        except discord.DiscordException as exc:
            raise RemoteOperationError(LOCAL_FAILURE, str(exc), operation) from exc
        except (OSError, aiohttp.ClientError) as exc:
            # discord.py lets connection failures through once its retries run out
            raise RemoteOperationError(
                LOCAL_FAILURE, str(exc) or type(exc).__name__, operation
            ) from exc

    async def _guild(self, guild_id: int) -> discord.Guild:
        return self._client.get_guild(guild_id) or await self._client.fetch_guild(guild_id)

    async def _text_channel(self, channel_id: int) -> discord.TextChannel:
        channel = self._client.get_channel(channel_id) or await self._client.fetch_channel(
            channel_id
        )
        if not isinstance(channel, discord.TextChannel):
            raise RemoteOperationError(UNKNOWN_CHANNEL, "not a text channel", "resolve_channel")
        return channel

    async def list_guilds(self) -> list[GuildRef]:
        async def _list() -> list[GuildRef]:
            return [
                GuildRef(id=guild.id, name=guild.name)
                async for guild in self._client.fetch_guilds(limit=None)
            ]

        return await self._call("list_guilds", _list)

    async def list_text_channels(self, guild_id: int) -> list[ChannelRef]:
        async def _list() -> list[ChannelRef]:
            guild = await self._guild(guild_id)
            channels = await guild.fetch_channels()
            return [_channel_ref(c) for c in channels if isinstance(c, discord.TextChannel)]

        return await self._call("list_text_channels", _list)

    async def create_text_channel(self, guild_id: int, name: str) -> ChannelRef:
        async def _create() -> ChannelRef:
            guild = await self._guild(guild_id)
            channel = await guild.create_text_channel(name)
            return _channel_ref(channel)

        return await self._call("create_text_channel", _create)

    async def list_messages_authored_by_self(self, channel_id: int) -> list[MessageRef]:
        async def _list() -> list[MessageRef]:
            channel = await self._text_channel(channel_id)
            me_id = self._client.user.id if self._client.user else 0
            return [
                _message_ref(message)
                async for message in channel.history(limit=None)
                if message.author.id == me_id
            ]

        return await self._call("list_messages", _list)

    async def delete_messages(self, channel_id: int, message_ids: list[int]) -> None:
        async def _delete() -> None:
            channel = await self._text_channel(channel_id)
            cutoff = discord.utils.utcnow() - BULK_DELETE_MAX_AGE
            recent = [i for i in message_ids if discord.utils.snowflake_time(i) > cutoff]
            old = sorted(set(message_ids) - set(recent))
            for start in range(0, len(recent), BULK_DELETE_MAX_COUNT):
                chunk = recent[start : start + BULK_DELETE_MAX_COUNT]
                await channel.delete_messages([discord.Object(id=i) for i in chunk])
            for message_id in old:
                await channel.get_partial_message(message_id).delete()

        await self._call("delete_messages", _delete)

    async def rename_channel(self, channel_id: int, name: str) -> ChannelRef:
        async def _rename() -> ChannelRef:
            channel = await self._text_channel(channel_id)
            edited = await channel.edit(name=name)
            return _channel_ref(edited or channel)

        return await self._call("rename_channel", _rename)

    async def send_message(
        self, channel_id: int, text: str, embed: discord.Embed | None = None
    ) -> MessageRef:
        async def _send() -> MessageRef:
            channel = await self._text_channel(channel_id)
            message = await channel.send(content=text, embed=embed)
            return _message_ref(message)

        return await self._call("send_message", _send)

    async def edit_message(
        self,
        channel_id: int,
        message_id: int,
        text: str,
        embed: discord.Embed | None = None,
    ) -> None:
        async def _edit() -> None:
            channel = await self._text_channel(channel_id)
            await channel.get_partial_message(message_id).edit(content=text, embed=embed)

        await self._call("edit_message", _edit)
