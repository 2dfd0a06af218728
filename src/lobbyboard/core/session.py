"""Discord session state machine.

Disconnected -> Connecting -> Connected, and back to Disconnected when the
session is lost. The transition table is a pure function; ``SessionManager``
feeds it platform events and carries out the effects it returns.

A lost session is retried after a fixed delay, every time it is lost. A
failed login is logged and left alone: a bad token should not be hammered.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from enum import Enum

from lobbyboard.core.credentials import TokenStore
from lobbyboard.core.errors import SessionLoginError
from lobbyboard.discord.platform import ChatPlatformClient, SessionEvent, SessionEventType

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY_SECONDS = 5.0


class SessionStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class SessionInput(str, Enum):
    START = "start"
    LOGGED_IN = "logged_in"
    LOGIN_FAILED = "login_failed"
    LOGGED_OUT = "logged_out"
    LOG = "log"


class SessionEffect(str, Enum):
    LOGIN = "login"
    PERSIST_CREDENTIAL = "persist_credential"
    RELOGIN_AFTER_DELAY = "relogin_after_delay"
    LOG = "log"


@dataclass(frozen=True)
class Transition:
    status: SessionStatus
    effects: tuple[SessionEffect, ...] = ()


_TRANSITIONS: dict[tuple[SessionStatus, SessionInput], Transition] = {
    (SessionStatus.DISCONNECTED, SessionInput.START): Transition(
        SessionStatus.CONNECTING, (SessionEffect.LOGIN,)
    ),
    (SessionStatus.CONNECTING, SessionInput.LOGGED_IN): Transition(
        SessionStatus.CONNECTED, (SessionEffect.PERSIST_CREDENTIAL,)
    ),
    (SessionStatus.CONNECTING, SessionInput.LOGIN_FAILED): Transition(
        SessionStatus.DISCONNECTED
    ),
    (SessionStatus.CONNECTING, SessionInput.LOGGED_OUT): Transition(
        SessionStatus.DISCONNECTED, (SessionEffect.RELOGIN_AFTER_DELAY,)
    ),
    (SessionStatus.CONNECTED, SessionInput.LOGGED_OUT): Transition(
        SessionStatus.DISCONNECTED, (SessionEffect.RELOGIN_AFTER_DELAY,)
    ),
}

_PLATFORM_INPUTS: dict[SessionEventType, SessionInput] = {
    SessionEventType.LOGGED_IN: SessionInput.LOGGED_IN,
    SessionEventType.LOGGED_OUT: SessionInput.LOGGED_OUT,
    SessionEventType.LOG: SessionInput.LOG,
}


def transition(status: SessionStatus, event: SessionInput) -> Transition:
    """Next status and effects for ``event`` in ``status``.

    Log events never change state; pairs not in the table are ignored.
    """
    if event == SessionInput.LOG:
        return Transition(status, (SessionEffect.LOG,))
    return _TRANSITIONS.get((status, event), Transition(status))


@dataclass
class SessionState:
    token: str
    status: SessionStatus = SessionStatus.DISCONNECTED

    @property
    def connected(self) -> bool:
        return self.status == SessionStatus.CONNECTED


class SessionManager:
    """Drives login and automatic relogin for the platform client."""

    def __init__(
        self,
        client: ChatPlatformClient,
        store: TokenStore,
        token: str,
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY_SECONDS,
    ) -> None:
        self.client = client
        self.store = store
        self.state = SessionState(token=token)
        self.reconnect_delay = reconnect_delay
        self._relogin_task: asyncio.Task[None] | None = None
        client.add_session_listener(self._on_platform_event)

    @property
    def connected(self) -> bool:
        return self.state.connected

    async def start(self) -> None:
        """Log in with the stored credential."""
        await self.dispatch(SessionInput.START)

    async def stop(self) -> None:
        """Cancel any pending relogin and log out."""
        task = self._relogin_task
        self._relogin_task = None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self.state.status = SessionStatus.DISCONNECTED
        await self.client.logout()
        logger.info("discord_session_stopped")

    async def _on_platform_event(self, event: SessionEvent) -> None:
        await self.dispatch(_PLATFORM_INPUTS[event.type], event.message)

    async def dispatch(self, event: SessionInput, message: str = "") -> None:
        """Apply one input to the state machine and run its effects."""
        result = transition(self.state.status, event)
        if result.status != self.state.status:
            logger.info(
                "discord_session %s -> %s on=%s",
                self.state.status.value,
                result.status.value,
                event.value,
            )
        self.state.status = result.status
        for effect in result.effects:
            await self._run_effect(effect, message)

    async def _run_effect(self, effect: SessionEffect, message: str) -> None:
        if effect == SessionEffect.LOGIN:
            await self._login()
        elif effect == SessionEffect.PERSIST_CREDENTIAL:
            self._persist_credential()
        elif effect == SessionEffect.RELOGIN_AFTER_DELAY:
            self._schedule_relogin()
        elif effect == SessionEffect.LOG:
            logger.info("discord_log %s", message)

    async def _login(self) -> None:
        if not self.state.token:
            logger.error("discord_login_failed err=no bot token configured")
            await self.dispatch(SessionInput.LOGIN_FAILED)
            return
        logger.info("discord_login_started")
        try:
            await self.client.login(self.state.token)
        except SessionLoginError as exc:
            logger.error("discord_login_failed err=%s", exc)
            await self.dispatch(SessionInput.LOGIN_FAILED)

    def _persist_credential(self) -> None:
        logger.info("discord_logged_in")
        try:
            self.store.write(self.state.token)
        except OSError:
            logger.exception("token_save_failed path=%s", self.store.path)

    def _schedule_relogin(self) -> None:
        logger.warning("discord_logged_out relogin_in=%.0fs", self.reconnect_delay)
        self._relogin_task = asyncio.create_task(self._relogin_later(), name="discord-relogin")

    async def _relogin_later(self) -> None:
        await asyncio.sleep(self.reconnect_delay)
        await self.dispatch(SessionInput.START)
