"""Reconciliation engine: one pass brings every guild's board up to date.

A pass renders the snapshot once, then for each guild runs
discover -> compact -> sync. Guilds are independent: a failure in one is
classified and logged, and never stops the others. Passes never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from lobbyboard.core.compactor import compact_pool
from lobbyboard.core.discovery import discover_status_channel
from lobbyboard.core.errors import RecoveryAction, RemoteOperationError, classify_error
from lobbyboard.core.registry import ReconciliationState
from lobbyboard.core.render import render_slots
from lobbyboard.core.sync import sync_slots
from lobbyboard.discord.platform import ChatPlatformClient
from lobbyboard.models.board import STATUS_POOL_CAPACITY, GuildRef, GuildStatusEntry, Slot
from lobbyboard.models.lobby import LobbySnapshot

logger = logging.getLogger(__name__)

OUTCOME_OK = "ok"


@dataclass(frozen=True)
class GuildOutcome:
    """Result of reconciling one guild in one pass."""

    guild_id: int
    guild_name: str
    status: str  # "ok" or a RecoveryAction value
    step: str = ""
    code: int | None = None

    @property
    def ok(self) -> bool:
        return self.status == OUTCOME_OK


@dataclass
class PassReport:
    """Summary of one reconciliation pass."""

    started_at: datetime
    slot_count: int
    outcomes: list[GuildOutcome] = field(default_factory=list)
    error: str = ""

    @property
    def succeeded(self) -> bool:
        return not self.error and all(o.ok for o in self.outcomes)


class ReconciliationEngine:
    """Owns the reconciliation state and runs passes against the platform."""

    def __init__(
        self,
        client: ChatPlatformClient,
        *,
        game_title: str,
        app_id: int,
        state: ReconciliationState | None = None,
        max_concurrent_guilds: int = 1,
        capacity: int = STATUS_POOL_CAPACITY,
    ) -> None:
        self.client = client
        self.state = state or ReconciliationState()
        self.game_title = game_title
        self.app_id = app_id
        self.capacity = capacity
        self.last_report: PassReport | None = None
        self._max_concurrent_guilds = max_concurrent_guilds
        self._pass_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._pass_lock.locked()

    async def run_pass(self, snapshot: LobbySnapshot) -> PassReport | None:
        """Run one pass for ``snapshot``.

        Returns None without touching anything if a pass is already running.
        """
        if self._pass_lock.locked():
            logger.warning("reconcile_pass_skipped reason=pass_in_flight")
            return None
        async with self._pass_lock:
            report = await self._run_pass(snapshot)
        self.last_report = report
        return report

    async def _run_pass(self, snapshot: LobbySnapshot) -> PassReport:
        slots = render_slots(snapshot, game_title=self.game_title, app_id=self.app_id)
        report = PassReport(started_at=datetime.now(UTC), slot_count=len(slots))
        logger.info("reconcile_pass_started slots=%d", len(slots))

        try:
            guilds = await self.client.list_guilds()
        except RemoteOperationError as exc:
            logger.warning("reconcile_list_guilds_failed code=%s err=%s", exc.code, exc.message)
            # No guild was touched, so the counter stays where it was.
            report.error = str(exc)
            return report

        semaphore = asyncio.Semaphore(self._max_concurrent_guilds)
        matchmaking_players = snapshot.lobby_counts.matchmaking_players

        async def _bounded(guild: GuildRef) -> GuildOutcome:
            async with semaphore:
                return await self._reconcile_guild(guild, slots, matchmaking_players)

        report.outcomes = list(await asyncio.gather(*(_bounded(g) for g in guilds)))
        self._advance_slot_count(len(slots), succeeded=report.succeeded)

        failed = sum(1 for o in report.outcomes if not o.ok)
        logger.info(
            "reconcile_pass_complete guilds=%d failed=%d last_desired_slot_count=%d",
            len(report.outcomes),
            failed,
            self.state.last_desired_slot_count,
        )
        return report

    def _advance_slot_count(self, desired: int, *, succeeded: bool) -> None:
        """Move the shrink-blanking counter after a pass.

        Only a fully successful pass may lower it; otherwise some guild may
        still show slots up to the larger count.
        """
        if succeeded:
            self.state.last_desired_slot_count = desired
        else:
            self.state.last_desired_slot_count = max(
                self.state.last_desired_slot_count, desired
            )

    async def _reconcile_guild(
        self,
        guild: GuildRef,
        slots: list[Slot],
        matchmaking_players: int,
    ) -> GuildOutcome:
        registry = self.state.registry
        entry = registry.get(guild.id)
        fresh = entry is None
        step = "setup"

        try:
            if entry is None:
                entry = await self._set_up_guild(guild)
                registry.put(entry)
            step = "sync"
            await sync_slots(
                self.client,
                entry,
                slots,
                last_desired_slot_count=self.state.last_desired_slot_count,
                matchmaking_players=matchmaking_players,
                fresh=fresh,
            )
        except RemoteOperationError as exc:
            return self._handle_failure(guild, step, exc)
        except Exception:  # Last-resort handler: one guild must never end the pass for the rest
            logger.exception(
                "reconcile_guild_error guild=%s (%s) step=%s action=%s",
                guild.name,
                guild.id,
                step,
                RecoveryAction.TRANSIENT.value,
            )
            return GuildOutcome(
                guild_id=guild.id,
                guild_name=guild.name,
                status=RecoveryAction.TRANSIENT.value,
                step=step,
            )

        return GuildOutcome(guild_id=guild.id, guild_name=guild.name, status=OUTCOME_OK)

    async def _set_up_guild(self, guild: GuildRef) -> GuildStatusEntry:
        """Find or create the status channel and compact its inherited pool."""
        logger.info("status_channel_setup guild=%s (%s)", guild.name, guild.id)
        channel, created = await discover_status_channel(self.client, guild)
        messages = [] if created else await compact_pool(self.client, channel, self.capacity)
        return GuildStatusEntry(
            guild_id=guild.id,
            guild_name=guild.name,
            channel=channel,
            messages=messages,
            capacity=self.capacity,
        )

    def _handle_failure(
        self,
        guild: GuildRef,
        step: str,
        exc: RemoteOperationError,
    ) -> GuildOutcome:
        action = classify_error(exc)
        logger.warning(
            "reconcile_guild_failed guild=%s (%s) step=%s op=%s code=%s action=%s err=%s",
            guild.name,
            guild.id,
            step,
            exc.operation,
            exc.code,
            action.value,
            exc.message,
        )
        if action.drops_entry:
            self.state.registry.drop(guild.id)
        return GuildOutcome(
            guild_id=guild.id,
            guild_name=guild.name,
            status=action.value,
            step=step,
            code=exc.code,
        )

