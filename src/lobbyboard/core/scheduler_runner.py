"""Scheduler entry point: fetch a snapshot and run one reconciliation pass.

Called by APScheduler on a fixed interval (see main.py).
"""

from __future__ import annotations

import logging
import time
from typing import Protocol

from lobbyboard.core.engine import PassReport, ReconciliationEngine
from lobbyboard.models.lobby import LobbySnapshot

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def fetch(self) -> LobbySnapshot: ...


async def tick_reconcile(
    engine: ReconciliationEngine,
    source: SnapshotSource,
) -> PassReport | None:
    """Run one scheduled reconciliation. Returns the pass report, or None if skipped."""
    if engine.is_running:
        logger.info("tick_reconcile_skipped reason=pass_in_flight")
        return None

    start = time.monotonic()
    snapshot = await source.fetch()
    report = await engine.run_pass(snapshot)
    if report is not None:
        logger.info(
            "tick_reconcile_complete guilds=%d succeeded=%s elapsed=%.1fs",
            len(report.outcomes),
            report.succeeded,
            time.monotonic() - start,
        )
    return report
