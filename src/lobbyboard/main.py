"""FastAPI application factory.

The app hosts the Discord session and the reconciliation scheduler in its
lifespan, and exposes health and board status for operators. Run with
``uvicorn lobbyboard.main:app``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request

from lobbyboard import __version__
from lobbyboard.config import Settings
from lobbyboard.core.credentials import TokenStore, resolve_token
from lobbyboard.core.engine import ReconciliationEngine
from lobbyboard.core.session import SessionManager
from lobbyboard.core.snapshot_source import HttpSnapshotSource
from lobbyboard.discord.platform import DiscordPlatformClient

logger = logging.getLogger(__name__)


def is_discord_enabled(settings: Settings, token: str) -> bool:
    """Start Discord only when enabled and a credential is available."""
    return bool(settings.discord_enabled and token)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: log into Discord and schedule reconciliation passes."""
    settings: Settings = app.state.settings
    store = TokenStore(settings.lobbyboard_token_file)
    token = resolve_token(settings.discord_bot_token, store)

    platform = DiscordPlatformClient(timeout=settings.lobbyboard_remote_timeout_seconds)
    session = SessionManager(
        platform,
        store,
        token,
        reconnect_delay=settings.lobbyboard_reconnect_delay_seconds,
    )
    engine = ReconciliationEngine(
        platform,
        game_title=settings.lobbyboard_game_title,
        app_id=settings.lobbyboard_steam_app_id,
        max_concurrent_guilds=settings.lobbyboard_max_concurrent_guilds,
    )
    source = HttpSnapshotSource(
        settings.lobbyboard_snapshot_url,
        timeout=settings.lobbyboard_snapshot_timeout_seconds,
    )
    app.state.session = session
    app.state.engine = engine

    scheduler = None
    if is_discord_enabled(settings, token):
        await session.start()
        logger.info("discord_session_integration_started")

        from apscheduler.schedulers.asyncio import AsyncIOScheduler
        from apscheduler.triggers.interval import IntervalTrigger

        from lobbyboard.core.scheduler_runner import tick_reconcile

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            tick_reconcile,
            trigger=IntervalTrigger(seconds=settings.lobbyboard_reconcile_interval_seconds),
            kwargs={"engine": engine, "source": source},
            id="tick_reconcile",
            name="Reconcile status boards",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        logger.info(
            "scheduler_started interval=%ss",
            settings.lobbyboard_reconcile_interval_seconds,
        )
    else:
        logger.info("discord_session_integration_disabled")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
        await session.stop()


def _board_status(request: Request) -> dict[str, Any]:
    engine: ReconciliationEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        return {
            "guilds": [],
            "last_desired_slot_count": 0,
            "pass_running": False,
            "last_pass": None,
        }

    report = engine.last_report
    last_pass = None
    if report is not None:
        last_pass = {
            "started_at": report.started_at.isoformat(),
            "slot_count": report.slot_count,
            "succeeded": report.succeeded,
            "error": report.error,
            "outcomes": [
                {
                    "guild_id": str(o.guild_id),
                    "guild_name": o.guild_name,
                    "status": o.status,
                    "step": o.step,
                    "code": o.code,
                }
                for o in report.outcomes
            ],
        }
    return {
        "guilds": [
            {
                "guild_id": str(entry.guild_id),
                "guild_name": entry.guild_name,
                "channel_id": str(entry.channel.id),
                "channel_name": entry.channel.name,
                "pool_size": entry.pool_size,
            }
            for entry in engine.state.registry
        ],
        "last_desired_slot_count": engine.state.last_desired_slot_count,
        "pass_running": engine.is_running,
        "last_pass": last_pass,
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the lobby board application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.lobbyboard_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("discord").setLevel(logging.WARNING)

    app = FastAPI(
        title="Lobby Board",
        version=__version__,
        description="Discord status board mirroring live game-lobby activity",
        docs_url="/docs" if settings.lobbyboard_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        session: SessionManager | None = getattr(request.app.state, "session", None)
        return {
            "status": "ok",
            "env": settings.lobbyboard_env,
            "discord_connected": bool(session and session.connected),
        }

    @app.get("/status")
    async def status(request: Request) -> dict[str, Any]:
        return _board_status(request)

    return app


app = create_app()
