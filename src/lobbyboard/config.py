"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from pydantic import model_validator
from pydantic_settings import BaseSettings

MIN_RECONCILE_INTERVAL_SECONDS = 5


class Settings(BaseSettings):
    """Lobby board configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Discord
    discord_bot_token: str = ""
    discord_enabled: bool = True

    # Environment
    lobbyboard_env: str = "development"

    # Credential persistence
    lobbyboard_token_file: str = "token.txt"

    # Lobby data source
    lobbyboard_snapshot_url: str = ""
    lobbyboard_snapshot_timeout_seconds: float = 10.0

    # Scheduling & session
    lobbyboard_reconcile_interval_seconds: int = 60
    lobbyboard_reconnect_delay_seconds: float = 5.0
    lobbyboard_remote_timeout_seconds: float = 15.0
    lobbyboard_max_concurrent_guilds: int = 1

    # Rendering
    lobbyboard_game_title: str = "S&ASRT"
    lobbyboard_steam_app_id: int = 212480

    # Logging
    lobbyboard_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_limits(self) -> Settings:
        """Reject settings that would stall or flood the reconcile loop."""
        if self.lobbyboard_max_concurrent_guilds < 1:
            msg = "LOBBYBOARD_MAX_CONCURRENT_GUILDS must be at least 1."
            raise ValueError(msg)
        if self.lobbyboard_reconcile_interval_seconds < MIN_RECONCILE_INTERVAL_SECONDS:
            msg = (
                "LOBBYBOARD_RECONCILE_INTERVAL_SECONDS must be at least "
                f"{MIN_RECONCILE_INTERVAL_SECONDS}."
            )
            raise ValueError(msg)
        return self
