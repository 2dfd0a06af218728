"""Lobby snapshot models — input to the slot renderer.

A snapshot is produced once per reconciliation trigger by the game-stats
source and never mutated afterwards. Negative counts mean "unknown".
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LobbyType(IntEnum):
    """Kind of lobby as reported by the game."""

    UNKNOWN = -1
    MATCHMAKING_RACE = 0
    MATCHMAKING_ARENA = 1
    CUSTOM = 2
    PRIVATE = 3


class LobbyState(IntEnum):
    """Lifecycle of a lobby once the game has initialised it."""

    UNINITIALISED = -1
    WAITING = 0
    COUNTDOWN = 1
    RACING = 2
    RESULTS = 3


class LobbyCounts(BaseModel):
    """Aggregate lobby and player counts per category."""

    model_config = ConfigDict(frozen=True)

    matchmaking_lobbies: int = 0
    matchmaking_players: int = -1
    custom_game_lobbies: int = 0
    custom_game_players: int = 0


class LobbyInfo(BaseModel):
    """One lobby as seen in the latest snapshot."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    type: LobbyType = LobbyType.UNKNOWN
    player_count: int = 0
    state: LobbyState = LobbyState.UNINITIALISED
    race_progress: int = 0  # percent of the current race completed
    countdown: int = 0  # seconds until the race starts
    match_mode: int = 0
    difficulty: int = 0

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: object) -> object:
        """Map lobby types this build does not know about to UNKNOWN."""
        if isinstance(value, int) and value not in set(LobbyType):
            return LobbyType.UNKNOWN
        return value

    @field_validator("state", mode="before")
    @classmethod
    def _coerce_state(cls, value: object) -> object:
        if isinstance(value, int) and value not in set(LobbyState):
            return LobbyState.UNINITIALISED
        return value

    @property
    def is_initialised(self) -> bool:
        return self.state != LobbyState.UNINITIALISED

    @property
    def is_private(self) -> bool:
        return self.type == LobbyType.PRIVATE


class LobbySnapshot(BaseModel):
    """Immutable view of lobby activity at one point in time."""

    model_config = ConfigDict(frozen=True)

    player_count: int = -1
    lobby_counts: LobbyCounts = Field(default_factory=LobbyCounts)
    lobbies: list[LobbyInfo] = Field(default_factory=list)

    @classmethod
    def unavailable(cls) -> LobbySnapshot:
        """Snapshot signalling that the lobby source could not be reached."""
        return cls()

    @property
    def is_available(self) -> bool:
        return self.player_count >= 0
