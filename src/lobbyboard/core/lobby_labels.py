"""Human-readable labels for the numeric fields of a lobby.

The game reports lobby type, activity, match mode and difficulty as small
integers. Values outside the known tables render as "Unknown" rather than
failing the whole board.
"""

from __future__ import annotations

from lobbyboard.models.lobby import LobbyState, LobbyType

UNKNOWN_LABEL = "Unknown"

LOBBY_TYPE_LABELS: dict[LobbyType, str] = {
    LobbyType.MATCHMAKING_RACE: "Matchmaking (race)",
    LobbyType.MATCHMAKING_ARENA: "Matchmaking (arena)",
    LobbyType.CUSTOM: "Custom game",
    LobbyType.PRIVATE: "Private custom game",
}

# Match modes as (event, venue) pairs; arena lobbies play on arenas, the rest on tracks.
RACE_MODES: tuple[tuple[str, str], ...] = (
    ("Race", "Ocean View"),
    ("Race", "Samba Studios"),
    ("Race", "Carrier Zone"),
    ("Race", "Dragon Canyon"),
    ("Race", "Temple Trouble"),
    ("Race", "Galactic Parade"),
    ("Race", "Seasonal Shrines"),
    ("Race", "Rogue's Landing"),
    ("Race", "Dream Valley"),
    ("Race", "Chilly Castle"),
    ("Race", "Graffiti City"),
    ("Race", "Sanctuary Falls"),
    ("Race", "Graveyard Gig"),
    ("Race", "Adder's Lair"),
    ("Race", "Burning Depths"),
    ("Race", "Race of Ages"),
    ("Race", "Sunshine Tour"),
    ("Race", "Shibuya Downtown"),
    ("Race", "Roulette Road"),
    ("Race", "Egg Hangar"),
)
ARENA_MODES: tuple[tuple[str, str], ...] = (
    ("Battle Arena", "Rooftop Rumble"),
    ("Battle Arena", "Neon Docks"),
    ("Battle Arena", "Battle Bay"),
    ("Battle Arena", "Creepy Courtyard"),
)

DIFFICULTY_LABELS: tuple[str, ...] = ("C Class", "B Class", "A Class", "S Class")


def lobby_type_label(lobby_type: LobbyType) -> str:
    return LOBBY_TYPE_LABELS.get(lobby_type, UNKNOWN_LABEL)


def activity_label(state: LobbyState, race_progress: int, countdown: int) -> str:
    """What the lobby is doing right now."""
    if state == LobbyState.WAITING:
        return "Waiting for players"
    if state == LobbyState.COUNTDOWN:
        return f"Starting in {countdown}s"
    if state == LobbyState.RACING:
        return f"Racing ({race_progress}%)"
    if state == LobbyState.RESULTS:
        return "Viewing results"
    return UNKNOWN_LABEL


def _mode(lobby_type: LobbyType, match_mode: int) -> tuple[str, str] | None:
    modes = ARENA_MODES if lobby_type == LobbyType.MATCHMAKING_ARENA else RACE_MODES
    if 0 <= match_mode < len(modes):
        return modes[match_mode]
    return None


def event_label(lobby_type: LobbyType, match_mode: int) -> str:
    mode = _mode(lobby_type, match_mode)
    return mode[0] if mode else UNKNOWN_LABEL


def map_field(lobby_type: LobbyType, match_mode: int) -> tuple[str, str]:
    """(field name, value) for the lobby's venue."""
    name = "Arena" if lobby_type == LobbyType.MATCHMAKING_ARENA else "Track"
    mode = _mode(lobby_type, match_mode)
    return name, mode[1] if mode else UNKNOWN_LABEL


def difficulty_label(lobby_type: LobbyType, difficulty: int) -> str:
    if lobby_type == LobbyType.MATCHMAKING_ARENA:
        return "Arena rules"
    if 0 <= difficulty < len(DIFFICULTY_LABELS):
        return DIFFICULTY_LABELS[difficulty]
    return UNKNOWN_LABEL
