"""Render a lobby snapshot into the ordered slots of the status board.

Slot 0 is always the overview. Every other slot is one displayed lobby;
private lobbies are counted in the overview but never shown on their own.
"""

from __future__ import annotations

from datetime import UTC, datetime

from lobbyboard.discord.embeds import build_lobby_embed
from lobbyboard.models.board import BLANK_PLACEHOLDER, Slot
from lobbyboard.models.lobby import LobbySnapshot

CLOCK_FORMAT = "%d/%m/%y %H:%M"
UNAVAILABLE_MESSAGE = "Bot is not logged into Steam!"


def lobby_count_message(lobby_count: int, player_count: int, category: str) -> str:
    """One overview line for a lobby category, e.g. matchmaking.

    A negative player count means the source did not report one.
    """
    if player_count < 0:
        return f"The number of {category} players is unknown."
    if player_count == 0:
        return f"**There are no {category} lobbies!**"
    if player_count == 1:
        return f"**1** player is in a {category} lobby."
    noun = "lobbies" if lobby_count > 1 else "lobby"
    return f"**{player_count}** players are in **{lobby_count}** {category} {noun}."


def render_overview(
    snapshot: LobbySnapshot,
    *,
    game_title: str,
    now: datetime | None = None,
) -> str:
    if not snapshot.is_available:
        return UNAVAILABLE_MESSAGE
    now = now or datetime.now(UTC)
    counts = snapshot.lobby_counts
    return "\n".join(
        [
            f"**__{game_title} lobby status — {now.strftime(CLOCK_FORMAT)} GMT__**",
            "",
            f"**{snapshot.player_count}** people are playing {game_title}.",
            lobby_count_message(
                counts.matchmaking_lobbies, counts.matchmaking_players, "matchmaking"
            ),
            lobby_count_message(
                counts.custom_game_lobbies, counts.custom_game_players, "custom game"
            ),
        ]
    )


def render_slots(
    snapshot: LobbySnapshot,
    *,
    game_title: str,
    app_id: int,
    now: datetime | None = None,
) -> list[Slot]:
    """Overview slot followed by one slot per non-private lobby, in snapshot order."""
    slots = [Slot(text=render_overview(snapshot, game_title=game_title, now=now))]
    for lobby in snapshot.lobbies:
        if lobby.is_private:
            continue
        slots.append(Slot(text=BLANK_PLACEHOLDER, embed=build_lobby_embed(lobby, app_id)))
    return slots
