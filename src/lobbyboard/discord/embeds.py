"""Discord embed builders for the lobby board.

One embed per displayed lobby. Fields that depend on the game having
initialised the lobby are only added once its state is known.
"""

from __future__ import annotations

import discord

from lobbyboard.core.lobby_labels import (
    activity_label,
    difficulty_label,
    event_label,
    lobby_type_label,
    map_field,
)
from lobbyboard.models.lobby import LobbyInfo, LobbyType

LOBBY_COLOUR = discord.Color.gold()
LOBBY_MAX_PLAYERS = 10


def join_link(app_id: int, lobby_id: int) -> str:
    return f"steam://joinlobby/{app_id}/{lobby_id}"


def build_lobby_embed(lobby: LobbyInfo, app_id: int) -> discord.Embed:
    """Build the status embed for a single lobby."""
    embed = discord.Embed(title=lobby.name, color=LOBBY_COLOUR)
    embed.add_field(name="Players", value=f"{lobby.player_count}/{LOBBY_MAX_PLAYERS}", inline=True)

    if lobby.type != LobbyType.UNKNOWN:
        embed.add_field(name="Type", value=lobby_type_label(lobby.type), inline=True)
        embed.description = "Private lobby" if lobby.is_private else join_link(app_id, lobby.id)

    if lobby.is_initialised:
        embed.add_field(
            name="Activity",
            value=activity_label(lobby.state, lobby.race_progress, lobby.countdown),
            inline=True,
        )
        embed.add_field(name="Event", value=event_label(lobby.type, lobby.match_mode), inline=True)
        map_name, map_value = map_field(lobby.type, lobby.match_mode)
        embed.add_field(name=map_name, value=map_value, inline=True)
        embed.add_field(
            name="Difficulty",
            value=difficulty_label(lobby.type, lobby.difficulty),
            inline=True,
        )
    else:
        embed.description = "Lobby initialising..."

    return embed
