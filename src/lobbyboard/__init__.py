"""Lobby board: a Discord status board mirroring live game-lobby activity."""

__version__ = "0.1.0"
