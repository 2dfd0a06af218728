"""Discord integration for the lobby board.

The adapter in ``platform`` is the only place that talks to the Discord API;
everything in ``lobbyboard.core`` works on plain handles.
"""
