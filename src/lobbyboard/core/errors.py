"""Remote failure taxonomy and the classifier that maps failures to recovery.

Every call through the platform port raises ``RemoteOperationError`` on
failure. The engine asks ``classify_error`` what to do with the guild's
registry entry; nothing here ever aborts a whole pass.
"""

from __future__ import annotations

from enum import Enum

# Discord JSON error codes
UNKNOWN_CHANNEL = 10003
UNKNOWN_GUILD = 10004
UNKNOWN_MESSAGE = 10008
MISSING_ACCESS = 50001
MISSING_PERMISSIONS = 50013

# Code used for failures that never reached Discord (timeouts, not connected).
LOCAL_FAILURE = 0

GONE_CODES = frozenset({UNKNOWN_CHANNEL, UNKNOWN_GUILD, UNKNOWN_MESSAGE})
FORBIDDEN_CODES = frozenset({MISSING_ACCESS, MISSING_PERMISSIONS})


class RemoteOperationError(Exception):
    """A chat platform call failed."""

    def __init__(self, code: int, message: str, operation: str = "") -> None:
        super().__init__(f"{operation or 'remote call'} failed ({code}): {message}")
        self.code = code
        self.message = message
        self.operation = operation


class SessionLoginError(Exception):
    """Logging in with the stored credential failed."""


class RecoveryAction(str, Enum):
    """What to do with a guild's registry entry after a failure."""

    GONE = "gone"
    FORBIDDEN = "forbidden"
    TRANSIENT = "transient"

    @property
    def drops_entry(self) -> bool:
        return self is not RecoveryAction.TRANSIENT


def classify_error(exc: RemoteOperationError) -> RecoveryAction:
    """Classify a remote failure by its platform error code."""
    if exc.code in GONE_CODES:
        return RecoveryAction.GONE
    if exc.code in FORBIDDEN_CODES:
        return RecoveryAction.FORBIDDEN
    return RecoveryAction.TRANSIENT
