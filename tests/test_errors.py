"""Tests for remote failure classification."""

from __future__ import annotations

import pytest

from lobbyboard.core.errors import RecoveryAction, RemoteOperationError, classify_error


@pytest.mark.parametrize(
    ("code", "action"),
    [
        (10003, RecoveryAction.GONE),
        (10004, RecoveryAction.GONE),
        (10008, RecoveryAction.GONE),
        (50001, RecoveryAction.FORBIDDEN),
        (50013, RecoveryAction.FORBIDDEN),
        (0, RecoveryAction.TRANSIENT),
        (500, RecoveryAction.TRANSIENT),
        (130000, RecoveryAction.TRANSIENT),
    ],
)
def test_classify_error(code: int, action: RecoveryAction) -> None:
    assert classify_error(RemoteOperationError(code, "boom")) is action


def test_only_transient_keeps_entry() -> None:
    assert RecoveryAction.GONE.drops_entry
    assert RecoveryAction.FORBIDDEN.drops_entry
    assert not RecoveryAction.TRANSIENT.drops_entry


def test_error_message_names_operation() -> None:
    exc = RemoteOperationError(50013, "Missing Permissions", "rename_channel")

    assert str(exc) == "rename_channel failed (50013): Missing Permissions"
    assert exc.code == 50013
    assert exc.operation == "rename_channel"
