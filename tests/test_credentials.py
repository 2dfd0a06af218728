"""Tests for the persisted bot token."""

from __future__ import annotations

from pathlib import Path

from lobbyboard.core.credentials import TokenStore, resolve_token


class TestTokenStore:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert TokenStore(tmp_path / "token.txt").read() is None

    def test_blank_file(self, tmp_path: Path) -> None:
        path = tmp_path / "token.txt"
        path.write_text("  \n")
        assert TokenStore(path).read() is None

    def test_read_strips_whitespace(self, tmp_path: Path) -> None:
        path = tmp_path / "token.txt"
        path.write_text("abc.def\n")
        assert TokenStore(path).read() == "abc.def"

    def test_write_then_read(self, tmp_path: Path) -> None:
        store = TokenStore(tmp_path / "token.txt")
        store.write("secret")
        assert (tmp_path / "token.txt").read_text() == "secret"
        assert store.read() == "secret"


class TestResolveToken:
    def test_configured_token_wins(self, tmp_path: Path) -> None:
        store = TokenStore(tmp_path / "token.txt")
        store.write("stored")
        assert resolve_token("from-env", store) == "from-env"

    def test_falls_back_to_stored(self, tmp_path: Path) -> None:
        store = TokenStore(tmp_path / "token.txt")
        store.write("stored")
        assert resolve_token("  ", store) == "stored"

    def test_nothing_available(self, tmp_path: Path) -> None:
        assert resolve_token("", TokenStore(tmp_path / "token.txt")) == ""
