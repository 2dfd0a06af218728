"""Persisted bot credential: a single raw token string in a file."""

from __future__ import annotations

import logging
import pathlib

logger = logging.getLogger(__name__)


class TokenStore:
    """Reads and writes the bot token file."""

    def __init__(self, path: str | pathlib.Path) -> None:
        self.path = pathlib.Path(path)

    def read(self) -> str | None:
        """Return the persisted token, or None if there is none."""
        if not self.path.exists():
            return None
        token = self.path.read_text(encoding="utf-8").strip()
        if token:
            logger.info("token_loaded path=%s", self.path)
        return token or None

    def write(self, token: str) -> None:
        self.path.write_text(token, encoding="utf-8")
        logger.info("token_saved path=%s", self.path)


def resolve_token(configured: str, store: TokenStore) -> str:
    """Configured token wins; otherwise fall back to the persisted one."""
    return configured.strip() or store.read() or ""
