"""File-backed roster cache."""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog

from netpoll.core.config import settings
from netpoll.core.errors import CacheError, PersistError

logger = structlog.get_logger()


class RosterCache:
    """Stores the roster as one pretty-printed JSON blob at a fixed path."""

    def __init__(self, path: str | Path = settings.roster_cache_path) -> None:
        self.path = Path(path)

    async def load(self) -> Any:
        """Read and decode the cached blob."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, self._sync_load)

    async def save(self, data: Any) -> None:
        """Replace the cached blob."""
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._sync_save, data)
        logger.debug("Roster cache written", path=str(self.path))

    def _sync_load(self) -> Any:
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CacheError(f"Cannot read {self.path}: {e}") from e
        try:
            return json.loads(text)
        except ValueError as e:
            raise CacheError(f"Cannot parse {self.path}: {e}") from e

    def _sync_save(self, data: Any) -> None:
        """Write to a sibling temp file, then move it over the target."""
        directory = self.path.parent
        tmp_path: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistError(f"Cannot write {self.path}: {e}") from e
