# termprofiles/storage/json_backend.py
from __future__ import annotations

import asyncio
import json
import os
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from termprofiles.core.errors import (
    PersistenceReadError,
    PersistenceWriteError,
    ProfilesFileCorruptError,
    ProfilesFileMissingError,
)


class JsonFileBackend:
    """
    Single JSON object document at a fixed path.

    Blocking file I/O runs in a worker thread so the event loop only
    suspends at read/write boundaries.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)

    # ---------- read ----------
    def _read_sync(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ProfilesFileMissingError(self.path, "file does not exist") from None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProfilesFileCorruptError(self.path, f"invalid JSON ({e})") from e
        except OSError as e:
            raise PersistenceReadError(self.path, e.strerror or str(e)) from e

        if not isinstance(data, dict):
            raise ProfilesFileCorruptError(self.path, f"expected a JSON object, got {type(data).__name__}")
        return data

    async def read_json(self) -> dict[str, Any]:
        return await asyncio.to_thread(self._read_sync)

    # ---------- write ----------
    def _ensure_dir_sync(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceWriteError(self.path, e.strerror or str(e)) from e

    async def ensure_dir(self) -> None:
        await asyncio.to_thread(self._ensure_dir_sync)

    def _write_sync(self, data: dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
            raise PersistenceWriteError(self.path, reason) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

    async def write_json(self, data: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write_sync, data)
        logger.debug(f"JsonFileBackend: wrote {len(data)} entries to {self.path}")

    # ---------- recovery ----------
    def _backup_sync(self) -> Path | None:
        if not self.path.exists():
            return None
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}-{uuid.uuid4().hex[:8]}")
        os.replace(self.path, backup)
        return backup

    async def backup_unreadable(self) -> Path | None:
        """Move the current document aside; returns the backup path, or None if there was nothing to move."""
        backup = await asyncio.to_thread(self._backup_sync)
        if backup is not None:
            logger.warning(f"JsonFileBackend: moved unreadable {self.path.name} to {backup}")
        return backup
