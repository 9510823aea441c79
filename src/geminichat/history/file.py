"""File storage backend.

Keeps each key in its own JSON file inside a directory. Writes go to a
temporary file in the same directory which then replaces the target, so a
crash never leaves a half-written history behind.
"""

import logging
import os
import re
import tempfile
from pathlib import Path

from ..exceptions import PersistenceError
from .base import StorageBackend

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileStorage(StorageBackend):
    """File-backed storage, persistent across sessions."""

    def __init__(self, directory: str | Path):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File that holds the value stored under ``key``."""
        safe_key = _UNSAFE_KEY_CHARS.sub("_", key)
        return self._directory / f"{safe_key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e

    def write(self, key: str, data: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{path.stem}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, UnicodeError) as e:
            raise PersistenceError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %d characters to %s", len(data), path)

    @property
    def backend_type(self) -> str:
        return "file"
