"""
Durable key-value storage for client state (cart snapshots).

A storage object behaves like a browser's localStorage: string keys,
string values, one namespace per client. The cart never talks to files
directly; it only sees this interface.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, used for tests and single-process runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStorage:
    """
    One file per key inside `directory`.

    Writes go to a temp file first and are moved into place with
    os.replace, so a reader never sees a half-written snapshot.
    The directory is created lazily on first write.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        name = _UNSAFE_KEY_CHARS.sub("_", key).strip(".") or "_"
        return self.directory / f"{name}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
