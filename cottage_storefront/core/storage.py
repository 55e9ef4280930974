"""Key-value stores backing cart persistence"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """The subset of browser-style storage the cart needs"""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-memory store; lost on restart"""

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    Durable store kept as one JSON object on disk.

    Writes go to a temporary file that replaces the old one, so a crash
    mid-write leaves the previous document intact.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def _read_for_update(self) -> dict[str, str]:
        """Current document, or an empty one when the file is unreadable"""
        try:
            return self._read()
        except ValueError as e:
            logger.warning(f"Overwriting unreadable store {self.path}: {e}")
            return {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_for_update()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read_for_update()
        if key in data:
            del data[key]
            self._write(data)
