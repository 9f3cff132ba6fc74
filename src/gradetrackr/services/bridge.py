"""External persistent store bridges.

A bridge is an opaque two-verb blob store: ``load_data`` returns the last
saved JSON document (``"{}"`` before the first save) and ``save_data``
replaces it. The semester store treats any exception from a bridge as
"store not available".
"""

from __future__ import annotations

import abc
import asyncio
from pathlib import Path


class BridgeError(Exception):
    pass


class DataBridge(abc.ABC):
    @abc.abstractmethod
    async def load_data(self) -> str: ...

    @abc.abstractmethod
    async def save_data(self, data: str) -> None: ...

    @abc.abstractmethod
    async def get_data_location(self) -> str: ...


class FileDataBridge(DataBridge):
    FILE_NAME = "grade_data.json"

    def __init__(self, data_dir: str) -> None:
        if not data_dir:
            raise BridgeError("Missing data directory for file storage")
        self.data_dir = Path(data_dir)

    @property
    def path(self) -> Path:
        return self.data_dir / self.FILE_NAME

    def _read(self) -> str:
        path = self.path
        if not path.exists():
            return "{}"
        return path.read_text(encoding="utf-8")

    def _write(self, data: str) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(self.path)

    async def load_data(self) -> str:
        try:
            return await asyncio.to_thread(self._read)
        except OSError as exc:
            raise BridgeError(f"Failed to read {self.path}: {exc}") from exc

    async def save_data(self, data: str) -> None:
        try:
            await asyncio.to_thread(self._write, data)
        except OSError as exc:
            raise BridgeError(f"Failed to write {self.path}: {exc}") from exc

    async def get_data_location(self) -> str:
        return str(self.path)
