"""
Save-slot storage abstraction.

The engine treats persistence as an opaque async key-value blob store:
values are strings (serialized game states), keys are slot names.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class BlobStore(Protocol):
    """
    Async key-value storage for serialized state.

    Implementations:
    - JsonFileBlobStore: one file per key (production)
    - MemoryBlobStore: in-memory dict (testing)
    """

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is unset."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    async def remove(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        ...


class JsonFileBlobStore:
    """
    File-based blob storage.

    Features:
    - One <key>.json file per slot under save_dir
    - Previous value kept as <key>.json.bak on overwrite
    - File I/O runs in a worker thread so callers' event loops stay free
    """

    def __init__(self, save_dir: Path | str = "saves"):
        self.save_dir = Path(save_dir)
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid save key: {key!r}")
        return self.save_dir / f"{key}.json"

    async def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(self._write, path, value)

    async def remove(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            await asyncio.to_thread(path.unlink)

    @staticmethod
    def _write(path: Path, value: str) -> None:
        # Backup previous save
        if path.exists():
            backup = path.with_suffix(".json.bak")
            backup.write_text(path.read_text(encoding="utf-8"), encoding="utf-8")
            logger.debug(f"Backed up {path.name} to {backup.name}")
        path.write_text(value, encoding="utf-8")

    def keys(self) -> list[str]:
        """List stored keys, newest first."""
        files = sorted(
            self.save_dir.glob("*.json"),
            key=lambda f: f.stat().st_mtime,
            reverse=True,
        )
        return [f.stem for f in files]


class MemoryBlobStore:
    """
    In-memory blob storage for testing.

    No file I/O - all data lives in memory.
    """

    def __init__(self):
        self.blobs: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.blobs.get(key)

    async def set(self, key: str, value: str) -> None:
        self.blobs[key] = value

    async def remove(self, key: str) -> None:
        self.blobs.pop(key, None)

    def keys(self) -> list[str]:
        return list(self.blobs)

    def clear(self) -> None:
        """Clear all blobs (test utility)."""
        self.blobs.clear()
