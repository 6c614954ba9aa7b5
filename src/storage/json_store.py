# src/storage/json_store.py - v1
"""JSON file-based blob store (default STORE_BACKEND=json).

One directory per partition under STORE_ROOT, one JSON file per entry.
Entry files are named by the SHA-256 of the request key because request
URLs are not safe file names.
"""

from __future__ import annotations

import hashlib
import json
import logging
import shutil
from pathlib import Path

from pydantic import ValidationError

from shellcache.core.models import ResourceResponse
from shellcache.storage.base_blob_store import BaseBlobStore, BasePartition

logger = logging.getLogger(__name__)


class _StoredEntry(ResourceResponse):
    """On-disk envelope: the response plus the key it was stored under."""

    key: str


class JsonPartition(BasePartition):
    """Partition stored as a directory of JSON files."""

    def __init__(self, name: str, directory: Path) -> None:
        super().__init__(name)
        self._dir = directory
        self._dir.mkdir(parents=True, exist_ok=True)

    async def get(self, key: str) -> ResourceResponse | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is None:
            return None
        return ResourceResponse(**entry.model_dump(exclude={"key"}))

    async def put(self, key: str, response: ResourceResponse) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        entry = _StoredEntry(key=key, **response.model_dump())
        self._entry_path(key).write_text(entry.model_dump_json(), encoding="utf-8")

    async def delete(self, key: str) -> bool:
        path = self._entry_path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    async def keys(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        keys: list[str] = []
        for path in sorted(self._dir.glob("*.json")):
            entry = self._read(path)
            if entry is not None:
                keys.append(entry.key)
        return keys

    def _read(self, path: Path) -> _StoredEntry | None:
        try:
            return _StoredEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    def _entry_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._dir / f"{digest}.json"


class JsonBlobStore(BaseBlobStore):
    """File-based blob store using a directory tree of JSON files."""

    def __init__(self, store_root: Path | str) -> None:
        self._root = Path(store_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def open_partition(self, name: str) -> JsonPartition:
        return JsonPartition(name, self._partition_dir(name))

    async def delete_partition(self, name: str) -> bool:
        directory = self._partition_dir(name)
        if not directory.is_dir():
            return False
        shutil.rmtree(directory)
        return True

    async def partition_names(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if p.is_dir())

    def _partition_dir(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(f"Invalid partition name: {name!r}")
        return self._root / name
