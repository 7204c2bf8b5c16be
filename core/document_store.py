"""
Document store - JSON documents grouped into collections.

Each document lives at ``<root>/<collection>/<doc_id>.json``. Writes are atomic
per document; a per-collection lock serializes access within the process.
Read-modify-write sequences spanning several calls are not protected.
"""
from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from .io_utils import (
    ensure_writable_dir,
    list_json_stems,
    read_json,
    write_json_atomic,
    write_json_exclusive,
)

logger = logging.getLogger("bankbot.store")

_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class DocumentStoreError(RuntimeError):
    pass


class DocumentStore:
    """Async-safe JSON document storage keyed by (collection, document id)."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self._locks: Dict[str, asyncio.Lock] = {}

    async def initialize(self) -> None:
        """Ensure the storage root exists and is writable."""
        try:
            await ensure_writable_dir(self.root)
        except OSError as exc:
            raise DocumentStoreError(f"Data directory {self.root} is not writable: {exc}") from exc

    def _lock(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[collection] = lock
        return lock

    def _path(self, collection: str, doc_id: str) -> Path:
        doc_id = str(doc_id)
        if not _SAFE_NAME_RE.fullmatch(collection):
            raise DocumentStoreError(f"Invalid collection name: {collection!r}")
        if not _SAFE_NAME_RE.fullmatch(doc_id):
            raise DocumentStoreError(f"Invalid document id: {doc_id!r}")
        return self.root / collection / f"{doc_id}.json"

    # ─── Reads ────────────────────────────────────────────────────────────────

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document, or None if it does not exist."""
        path = self._path(collection, doc_id)
        async with self._lock(collection):
            data = await read_json(path, default=None)
        if data is not None and not isinstance(data, dict):
            raise DocumentStoreError(f"{collection}/{doc_id} is not a JSON object")
        return data

    async def exists(self, collection: str, doc_id: str) -> bool:
        return await self.get(collection, doc_id) is not None

    async def list_ids(self, collection: str) -> List[str]:
        if not _SAFE_NAME_RE.fullmatch(collection):
            raise DocumentStoreError(f"Invalid collection name: {collection!r}")
        async with self._lock(collection):
            return await list_json_stems(self.root / collection)

    async def list_documents(self, collection: str) -> Dict[str, Dict[str, Any]]:
        documents: Dict[str, Dict[str, Any]] = {}
        for doc_id in await self.list_ids(collection):
            data = await self.get(collection, doc_id)
            if isinstance(data, dict):
                documents[doc_id] = data
        return documents

    # ─── Writes ───────────────────────────────────────────────────────────────

    async def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or replace a document."""
        path = self._path(collection, doc_id)
        async with self._lock(collection):
            await write_json_atomic(path, data)

    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
        """
        Create a document only if none exists yet.

        Returns False (and writes nothing) when the document already exists.
        """
        path = self._path(collection, doc_id)
        async with self._lock(collection):
            created = await write_json_exclusive(path, data)
        if not created:
            logger.debug("Document %s/%s already exists; create skipped", collection, doc_id)
        return created

    async def update(self, collection: str, doc_id: str, updates: Dict[str, Any]) -> bool:
        """
        Merge ``updates`` into an existing document.

        Returns True if updated, False if not found.
        """
        path = self._path(collection, doc_id)
        async with self._lock(collection):
            data = await read_json(path, default=None)
            if not isinstance(data, dict):
                return False
            data.update(updates)
            await write_json_atomic(path, data)
            return True
