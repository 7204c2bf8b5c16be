from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, List


async def read_json(path: Path, default: Any = None) -> Any:
    def _read() -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return default

    return await asyncio.to_thread(_read)


async def write_json_atomic(path: Path, data: Any) -> None:
    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)

    await asyncio.to_thread(_write)


async def write_json_exclusive(path: Path, data: Any) -> bool:
    """Write ``data`` only if ``path`` does not exist yet. Returns False if it did."""

    def _write() -> bool:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        except FileExistsError:
            return False
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
        except OSError:
            # A partial file would block every later create for this id.
            path.unlink(missing_ok=True)
            raise
        return True

    return await asyncio.to_thread(_write)


async def list_json_stems(directory: Path) -> List[str]:
    def _list() -> List[str]:
        if not directory.is_dir():
            return []
        return sorted(p.stem for p in directory.glob("*.json"))

    return await asyncio.to_thread(_list)


async def ensure_writable_dir(directory: Path) -> None:
    """Create ``directory`` and verify the process can write into it."""

    def _check() -> None:
        directory.mkdir(parents=True, exist_ok=True)
        probe = directory / ".write_probe"
        probe.write_text("ok", encoding="utf-8")
        probe.unlink()

    await asyncio.to_thread(_check)
