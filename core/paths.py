"""
Path resolution utilities.

Provides the repository base directory and resolves configured paths against it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_DATA_DIR = BASE_DIR / "data"


def resolve_repo_path(path: Union[str, Path]) -> Path:
    candidate = Path(path).expanduser()
    if candidate.is_absolute() or candidate.drive:
        return candidate
    return BASE_DIR / candidate
