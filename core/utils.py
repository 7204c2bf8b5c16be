"""
General utility functions.

Provides date/time helpers, id validation and small text helpers shared by the
request and stimulus workflows.
"""
from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Any, Iterable, Optional

UTC = dt.timezone.utc

CONTROL_RE = re.compile(r"[\x00-\x09\x0b-\x1f\x7f]")


def utcnow() -> dt.datetime:
    return dt.datetime.now(tz=UTC)


def dt_to_iso(value: Optional[dt.datetime]) -> Optional[str]:
    if value is None:
        return None
    value = value.astimezone(UTC).replace(microsecond=0)
    return value.isoformat().replace("+00:00", "Z")


def now_iso() -> str:
    return dt_to_iso(utcnow()) or ""


def is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_valid_id(value: Any) -> bool:
    return is_int(value) and 1 <= value <= 2**63 - 1


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isdigit():
            return int(stripped)
    return default


def is_safe_data_path(path_str: str) -> bool:
    """Reject Windows drive paths and parent-directory hops."""
    try:
        path = Path(path_str)
    except TypeError:
        return False
    if path.drive:
        return False
    if ".." in path.parts:
        return False
    return True


def strip_control(text: Any) -> str:
    """Drop control characters except newlines."""
    if text is None:
        return ""
    return CONTROL_RE.sub("", str(text))


def truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def short_id(value: Any, length: int = 4) -> str:
    return str(value)[:length]


def status_label(status: str) -> str:
    """``partially_fulfilled`` -> ``PARTIALLY FULFILLED``."""
    return status.upper().replace("_", " ")


def bullet_list(names: Iterable[str], marker: str) -> str:
    return "\n".join(f"{marker} {name}" for name in names)
