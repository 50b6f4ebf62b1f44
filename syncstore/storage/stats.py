"""Object metadata to sync-engine file stats."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List

from syncstore.storage.paths import basename


@dataclass(frozen=True)
class FileStat:
    path: str
    updated_time: int
    is_deleted: bool = False
    is_dir: bool = False

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "updated_time": self.updated_time,
            "isDeleted": self.is_deleted,
            "isDir": self.is_dir,
        }


@dataclass(frozen=True)
class ListResult:
    items: List[FileStat]
    has_more: bool = False
    context: dict = field(default_factory=dict)


def now_ms() -> int:
    return int(time.time() * 1000)


def _to_millis(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp() * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return _to_millis(parsed)
    return None


def _last_modified(metadata: Any) -> Any:
    if isinstance(metadata, dict):
        for name in ("LastModified", "lastModified"):
            if metadata.get(name) is not None:
                return metadata[name]
    return None


def metadata_to_stat(metadata: Any, path: str) -> FileStat:
    """
    Build the file stat for one object.

    Missing metadata means the object is gone: the stat is flagged deleted
    and stamped with the current time, since no real timestamp exists.
    """
    if metadata is None:
        return FileStat(path=basename(path), updated_time=now_ms(), is_deleted=True)

    try:
        updated_time = _to_millis(_last_modified(metadata))
    except (OverflowError, OSError, ValueError):
        updated_time = None

    return FileStat(
        path=basename(path),
        updated_time=updated_time if updated_time is not None else now_ms(),
    )


def metadata_to_stats(keys: Iterable[str]) -> List[FileStat]:
    """Listing entries carry no metadata of their own; the key stands in for it."""
    return [metadata_to_stat(key, key) for key in keys]
