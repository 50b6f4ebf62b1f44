"""Abstract file driver interface consumed by the sync engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol

from syncstore.storage.stats import FileStat, ListResult

DirStatsFn = Callable[[str], List[FileStat]]


class DeltaAlgorithm(Protocol):
    """Incremental-diff routine driven by a directory listing callback."""

    def __call__(self, path: str, get_dir_stats: DirStatsFn, options: Optional[dict]) -> Any:
        ...


class FileApiDriver(ABC):
    """Abstract interface for sync target operations."""

    def request_repeat_count(self) -> int:
        """How many times the caller should repeat a failed request."""
        return 3

    @abstractmethod
    def list(self, path: str) -> ListResult:
        """
        List every item under a directory path.

        Args:
            path: Logical directory path (e.g., "notes"); "" lists the root

        Returns:
            ListResult with has_more always False
        """
        pass

    @abstractmethod
    def stat(self, path: str) -> Optional[FileStat]:
        """
        Get the status of one item.

        Returns:
            FileStat, or None when the item does not exist
        """
        pass

    @abstractmethod
    def get(self, path: str, options: Optional[dict] = None) -> str | Path | None:
        """
        Read one item.

        Args:
            path: Logical item path
            options: ``target="file"`` plus ``path`` downloads to a local file;
                otherwise the content is returned as text

        Returns:
            Text content, the local file path, or None when the item is absent

        Raises:
            PermissionDeniedError: If the target rejects our credentials
        """
        pass

    @abstractmethod
    def put(self, path: str, content: str | bytes | None, options: Optional[dict] = None) -> None:
        """
        Write one item.

        Args:
            path: Logical item path
            content: Text or bytes; ignored when ``options["source"] == "file"``
            options: ``source="file"`` plus ``path`` uploads a local file

        Raises:
            PermissionDeniedError: If the target rejects our credentials
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete one item. Deleting a missing item succeeds."""
        pass

    @abstractmethod
    def move(self, old_path: str, new_path: str) -> None:
        """Rename one item."""
        pass

    @abstractmethod
    def batch_deletes(self, paths: List[str]) -> None:
        """Delete many items. Missing items count as deleted."""
        pass

    @abstractmethod
    def delta(self, path: str, options: Optional[dict] = None) -> Any:
        """Describe what changed under ``path`` since the cursor in ``options``."""
        pass

    @abstractmethod
    def mkdir(self, path: str) -> bool:
        pass

    @abstractmethod
    def format(self) -> None:
        pass

    @abstractmethod
    def clear_root(self) -> None:
        """Remove everything from the target. Destructive."""
        pass
