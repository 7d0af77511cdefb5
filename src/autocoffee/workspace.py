"""Workspace folder bookkeeping.

Tracks the folders being watched and answers which one a given file
belongs to.
"""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from autocoffee.resolver import fix_path, is_within, relative_to_root

if TYPE_CHECKING:
    from collections.abc import Iterable

__all__ = ["WorkspaceFolders"]

logger = logging.getLogger(__name__)


def _normalize_folder(folder: str | Path) -> str:
    return fix_path(str(Path(folder).resolve())).rstrip("/") or "/"


class WorkspaceFolders:
    """The set of open workspace folders.

    Folders are stored as absolute ``/``-separated paths. Lookups pick the
    longest folder that contains the file, so nested workspaces win over
    their parents.
    """

    def __init__(self, folders: Iterable[str | Path] = ()) -> None:
        self._folders: list[str] = []
        self.add(folders)

    @property
    def folders(self) -> list[str]:
        return list(self._folders)

    def __len__(self) -> int:
        return len(self._folders)

    def __contains__(self, folder: object) -> bool:
        if not isinstance(folder, (str, Path)):
            return False
        return _normalize_folder(folder) in self._folders

    def add(self, folders: Iterable[str | Path]) -> list[str]:
        """Add folders, ignoring ones already known. Returns those added."""
        added: list[str] = []
        for folder in folders:
            normalized = _normalize_folder(folder)
            if normalized in self._folders:
                continue
            self._folders.append(normalized)
            added.append(normalized)
            logger.info("Added workspace folder %s", normalized)
        return added

    def remove(self, folders: Iterable[str | Path]) -> list[str]:
        """Remove folders that are known. Returns those removed."""
        removed: list[str] = []
        for folder in folders:
            normalized = _normalize_folder(folder)
            if normalized not in self._folders:
                continue
            self._folders.remove(normalized)
            removed.append(normalized)
            logger.info("Removed workspace folder %s", normalized)
        return removed

    def find(self, path: str) -> str | None:
        """Return the innermost known folder containing *path*, if any."""
        path = fix_path(path)
        matches = [f for f in self._folders if is_within(path, f)]
        if not matches:
            return None
        return max(matches, key=len)

    def root_for(self, path: str) -> str:
        """Return the workspace root for *path*.

        Falls back to the file's own directory when no folder contains it.
        """
        root = self.find(path)
        if root is None:
            root = posixpath.dirname(fix_path(path))
        return root

    def display_path(self, path: str) -> str:
        """Short path for user messages: workspace-relative when possible."""
        root = self.find(path)
        if root is None:
            return posixpath.basename(fix_path(path))
        return relative_to_root(path, root) or posixpath.basename(fix_path(path))
