"""Filesystem host for the auto-compile façade.

Watchdog observer threads only enqueue events; the thread that owns the
watcher drains the queue and calls the façade, so every event is handled to
completion before the next one starts.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from autocoffee.exceptions import WatchError
from autocoffee.project import CONFIG_DIR, CONFIG_FILE
from autocoffee.resolver import fix_path
from autocoffee.types import SavedDocument

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from watchdog.observers.api import BaseObserver, ObservedWatch

    from autocoffee.events import WorkspaceEvents

__all__ = [
    "DEFAULT_IGNORE",
    "ConfigChanged",
    "FileSaved",
    "FoldersChanged",
    "WorkspaceWatcher",
]

logger = logging.getLogger(__name__)

DEFAULT_IGNORE = (".git", ".hg", ".svn", CONFIG_DIR, "node_modules")


@dataclass(frozen=True)
class FileSaved:
    path: str


@dataclass(frozen=True)
class ConfigChanged:
    path: str


@dataclass(frozen=True)
class FoldersChanged:
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


WatchEvent = FileSaved | ConfigChanged | FoldersChanged


class _WorkspaceEventHandler(FileSystemEventHandler):
    """Forwards raw watchdog events for one folder to the watcher's queue."""

    def __init__(self, watcher: WorkspaceWatcher, folder: str) -> None:
        super().__init__()
        self._watcher = watcher
        self._folder = folder

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.enqueue_path(os.fsdecode(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.enqueue_path(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.enqueue_path(os.fsdecode(event.dest_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory and fix_path(os.fsdecode(event.src_path)) == self._folder:
            self._watcher.enqueue(FoldersChanged(removed=(self._folder,)))


class WorkspaceWatcher:
    """Watches workspace folders and feeds a :class:`WorkspaceEvents` host.

    Usage::

        watcher = WorkspaceWatcher(auto_compiler, ["/path/to/project"])
        watcher.start()
        try:
            watcher.run()
        except KeyboardInterrupt:
            pass
        finally:
            watcher.stop()
    """

    def __init__(
        self,
        events: WorkspaceEvents,
        folders: Iterable[str | Path] = (),
        *,
        extension: str = ".coffee",
        ignore: Iterable[str] = DEFAULT_IGNORE,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self.events = events
        self.extension = extension
        self.ignore = frozenset(ignore)
        self._folders = [fix_path(str(Path(f).resolve())) for f in folders]
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._watches: dict[str, ObservedWatch] = {}
        self._queue: queue.Queue[WatchEvent] = queue.Queue()
        self._stopped = threading.Event()

    @property
    def folders(self) -> list[str]:
        return list(self._folders)

    # -- producer side (observer threads) ----------------------------------

    def enqueue(self, event: WatchEvent) -> None:
        self._queue.put(event)

    def enqueue_path(self, path: str) -> None:
        """Classify a changed path and queue the matching event, if any."""
        path = fix_path(path)
        parts = PurePath(path).parts
        if tuple(parts[-2:]) == (CONFIG_DIR, CONFIG_FILE):
            self.enqueue(ConfigChanged(path))
            return
        if self.ignore.intersection(parts[:-1]):
            return
        if path.endswith(self.extension):
            self.enqueue(FileSaved(path))

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        """Start observing every folder.

        Raises:
            WatchError: If a folder cannot be watched.
        """
        if self._observer is not None:
            raise WatchError("Watcher already started")
        self._observer = self._observer_factory()
        for folder in self._folders:
            self._schedule(folder)
        self._observer.start()
        logger.info("Watching %d folder(s) for %s files", len(self._folders), self.extension)

    def stop(self) -> None:
        """Deactivate the host and stop observing. Safe to call twice."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        self.events.deactivate()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def add_folder(self, folder: str | Path) -> None:
        normalized = fix_path(str(Path(folder).resolve()))
        if normalized in self._folders:
            return
        self._folders.append(normalized)
        if self._observer is not None:
            self._schedule(normalized)
        self.enqueue(FoldersChanged(added=(normalized,)))

    def remove_folder(self, folder: str | Path) -> None:
        normalized = fix_path(str(Path(folder).resolve()))
        if normalized not in self._folders:
            return
        self.enqueue(FoldersChanged(removed=(normalized,)))

    def _schedule(self, folder: str) -> None:
        if self._observer is None:
            raise WatchError("Watcher not started")
        try:
            watch = self._observer.schedule(
                _WorkspaceEventHandler(self, folder), folder, recursive=True
            )
        except OSError as e:
            raise WatchError(f"Cannot watch {folder}: {e}") from e
        self._watches[folder] = watch

    def _unschedule(self, folder: str) -> None:
        if folder in self._folders:
            self._folders.remove(folder)
        watch = self._watches.pop(folder, None)
        if watch is not None and self._observer is not None:
            self._observer.unschedule(watch)

    # -- consumer side (owning thread) -------------------------------------

    def process_pending(self, timeout: float | None = None) -> int:
        """Dispatch queued events to the host.

        Waits up to *timeout* seconds for the first event, then drains
        whatever else is queued. Repeated saves of one file within a batch
        are handled once. Returns the number of events dispatched.
        """
        batch: list[WatchEvent] = []
        try:
            batch.append(self._queue.get(timeout=timeout) if timeout else self._queue.get_nowait())
        except queue.Empty:
            return 0
        while True:
            try:
                batch.append(self._queue.get_nowait())
            except queue.Empty:
                break

        dispatched = 0
        for event in dict.fromkeys(batch):
            if self._stopped.is_set():
                break
            self._dispatch(event)
            dispatched += 1
        return dispatched

    def run(self, poll_interval: float = 0.5) -> None:
        """Dispatch events until :meth:`stop` is called."""
        while not self._stopped.is_set():
            self.process_pending(timeout=poll_interval)

    def _dispatch(self, event: WatchEvent) -> None:
        if isinstance(event, FileSaved):
            try:
                text = Path(event.path).read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.debug("Skipping %s: removed before it could be read", event.path)
                return
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping %s: %s", event.path, e)
                return
            self.events.on_save(SavedDocument(path=event.path, text=text))
        elif isinstance(event, ConfigChanged):
            self.events.on_configuration_changed()
        else:
            for folder in event.removed:
                self._unschedule(folder)
            self.events.on_workspace_folders_changed(event.added, event.removed)
