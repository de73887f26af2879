"""File watcher with debounce for triggering rebuilds."""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


# Event types that mean content or existence changed; opened and closed_no_write
# arrive for plain reads on Linux
_CHANGE_EVENTS = frozenset({"created", "modified", "moved", "deleted", "closed"})


class _SourceEventHandler(FileSystemEventHandler):
    """Marks source documents dirty as filesystem events arrive."""

    def __init__(
        self,
        extension: str,
        ignore_dirs: tuple[str, ...],
        mark: Callable[[str], None],
        callback: Callable[[str, str], None] | None = None,
    ) -> None:
        super().__init__()
        self._extension = extension
        self._ignore_dirs = ignore_dirs
        self._mark = mark
        self._callback = callback

    def _is_source(self, path: str) -> bool:
        if Path(path).suffix != self._extension:
            return False
        return not any(
            path == d or path.startswith(d + os.sep) for d in self._ignore_dirs
        )

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        # Moves carry the new name in dest_path; editors often save via rename
        candidates = [os.fsdecode(event.src_path)]
        dest = getattr(event, "dest_path", "")
        if dest:
            candidates.append(os.fsdecode(dest))

        for path in candidates:
            if not self._is_source(path):
                continue
            self._mark(path)
            if self._callback is not None:
                try:
                    self._callback(event.event_type, path)
                except Exception:
                    logger.exception("Watcher callback failed for %s", path)


class SourceWatcher:
    """Watches a source root and collects changed documents.

    Events are buffered until no new event has arrived for
    ``debounce_seconds``; ``take_ready`` then hands the batch over once.
    Paths under any of ``ignore`` (typically the output directory) are
    never reported.
    """

    def __init__(
        self,
        root: Path,
        extension: str = ".tex",
        ignore: Iterable[Path] = (),
        debounce_seconds: float = 1.0,
        callback: Callable[[str, str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._root = Path(root).absolute()
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._dirty: set[str] = set()
        self._last_event = 0.0
        self._observer: Observer | None = None
        self._handler = _SourceEventHandler(
            extension=extension,
            ignore_dirs=tuple(str(Path(p).absolute()) for p in ignore),
            mark=self._mark,
            callback=callback,
        )

    def _mark(self, path: str) -> None:
        with self._lock:
            self._dirty.add(path)
            self._last_event = self._clock()

    @property
    def dirty_paths(self) -> set[str]:
        """Paths changed since the last batch was taken."""
        with self._lock:
            return set(self._dirty)

    def take_ready(self) -> set[str]:
        """Return and clear the dirty set once the debounce window has passed."""
        with self._lock:
            if not self._dirty:
                return set()
            if self._clock() - self._last_event < self._debounce_seconds:
                return set()
            batch = self._dirty
            self._dirty = set()
            return batch

    def start(self) -> None:
        """Begin watching the source root recursively."""
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._root), recursive=True)
        self._observer.start()
        logger.info("Watching %s for changes", self._root)

    def stop(self) -> None:
        """Stop watching and clean up."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Stopped watching %s", self._root)

    def __enter__(self) -> SourceWatcher:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
