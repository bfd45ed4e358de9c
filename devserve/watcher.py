"""Recursive filesystem watching with a debounced change callback."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 0.1

IDLE = "idle"
COOLING_DOWN = "cooling-down"

CHANGE_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class Debouncer:
    """Calls ``callback`` on the first trigger, then ignores triggers for ``window`` seconds."""

    def __init__(
        self,
        callback: Callable[[], None],
        window: float = DEFAULT_WINDOW,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._callback = callback
        self._window = window
        self._timer_factory = timer_factory
        self._timer = None
        self._state = IDLE
        self._lock = threading.Lock()
        self.coalesced = 0

    @property
    def state(self) -> str:
        return self._state

    def trigger(self) -> bool:
        with self._lock:
            if self._state == COOLING_DOWN:
                self.coalesced += 1
                return False
            self._state = COOLING_DOWN
            self._timer = self._timer_factory(self._window, self._cool_down)
            self._timer.daemon = True
            self._timer.start()
        self._callback()
        return True

    def _cool_down(self) -> None:
        with self._lock:
            self._state = IDLE
            self._timer = None

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._state = IDLE


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: "ChangeWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._watcher.handle_event(event)


class ChangeWatcher:
    def __init__(
        self,
        directory: str | Path,
        callback: Callable[[], None],
        window: float = DEFAULT_WINDOW,
        observer_factory: Callable[[], Observer] = Observer,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self.directory = Path(directory).resolve()
        self.debouncer = Debouncer(callback, window, timer_factory)
        self._observer_factory = observer_factory
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> bool:
        """Begin watching. Returns False (after logging) if the tree cannot be watched."""
        if not self.directory.is_dir():
            logger.error("Cannot watch %s: not a directory; live reload disabled", self.directory)
            return False
        observer = self._observer_factory()
        try:
            observer.schedule(_ChangeHandler(self), str(self.directory), recursive=True)
            observer.start()
        except OSError as exc:
            observer.stop()
            logger.error("Cannot watch %s: %s; live reload disabled", self.directory, exc)
            return False
        self._observer = observer
        logger.debug("Watching %s", self.directory)
        return True

    def handle_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in CHANGE_EVENTS:
            return
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return
        if event.event_type == EVENT_TYPE_DELETED and os.fspath(event.src_path) == str(self.directory):
            logger.error("Watched directory %s was removed; live reload disabled", self.directory)
            self.stop(join=False)
            return
        logger.debug("Change: %s %s", event.event_type, event.src_path)
        try:
            self.debouncer.trigger()
        except Exception:
            logger.exception("Reload callback failed")

    def stop(self, join: bool = True) -> None:
        self.debouncer.cancel()
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        if join and observer is not threading.current_thread():
            observer.join()
