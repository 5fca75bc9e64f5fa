# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import threading
from pathlib import Path
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from .errors import SourceExhausted


class NotificationSource:
    """
    Auto-reset "something changed" signal.

    notify() marks a change as pending; wait_next() blocks until one is
    pending and consumes it. Changes that arrive before the waiter wakes up
    collapse into a single signal.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._pending = False
        self._closed = False

    def notify(self):
        with self._cond:
            if self._closed:
                return
            self._pending = True
            self._cond.notify_all()

    def wait_next(self):
        """
        Blocks until the next change. Raises SourceExhausted once closed.
        """
        with self._cond:
            while not self._pending and not self._closed:
                self._cond.wait()
            if self._closed:
                raise SourceExhausted("notification source is closed")
            self._pending = False

    def close(self):
        self._mark_closed()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def _mark_closed(self):
        with self._cond:
            self._closed = True
            self._cond.notify_all()


class ChangeHandler(FileSystemEventHandler):
    """
    Forwards file name, size and write changes to a WatchdogSource.
    """

    def __init__(self, source: "WatchdogSource"):
        self.source = source

    def on_created(self, event):
        if not event.is_directory:
            self.source.notify()

    def on_deleted(self, event):
        if not event.is_directory:
            self.source.notify()
        elif Path(event.src_path) == self.source.path:
            self.source.logger.warning(f"Watched directory was removed: {event.src_path}")
            self.source._mark_closed()

    def on_moved(self, event):
        if not event.is_directory:
            self.source.notify()

    def on_modified(self, event):
        if not event.is_directory:
            self.source.notify()


class WatchdogSource(NotificationSource):
    """
    Notification source fed by a watchdog observer on a directory tree.
    """

    def __init__(self, path: Path, recursive: bool = True):
        super().__init__()
        self.path = Path(path)
        self.recursive = recursive
        self.logger = logging.getLogger(__name__)
        self.observer = Observer()
        self.handler = ChangeHandler(self)
        self._observer_lock = threading.Lock()

    def start(self):
        self.logger.debug(f"Scheduling observer on {self.path} (recursive={self.recursive})")
        self.observer.schedule(self.handler, str(self.path), recursive=self.recursive)
        self.observer.start()

    def close(self):
        super().close()
        with self._observer_lock:
            if self.observer.is_alive():
                self.observer.stop()
                self.observer.join()
