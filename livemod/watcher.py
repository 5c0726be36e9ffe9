#!/usr/bin/env python3
"""
File watcher for interactive sessions.
Notices edits to imported module files as they are saved, so the REPL can
announce them. Reloading itself still happens on the host thread, in the
check that runs before the next statement.
"""

import os
import time
import threading
from pathlib import Path
from typing import Dict, List, Set

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileModifiedEvent, FileMovedEvent

from .modules import ModuleRegistry


class ModuleChangeHandler(FileSystemEventHandler):
    """Collects names of registered modules whose files changed on disk"""

    DEBOUNCE_SECONDS = 0.5

    def __init__(self, registry: ModuleRegistry):
        super().__init__()
        self.registry = registry
        self._pending: Set[str] = set()
        self._last_seen: Dict[str, float] = {}
        self._lock = threading.Lock()

    def on_modified(self, event):
        """Called when a file in a watched directory is modified"""
        if not isinstance(event, FileModifiedEvent):
            return
        self._note(event.src_path)

    def on_moved(self, event):
        """Editors that save via rename show up as moves onto the target"""
        if not isinstance(event, FileMovedEvent):
            return
        self._note(event.dest_path)

    def _note(self, src_path: str):
        record = self.registry.find_by_path(Path(os.path.abspath(src_path)).resolve())
        if record is None:
            return

        # Debounce - one notice per burst of saves
        now = time.time()
        with self._lock:
            if now - self._last_seen.get(record.name, 0) < self.DEBOUNCE_SECONDS:
                return
            self._last_seen[record.name] = now
            self._pending.add(record.name)

    def drain(self) -> List[str]:
        """Return and clear the modules changed since the last call"""
        with self._lock:
            names = sorted(self._pending)
            self._pending.clear()
        return names


class ModuleWatcher:
    """Manages the watchdog observer for a registry's module directories"""

    def __init__(self, registry: ModuleRegistry):
        self.registry = registry
        self.observer = None
        self.handler = ModuleChangeHandler(registry)
        self._watched: Set[str] = set()

    def start(self):
        """Start the observer and watch every registered module's directory"""
        self.observer = Observer()
        self.observer.start()
        self.sync()

    def sync(self):
        """Watch directories of modules registered since the last sync"""
        if self.observer is None:
            return
        for record in self.registry.records():
            directory = str(Path(record.path).parent)
            if directory in self._watched:
                continue
            self.observer.schedule(self.handler, path=directory, recursive=False)
            self._watched.add(directory)

    def watched_dirs(self) -> List[str]:
        return sorted(self._watched)

    def drain(self) -> List[str]:
        return self.handler.drain()

    def stop(self):
        """Stop watching"""
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None
