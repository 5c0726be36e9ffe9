"""
Reload Tracker

Before each unit of interactive work, compares every tracked module's source
signature with the one recorded at its last successful load, re-executes the
changed ones and swaps the new bindings into the existing namespaces.

A failed reload leaves the old bindings and the recorded signature alone, so
the module keeps working and the next check tries again.
"""

import logging
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Set

from .importer import Importer
from .loader import LoadError
from .registry import ModuleRecord, ModuleRegistry, replace_bindings
from .signature import compute_signature

logger = logging.getLogger(__name__)


class AutoreloadMode(IntEnum):
    """Which modules the tracker reloads"""
    OFF = 0        # Never reload automatically
    EXPLICIT = 1   # Only modules marked with mark()
    ALL = 2        # Every module except those excluded with exclude()


class ReloadTracker:
    """Detects changed module sources and reloads them in place"""

    def __init__(
        self,
        registry: ModuleRegistry,
        importer: Importer,
        signature_mode: str = 'mtime',
        mode: AutoreloadMode = AutoreloadMode.ALL,
        on_error: Optional[Callable[[LoadError], None]] = None,
    ):
        self.registry = registry
        self.importer = importer
        self.signature_mode = signature_mode
        self.mode = AutoreloadMode(mode)
        self.on_error = on_error

        self.marked: Set[str] = set()
        self.excluded: Set[str] = set()

        # Failures from the most recent check
        self.errors: Dict[str, LoadError] = {}

    def mark(self, name: str) -> None:
        """Track a module in EXPLICIT mode (and stop excluding it)"""
        self.marked.add(name)
        self.excluded.discard(name)

    def exclude(self, name: str) -> None:
        """Never reload a module automatically"""
        self.excluded.add(name)
        self.marked.discard(name)

    def is_tracked(self, name: str) -> bool:
        """Whether the current mode reloads this module"""
        if self.mode == AutoreloadMode.OFF:
            return False
        if self.mode == AutoreloadMode.EXPLICIT:
            return name in self.marked
        return name not in self.excluded

    def check_and_reload_all(self) -> List[str]:
        """
        Reload every tracked module whose source changed.

        Must run between units of work, never while code from a tracked
        namespace is on the stack.

        Returns:
            Names of the modules reloaded, in registration order
        """
        self.errors = {}
        reloaded: List[str] = []

        for record in self.registry.records():
            if not self.is_tracked(record.name):
                continue

            try:
                current = compute_signature(record.path, self.signature_mode)
            except OSError as e:
                self._report(record, LoadError(record.name, record.path, e))
                continue

            if current == record.signature:
                continue

            if self._reload(record, current):
                reloaded.append(record.name)

        if reloaded:
            logger.info(f"Reloaded modules: {', '.join(reloaded)}")
        return reloaded

    def reload(self, name: str) -> None:
        """
        Reload a module now, whether or not its source changed.

        Raises:
            KeyError: If the module was never imported
            LoadError: If the new source fails; old bindings are kept
        """
        record = self.registry.get(name)
        if record is None:
            raise KeyError(name)
        try:
            signature = compute_signature(record.path, self.signature_mode)
        except OSError as e:
            error = LoadError(record.name, record.path, e)
            record.last_error = error
            raise error from e
        if not self._reload(record, signature, report=False):
            raise record.last_error

    def _reload(self, record: ModuleRecord, signature, report: bool = True) -> bool:
        """Execute the source and swap bindings; returns False on failure"""
        try:
            bindings = self.importer.execute(record.name, record.path)
        except LoadError as e:
            record.last_error = e
            if report:
                self._report(record, e)
            return False

        replace_bindings(record.namespace, bindings)
        record.signature = signature
        record.reload_count += 1
        record.last_error = None
        logger.debug(f"Reloaded module '{record.name}' (reload #{record.reload_count})")
        return True

    def _report(self, record: ModuleRecord, error: LoadError) -> None:
        record.last_error = error
        self.errors[record.name] = error
        logger.warning(f"Reload of '{record.name}' failed: {error}")
        if self.on_error:
            self.on_error(error)
