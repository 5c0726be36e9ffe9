"""
Module Registry

Live namespaces and their bookkeeping, keyed by module name. One registry is
owned by each host and passed explicitly to the importer and tracker.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Hashable, Iterator, List, Optional

logger = logging.getLogger(__name__)


class Namespace:
    """
    Stable handle to a module's top-level bindings.

    Attribute access reads the current bindings (m.f, m.CONSTANT). On reload
    the bindings are replaced behind the same handle, so every holder of the
    object sees the new definitions. The object also answers `in`, `[]`,
    `len()`, iteration and `dir()`; helpers live at module level so that no
    method name can shadow a binding.
    """

    __slots__ = ('__name', '__bindings')

    def __init__(self, name: str, bindings: Optional[Dict[str, Any]] = None):
        object.__setattr__(self, '_Namespace__name', name)
        object.__setattr__(self, '_Namespace__bindings', bindings if bindings is not None else {})

    def __getattr__(self, item: str) -> Any:
        if item.startswith('_Namespace__'):
            # Slot not initialised yet (copy/pickle protocols)
            raise AttributeError(item)
        if item == '__dict__':
            # vars(namespace) and 'from module import *'
            return self.__bindings
        try:
            return self.__bindings[item]
        except KeyError:
            raise AttributeError(f"module '{self.__name}' has no attribute '{item}'") from None

    def __setattr__(self, key: str, value: Any) -> None:
        self.__bindings[key] = value

    def __delattr__(self, item: str) -> None:
        try:
            del self.__bindings[item]
        except KeyError:
            raise AttributeError(item) from None

    def __getitem__(self, key: str) -> Any:
        return self.__bindings[key]

    def __contains__(self, key: object) -> bool:
        return key in self.__bindings

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.__bindings))

    def __len__(self) -> int:
        return len(self.__bindings)

    def __dir__(self) -> List[str]:
        return sorted(self.__bindings)

    def __repr__(self) -> str:
        location = self.__bindings.get('__file__')
        if location:
            return f"<namespace '{self.__name}' from '{location}'>"
        return f"<namespace '{self.__name}'>"


def namespace_name(namespace: Namespace) -> str:
    """Module name a namespace was created for"""
    return object.__getattribute__(namespace, '_Namespace__name')


def namespace_bindings(namespace: Namespace) -> Dict[str, Any]:
    """The live binding dict behind a namespace"""
    return object.__getattribute__(namespace, '_Namespace__bindings')


def replace_bindings(namespace: Namespace, bindings: Dict[str, Any]) -> None:
    """
    Replace a namespace's contents in place; its identity is unchanged.

    The fresh dict becomes the live store, so functions defined by the new
    source share their globals with the namespace.
    """
    object.__setattr__(namespace, '_Namespace__bindings', bindings)


class ModuleState(Enum):
    """Lifecycle of a tracked module"""
    UNLOADED = 'unloaded'   # Never successfully loaded
    LOADED = 'loaded'       # Namespace registered; reloads keep it here


@dataclass
class ModuleRecord:
    """Registry entry for one module"""
    name: str
    path: Path
    namespace: Namespace
    signature: Hashable
    state: ModuleState = ModuleState.LOADED
    reload_count: int = 0
    last_error: Optional[Exception] = None
    loaded_at: datetime = field(default_factory=datetime.now)


class ModuleRegistry:
    """
    Process-wide mapping of module name to its record.

    Entries are added on first successful import and mutated on reload; they
    are never removed while the host runs.
    """

    def __init__(self):
        self._records: Dict[str, ModuleRecord] = {}

    def register(self, record: ModuleRecord) -> ModuleRecord:
        """Add a freshly loaded module"""
        if record.name in self._records:
            raise ValueError(f"Module '{record.name}' is already registered")
        self._records[record.name] = record
        logger.debug(f"Registered module '{record.name}' ({record.path})")
        return record

    def get(self, name: str) -> Optional[ModuleRecord]:
        """Get a record by module name"""
        return self._records.get(name)

    def namespace(self, name: str) -> Optional[Namespace]:
        """Get a module's live namespace"""
        record = self._records.get(name)
        return record.namespace if record else None

    def state(self, name: str) -> ModuleState:
        """Lifecycle state; UNLOADED for names never loaded"""
        record = self._records.get(name)
        return record.state if record else ModuleState.UNLOADED

    def records(self) -> List[ModuleRecord]:
        """All records in registration order"""
        return list(self._records.values())

    def names(self) -> List[str]:
        return list(self._records)

    def find_by_path(self, path: Path) -> Optional[ModuleRecord]:
        """Get the record whose source file is `path`"""
        path = Path(path)
        # Called from the watcher thread; iterate over a snapshot
        for record in list(self._records.values()):
            if record.path == path:
                return record
        return None

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._records))
