"""Module system: path resolution, loading, registry and live reload."""

from .resolver import PathResolver, ModuleNotFoundError
from .loader import ModuleLoader, LoadError
from .signature import compute_signature
from .registry import (
    Namespace,
    ModuleRecord,
    ModuleRegistry,
    ModuleState,
    namespace_bindings,
    namespace_name,
    replace_bindings,
)
from .importer import Importer
from .tracker import ReloadTracker, AutoreloadMode

__all__ = [
    'PathResolver',
    'ModuleNotFoundError',
    'ModuleLoader',
    'LoadError',
    'compute_signature',
    'Namespace',
    'ModuleRecord',
    'ModuleRegistry',
    'ModuleState',
    'namespace_bindings',
    'namespace_name',
    'replace_bindings',
    'Importer',
    'ReloadTracker',
    'AutoreloadMode',
]
