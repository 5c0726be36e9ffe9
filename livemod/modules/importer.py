"""
Importer

Ties resolution, loading and registration together for first-time imports,
and provides an __import__ replacement so that `import name` inside the
interactive session or inside a tracked module returns the live namespace.
"""

import builtins
import logging
import sys
from typing import Any, Dict, List

from .loader import ModuleLoader
from .registry import ModuleRecord, ModuleRegistry, Namespace
from .resolver import PathResolver
from .signature import compute_signature

logger = logging.getLogger(__name__)


class Importer:
    """
    First-time imports into a registry.

    A module is registered only after its source executed successfully;
    resolution and load failures propagate and leave the registry unchanged.
    """

    def __init__(
        self,
        resolver: PathResolver,
        loader: ModuleLoader,
        registry: ModuleRegistry,
        signature_mode: str = 'mtime',
    ):
        self.resolver = resolver
        self.loader = loader
        self.registry = registry
        self.signature_mode = signature_mode
        self.loading_stack: List[str] = []

        # Builtins handed to tracked modules and the user namespace
        self.builtins: Dict[str, Any] = dict(builtins.__dict__)
        self.builtins['__import__'] = self.import_hook

    def import_module(self, name: str) -> Namespace:
        """
        Import a module by name.

        Returns:
            The module's live namespace (the registered one if already loaded)

        Raises:
            ModuleNotFoundError: If the name cannot be resolved
            LoadError: If the source fails to execute
            ImportError: On a circular first-time import
        """
        record = self.registry.get(name)
        if record is not None:
            return record.namespace

        if name in self.loading_stack:
            chain = " -> ".join(self.loading_stack + [name])
            raise ImportError(f"Circular import detected: {chain}", name=name)

        path = self.resolver.resolve(name)

        self.loading_stack.append(name)
        try:
            # Signature taken before executing: an edit racing the load is
            # picked up by the next check.
            signature = compute_signature(path, self.signature_mode)
            bindings = self.execute(name, path)
        finally:
            self.loading_stack.pop()

        record = self.registry.register(ModuleRecord(
            name=name,
            path=path,
            namespace=Namespace(name, bindings),
            signature=signature,
        ))
        logger.debug(f"Imported module '{name}' from {path}")
        return record.namespace

    def execute(self, name: str, path) -> Dict[str, Any]:
        """Run a module source with the hooked builtins; raises LoadError"""
        return self.loader.load(path, name=name, builtins_namespace=self.builtins)

    def import_hook(self, name, globals=None, locals=None, fromlist=(), level=0):
        """
        Drop-in __import__.

        Absolute, single-name imports are served from the registry, then
        sys.modules, then the search path. Everything else goes to the
        interpreter's own import machinery.
        """
        if level == 0 and name.isidentifier():
            namespace = self.registry.namespace(name)
            if namespace is not None:
                return namespace
            if name not in sys.modules and self.resolver.find(name) is not None:
                return self.import_module(name)
        return builtins.__import__(name, globals, locals, fromlist, level)

    def make_user_namespace(self, name: str = '__main__') -> Dict[str, Any]:
        """Fresh globals for interactive code, with the import hook installed"""
        return {'__name__': name, '__builtins__': self.builtins}
