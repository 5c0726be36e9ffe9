#!/usr/bin/env python3
"""
Interactive host core.
Owns the module system for one session and runs units of user work, checking
for changed modules before each one.
"""

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import Settings
from .modules import (
    AutoreloadMode,
    Importer,
    LoadError,
    ModuleLoader,
    ModuleRegistry,
    Namespace,
    PathResolver,
    ReloadTracker,
)

logger = logging.getLogger(__name__)


@dataclass
class CellResult:
    """Outcome of one unit of work"""
    reloaded: List[str] = field(default_factory=list)
    reload_errors: Dict[str, LoadError] = field(default_factory=dict)
    value: Any = None
    has_value: bool = False
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ModuleHost:
    """Session-scoped module system plus a persistent user namespace"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        base_dir: Optional[Path] = None,
        on_error: Optional[Callable[[LoadError], None]] = None,
    ):
        self.settings = settings or Settings()
        self.resolver = PathResolver(
            search_path=self.settings.search_path,
            base_dir=base_dir,
            extension=self.settings.extension,
        )
        self.loader = ModuleLoader()
        self.registry = ModuleRegistry()
        self.importer = Importer(
            self.resolver,
            self.loader,
            self.registry,
            signature_mode=self.settings.signature,
        )
        self.tracker = ReloadTracker(
            self.registry,
            self.importer,
            signature_mode=self.settings.signature,
            mode=AutoreloadMode(self.settings.autoreload),
            on_error=on_error,
        )
        self.user_ns: Dict[str, Any] = self.importer.make_user_namespace()
        self.execution_count = 0

    def import_module(self, name: str, alias: Optional[str] = None) -> Namespace:
        """Import a module and bind it in the user namespace"""
        namespace = self.importer.import_module(name)
        self.user_ns[alias or name] = namespace
        return namespace

    def check_and_reload_all(self) -> List[str]:
        return self.tracker.check_and_reload_all()

    def run_cell(self, source: str) -> CellResult:
        """
        Run one unit of work.

        Changed modules are reloaded first; the source then runs in the user
        namespace. If the last statement is an expression its value is
        returned. Errors from user code are captured, never raised.
        """
        result = CellResult()
        result.reloaded = self.tracker.check_and_reload_all()
        result.reload_errors = dict(self.tracker.errors)

        self.execution_count += 1
        filename = f"<cell-{self.execution_count}>"

        try:
            tree = ast.parse(source, filename=filename, mode='exec')
        except (SyntaxError, ValueError) as e:
            result.error = e
            return result

        last_expr = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last_expr = ast.Expression(tree.body.pop().value)

        try:
            if tree.body:
                exec(compile(tree, filename, 'exec'), self.user_ns)
            if last_expr is not None:
                result.value = eval(compile(last_expr, filename, 'eval'), self.user_ns)
                result.has_value = True
        except Exception as e:
            result.error = e
            return result

        if result.has_value and result.value is not None:
            self.user_ns['_'] = result.value
        return result

    def run_file(self, path: Path) -> CellResult:
        """Run a script file as a single unit of work"""
        source = Path(path).read_text(encoding=self.loader.encoding)
        self.user_ns['__file__'] = str(Path(path).resolve())
        logger.debug(f"Running script {self.user_ns['__file__']}")
        return self.run_cell(source)
