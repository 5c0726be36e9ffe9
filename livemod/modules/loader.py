"""
Module Loader

Reads a source file, compiles it and executes its top-level statements in a
fresh namespace. Nothing is registered here: the caller decides what to do
with the resulting bindings, so a failed load can never leave a half-built
module behind.
"""

import builtins
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_FILE_ENCODING = "utf-8"


class LoadError(Exception):
    """Raised when a module source cannot be read, parsed or executed"""

    def __init__(self, name: str, path: Union[str, Path], cause: BaseException):
        self.name = name
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to load module '{name}' from {self.path}: "
                         f"{type(cause).__name__}: {cause}")
        self.__cause__ = cause


class ModuleLoader:
    """Compiles and executes module sources into fresh binding dicts"""

    def __init__(self, encoding: str = DEFAULT_FILE_ENCODING):
        self.encoding = encoding

    def read_source(self, file_path: Path) -> str:
        """Read a source file with the configured encoding"""
        return Path(file_path).read_text(encoding=self.encoding)

    def load(
        self,
        file_path: Union[str, Path],
        name: Optional[str] = None,
        builtins_namespace: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Execute a module source in a fresh namespace.

        Args:
            file_path: Source file to execute
            name: Module name bound to __name__ (file stem if None)
            builtins_namespace: Builtins visible to the module (e.g. with an
                import hook installed); the interpreter's builtins if None

        Returns:
            The dict of top-level bindings

        Raises:
            LoadError: On read, syntax or top-level execution failure
        """
        path = Path(file_path)
        name = name or path.stem

        try:
            source = self.read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(name, path, e) from e

        try:
            code = compile(source, str(path), 'exec')
        except (SyntaxError, ValueError) as e:
            raise LoadError(name, path, e) from e

        bindings: Dict[str, Any] = {
            '__name__': name,
            '__file__': str(path),
            '__builtins__': builtins_namespace if builtins_namespace is not None else builtins.__dict__,
        }
        try:
            exec(code, bindings)
        except (Exception, SystemExit) as e:
            # sys.exit() or argparse at top level must not end the session
            raise LoadError(name, path, e) from e

        logger.debug(f"Executed module '{name}' from {path}: {len(bindings)} bindings")
        return bindings
