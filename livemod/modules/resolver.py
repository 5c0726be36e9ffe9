"""
Module Path Resolution

Maps a module name to the first matching source file: the base directory
(the current working directory unless one is given) first, then each search
path directory in the order it was configured.

This class is stateless apart from its fixed configuration and can be shared.
"""

import builtins
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import DEFAULT_EXTENSION

logger = logging.getLogger(__name__)


class ModuleNotFoundError(builtins.ModuleNotFoundError):
    """Raised when a module name cannot be resolved to a source file"""

    def __init__(self, message: str, name: Optional[str] = None, searched: Sequence[Path] = ()):
        super().__init__(message, name=name)
        self.searched = list(searched)


class PathResolver:
    """
    Resolves module names to source files.

    - my_module -> <base_dir>/my_module.py
    - my_module -> <search_path[0]>/my_module.py
    - my_module -> <search_path[1]>/my_module.py ...

    The search path is frozen at construction; first match wins.
    """

    def __init__(
        self,
        search_path: Sequence[Union[str, Path]] = (),
        base_dir: Optional[Union[str, Path]] = None,
        extension: str = DEFAULT_EXTENSION,
    ):
        """
        Args:
            search_path: Ordered directories consulted after the base directory
            base_dir: Directory searched first (current working directory if None)
            extension: Source file extension, including the leading dot
        """
        self.search_path = tuple(Path(p) for p in search_path)
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.extension = extension

    def candidate_dirs(self) -> List[Path]:
        """Directories in the order they are searched"""
        base = self.base_dir if self.base_dir is not None else Path.cwd()
        return [base, *self.search_path]

    def resolve(self, name: str) -> Path:
        """
        Resolve a module name to a source file.

        Returns:
            Absolute path of the first existing '<name><extension>' file

        Raises:
            ModuleNotFoundError: If the name is invalid or no file matches
        """
        if not isinstance(name, str) or not name:
            raise ModuleNotFoundError("Empty module name", name=name)
        if not name.isidentifier():
            raise ModuleNotFoundError(f"Invalid module name '{name}'", name=name)

        searched = []
        for directory in self.candidate_dirs():
            candidate = directory / f"{name}{self.extension}"
            searched.append(candidate)
            if candidate.is_file():
                resolved = candidate.resolve()
                logger.debug(f"Resolved module '{name}' to {resolved}")
                return resolved

        raise ModuleNotFoundError(
            f"No module named '{name}'. Searched: {', '.join(str(p) for p in searched)}",
            name=name,
            searched=searched,
        )

    def find(self, name: str) -> Optional[Path]:
        """Like resolve(), but returns None instead of raising"""
        try:
            return self.resolve(name)
        except ModuleNotFoundError:
            return None
