"""Interactive REPL host."""

from .session import HostREPL
from .commands import COMMANDS, get_command_help

__all__ = ["HostREPL", "COMMANDS", "get_command_help"]
