#!/usr/bin/env python3
"""
Magic command definitions for the interactive host.
"""

MAGIC_PREFIX = '%'

COMMANDS = {
    # Modules
    'import': {
        'help': 'Import a module from the search path and track it',
        'usage': '%import <name> [as <alias>]',
        'examples': ['%import helpers', '%import data_utils as du'],
    },
    'reload': {
        'help': 'Reload a module now, even if its file is unchanged',
        'usage': '%reload <name>',
        'examples': ['%reload helpers'],
    },
    'modules': {
        'help': 'List imported modules with their reload status',
        'usage': '%modules',
        'examples': ['%modules'],
    },

    # Autoreload
    'autoreload': {
        'help': 'Show or set autoreload (0 off, 1 marked modules, 2 all)',
        'usage': '%autoreload [0|1|2]',
        'examples': ['%autoreload', '%autoreload 2', '%autoreload 1'],
    },
    'aimport': {
        'help': 'Mark a module for reload (-name to exclude it); no argument lists them',
        'usage': '%aimport [name | -name]',
        'examples': ['%aimport', '%aimport helpers', '%aimport -big_tables'],
    },

    # Search path
    'path': {
        'help': 'Show the module search path in order',
        'usage': '%path',
        'examples': ['%path'],
    },
    'resolve': {
        'help': 'Show which file a module name resolves to',
        'usage': '%resolve <name>',
        'examples': ['%resolve helpers'],
    },

    # Utilities
    'help': {
        'help': 'Show available commands or help for a specific command',
        'usage': '%help [command]',
        'examples': ['%help', '%help aimport'],
    },
    'exit': {
        'help': 'Exit the session',
        'usage': '%exit',
        'examples': ['%exit', '%quit'],
    },
    'quit': {
        'help': 'Exit the session (alias for exit)',
        'usage': '%quit',
        'examples': ['%quit'],
    },
}


def get_command_help(command: str = None) -> str:
    """Get help text for a command or all commands"""
    if command:
        command = command.lstrip(MAGIC_PREFIX)
    if command and command in COMMANDS:
        cmd = COMMANDS[command]
        lines = [
            f"  {MAGIC_PREFIX}{command}: {cmd['help']}",
            f"  Usage: {cmd['usage']}",
        ]
        if cmd.get('examples'):
            lines.append(f"  Examples: {', '.join(cmd['examples'])}")
        return '\n'.join(lines)

    groups = {
        'Modules': ['import', 'reload', 'modules'],
        'Autoreload': ['autoreload', 'aimport'],
        'Search path': ['path', 'resolve'],
        'Utilities': ['help', 'exit'],
    }

    lines = ["Available commands:\n"]
    for group, cmds in groups.items():
        lines.append(f"  {group}:")
        for cmd in cmds:
            if cmd in COMMANDS:
                lines.append(f"    {MAGIC_PREFIX}{cmd:12} - {COMMANDS[cmd]['help']}")
        lines.append("")

    lines.append("Anything else is run as Python. Type '%help <command>' for details.")
    return '\n'.join(lines)
