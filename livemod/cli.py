#!/usr/bin/env python3
"""
livemod - Live-reloading module host CLI

Usage:
    livemod                                # Interactive session
    livemod analysis.py -i                 # Run a script, then stay interactive
    livemod --path ~/lib --resolve helpers # Which file would be imported?
    livemod --add-path ~/lib               # Remember a search directory
"""

import logging
import sys
import argparse
from typing import List, Optional

from rich.logging import RichHandler

from .config import (
    SEARCH_PATH_ENV,
    add_search_path,
    get_config_path,
    load_settings,
    remove_search_path,
)
from .host import ModuleHost
from .modules import ModuleNotFoundError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='livemod - import your own modules and keep them live while you work',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Search path order:
  1. The current directory
  2. --path options, in the order given
  3. ${SEARCH_PATH_ENV} (separated like PATH)
  4. Directories saved with --add-path

Examples:
  livemod                                  # Start an interactive session
  livemod --watch                          # Announce module edits as they are saved
  livemod analysis.py -i                   # Run a script, then continue interactively
  livemod --resolve helpers                # Show which file 'helpers' resolves to
  livemod --show-path                      # Show the search path
  livemod --add-path ~/projects/shared     # Save a directory to the search path
        """
    )

    parser.add_argument('script', nargs='?', help='Script to run as the first statement')
    parser.add_argument('-i', '--interactive', action='store_true',
                        help='Start the interactive session (default when no script is given)')
    parser.add_argument('--path', action='append', default=[], metavar='DIR',
                        help='Add a directory to the search path for this run (repeatable)')
    parser.add_argument('--autoreload', type=int, choices=[0, 1, 2], default=None,
                        help='0: off, 1: only modules marked with %%aimport, 2: all modules (default)')
    parser.add_argument('--signature', choices=['mtime', 'hash'], default=None,
                        help='How file changes are detected (default: mtime)')
    parser.add_argument('--watch', action='store_true',
                        help='Watch imported module files and announce changes')
    parser.add_argument('--resolve', metavar='NAME',
                        help='Print the file a module name resolves to')
    parser.add_argument('--show-path', action='store_true',
                        help='Print the module search path')
    parser.add_argument('--add-path', metavar='DIR',
                        help='Save a directory to the search path')
    parser.add_argument('--remove-path', metavar='DIR',
                        help='Remove a saved directory from the search path')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log resolution and reload details')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit status"""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # Persistent search path edits
    if args.add_path:
        if add_search_path(args.add_path):
            print(f"Added to search path: {args.add_path}")
        else:
            print(f"Already on search path: {args.add_path}")
        print(f"(saved in {get_config_path()})")
        return 0

    if args.remove_path:
        if remove_search_path(args.remove_path):
            print(f"Removed from search path: {args.remove_path}")
            return 0
        print(f"Not on saved search path: {args.remove_path}")
        return 1

    try:
        settings = load_settings(
            extra_path=args.path,
            signature=args.signature,
            autoreload=args.autoreload,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1

    host = ModuleHost(settings)

    if args.show_path:
        print("Module search path:")
        for i, directory in enumerate(host.resolver.candidate_dirs(), 1):
            marker = '' if directory.is_dir() else '  (missing)'
            print(f"  {i}. {directory}{marker}")
        return 0

    if args.resolve:
        try:
            print(host.resolver.resolve(args.resolve))
        except ModuleNotFoundError as e:
            print(str(e))
            return 1
        return 0

    status = 0
    if args.script:
        try:
            result = host.run_file(args.script)
        except OSError as e:
            print(f"Cannot read script: {e}")
            return 1
        if result.error is not None:
            print(f"{type(result.error).__name__}: {result.error}")
            status = 1
        if not args.interactive:
            return status

    from .repl import HostREPL
    watcher = None
    if args.watch:
        from .watcher import ModuleWatcher
        watcher = ModuleWatcher(host.registry)
    repl = HostREPL(host, history_path=settings.history_path, watcher=watcher)
    repl.run()
    return status


if __name__ == "__main__":
    sys.exit(main())
