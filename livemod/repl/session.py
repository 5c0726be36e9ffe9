#!/usr/bin/env python3
"""
Interactive REPL session with live module reloading.
"""

import codeop
from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.pretty import Pretty
from rich.table import Table

from ..host import ModuleHost, CellResult
from ..modules import AutoreloadMode, LoadError, ModuleNotFoundError
from ..watcher import ModuleWatcher
from .commands import get_command_help, COMMANDS, MAGIC_PREFIX


class HostREPL:
    """Interactive REPL that reloads changed modules before each statement"""

    def __init__(
        self,
        host: ModuleHost,
        console: Optional[Console] = None,
        history_path: Optional[Path] = None,
        watcher: Optional[ModuleWatcher] = None,
    ):
        self.host = host
        self.console = console or Console()
        self.history_path = history_path
        self.watcher = watcher

        # Created on first run so the REPL can be driven without a terminal
        self.prompt_session: Optional[PromptSession] = None

    def _create_prompt_session(self) -> PromptSession:
        if self.history_path is None:
            return PromptSession(auto_suggest=AutoSuggestFromHistory())
        self.history_path.parent.mkdir(parents=True, exist_ok=True)
        return PromptSession(
            history=FileHistory(str(self.history_path)),
            auto_suggest=AutoSuggestFromHistory(),
        )

    def run(self):
        """Main REPL loop"""
        self._print_welcome()
        if self.prompt_session is None:
            self.prompt_session = self._create_prompt_session()
        if self.watcher:
            self.watcher.start()

        try:
            while True:
                try:
                    self._show_file_changes()
                    user_input = self._read_input()

                    if not user_input.strip():
                        continue

                    result = self.process_input(user_input)

                    if result == 'exit':
                        self._handle_exit()
                        break

                except KeyboardInterrupt:
                    self.console.print("\n[dim]Use '%exit' or Ctrl+D to quit[/dim]")
                except EOFError:
                    self._handle_exit()
                    break
                except Exception as e:
                    self.console.print(f"[red]Error: {escape(str(e))}[/red]")
        finally:
            if self.watcher:
                self.watcher.stop()

    def _print_welcome(self):
        """Print welcome message"""
        welcome = """
[bold blue]livemod[/bold blue] - Live-reloading module host

Edit your module files freely; changes are picked up before each statement.

[dim]Commands: %import, %reload, %modules, %autoreload, %aimport, %path
Type '%help' for all commands or '%help <cmd>' for details.[/dim]
"""
        self.console.print(Panel(welcome, border_style="blue"))

        mode = self.host.tracker.mode
        self.console.print(f"[dim]Autoreload: {mode.value} ({mode.name.lower()})[/dim]")
        if self.watcher:
            self.console.print("[dim]Watching imported module files for changes.[/dim]")

    def _get_prompt(self) -> str:
        return f"livemod [{self.host.execution_count + 1}]> "

    def _read_input(self) -> str:
        """Read one unit of work, continuing until the block is complete"""
        lines = [self.prompt_session.prompt(self._get_prompt())]
        while self.is_incomplete('\n'.join(lines)):
            lines.append(self.prompt_session.prompt('... '))
        return '\n'.join(lines)

    @staticmethod
    def is_incomplete(source: str) -> bool:
        """True while Python needs more lines to finish a statement"""
        if source.lstrip().startswith(MAGIC_PREFIX):
            return False
        try:
            return codeop.compile_command(source, '<input>', 'single') is None
        except (SyntaxError, OverflowError, ValueError):
            # Complete but invalid; run_cell reports it
            return False

    def _show_file_changes(self):
        if not self.watcher:
            return
        self.watcher.sync()
        for name in self.watcher.drain():
            self.console.print(f"[cyan]{name} changed on disk; reloading before the next statement[/cyan]")

    def process_input(self, user_input: str) -> Optional[str]:
        """Dispatch a magic command or run Python source"""
        stripped = user_input.strip()
        if stripped.startswith(MAGIC_PREFIX):
            return self._process_command(stripped[len(MAGIC_PREFIX):])

        result = self.host.run_cell(user_input)
        self.display_result(result)
        return None

    def _process_command(self, command_line: str) -> Optional[str]:
        """Process a magic command and dispatch to handlers"""
        parts = command_line.split(maxsplit=1)
        if not parts:
            self.console.print("[red]Empty command. Type '%help' for commands.[/red]")
            return None
        command = parts[0].lower()
        args = parts[1].strip() if len(parts) > 1 else ''

        handlers = {
            'import': self._cmd_import,
            'reload': self._cmd_reload,
            'modules': self._cmd_modules,
            'autoreload': self._cmd_autoreload,
            'aimport': self._cmd_aimport,
            'path': self._cmd_path,
            'resolve': self._cmd_resolve,
            'help': self._cmd_help,
            'exit': lambda _: 'exit',
            'quit': lambda _: 'exit',
        }

        handler = handlers.get(command)
        if handler:
            return handler(args)

        self.console.print(f"[red]Unknown command: {MAGIC_PREFIX}{escape(command)}[/red]")
        self.console.print("[dim]Type '%help' for commands.[/dim]")
        return None

    # === Output ===

    def display_result(self, result: CellResult):
        """Show reload notices, reload failures, then the statement outcome"""
        for name in result.reloaded:
            self.console.print(f"[dim]Reloaded {name}[/dim]")

        for name, error in result.reload_errors.items():
            self._show_load_error(error, kept=True)

        if result.error is not None:
            error = result.error
            self.console.print(f"[red]{type(error).__name__}: {escape(str(error))}[/red]")
        elif result.has_value and result.value is not None:
            self.console.print(Pretty(result.value))

    def _show_load_error(self, error: LoadError, kept: bool = False):
        message = f"{type(error.cause).__name__}: {error.cause}"
        if kept:
            message += f"\n\nStill using the last working version of '{error.name}'. Fix the file and run any statement to retry."
        self.console.print(Panel(
            escape(message),
            title=f"[red]Failed to load {escape(error.name)}[/red]",
            subtitle=escape(str(error.path)),
            border_style="red",
        ))

    def _usage(self, command: str):
        self.console.print(f"[red]Usage: {escape(COMMANDS[command]['usage'])}[/red]")

    # === Command Handlers ===

    def _cmd_import(self, args: str) -> None:
        """Import a module and bind it"""
        parts = args.split()
        if len(parts) == 1:
            name, alias = parts[0], None
        elif len(parts) == 3 and parts[1] == 'as':
            name, alias = parts[0], parts[2]
        else:
            self._usage('import')
            return

        if not self._bind_module(name, alias):
            return
        record = self.host.registry.get(name)
        self.console.print(f"[green]Imported:[/green] {escape(alias or name)} [dim]({escape(str(record.path))})[/dim]")

    def _bind_module(self, name: str, alias: Optional[str] = None) -> bool:
        try:
            self.host.import_module(name, alias=alias)
        except ModuleNotFoundError as e:
            self.console.print(f"[red]{escape(str(e))}[/red]")
            self.console.print("[dim]Use '%path' to see where modules are looked up[/dim]")
            return False
        except LoadError as e:
            self._show_load_error(e)
            return False
        except ImportError as e:
            self.console.print(f"[red]{escape(str(e))}[/red]")
            return False
        return True

    def _cmd_reload(self, args: str) -> None:
        """Force a reload"""
        if not args:
            self._usage('reload')
            return
        try:
            self.host.tracker.reload(args)
        except KeyError:
            self.console.print(f"[red]Module not imported: {escape(args)}[/red]")
            return
        except LoadError as e:
            self._show_load_error(e, kept=True)
            return
        self.console.print(f"[green]Reloaded:[/green] {escape(args)}")

    def _cmd_modules(self, args: str) -> None:
        """List imported modules"""
        records = self.host.registry.records()
        if not records:
            self.console.print("[dim]No modules imported yet. Use '%import <name>'.[/dim]")
            return

        table = Table(title="Imported Modules")
        table.add_column("Name", style="cyan")
        table.add_column("Path")
        table.add_column("Tracked")
        table.add_column("Reloads", justify="right")
        table.add_column("Status")

        for record in records:
            tracked = "yes" if self.host.tracker.is_tracked(record.name) else "no"
            if record.last_error is not None:
                status = f"[red]{escape(type(record.last_error.__cause__ or record.last_error).__name__)}[/red]"
            else:
                status = "[green]ok[/green]"
            table.add_row(
                record.name,
                escape(str(record.path)),
                tracked,
                str(record.reload_count),
                status,
            )

        self.console.print(table)

    def _cmd_autoreload(self, args: str) -> None:
        """Show or set the autoreload mode"""
        tracker = self.host.tracker
        if not args:
            self.console.print(f"Autoreload: {tracker.mode.value} ({tracker.mode.name.lower()})")
            return
        try:
            tracker.mode = AutoreloadMode(int(args))
        except ValueError:
            self._usage('autoreload')
            return
        self.console.print(f"[green]Autoreload set to {tracker.mode.value} ({tracker.mode.name.lower()})[/green]")

    def _cmd_aimport(self, args: str) -> None:
        """Mark or exclude a module for autoreload"""
        tracker = self.host.tracker
        if not args:
            marked = ', '.join(sorted(tracker.marked)) or '(none)'
            excluded = ', '.join(sorted(tracker.excluded)) or '(none)'
            self.console.print(f"Modules to reload:\n  {escape(marked)}")
            self.console.print(f"Modules to skip:\n  {escape(excluded)}")
            return

        for name in args.replace(',', ' ').split():
            if name.startswith('-'):
                tracker.exclude(name[1:])
                self.console.print(f"[yellow]Not reloading:[/yellow] {escape(name[1:])}")
                continue
            if not self._bind_module(name):
                continue
            tracker.mark(name)
            self.console.print(f"[green]Reloading:[/green] {escape(name)}")

    def _cmd_path(self, args: str) -> None:
        """Show the search path"""
        table = Table(title="Module Search Path")
        table.add_column("#", style="dim")
        table.add_column("Directory")
        table.add_column("Exists")

        for i, directory in enumerate(self.host.resolver.candidate_dirs(), 1):
            exists = "[green]yes[/green]" if directory.is_dir() else "[red]no[/red]"
            table.add_row(str(i), escape(str(directory)), exists)

        self.console.print(table)

    def _cmd_resolve(self, args: str) -> None:
        """Show where a module name resolves"""
        if not args:
            self._usage('resolve')
            return
        try:
            path = self.host.resolver.resolve(args)
        except ModuleNotFoundError as e:
            self.console.print(f"[red]{escape(str(e))}[/red]")
            return
        self.console.print(f"{escape(args)} -> {escape(str(path))}")

    def _cmd_help(self, args: str) -> None:
        """Show help"""
        self.console.print(escape(get_command_help(args if args else None)))

    def _handle_exit(self):
        """Handle exit"""
        self.console.print("[dim]Goodbye![/dim]")
