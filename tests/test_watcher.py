#!/usr/bin/env python3
"""
Tests for the module file watcher.
"""

from unittest.mock import patch

from watchdog.events import DirModifiedEvent, FileModifiedEvent, FileMovedEvent

from livemod.watcher import ModuleChangeHandler, ModuleWatcher


class TestModuleChangeHandler:
    """Tests for change collection"""

    def test_modified_module_is_pending(self, host, workdir):
        path = workdir / 'calc.py'
        path.write_text('X = 1\n')
        host.import_module('calc')
        handler = ModuleChangeHandler(host.registry)

        handler.on_modified(FileModifiedEvent(str(path)))

        assert handler.drain() == ['calc']
        assert handler.drain() == []

    def test_unrelated_files_ignored(self, host, workdir):
        (workdir / 'calc.py').write_text('X = 1\n')
        notes = workdir / 'notes.txt'
        notes.write_text('hello')
        host.import_module('calc')
        handler = ModuleChangeHandler(host.registry)

        handler.on_modified(FileModifiedEvent(str(notes)))
        handler.on_modified(DirModifiedEvent(str(workdir)))

        assert handler.drain() == []

    def test_save_via_rename(self, host, workdir):
        path = workdir / 'calc.py'
        path.write_text('X = 1\n')
        host.import_module('calc')
        handler = ModuleChangeHandler(host.registry)

        handler.on_moved(FileMovedEvent(str(workdir / '.calc.py.swp'), str(path)))

        assert handler.drain() == ['calc']

    def test_burst_of_saves_debounced(self, host, workdir):
        path = workdir / 'calc.py'
        path.write_text('X = 1\n')
        host.import_module('calc')
        handler = ModuleChangeHandler(host.registry)

        handler.on_modified(FileModifiedEvent(str(path)))
        handler.drain()
        handler.on_modified(FileModifiedEvent(str(path)))

        assert handler.drain() == []


class TestModuleWatcher:
    """Tests for observer management"""

    def test_sync_schedules_each_directory_once(self, host, workdir, libdir):
        (workdir / 'calc.py').write_text('X = 1\n')
        (libdir / 'shared.py').write_text('X = 1\n')
        (libdir / 'more.py').write_text('X = 1\n')

        with patch('livemod.watcher.Observer') as observer_cls:
            watcher = ModuleWatcher(host.registry)
            watcher.start()
            for name in ['calc', 'shared', 'more']:
                host.import_module(name)
            watcher.sync()
            watcher.sync()

            observer = observer_cls.return_value
            observer.start.assert_called_once()
            assert observer.schedule.call_count == 2
            assert watcher.watched_dirs() == sorted([str(workdir.resolve()), str(libdir.resolve())])

            watcher.stop()
            observer.stop.assert_called_once()
            observer.join.assert_called_once()

    def test_sync_before_start_is_noop(self, host):
        watcher = ModuleWatcher(host.registry)
        watcher.sync()
        assert watcher.watched_dirs() == []
