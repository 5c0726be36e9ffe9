#!/usr/bin/env python3
"""
Tests for first-time imports and the import hook.
"""

import json
from unittest.mock import patch

import pytest

from livemod.modules import (
    Importer,
    LoadError,
    ModuleLoader,
    ModuleNotFoundError,
    ModuleRegistry,
    ModuleState,
    Namespace,
    PathResolver,
    compute_signature,
)


@pytest.fixture
def importer(workdir, libdir):
    return Importer(
        PathResolver([libdir], base_dir=workdir),
        ModuleLoader(),
        ModuleRegistry(),
    )


class TestImportModule:
    """Tests for Importer.import_module"""

    def test_import_registers_namespace(self, importer, workdir):
        path = workdir / 'calc.py'
        path.write_text('def f(a, b):\n    return a + b\n')

        ns = importer.import_module('calc')

        assert isinstance(ns, Namespace)
        assert ns.f(1, 2) == 3
        record = importer.registry.get('calc')
        assert record.namespace is ns
        assert record.path == path.resolve()
        assert record.signature == compute_signature(path)
        assert importer.registry.state('calc') == ModuleState.LOADED

    def test_import_from_search_path(self, importer, libdir):
        (libdir / 'shared.py').write_text('VALUE = 42\n')

        assert importer.import_module('shared').VALUE == 42

    def test_second_import_is_idempotent(self, importer, workdir):
        """Importing again returns the same object without re-reading the file"""
        (workdir / 'calc.py').write_text('X = 1\n')
        first = importer.import_module('calc')
        signature = importer.registry.get('calc').signature

        with patch.object(importer.loader, 'load', wraps=importer.loader.load) as load:
            second = importer.import_module('calc')

        assert second is first
        load.assert_not_called()
        assert importer.registry.get('calc').signature == signature

    def test_not_found_creates_no_entry(self, importer):
        with pytest.raises(ModuleNotFoundError):
            importer.import_module('ghost')

        assert 'ghost' not in importer.registry
        assert len(importer.registry) == 0

    def test_load_error_creates_no_entry(self, importer, workdir):
        """A module that fails its first load is never registered"""
        (workdir / 'calc.py').write_text('def f(:\n')

        with pytest.raises(LoadError):
            importer.import_module('calc')

        assert importer.registry.state('calc') == ModuleState.UNLOADED
        assert importer.loading_stack == []

    def test_circular_import(self, importer, workdir):
        (workdir / 'cyc_alpha.py').write_text('import cyc_beta\n')
        (workdir / 'cyc_beta.py').write_text('import cyc_alpha\n')

        with pytest.raises(LoadError) as excinfo:
            importer.import_module('cyc_alpha')

        assert 'Circular import detected' in str(excinfo.value)
        assert len(importer.registry) == 0
        assert importer.loading_stack == []


class TestImportHook:
    """Tests for the __import__ replacement"""

    def test_import_statement_in_user_namespace(self, importer, workdir):
        (workdir / 'calc.py').write_text('def f(a, b):\n    return a + b\n')
        user_ns = importer.make_user_namespace()

        exec('import calc\nresult = calc.f(2, 3)', user_ns)

        assert user_ns['calc'] is importer.registry.namespace('calc')
        assert user_ns['result'] == 5

    def test_from_import(self, importer, workdir):
        (workdir / 'calc.py').write_text('def f(a, b):\n    return a * b\n')
        user_ns = importer.make_user_namespace()

        exec('from calc import f', user_ns)

        assert user_ns['f'](2, 3) == 6

    def test_star_import(self, importer, workdir):
        (workdir / 'calc.py').write_text('A = 1\nB = 2\n_hidden = 3\n')
        user_ns = importer.make_user_namespace()

        exec('from calc import *', user_ns)

        assert user_ns['A'] == 1
        assert user_ns['B'] == 2
        assert '_hidden' not in user_ns

    def test_tracked_modules_import_each_other(self, importer, workdir, libdir):
        """Imports inside a tracked module share the registry"""
        (libdir / 'base_ops.py').write_text('def one():\n    return 1\n')
        (workdir / 'calc.py').write_text('import base_ops\n\ndef two():\n    return base_ops.one() * 2\n')

        calc = importer.import_module('calc')

        assert calc.two() == 2
        assert calc.base_ops is importer.registry.namespace('base_ops')

    def test_already_imported_stdlib_wins(self, importer, workdir):
        """A local json.py does not shadow the loaded standard module"""
        (workdir / 'json.py').write_text('SHADOW = True\n')
        user_ns = importer.make_user_namespace()

        exec('import json', user_ns)

        assert user_ns['json'] is json
        assert 'json' not in importer.registry

    def test_unresolvable_falls_through(self, importer):
        user_ns = importer.make_user_namespace()

        with pytest.raises(ImportError):
            exec('import livemod_ghost_module', user_ns)

        exec('import os.path', user_ns)
        assert 'os' in user_ns
