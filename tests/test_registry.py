#!/usr/bin/env python3
"""
Tests for namespaces and the module registry.
"""

from pathlib import Path

import pytest

from livemod.modules import (
    ModuleRecord,
    ModuleRegistry,
    ModuleState,
    Namespace,
    namespace_bindings,
    namespace_name,
    replace_bindings,
)


def _record(name='calc', path='/tmp/calc.py', bindings=None):
    return ModuleRecord(
        name=name,
        path=Path(path),
        namespace=Namespace(name, bindings or {'X': 1}),
        signature=(1, 1),
    )


class TestNamespace:
    """Tests for the Namespace handle"""

    def test_attribute_access(self):
        ns = Namespace('calc', {'X': 1, 'f': lambda: 'f'})

        assert ns.X == 1
        assert ns.f() == 'f'
        assert ns['X'] == 1
        assert 'X' in ns
        assert len(ns) == 2
        assert sorted(ns) == ['X', 'f']
        assert dir(ns) == ['X', 'f']

    def test_missing_attribute(self):
        ns = Namespace('calc', {})

        with pytest.raises(AttributeError, match="module 'calc' has no attribute 'nope'"):
            ns.nope

    def test_set_and_delete(self):
        ns = Namespace('calc', {})

        ns.Y = 5
        assert namespace_bindings(ns) == {'Y': 5}

        del ns.Y
        assert 'Y' not in ns
        with pytest.raises(AttributeError):
            del ns.Y

    def test_bindings_named_like_methods(self):
        """Module functions called keys/get/items are not shadowed"""
        ns = Namespace('calc', {'keys': 'k', 'get': 'g', 'items': 'i'})

        assert (ns.keys, ns.get, ns.items) == ('k', 'g', 'i')

    def test_vars_returns_live_bindings(self):
        bindings = {'X': 1}
        ns = Namespace('calc', bindings)

        assert vars(ns) is bindings

    def test_saved_vars_is_a_snapshot_after_replace(self):
        """vars() taken before a reload keeps the old contents"""
        ns = Namespace('calc', {'X': 1})
        saved = vars(ns)

        replace_bindings(ns, {'X': 2})

        assert saved['X'] == 1
        assert vars(ns)['X'] == 2
        assert ns.X == 2

    def test_replace_keeps_identity(self):
        """Replacing bindings is visible through every existing reference"""
        ns = Namespace('calc', {'X': 1})
        holder = [ns]

        replace_bindings(ns, {'X': 2, 'Y': 3})

        assert holder[0] is ns
        assert holder[0].X == 2
        assert holder[0].Y == 3
        assert namespace_name(ns) == 'calc'

    def test_repr(self):
        assert repr(Namespace('calc')) == "<namespace 'calc'>"
        assert repr(Namespace('calc', {'__file__': '/x/calc.py'})) == "<namespace 'calc' from '/x/calc.py'>"


class TestModuleRegistry:
    """Tests for ModuleRegistry"""

    def test_register_and_lookup(self):
        registry = ModuleRegistry()
        record = registry.register(_record())

        assert 'calc' in registry
        assert len(registry) == 1
        assert registry.get('calc') is record
        assert registry.namespace('calc') is record.namespace
        assert registry.names() == ['calc']
        assert list(registry) == ['calc']

    def test_unknown_name(self):
        registry = ModuleRegistry()

        assert registry.get('calc') is None
        assert registry.namespace('calc') is None
        assert registry.state('calc') == ModuleState.UNLOADED

    def test_state_after_register(self):
        registry = ModuleRegistry()
        registry.register(_record())

        assert registry.state('calc') == ModuleState.LOADED

    def test_duplicate_register(self):
        registry = ModuleRegistry()
        registry.register(_record())

        with pytest.raises(ValueError):
            registry.register(_record())

    def test_records_in_registration_order(self):
        registry = ModuleRegistry()
        for name in ['b', 'a', 'c']:
            registry.register(_record(name=name, path=f'/tmp/{name}.py'))

        assert [r.name for r in registry.records()] == ['b', 'a', 'c']

    def test_find_by_path(self):
        registry = ModuleRegistry()
        record = registry.register(_record())

        assert registry.find_by_path(Path('/tmp/calc.py')) is record
        assert registry.find_by_path(Path('/tmp/other.py')) is None

    def test_new_records_defaults(self):
        record = _record()

        assert record.state == ModuleState.LOADED
        assert record.reload_count == 0
        assert record.last_error is None
        assert record.loaded_at is not None
