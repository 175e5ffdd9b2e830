"""Tests for the module loader."""

from __future__ import annotations

import pytest

from modulith.core.exceptions import InvalidModuleError, MissingApplicationError, ModuleLoadError
from modulith.core.modules import ModuleContext, ModuleDescriptor
from modulith.core.modules.loader import (
    compose_modules,
    import_module_factory,
    is_valid_module,
    load_from_paths,
    load_module,
    normalize_module,
)


@pytest.mark.unit
class TestNormalizeModule:
    """Test suite for normalize_module."""

    def test_calls_factory_with_context(self, module_context):
        module = normalize_module(lambda ctx: ModuleDescriptor(id="users", extras={"ctx": ctx}), module_context)

        assert module.extras["ctx"] is module_context

    def test_descriptor_is_returned_unchanged(self, module_context):
        descriptor = ModuleDescriptor(id="users")

        assert normalize_module(descriptor, module_context) is descriptor

    def test_mapping_export_is_converted(self, module_context):
        module = normalize_module({"id": "users"}, module_context)

        assert isinstance(module, ModuleDescriptor)
        assert is_valid_module(module)

    def test_other_values_pass_through(self, module_context):
        assert normalize_module(42, module_context) == 42
        assert is_valid_module(42) is False


@pytest.mark.unit
class TestLoadModule:
    """Test suite for load_module."""

    def test_requires_application(self):
        with pytest.raises(MissingApplicationError):
            load_module(ModuleContext(), lambda ctx: ModuleDescriptor(id="users"))

    def test_rejects_none(self, application, module_context):
        with pytest.raises(InvalidModuleError):
            load_module(module_context, None)

    def test_loads_factory(self, application, module_context, make_module):
        module = load_module(module_context, make_module("users", models={"User": 1}))

        assert module.id == "users"
        assert application.get_module("users")["models"] == {"User": 1}

    def test_factory_is_called_once(self, application, module_context):
        calls = []

        def factory(ctx):
            calls.append(ctx)
            return ModuleDescriptor(id="users", on_load=lambda: None)

        load_module(module_context, factory)

        assert len(calls) == 1

    def test_host_factory_is_named_after_the_export(self, application, module_context, make_module, monkeypatch):
        seen = []
        original = application.load

        def load(factory):
            seen.append(factory.__qualname__)
            return original(factory)

        monkeypatch.setattr(application, "load", load)

        load_module(module_context, make_module("users"))
        load_module(module_context, ModuleDescriptor(id="plans", on_load=lambda: None))

        assert seen == ["users_module", "(object export)"]
        assert application.has_module("plans") is True

    def test_wraps_normalization_errors(self, application, module_context):
        def factory(ctx):
            raise KeyError("missing setting")

        with pytest.raises(InvalidModuleError) as exc_info:
            load_module(module_context, factory)

        assert isinstance(exc_info.value.__cause__, KeyError)
        assert exc_info.value.extra["export"].endswith("factory")

    def test_rejects_module_without_id(self, application, module_context):
        with pytest.raises(InvalidModuleError, match="valid string 'id'"):
            load_module(module_context, {"models": {}})


@pytest.mark.unit
class TestComposeModules:
    """Test suite for compose_modules."""

    def test_loads_in_order(self, application, module_context, make_module):
        loaded = compose_modules(module_context, [make_module("a"), make_module("b")])

        assert [m.id for m in loaded] == ["a", "b"]
        assert [m.id for m in application.get_modules()] == ["a", "b"]

    def test_empty_list(self, application, module_context):
        assert compose_modules(module_context, []) == []

    def test_aborts_on_first_failure(self, application, module_context, make_module):
        with pytest.raises(ModuleLoadError) as exc_info:
            compose_modules(module_context, [make_module("a"), lambda ctx: {"id": None}, make_module("c")])

        assert exc_info.value.extra["index"] == 1
        assert isinstance(exc_info.value.__cause__, InvalidModuleError)
        assert [m.id for m in application.get_modules()] == ["a"]


@pytest.mark.unit
class TestImportModuleFactory:
    """Test suite for import_module_factory."""

    def test_default_attribute_is_module(self):
        from modulith.features import users

        assert import_module_factory("modulith.features.users") is users.module

    def test_explicit_attribute(self):
        from modulith.features.users import types

        assert import_module_factory("modulith.features.users.types:build_type_composers") is types.build_type_composers

    @pytest.mark.parametrize("path", ["", "   ", ":module"])
    def test_malformed_path(self, path):
        with pytest.raises(InvalidModuleError):
            import_module_factory(path)

    def test_unknown_module(self):
        with pytest.raises(ModuleLoadError, match="Cannot import"):
            import_module_factory("modulith.features.does_not_exist")

    def test_unknown_attribute(self):
        with pytest.raises(ModuleLoadError, match="no attribute"):
            import_module_factory("modulith.features.users:nope")

    def test_load_from_paths(self, application, module_context):
        loaded = load_from_paths(module_context, ["modulith.features.users:module"])

        assert [m.id for m in loaded] == ["users"]
        assert "User" in module_context.models
