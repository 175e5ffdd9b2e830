"""Tests for the application host and module lifecycle."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from modulith.core.exceptions import InvalidModuleError
from modulith.core.modules import Application, ModuleContext, ModuleDescriptor, ModuleState


@pytest.mark.unit
class TestApplicationLoad:
    """Test suite for Application.load."""

    def test_injects_itself_into_context(self, module_context):
        app = Application(module_context)

        assert module_context.app is app

    def test_load_runs_on_load_once_and_returns_self(self, application):
        on_load = MagicMock()

        result = application.load(lambda ctx: ModuleDescriptor(id="users", on_load=on_load))

        assert result is application
        on_load.assert_called_once_with()
        assert [m.id for m in application.get_modules()] == ["users"]
        assert application.state_of("users") is ModuleState.LOADED

    def test_factory_receives_context(self, application, module_context):
        factory = MagicMock(return_value=ModuleDescriptor(id="users"))

        application.load(factory)

        factory.assert_called_once_with(module_context)

    def test_load_accepts_mapping(self, application):
        application.load(lambda ctx: {"id": "billing", "models": {"Invoice": object}})

        assert application.find_module("billing").models == {"Invoice": object}

    def test_load_rejects_non_callable(self, application):
        with pytest.raises(InvalidModuleError):
            application.load(ModuleDescriptor(id="users"))  # type: ignore[arg-type]

    @pytest.mark.parametrize("produced", [None, {"models": {}}, {"id": ""}, "users"])
    def test_load_rejects_invalid_descriptor(self, application, produced):
        with pytest.raises(InvalidModuleError):
            application.load(lambda ctx: produced)

        assert application.get_modules() == []

    def test_on_load_failure_propagates(self, application, caplog):
        def on_load():
            raise RuntimeError("registry down")

        with pytest.raises(RuntimeError, match="registry down"):
            application.load(lambda ctx: ModuleDescriptor(id="users", on_load=on_load))

        assert application.get_modules() == []
        assert "Error during on_load for module users" in caplog.text

    def test_missing_on_load_logs_warning(self, application, caplog):
        caplog.set_level(logging.WARNING)

        application.load(lambda ctx: ModuleDescriptor(id="bare"))

        assert "has no on_load callback" in caplog.text
        assert application.has_module("bare") is True
        assert application.registry.has_module("bare") is False
        assert application.has_module("other") is False

    def test_duplicate_id_warns_and_merges(self, application, make_module, caplog):
        caplog.set_level(logging.WARNING)

        application.load(make_module("users", models={"User": 1}))
        application.load(make_module("users", models={"Profile": 2}))

        assert "loaded more than once" in caplog.text
        assert len(application.get_modules()) == 2
        assert application.get_module("users")["models"] == {"User": 1, "Profile": 2}

    def test_load_publishes_models_and_composers(self, application, module_context, make_module):
        first, second = object(), object()
        application.load(make_module("a", models={"A": 1}, type_composers={"SharedTC": first}))
        application.load(make_module("b", models={"B": 2}, type_composers={"SharedTC": second}))

        assert module_context.models == {"A": 1, "B": 2}
        assert module_context.type_composers["SharedTC"] is first

    def test_register_delegates_to_registry(self, application):
        record = application.register("users", services={"mailer": "m"})

        assert record["services"] == {"mailer": "m"}
        assert application.get_all_assets() == [record]

    def test_folds_are_scoped_to_loaded_modules(self, application, make_module):
        application.register("ghost", models={"Ghost": 0})
        application.load(make_module("users", models={"User": 1}, validators={"v": 2}))

        assert application.get_models() == {"users": {"User": 1}}
        assert application.get_validators() == {"users": {"v": 2}}
        assert application.get_services() == {}

    def test_unknown_module_state(self, application):
        assert application.state_of("nope") is ModuleState.UNLOADED


@pytest.mark.unit
class TestPostLoad:
    """Test suite for Application.post_load."""

    async def test_runs_phases_in_order_for_each_module(self, application):
        calls: list[str] = []

        def recorder(label):
            def callback(ctx, modules):
                calls.append(label)

            return callback

        for module_id in ("a", "b"):
            application.load(
                lambda ctx, module_id=module_id: ModuleDescriptor(
                    id=module_id,
                    on_load=lambda: None,
                    relations=recorder(f"{module_id}.relations"),
                    hooks=recorder(f"{module_id}.hooks"),
                    init=recorder(f"{module_id}.init"),
                )
            )

        failures = await application.post_load()

        assert failures == []
        assert calls == ["a.relations", "a.hooks", "a.init", "b.relations", "b.hooks", "b.init"]
        assert application.state_of("a") is ModuleState.POST_LOADED

    async def test_callbacks_receive_context_and_all_modules(self, application, module_context):
        init = AsyncMock()
        application.load(lambda ctx: ModuleDescriptor(id="a", on_load=lambda: None, init=init))
        application.load(lambda ctx: ModuleDescriptor(id="b", on_load=lambda: None))

        await application.post_load()

        init.assert_awaited_once()
        ctx, modules = init.await_args.args
        assert ctx is module_context
        assert [m.id for m in modules] == ["a", "b"]

    async def test_failure_is_isolated(self, application, caplog):
        later = MagicMock()

        def broken(ctx, modules):
            raise ValueError("boom")

        application.load(lambda ctx: ModuleDescriptor(id="a", on_load=lambda: None, relations=broken, init=later))
        application.load(lambda ctx: ModuleDescriptor(id="b", on_load=lambda: None, relations=later))

        failures = await application.post_load()

        assert len(failures) == 1
        assert failures[0].module_id == "a"
        assert failures[0].phase == "relations"
        assert isinstance(failures[0].error, ValueError)
        assert later.call_count == 2
        assert "Error during relations for module a" in caplog.text

    async def test_lifecycle_records_carry_module_context(self, application, caplog):
        caplog.set_level(logging.INFO)
        seen: dict[str, object] = {}

        def init(ctx, modules):
            from modulith.infra.logging import get_log_context

            seen.update(get_log_context())

        application.load(lambda ctx: ModuleDescriptor(id="users", on_load=lambda: None, init=init))
        await application.post_load()

        assert seen == {"module_id": "users", "phase": "init"}


@pytest.mark.unit
class TestReadyAndShutdown:
    """Test suite for Application.ready and Application.shutdown."""

    async def test_ready_in_load_order_and_shutdown_in_reverse(self, application):
        calls: list[str] = []

        for module_id in ("a", "b", "c"):
            application.load(
                lambda ctx, module_id=module_id: ModuleDescriptor(
                    id=module_id,
                    on_load=lambda: None,
                    on_ready=lambda ctx, module_id=module_id: calls.append(f"ready:{module_id}"),
                    on_destroy=lambda ctx, module_id=module_id: calls.append(f"destroy:{module_id}"),
                )
            )

        await application.ready()
        await application.shutdown()

        assert calls == ["ready:a", "ready:b", "ready:c", "destroy:c", "destroy:b", "destroy:a"]

    async def test_shutdown_continues_after_failure(self, application):
        destroyed = AsyncMock()

        async def broken(ctx):
            raise RuntimeError("close failed")

        application.load(lambda ctx: ModuleDescriptor(id="a", on_load=lambda: None, on_destroy=destroyed))
        application.load(lambda ctx: ModuleDescriptor(id="b", on_load=lambda: None, on_destroy=broken))

        failures = await application.shutdown()

        assert [f.module_id for f in failures] == ["b"]
        destroyed.assert_awaited_once()


@pytest.mark.unit
def test_find_module_returns_latest(module_context):
    app = Application(module_context)
    app.load(lambda ctx: ModuleDescriptor(id="users", on_load=lambda: None, meta={"version": "1"}))
    app.load(lambda ctx: ModuleDescriptor(id="users", on_load=lambda: None, meta={"version": "2"}))

    assert app.find_module("users").meta.version == "2"
    assert app.find_module("missing") is None
    assert isinstance(app.ctx, ModuleContext)
