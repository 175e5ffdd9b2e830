"""Application host.

Owns the ordered list of loaded modules and the asset registry, and drives the
module lifecycle:

    load()       factory(ctx) -> descriptor, on_load() registers assets
    post_load()  relations -> hooks -> init, per module, in load order
    ready()      on_ready, in load order
    shutdown()   on_destroy, in reverse load order

``load`` failures are fatal. Every post-load, ready and shutdown callback is
isolated: a failure is logged with ``module_id``/``phase`` context, recorded as
a ``LifecycleFailure`` and the remaining callbacks still run.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
import inspect
import logging
from typing import TYPE_CHECKING, Any

from modulith.core.exceptions import InvalidModuleError
from modulith.core.modules.descriptor import ModuleDescriptor, has_valid_id
from modulith.core.modules.registry import AssetRegistry
from modulith.infra.logging.context import log_context

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

POST_LOAD_PHASES: tuple[str, ...] = ("relations", "hooks", "init")


class ModuleState(StrEnum):
    """Lifecycle state of a module id."""

    UNLOADED = "unloaded"
    LOADED = "loaded"
    POST_LOADED = "post_loaded"


@dataclass(frozen=True)
class LifecycleFailure:
    """A lifecycle callback that raised and was isolated."""

    module_id: str
    phase: str
    error: BaseException

    def __str__(self) -> str:
        return f"{self.module_id}.{self.phase}: {self.error!r}"


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class Application:
    """Module host for the modular monolith.

    Constructing an ``Application`` injects it into the context as
    ``ctx.app`` so module factories can call ``ctx.app.register(...)``.

    Example:
        ctx = ModuleContext()
        app = Application(ctx)
        app.load(users.module).load(subscriptions.module)
        failures = await app.post_load()
        schema = compose_schema(ctx)
    """

    def __init__(self, ctx: ModuleContext, registry: AssetRegistry | None = None) -> None:
        self.ctx = ctx
        self.registry = registry if registry is not None else AssetRegistry()
        self._modules: list[ModuleDescriptor] = []
        self._states: dict[str, ModuleState] = {}
        ctx.app = self

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, module_factory: Callable[[ModuleContext], Any]) -> Application:
        """Load one module.

        Args:
            module_factory: Callable taking the context and returning a
                ``ModuleDescriptor`` or a mapping with the same keys.

        Returns:
            ``self``, for chaining.

        Raises:
            InvalidModuleError: If the factory is not callable or does not
                produce a descriptor with a non-empty string id.
            Exception: Whatever ``on_load`` raised, after logging it.
        """
        if not callable(module_factory):
            raise InvalidModuleError(
                detail="Attempted to load a non-callable module; modules must export a factory",
                extra={"export": repr(module_factory)},
            )

        factory_name = getattr(module_factory, "__qualname__", None) or repr(module_factory)
        produced = module_factory(self.ctx)
        if isinstance(produced, Mapping):
            produced = ModuleDescriptor.from_mapping(produced)
        if not isinstance(produced, ModuleDescriptor) or not has_valid_id(produced):
            raise InvalidModuleError(
                detail=f"Module factory {factory_name} must return a descriptor with a valid string 'id'",
                extra={"factory": factory_name, "received": repr(produced)},
            )

        module = produced
        if module.id in self._states:
            logger.warning(
                "Module %s loaded more than once; registry entries will be merged",
                module.id,
                extra={"module_id": module.id},
            )

        with log_context(module_id=module.id, phase="on_load"):
            if module.on_load is None:
                logger.warning(
                    "Module %s has no on_load callback; its assets may not be registered",
                    module.id,
                )
            else:
                try:
                    module.on_load()
                except Exception:
                    logger.exception("Error during on_load for module %s", module.id)
                    raise
                logger.debug("Executed on_load for module %s", module.id)

        self._modules.append(module)
        self._states[module.id] = ModuleState.LOADED
        self._publish_assets(module)

        logger.info("Module loaded: %s", module.id, extra={"module_id": module.id})
        return self

    def _publish_assets(self, module: ModuleDescriptor) -> None:
        """Expose the module's models and type composers on the context."""
        record = self.registry.get_module(module.id) or {}

        models = {**module.models, **(record.get("models") or {})}
        self.ctx.models.update(models)

        composers = {**module.type_composers, **(record.get("type_composers") or {})}
        for key, composer in composers.items():
            existing = self.ctx.type_composers.setdefault(key, composer)
            if existing is not composer:
                logger.debug(
                    "Type composer %s already published; keeping the first one",
                    key,
                    extra={"module_id": module.id},
                )

    def register(self, module_id: str, **buckets: Any) -> dict[str, Any]:
        """Register assets for ``module_id`` (see ``AssetRegistry.register``)."""
        return self.registry.register(module_id, **buckets)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def post_load(self) -> list[LifecycleFailure]:
        """Run relations, hooks and init for every loaded module.

        Modules are processed in load order; each callback is awaited before
        the next one starts. Not guarded against re-invocation.

        Returns:
            Failures recorded during this run (empty when all succeeded).
        """
        logger.info("Starting post_load phase for %d modules", len(self._modules))
        failures: list[LifecycleFailure] = []

        for module in list(self._modules):
            for phase in POST_LOAD_PHASES:
                callback = getattr(module, phase)
                if not callable(callback):
                    continue
                failure = await self._run_isolated(
                    module, phase, callback, self.ctx, list(self._modules)
                )
                if failure is not None:
                    failures.append(failure)
            self._states[module.id] = ModuleState.POST_LOADED

        logger.info(
            "post_load phase completed",
            extra={"modules": len(self._modules), "failures": len(failures)},
        )
        return failures

    async def ready(self) -> list[LifecycleFailure]:
        """Run ``on_ready`` for every module in load order."""
        failures: list[LifecycleFailure] = []
        for module in list(self._modules):
            if module.on_ready is None:
                continue
            failure = await self._run_isolated(module, "on_ready", module.on_ready, self.ctx)
            if failure is not None:
                failures.append(failure)
        return failures

    async def shutdown(self) -> list[LifecycleFailure]:
        """Run ``on_destroy`` for every module in reverse load order."""
        failures: list[LifecycleFailure] = []
        for module in reversed(self._modules):
            if module.on_destroy is None:
                continue
            failure = await self._run_isolated(module, "on_destroy", module.on_destroy, self.ctx)
            if failure is not None:
                failures.append(failure)
        return failures

    async def _run_isolated(
        self,
        module: ModuleDescriptor,
        phase: str,
        callback: Callable[..., Any],
        *args: Any,
    ) -> LifecycleFailure | None:
        with log_context(module_id=module.id, phase=phase):
            logger.debug("Executing %s for module %s", phase, module.id)
            try:
                await _maybe_await(callback(*args))
            except Exception as exc:
                logger.exception("Error during %s for module %s", phase, module.id)
                return LifecycleFailure(module_id=module.id, phase=phase, error=exc)
        return None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def modules(self) -> list[ModuleDescriptor]:
        return list(self._modules)

    def get_modules(self) -> list[ModuleDescriptor]:
        """Loaded module descriptors, in load order."""
        return list(self._modules)

    def find_module(self, module_id: str) -> ModuleDescriptor | None:
        """Most recently loaded descriptor with ``module_id``."""
        for module in reversed(self._modules):
            if module.id == module_id:
                return module
        return None

    def get_module(self, module_id: str) -> dict[str, Any] | None:
        """Registry record for ``module_id``."""
        return self.registry.get_module(module_id)

    def has_module(self, module_id: str) -> bool:
        """True once a module with this id was loaded or registered assets."""
        return module_id in self._states or self.registry.has_module(module_id)

    def get_all_assets(self) -> list[dict[str, Any]]:
        return self.registry.get_all_assets()

    def state_of(self, module_id: str) -> ModuleState:
        return self._states.get(module_id, ModuleState.UNLOADED)

    def _loaded_ids(self) -> list[str]:
        return list(dict.fromkeys(module.id for module in self._modules))

    def get_models(self) -> dict[str, Any]:
        return self.registry.collect("models", self._loaded_ids())

    def get_type_composers(self) -> dict[str, Any]:
        return self.registry.collect("type_composers", self._loaded_ids())

    def get_services(self) -> dict[str, Any]:
        return self.registry.collect("services", self._loaded_ids())

    def get_actions(self) -> dict[str, Any]:
        return self.registry.collect("actions", self._loaded_ids())

    def get_validators(self) -> dict[str, Any]:
        return self.registry.collect("validators", self._loaded_ids())


__all__ = ["POST_LOAD_PHASES", "Application", "LifecycleFailure", "ModuleState"]
