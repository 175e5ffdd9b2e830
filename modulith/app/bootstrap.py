"""Application bootstrap and lifespan.

Startup Order:
1. Logging - always runs first
2. Context - composition config, optional database engine and session factory
3. Modules - load every enabled module (on_load registers assets)
4. Database tables - created once the modules have declared their models
5. post_load - relations, hooks, init
6. Schema - compose_schema
7. on_ready

Shutdown Order: on_destroy in reverse load order, then the engine is disposed.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING, Any

from modulith.core.database import create_engine, create_session_factory, init_models
from modulith.core.modules import Application, ModuleContext
from modulith.core.modules.loader import compose_modules, load_from_paths
from modulith.core.settings import get_module_settings
from modulith.features.graphql.config import CompositionConfig
from modulith.features.graphql.schema_composer import compose_schema
from modulith.infra.logging import setup_logging

if TYPE_CHECKING:
    import strawberry

    from modulith.core.settings import DatabaseSettings

logger = logging.getLogger(__name__)


def create_context(
    *,
    database: bool = False,
    db_settings: DatabaseSettings | None = None,
    graphql_config: CompositionConfig | None = None,
    **extras: Any,
) -> ModuleContext:
    """Create the shared module context.

    Args:
        database: Create an async engine and session factory and expose them as
            ``extras["engine"]`` and ``extras["session_factory"]``.
        db_settings: Database settings for the engine (cached settings by default).
        graphql_config: Composition config; built from ``GraphQLSettings`` if omitted.
        **extras: Stored as-is in ``ctx.extras``.
    """
    ctx = ModuleContext(
        graphql_config=graphql_config if graphql_config is not None else CompositionConfig.from_settings(),
        extras=dict(extras),
    )
    if database:
        engine = create_engine(db_settings)
        ctx.extras["engine"] = engine
        ctx.extras["session_factory"] = create_session_factory(engine)
    return ctx


async def build_application(
    exports: Iterable[Any] | None = None,
    ctx: ModuleContext | None = None,
) -> tuple[Application, strawberry.Schema]:
    """Load modules, run post-load and compose the schema.

    Args:
        exports: Module exports (factories, descriptors or mappings). Defaults
            to the import paths in ``ModuleSettings.enabled``.
        ctx: Context to use; ``create_context()`` if omitted.

    Returns:
        The application host and the composed schema.

    Raises:
        ModuleLoadError: If a module fails to import or load.
        UnresolvedTypeError: If the composed types reference a missing type.
    """
    setup_logging()
    if ctx is None:
        ctx = create_context()

    app = Application(ctx)
    if exports is None:
        paths = get_module_settings().enabled
        logger.info("Loading enabled modules", extra={"modules": list(paths)})
        load_from_paths(ctx, paths)
    else:
        compose_modules(ctx, exports)

    engine = ctx.extras.get("engine")
    if engine is not None:
        await init_models(engine)

    failures = await app.post_load()
    if failures:
        logger.warning(
            "post_load finished with %d failure(s)",
            len(failures),
            extra={"failures": [str(failure) for failure in failures]},
        )

    schema = compose_schema(ctx)
    return app, schema


@asynccontextmanager
async def lifespan(
    exports: Iterable[Any] | None = None,
    ctx: ModuleContext | None = None,
) -> AsyncIterator[tuple[Application, strawberry.Schema]]:
    """Build the application, run ``on_ready``, and shut it down on exit.

    Example:
        async with lifespan() as (app, schema):
            result = await schema.execute("{ health }")
    """
    app, schema = await build_application(exports, ctx)
    await app.ready()
    logger.info("Application ready", extra={"modules": [m.id for m in app.modules]})
    try:
        yield app, schema
    finally:
        logger.info("Application shutting down")
        await app.shutdown()
        engine = app.ctx.extras.get("engine")
        if engine is not None:
            await engine.dispose()
        logger.info("Application shutdown complete")


__all__ = ["build_application", "create_context", "lifespan"]
