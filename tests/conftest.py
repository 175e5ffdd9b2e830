"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolate cached settings and root logging between tests
    - Module Fixtures: module context, application host and module factories
    - Database Fixtures: in-memory SQLite engine and session

When adding new features:
    1. Add fixtures to the appropriate section below
    2. Use @pytest.fixture with clear docstrings
    3. Make fixtures composable (fixtures can depend on other fixtures)
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
import logging
import os
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

# Keep tests independent from the developer's environment
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_JSON_LOGS", "false")

from modulith.core.database import create_engine, create_session_factory, init_models
from modulith.core.modules import Application, ModuleContext, ModuleDescriptor
from modulith.core.settings import DatabaseSettings, clear_settings_cache
from modulith.features.graphql.config import CompositionConfig

# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings before and after every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo root logger changes made by setup_logging during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# Module Fixtures
# ============================================================================


@pytest.fixture
def module_context() -> ModuleContext:
    """Empty module context with a timestamp-free composition config.

    Timestamps are disabled so schema assertions only see the fields the
    test declared; tests that exercise the decorator enable it explicitly.
    """
    return ModuleContext(graphql_config=CompositionConfig(type_decorators=[]))


@pytest.fixture
def application(module_context: ModuleContext) -> Application:
    """Application host bound to ``module_context``."""
    return Application(module_context)


@pytest.fixture
def make_module() -> Callable[..., Callable[[ModuleContext], ModuleDescriptor]]:
    """Factory for throwaway modules.

    The returned factory registers every given bucket from ``on_load``, the
    way real modules do.

    Example:
        def test_something(application, make_module):
            application.load(make_module("billing", resolvers={"Query": {"ping": str}}))
    """

    def _make(module_id: str, **kwargs: Any) -> Callable[[ModuleContext], ModuleDescriptor]:
        buckets = {
            key: kwargs.pop(key)
            for key in ("models", "type_composers", "resolvers", "actions", "services", "validators")
            if key in kwargs
        }
        register = kwargs.pop("register", True)

        def factory(ctx: ModuleContext) -> ModuleDescriptor:
            def on_load() -> None:
                if register:
                    ctx.app.register(module_id, **buckets)

            return ModuleDescriptor(id=module_id, on_load=on_load, **buckets, **kwargs)

        factory.__qualname__ = f"{module_id}_module"
        return factory

    return _make


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with every model table created."""
    # Import models so their tables are registered on Base.metadata
    import modulith.features.subscriptions.models
    import modulith.features.users.models  # noqa: F401

    engine = create_engine(DatabaseSettings(url="sqlite+aiosqlite:///:memory:"))
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine):
    """Session factory bound to the test engine."""
    return create_session_factory(db_engine)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession]:
    """Database session for a single test."""
    async with session_factory() as session:
        yield session
