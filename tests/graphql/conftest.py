"""GraphQL test fixtures.

Provides:
- The users and subscriptions modules composed on an in-memory SQLite database
- A GraphQL request context bound to a test session
- Sample user and seeded plan fixtures
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from modulith.app.bootstrap import build_application, create_context
from modulith.features import subscriptions, users
from modulith.features.graphql.config import CompositionConfig
from modulith.features.graphql.context import GraphQLContext

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    import strawberry

    from modulith.core.modules import Application, ModuleContext


@pytest.fixture
async def composed(db_engine, session_factory) -> tuple[Application, strawberry.Schema]:
    """Both bundled modules loaded, post-loaded (plans seeded) and composed."""
    ctx = create_context(
        graphql_config=CompositionConfig(),
        engine=db_engine,
        session_factory=session_factory,
    )
    return await build_application([users.module, subscriptions.module], ctx)


@pytest.fixture
def schema(composed) -> strawberry.Schema:
    return composed[1]


@pytest.fixture
def app_context(composed) -> ModuleContext:
    return composed[0].ctx


@pytest.fixture
async def graphql_context(app_context, session_factory) -> AsyncGenerator[GraphQLContext]:
    """Request context with its own session, as a transport layer would build it."""
    async with session_factory() as session:
        yield GraphQLContext.from_module_context(app_context, session=session)


@pytest.fixture
def execute(schema, graphql_context):
    """Execute a query against the composed schema with the test context."""

    async def _execute(query: str, **variables: Any):
        return await schema.execute(query, variable_values=variables or None, context_value=graphql_context)

    return _execute


@pytest.fixture
async def sample_user(execute) -> dict[str, Any]:
    result = await execute(CREATE_USER_MUTATION, data={"username": "ada", "email": "ada@example.com", "firstName": "Ada"})
    assert result.errors is None
    return result.data["createUser"]


@pytest.fixture
async def plan_ids(execute) -> dict[str, str]:
    result = await execute(PLANS_QUERY)
    assert result.errors is None
    return {plan["code"]: plan["id"] for plan in result.data["plans"]}


# =============================================================================
# Queries
# =============================================================================

CREATE_USER_MUTATION = """
mutation CreateUser($data: CreateUserInput!) {
    createUser(data: $data) {
        id
        username
        email
        fullName
        role
        isActive
    }
}
"""

PLANS_QUERY = """
query {
    plans {
        id
        code
        name
        price
        billingCycle
        features
        tier
    }
}
"""

