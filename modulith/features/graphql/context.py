"""GraphQL context for request-scoped dependencies.

The context is created fresh for each GraphQL request and provides:
- Database session (for queries/mutations)
- Model handles, as published by the loaded modules
- The module context (for resolvers that need the host or services)
- Authenticated user (optional)
- Correlation ID (for distributed tracing)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from modulith.core.modules.context import ModuleContext


@dataclass
class GraphQLContext:
    """Request context for GraphQL operations.

    Example usage in a composer resolver:
        async def resolve_user(root, info, id: strawberry.ID):
            ctx: GraphQLContext = info.context
            return await ctx.models["User"].get(ctx.session, int(id))
    """

    session: AsyncSession | None = None
    models: dict[str, Any] = field(default_factory=dict)
    app_context: ModuleContext | None = None
    user: Any | None = None
    correlation_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def is_authenticated(self) -> bool:
        """Check if the request is authenticated."""
        return self.user is not None

    @classmethod
    def from_module_context(
        cls,
        ctx: ModuleContext,
        session: AsyncSession | None = None,
        **kwargs: Any,
    ) -> GraphQLContext:
        """Build a request context exposing the models published on ``ctx``."""
        return cls(session=session, models=dict(ctx.models), app_context=ctx, **kwargs)


__all__ = ["GraphQLContext"]
