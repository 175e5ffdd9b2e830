"""Users module: user accounts and the ``User`` GraphQL type.

Other modules attach fields to ``UserTC`` in their relations phase; the
subscriptions module adds ``User.subscriptions`` this way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from modulith.core.modules.descriptor import ModuleDescriptor, ModuleMeta
from modulith.features.users.models import User
from modulith.features.users.repository import UserRepository
from modulith.features.users.resolvers import build_resolvers
from modulith.features.users.types import build_type_composers
from modulith.features.users.validators import VALIDATORS

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

MODULE_ID = "users"


def module(ctx: ModuleContext) -> ModuleDescriptor:
    """Users module factory."""
    type_composers = build_type_composers()
    resolvers = build_resolvers(type_composers)
    models = {"User": UserRepository(User)}

    def on_load() -> None:
        ctx.app.register(
            MODULE_ID,
            models=models,
            type_composers=type_composers,
            resolvers=resolvers,
            validators=VALIDATORS,
        )

    def init(_ctx: ModuleContext, modules: list[ModuleDescriptor]) -> None:
        logger.info("Users module initialization complete")

    return ModuleDescriptor(
        id=MODULE_ID,
        meta=ModuleMeta(
            version="1.0.0",
            description="Handles user accounts",
        ),
        models=models,
        type_composers=type_composers,
        resolvers=resolvers,
        validators=dict(VALIDATORS),
        on_load=on_load,
        init=init,
    )


__all__ = ["MODULE_ID", "User", "UserRepository", "module"]
