"""Root Query and Mutation fields of the users module.

Resolvers follow the composer convention ``(root, info, **args)`` and reach the
database through ``info.context.session`` and the ``User`` model handle
published in ``info.context.models``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

import strawberry

from modulith.features.graphql.composers import ArgConfig, FieldConfig, ListOf
from modulith.features.users.models import User
from modulith.features.users.validators import validate_registration

if TYPE_CHECKING:
    from modulith.features.users.repository import UserRepository

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


def _users(info: Any) -> UserRepository:
    return info.context.models["User"]


async def resolve_user(root: Any, info: Any, id: strawberry.ID) -> User | None:  # noqa: A002
    try:
        user_id = int(id)
    except (TypeError, ValueError):
        return None
    return await _users(info).get(info.context.session, user_id)


async def resolve_users(root: Any, info: Any, limit: int = 50, offset: int = 0) -> list[User]:
    limit = max(0, min(limit, MAX_PAGE_SIZE))
    return list(await _users(info).list(info.context.session, limit=limit, offset=max(0, offset)))


async def resolve_create_user(root: Any, info: Any, data: Any) -> User:
    """Create a user after validating the payload and checking uniqueness.

    Raises:
        ValueError: If the username or email is already taken.
        pydantic.ValidationError: If the payload is invalid.
    """
    payload = validate_registration(dataclasses.asdict(data))
    session = info.context.session
    users = _users(info)

    if await users.find_by_email(session, payload.email) is not None:
        msg = f"User with email {payload.email} already exists"
        raise ValueError(msg)
    if await users.find_by_username(session, payload.username) is not None:
        msg = f"Username {payload.username} is already taken"
        raise ValueError(msg)

    user = await users.create(session, User(**payload.model_dump()))
    await session.commit()
    logger.info("User created", extra={"user_id": user.id})
    return user


def build_resolvers(type_composers: dict[str, Any]) -> dict[str, dict[str, FieldConfig]]:
    """Query and Mutation field maps bound to this module's composers."""
    user_tc = type_composers["UserTC"]
    return {
        "Query": {
            "user": FieldConfig(
                user_tc,
                resolve=resolve_user,
                args={"id": strawberry.ID},
                nullable=True,
                description="Get a single user by ID",
            ),
            "users": FieldConfig(
                ListOf(user_tc),
                resolve=resolve_users,
                args={
                    "limit": ArgConfig(int, default=50, description="Maximum number of users"),
                    "offset": ArgConfig(int, default=0, description="Number of users to skip"),
                },
                description="List users ordered by ID",
            ),
        },
        "Mutation": {
            "create_user": FieldConfig(
                user_tc,
                resolve=resolve_create_user,
                args={"data": type_composers["CreateUserInputTC"]},
                description="Create a new user",
            ),
        },
    }


__all__ = ["build_resolvers", "resolve_create_user", "resolve_user", "resolve_users"]
