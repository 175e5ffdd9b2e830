"""Relation field builders.

Relations are ordinary ``FieldConfig`` resolvers that look the related rows up
through a model handle published in the request context
(``info.context.models[model]``). A handle must provide
``find_many(session, **filters)`` and ``find_one(session, **filters)``, which
``BaseRepository`` does.

Relation resolvers never fail the request: any exception is logged and the
field degrades to ``[]`` (``has_many``) or ``None`` (``belongs_to``).

Example:
    UserTC.add_relation(
        "subscriptions",
        has_many("SubscriptionTC", model="Subscription", foreign_key="user_id"),
    )
    SubscriptionTC.add_relation(
        "user",
        belongs_to("UserTC", model="User", local_key="user_id"),
    )
"""

from __future__ import annotations

from collections.abc import Callable
import copy
import functools
import inspect
import logging
from typing import Any

from modulith.features.graphql.composers import FieldConfig, ListOf
from modulith.features.graphql.utils import resolve_attribute

logger = logging.getLogger(__name__)


def isolated(resolve: Callable[..., Any], default: Any = None, *, name: str | None = None) -> Callable[..., Any]:
    """Wrap a ``(root, info, **args)`` resolver so failures return ``default``.

    Args:
        resolve: Sync or async resolver.
        default: Value returned (copied) when ``resolve`` raises.
        name: Field name used in the log record.
    """
    label = name or getattr(resolve, "__name__", "relation")

    @functools.wraps(resolve)
    async def wrapper(root: Any, info: Any, **kwargs: Any) -> Any:
        try:
            result = resolve(root, info, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.exception("Relation resolver %s failed; returning default", label)
            return copy.copy(default)
        return result

    return wrapper


def _lookup_handle(info: Any, model: str) -> Any:
    models = resolve_attribute(info.context, "models") or {}
    try:
        return models[model]
    except KeyError:
        msg = f"Model handle '{model}' is not available in the request context"
        raise LookupError(msg) from None


def has_many(
    target: Any,
    *,
    model: str,
    foreign_key: str,
    local_key: str = "id",
    description: str | None = None,
) -> FieldConfig:
    """One-to-many relation: rows of ``model`` whose ``foreign_key`` equals ``root.local_key``.

    Args:
        target: Type reference of the related type (composer or key).
        model: Model handle name in ``info.context.models``.
        foreign_key: Column on the related model.
        local_key: Attribute on the parent.
        description: Field description.
    """

    async def resolve(root: Any, info: Any) -> list[Any]:
        value = resolve_attribute(root, local_key)
        if value is None:
            return []
        handle = _lookup_handle(info, model)
        session = resolve_attribute(info.context, "session")
        return list(await handle.find_many(session, **{foreign_key: value}))

    return FieldConfig(
        type=ListOf(target),
        resolve=isolated(resolve, [], name=f"has_many:{model}.{foreign_key}"),
        description=description,
    )


def belongs_to(
    target: Any,
    *,
    model: str,
    local_key: str,
    foreign_key: str = "id",
    description: str | None = None,
) -> FieldConfig:
    """Many-to-one relation: the ``model`` row whose ``foreign_key`` equals ``root.local_key``.

    The field is nullable; a missing row or a failing lookup yields ``None``.
    """

    async def resolve(root: Any, info: Any) -> Any:
        value = resolve_attribute(root, local_key)
        if value is None:
            return None
        handle = _lookup_handle(info, model)
        session = resolve_attribute(info.context, "session")
        return await handle.find_one(session, **{foreign_key: value})

    return FieldConfig(
        type=target,
        resolve=isolated(resolve, None, name=f"belongs_to:{model}.{local_key}"),
        description=description,
        nullable=True,
    )


__all__ = ["belongs_to", "has_many", "isolated"]
