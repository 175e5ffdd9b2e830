"""Mutable GraphQL type composers.

Modules describe their GraphQL types with composers instead of decorated
strawberry classes so other modules can keep adding fields after load (the
relations phase) and the whole set can be rebuilt on every composition.

Composers are a tagged variant decided at construction time:

- ``ObjectTypeComposer``: output object type with a mutable field map
- ``InputTypeComposer``: input object type (no resolvers)
- ``EnumTypeComposer``: enum type
- ``ScalarTypeComposer``: wrapper around a strawberry scalar

Field descriptors accepted by ``add_field`` / ``add_fields``:

- ``FieldConfig``: type reference plus optional resolver, args, description
- a bare type reference (``str``, ``int``, ``UserTC``, ``"PlanTC"``,
  ``ListOf(...)``): shorthand for ``FieldConfig(type=...)``
- a prebuilt ``strawberry.field(...)``
- a plain ``(root, info, **args)`` resolver function, described by its
  annotations (``FieldConfig.from_resolver``)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
import enum
from enum import StrEnum
import inspect
import re
import typing
from typing import Any, ClassVar

from modulith.core.exceptions import InvalidFieldError


class _Missing:
    """Sentinel for "no default" on argument and input field descriptors."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

_GRAPHQL_NAME = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")


class TypeKind(StrEnum):
    """Kind of GraphQL type a composer produces."""

    OBJECT = "object"
    INPUT = "input"
    ENUM = "enum"
    SCALAR = "scalar"


@dataclass(frozen=True)
class ListOf:
    """List type reference: ``ListOf(UserTC)`` -> ``[User!]!``."""

    inner: Any
    nullable_items: bool = False


@dataclass
class ArgConfig:
    """Resolver argument descriptor.

    Nullable arguments without an explicit default default to ``None``.
    """

    type: Any
    default: Any = MISSING
    description: str | None = None
    nullable: bool = False


@dataclass
class FieldConfig:
    """Field descriptor.

    Attributes:
        type: Type reference for the field's value.
        resolve: Optional ``(root, info, **args)`` resolver, sync or async.
        args: Argument name -> type reference or ``ArgConfig``.
        description: Field description.
        nullable: Whether the field may resolve to null.
        default: Default value (input fields).
        deprecation_reason: Marks the field as deprecated.
    """

    type: Any
    resolve: Callable[..., Any] | None = None
    args: dict[str, Any] | None = None
    description: str | None = None
    nullable: bool = False
    default: Any = MISSING
    deprecation_reason: str | None = None

    @property
    def has_resolver(self) -> bool:
        return self.resolve is not None

    @classmethod
    def from_resolver(cls, resolve: Callable[..., Any], name: str | None = None) -> FieldConfig:
        """Describe a plain ``(root, info, **args)`` function from its annotations.

        The first two positional parameters are the root and info; every other
        parameter becomes an argument and must be annotated, as must the
        return type. String annotations that cannot be evaluated in the
        function's module are kept and resolved later as composer keys or
        GraphQL type names.

        Raises:
            InvalidFieldError: If the return type or an argument type is missing.
        """
        label = name or getattr(resolve, "__name__", repr(resolve))
        signature = inspect.signature(resolve)
        try:
            hints = typing.get_type_hints(resolve)
        except (NameError, TypeError):
            hints = {}

        def annotation_of(param_name: str, raw: Any) -> Any:
            if param_name in hints:
                return hints[param_name]
            if raw is inspect.Parameter.empty:
                raise InvalidFieldError(
                    detail=f"Resolver for field '{label}' needs a type annotation for {param_name!r}",
                    extra={"field": label},
                )
            if isinstance(raw, str):
                try:
                    return eval(raw, getattr(resolve, "__globals__", {}))  # noqa: S307
                except (NameError, SyntaxError, TypeError):
                    return raw
            return raw

        args: dict[str, Any] = {}
        positional = 0
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            if param.kind is not inspect.Parameter.KEYWORD_ONLY and positional < 2:
                positional += 1
                continue
            args[param.name] = ArgConfig(
                type=annotation_of(param.name, param.annotation),
                default=MISSING if param.default is inspect.Parameter.empty else param.default,
            )

        return cls(
            type=annotation_of("return", signature.return_annotation),
            resolve=resolve,
            args=args or None,
            description=inspect.getdoc(resolve),
        )


def is_prebuilt_field(value: Any) -> bool:
    """True for ``strawberry.field(...)`` objects."""
    return hasattr(value, "python_name")


def is_type_reference(value: Any) -> bool:
    """True when ``value`` can stand for a GraphQL type."""
    if isinstance(value, (type, str, TypeComposer, ListOf, typing.NewType)):
        return True
    if hasattr(value, "_scalar_definition"):
        return True
    return typing.get_origin(value) is not None


def normalize_field(name: str, value: Any) -> Any:
    """Normalize a field descriptor for storage on a composer.

    Raises:
        InvalidFieldError: If the name is not an identifier or the value is
            not an accepted field descriptor.
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise InvalidFieldError(
            detail=f"Field name {name!r} is not a valid identifier",
            extra={"field": repr(name)},
        )
    if isinstance(value, FieldConfig) or is_prebuilt_field(value):
        return value
    if is_type_reference(value):
        return FieldConfig(type=value)
    if inspect.isfunction(value) or inspect.ismethod(value):
        return FieldConfig.from_resolver(value, name)
    raise InvalidFieldError(
        detail=f"Cannot interpret field '{name}' of type {type(value).__name__}",
        extra={"field": name},
    )


class TypeComposer:
    """Base class for all composers."""

    kind: ClassVar[TypeKind]

    def __init__(self, name: str, description: str | None = None) -> None:
        if not isinstance(name, str) or not _GRAPHQL_NAME.match(name):
            raise InvalidFieldError(
                detail=f"{name!r} is not a valid GraphQL type name",
                extra={"type_name": repr(name)},
            )
        self.name = name
        self.description = description

    @property
    def type_name(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class _FieldsComposer(TypeComposer):
    """Shared field-map behaviour of object and input composers."""

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Any] | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(name, description)
        self._fields: dict[str, Any] = {}
        if fields:
            self.add_fields(fields)

    @property
    def fields(self) -> dict[str, Any]:
        return dict(self._fields)

    def _check_field(self, name: str, value: Any) -> None:
        """Hook for subclasses to reject fields they cannot hold."""

    def add_field(self, name: str, field: Any) -> _FieldsComposer:
        """Add or replace a single field."""
        normalized = normalize_field(name, field)
        self._check_field(name, normalized)
        self._fields[name] = normalized
        return self

    def add_fields(self, fields: Mapping[str, Any]) -> _FieldsComposer:
        """Add or replace several fields, preserving the given order."""
        for name, field in fields.items():
            self.add_field(name, field)
        return self

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_field(self, name: str) -> Any:
        """Return the stored descriptor for ``name``.

        Raises:
            KeyError: If the field does not exist.
        """
        try:
            return self._fields[name]
        except KeyError:
            msg = f"Type '{self.name}' has no field '{name}'"
            raise KeyError(msg) from None

    def remove_field(self, name: str) -> _FieldsComposer:
        self._fields.pop(name, None)
        return self

    def field_names(self) -> list[str]:
        return list(self._fields)

    def __len__(self) -> int:
        return len(self._fields)


class ObjectTypeComposer(_FieldsComposer):
    """Mutable output object type.

    Example:
        UserTC = ObjectTypeComposer(
            "User",
            fields={"id": strawberry.ID, "email": str, "name": FieldConfig(str, nullable=True)},
        )
        UserTC.add_relation("subscriptions", has_many("SubscriptionTC", model="Subscription", foreign_key="user_id"))
    """

    kind = TypeKind.OBJECT

    def __init__(
        self,
        name: str,
        fields: Mapping[str, Any] | None = None,
        description: str | None = None,
    ) -> None:
        self.relation_names: list[str] = []
        super().__init__(name, fields, description)

    def add_relation(self, name: str, config: FieldConfig | Any) -> ObjectTypeComposer:
        """Attach a cross-module relation field."""
        self.add_field(name, config)
        if name not in self.relation_names:
            self.relation_names.append(name)
        return self

    def remove_field(self, name: str) -> ObjectTypeComposer:
        super().remove_field(name)
        if name in self.relation_names:
            self.relation_names.remove(name)
        return self


class InputTypeComposer(_FieldsComposer):
    """Mutable input object type. Fields cannot carry resolvers."""

    kind = TypeKind.INPUT

    def _check_field(self, name: str, value: Any) -> None:
        if not isinstance(value, FieldConfig) or value.has_resolver:
            raise InvalidFieldError(
                detail=f"Input type '{self.name}' field '{name}' cannot have a resolver",
                extra={"type_name": self.name, "field": name},
            )


class EnumTypeComposer(TypeComposer):
    """Enum type built from a name -> value map or an existing ``enum.Enum``.

    Example:
        BillingCycleTC = EnumTypeComposer("BillingCycle", {"MONTHLY": "monthly", "YEARLY": "yearly"})
        StatusTC = EnumTypeComposer.from_enum(SubscriptionStatus)
    """

    kind = TypeKind.ENUM

    def __init__(
        self,
        name: str,
        values: Mapping[str, Any] | Iterable[str] | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(name, description)
        self.enum_cls: type[enum.Enum] | None = None
        self._values: dict[str, Any] = {}
        if values:
            self.add_values(values)

    @classmethod
    def from_enum(
        cls,
        enum_cls: type[enum.Enum],
        name: str | None = None,
        description: str | None = None,
    ) -> EnumTypeComposer:
        """Wrap an existing Python enum; resolvers may return its members."""
        composer = cls(name or enum_cls.__name__, description=description)
        composer.enum_cls = enum_cls
        composer._values = {member.name: member.value for member in enum_cls}
        return composer

    def add_values(self, values: Mapping[str, Any] | Iterable[str]) -> EnumTypeComposer:
        if self.enum_cls is not None:
            raise InvalidFieldError(
                detail=f"Enum '{self.name}' wraps {self.enum_cls.__name__}; its values are fixed",
                extra={"type_name": self.name},
            )
        items = values.items() if isinstance(values, Mapping) else ((v, v) for v in values)
        for key, value in items:
            if not isinstance(key, str) or not _GRAPHQL_NAME.match(key):
                raise InvalidFieldError(
                    detail=f"{key!r} is not a valid enum value name",
                    extra={"type_name": self.name},
                )
            self._values[key] = value
        return self

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)


class ScalarTypeComposer(TypeComposer):
    """Wrapper around a strawberry scalar (``strawberry.scalar(...)``)."""

    kind = TypeKind.SCALAR

    def __init__(self, scalar: Any, name: str | None = None, description: str | None = None) -> None:
        definition = getattr(scalar, "_scalar_definition", None)
        if definition is None:
            raise InvalidFieldError(
                detail=f"{scalar!r} is not a strawberry scalar",
                extra={"scalar": repr(scalar)},
            )
        super().__init__(name or definition.name, description or definition.description)
        self.scalar = scalar


def is_strawberry_scalar(value: Any) -> bool:
    return getattr(value, "_scalar_definition", None) is not None


__all__ = [
    "MISSING",
    "ArgConfig",
    "EnumTypeComposer",
    "FieldConfig",
    "InputTypeComposer",
    "ListOf",
    "ObjectTypeComposer",
    "ScalarTypeComposer",
    "TypeComposer",
    "TypeKind",
    "is_prebuilt_field",
    "is_strawberry_scalar",
    "is_type_reference",
    "normalize_field",
]
