"""Turn a schema namespace of composers into strawberry types.

Every call builds fresh classes, so composers can be mutated between
compositions and rebuilding never leaks state from a previous schema.

Building runs in two passes:

1. declare: create an empty class per object/input composer, build enums and
   pass scalars through, so any field can reference any type (cycles
   included); composers reached only through a field reference are declared
   when first seen;
2. define: attach annotations and fields to each declared class, then apply
   ``strawberry.type`` / ``strawberry.input``.
"""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
import enum
import inspect
import logging
from typing import Annotated, Any, Optional

import strawberry

from modulith.core.exceptions import InvalidFieldError, UnresolvedTypeError
from modulith.features.graphql.composers import (
    MISSING,
    ArgConfig,
    EnumTypeComposer,
    FieldConfig,
    ListOf,
    ObjectTypeComposer,
    TypeComposer,
    TypeKind,
    is_prebuilt_field,
)
from modulith.features.graphql.namespace import SchemaNamespace

logger = logging.getLogger(__name__)

BUILTIN_SCALARS: dict[str, Any] = {
    "String": str,
    "Int": int,
    "Float": float,
    "Boolean": bool,
    "ID": strawberry.ID,
    "DateTime": datetime,
}

_RESERVED_ARGS = frozenset({"root", "info", "self"})


@dataclass
class BuiltTypes:
    """Result of a build."""

    query: type
    mutation: type | None = None
    types: list[Any] = field(default_factory=list)
    by_name: dict[str, Any] = field(default_factory=dict)


class TypeBuilder:
    """Builds strawberry types for one namespace.

    Example:
        built = TypeBuilder(namespace).build()
        schema = strawberry.Schema(query=built.query, mutation=built.mutation, types=built.types)
    """

    def __init__(self, namespace: SchemaNamespace) -> None:
        self.namespace = namespace
        self._built: dict[int, Any] = {}
        self._discovered: list[TypeComposer] = []
        self._pending: list[TypeComposer] = []

    def build(self) -> BuiltTypes:
        self._built = {}
        self._discovered = []
        self._pending = []
        roots: list[ObjectTypeComposer] = [self.namespace.query]
        if self.namespace.mutation is not None:
            roots.append(self.namespace.mutation)
        composers: list[TypeComposer] = [*roots, *self.namespace.composers()]

        for composer in composers:
            self._declare(composer)
        for composer in composers:
            if composer.kind in (TypeKind.OBJECT, TypeKind.INPUT):
                self._define(composer)  # type: ignore[arg-type]
        while self._pending:
            self._define(self._pending.pop(0))  # type: ignore[arg-type]
        composers.extend(self._discovered)

        mutation = self.namespace.mutation
        return BuiltTypes(
            query=self._built[id(self.namespace.query)],
            mutation=self._built[id(mutation)] if mutation is not None else None,
            types=[self._built[id(c)] for c in self.namespace.object_types()],
            by_name={c.name: self._built[id(c)] for c in composers},
        )

    # ------------------------------------------------------------------
    # Pass 1
    # ------------------------------------------------------------------

    def _declare(self, composer: TypeComposer) -> None:
        if composer.kind in (TypeKind.OBJECT, TypeKind.INPUT):
            built: Any = type(composer.name, (), {"__module__": __name__, "__qualname__": composer.name})
        elif composer.kind is TypeKind.ENUM:
            built = self._build_enum(composer)  # type: ignore[arg-type]
        else:
            built = composer.scalar  # type: ignore[attr-defined]
        self._built[id(composer)] = built

    def _build_enum(self, composer: EnumTypeComposer) -> Any:
        enum_cls = composer.enum_cls
        if enum_cls is None:
            enum_cls = enum.Enum(composer.name, composer.values, module=__name__)  # type: ignore[misc]
        return strawberry.enum(enum_cls, name=composer.name, description=composer.description)

    # ------------------------------------------------------------------
    # Pass 2
    # ------------------------------------------------------------------

    def _define(self, composer: ObjectTypeComposer) -> None:
        cls = self._built[id(composer)]
        is_input = composer.kind is TypeKind.INPUT
        annotations: dict[str, Any] = {}

        for name, descriptor in composer.fields.items():
            if is_prebuilt_field(descriptor):
                setattr(cls, name, copy.copy(descriptor))
            else:
                annotation = self._field_annotation(descriptor, composer, name)
                if descriptor.resolve is None:
                    default = descriptor.default
                    if default is MISSING and is_input and descriptor.nullable:
                        default = None
                    annotations[name] = annotation
                    setattr(
                        cls,
                        name,
                        strawberry.field(
                            description=descriptor.description,
                            default=dataclasses.MISSING if default is MISSING else default,
                            deprecation_reason=descriptor.deprecation_reason,
                        ),
                    )
                else:
                    setattr(cls, name, self._resolver_field(name, descriptor, annotation, composer))

        cls.__annotations__ = annotations
        decorate = strawberry.input if is_input else strawberry.type
        decorate(cls, name=composer.name, description=composer.description)

    def _field_annotation(self, config: FieldConfig, owner: TypeComposer, name: str) -> Any:
        annotation = self.resolve_reference(config.type, owner=owner, field_name=name)
        return Optional[annotation] if config.nullable else annotation  # noqa: UP045

    def resolve_reference(self, ref: Any, *, owner: TypeComposer, field_name: str) -> Any:
        """Resolve a type reference to something strawberry understands.

        Raises:
            UnresolvedTypeError: If a type name matches no composer or builtin scalar.
        """
        if isinstance(ref, ListOf):
            inner = self.resolve_reference(ref.inner, owner=owner, field_name=field_name)
            if ref.nullable_items:
                inner = Optional[inner]  # noqa: UP045
            return list[inner]  # type: ignore[valid-type]

        if isinstance(ref, TypeComposer):
            built = self._built.get(id(ref))
            if built is None:
                installed = self.namespace.find(ref.name)
                if installed is not None:
                    built = self._built.get(id(installed))
            if built is None:
                built = self._declare_referenced(ref)
            return built

        if isinstance(ref, str):
            composer = self.namespace.get(ref) or self.namespace.find(ref)
            if composer is not None:
                return self.resolve_reference(composer, owner=owner, field_name=field_name)
            if ref in BUILTIN_SCALARS:
                return BUILTIN_SCALARS[ref]
            raise self._unresolved(ref, owner, field_name)

        return ref

    def _declare_referenced(self, composer: TypeComposer) -> Any:
        """Declare a composer reached only through a field reference.

        Object and input composers are queued and defined after the listed ones,
        so their own references are followed transitively.
        """
        self._declare(composer)
        self._discovered.append(composer)
        if composer.kind in (TypeKind.OBJECT, TypeKind.INPUT):
            self._pending.append(composer)
        logger.debug("Building unregistered type %s reached from a field reference", composer.name)
        return self._built[id(composer)]

    @staticmethod
    def _unresolved(reference: str, owner: TypeComposer, field_name: str) -> UnresolvedTypeError:
        return UnresolvedTypeError(
            detail=f"Field '{owner.name}.{field_name}' references unknown type '{reference}'",
            extra={"type_name": owner.name, "field": field_name, "reference": reference},
        )

    def _resolver_field(
        self,
        name: str,
        config: FieldConfig,
        annotation: Any,
        owner: TypeComposer,
    ) -> Any:
        """Wrap a ``(root, info, **args)`` resolver into a strawberry field."""
        resolve = config.resolve

        async def _resolver(**kwargs: Any) -> Any:
            root = kwargs.pop("root", None)
            info = kwargs.pop("info")
            result = resolve(root, info, **kwargs)  # type: ignore[misc]
            if inspect.isawaitable(result):
                result = await result
            return result

        parameters = [
            inspect.Parameter("root", inspect.Parameter.POSITIONAL_OR_KEYWORD),
            inspect.Parameter(
                "info", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=strawberry.Info
            ),
        ]
        hints: dict[str, Any] = {"info": strawberry.Info}

        for arg_name, spec in (config.args or {}).items():
            if not isinstance(arg_name, str) or not arg_name.isidentifier() or arg_name in _RESERVED_ARGS:
                raise InvalidFieldError(
                    detail=f"Invalid argument name {arg_name!r} on '{owner.name}.{name}'",
                    extra={"type_name": owner.name, "field": name},
                )
            arg = spec if isinstance(spec, ArgConfig) else ArgConfig(type=spec)
            arg_annotation = self.resolve_reference(arg.type, owner=owner, field_name=f"{name}({arg_name})")
            default = arg.default
            if arg.nullable:
                arg_annotation = Optional[arg_annotation]  # noqa: UP045
                if default is MISSING:
                    default = None
            if arg.description:
                arg_annotation = Annotated[arg_annotation, strawberry.argument(description=arg.description)]
            parameters.append(
                inspect.Parameter(
                    arg_name,
                    inspect.Parameter.KEYWORD_ONLY,
                    default=inspect.Parameter.empty if default is MISSING else default,
                    annotation=arg_annotation,
                )
            )
            hints[arg_name] = arg_annotation

        _resolver.__signature__ = inspect.Signature(parameters, return_annotation=annotation)  # type: ignore[attr-defined]
        _resolver.__annotations__ = {**hints, "return": annotation}
        _resolver.__name__ = name
        _resolver.__qualname__ = f"{owner.name}.{name}"

        return strawberry.field(
            resolver=_resolver,
            graphql_type=annotation,
            description=config.description,
            deprecation_reason=config.deprecation_reason,
        )


def build_types(namespace: SchemaNamespace) -> BuiltTypes:
    """Build strawberry types for ``namespace``."""
    return TypeBuilder(namespace).build()


__all__ = ["BUILTIN_SCALARS", "BuiltTypes", "TypeBuilder", "build_types"]
