"""Module descriptors.

A module factory returns a ``ModuleDescriptor`` (or a mapping with the same
keys) describing what the module contributes: persistence model handles,
GraphQL type composers, root resolvers, extra named buckets and the lifecycle
callbacks the application host invokes.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modulith.core.exceptions import InvalidModuleError

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

# (ctx, modules) -> None | Awaitable[None]
PostLoadCallback = Callable[["ModuleContext", list["ModuleDescriptor"]], Awaitable[None] | None]
# (ctx) -> None | Awaitable[None]
LifecycleCallback = Callable[["ModuleContext"], Awaitable[None] | None]


class ModuleMeta(BaseModel):
    """Advisory module metadata.

    Never enforced by the composer; ``depends_on`` documents ordering
    expectations for relation authors and shows up in devtools output.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    version: str = Field(default="0.1.0", description="Module version")
    scope: str = Field(default="app", description="Deployment scope of the module")
    description: str = Field(default="", description="Human readable summary")
    enabled: bool = Field(default=True, description="Whether the module is meant to be loaded")
    depends_on: list[str] = Field(default_factory=list, description="Ids of modules this one expects")

    @field_validator("description", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v


@dataclass
class ModuleDescriptor:
    """Everything a single module contributes to the application.

    Attributes:
        id: Unique, non-empty module id (registry key).
        meta: Advisory metadata.
        models: Model name -> model handle (repository, ORM class, ...).
        type_composers: Composer key (``<Name>TC``) -> type composer.
        resolvers: ``{"Query": {...}, "Mutation": {...}}`` root field maps.
        actions: Named action callables.
        services: Named service objects.
        validators: Named validator callables.
        relations: Post-load callback that attaches cross-module fields.
        hooks: Post-load callback for generic hooks.
        init: Post-load callback for one-time initialisation.
        on_load: Called once, synchronously, right after the module is loaded.
        on_ready: Called by ``Application.ready()``.
        on_destroy: Called by ``Application.shutdown()``.
        extras: Any other keys supplied through ``from_mapping``.
    """

    id: str
    meta: ModuleMeta = field(default_factory=ModuleMeta)
    models: dict[str, Any] = field(default_factory=dict)
    type_composers: dict[str, Any] = field(default_factory=dict)
    resolvers: dict[str, dict[str, Any]] = field(default_factory=dict)
    actions: dict[str, Any] = field(default_factory=dict)
    services: dict[str, Any] = field(default_factory=dict)
    validators: dict[str, Any] = field(default_factory=dict)
    relations: PostLoadCallback | None = None
    hooks: PostLoadCallback | None = None
    init: PostLoadCallback | None = None
    on_load: Callable[[], Any] | None = None
    on_ready: LifecycleCallback | None = None
    on_destroy: LifecycleCallback | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.meta, Mapping):
            self.meta = ModuleMeta.model_validate(dict(self.meta))
        elif self.meta is None:
            self.meta = ModuleMeta()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ModuleDescriptor:
        """Build a descriptor from a plain mapping.

        Known keys map onto attributes; everything else lands in ``extras``.

        Raises:
            InvalidModuleError: If ``data`` is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise InvalidModuleError(
                detail=f"Module descriptor must be a mapping, got {type(data).__name__}",
            )
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        extras = dict(kwargs.pop("extras", None) or {})
        extras.update({k: v for k, v in data.items() if k not in known})
        # Validated by the loader, which reports the offending export
        kwargs.setdefault("id", None)
        return cls(**kwargs, extras=extras)

    @property
    def asset_buckets(self) -> dict[str, dict[str, Any]]:
        """Non-empty asset buckets, keyed by bucket name."""
        buckets = {
            "models": self.models,
            "type_composers": self.type_composers,
            "resolvers": self.resolvers,
            "actions": self.actions,
            "services": self.services,
            "validators": self.validators,
        }
        return {name: bucket for name, bucket in buckets.items() if bucket}


def has_valid_id(descriptor: Any) -> bool:
    """Return True when ``descriptor`` carries a non-empty string id."""
    module_id = getattr(descriptor, "id", None)
    return isinstance(module_id, str) and bool(module_id.strip())


__all__ = [
    "LifecycleCallback",
    "ModuleDescriptor",
    "ModuleMeta",
    "PostLoadCallback",
    "has_valid_id",
]
