"""Module loader: normalise, validate and batch-load module exports.

A module export is either a factory ``(ctx) -> descriptor``, a
``ModuleDescriptor`` or a mapping with descriptor keys. Exports can also be
referenced by import path (``"package.module:attr"``), which is how the
bootstrap resolves ``ModuleSettings.enabled``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import importlib
import logging
from typing import TYPE_CHECKING, Any

from modulith.core.exceptions import (
    InvalidModuleError,
    MissingApplicationError,
    ModuleLoadError,
)
from modulith.core.modules.descriptor import ModuleDescriptor, has_valid_id

if TYPE_CHECKING:
    from modulith.core.modules.context import ModuleContext

logger = logging.getLogger(__name__)

DEFAULT_FACTORY_ATTR = "module"


def normalize_module(export: Any, ctx: ModuleContext) -> Any:
    """Turn a module export into a descriptor candidate.

    Factories are called with ``ctx``; mappings (returned or exported) are
    converted with ``ModuleDescriptor.from_mapping``. Anything else is
    returned unchanged for validation to reject.
    """
    produced = export
    if callable(export) and not isinstance(export, ModuleDescriptor):
        produced = export(ctx)
    if isinstance(produced, Mapping):
        produced = ModuleDescriptor.from_mapping(produced)
    return produced


def is_valid_module(module: Any) -> bool:
    return isinstance(module, ModuleDescriptor) and has_valid_id(module)


def _export_name(export: Any) -> str:
    if callable(export):
        return getattr(export, "__qualname__", None) or "(anonymous factory)"
    return "(object export)"


def load_module(ctx: ModuleContext, export: Any) -> ModuleDescriptor:
    """Normalise, validate and load a single module export.

    Args:
        ctx: Application context; must carry an ``Application`` as ``ctx.app``.
        export: Factory, descriptor or mapping.

    Returns:
        The loaded descriptor.

    Raises:
        MissingApplicationError: If ``ctx.app`` is not set.
        InvalidModuleError: If the export is empty, fails to normalise or
            yields no valid id.
    """
    if ctx.app is None:
        raise MissingApplicationError(
            detail="Context must contain an initialized Application (ctx.app)",
        )
    if export is None:
        raise InvalidModuleError(detail="Invalid module export provided (None)")

    try:
        module = normalize_module(export, ctx)
    except Exception as exc:
        logger.exception("Error normalizing module export %s", _export_name(export))
        raise InvalidModuleError(
            detail=f"Failed to normalize module export: {exc}",
            extra={"export": _export_name(export)},
        ) from exc

    if not is_valid_module(module):
        logger.error(
            "Invalid module structure for export %s",
            _export_name(export),
            extra={"received": repr(module)},
        )
        raise InvalidModuleError(
            detail="Invalid module structure: module must provide a valid string 'id'",
            extra={"export": _export_name(export), "received": repr(module)},
        )

    def loaded(_ctx: ModuleContext) -> ModuleDescriptor:
        return module

    loaded.__qualname__ = loaded.__name__ = _export_name(export)
    ctx.app.load(loaded)
    logger.debug("Module passed to application: %s", module.id)
    return module


def compose_modules(ctx: ModuleContext, exports: Iterable[Any] = ()) -> list[ModuleDescriptor]:
    """Load module exports in order, aborting on the first failure.

    Raises:
        ModuleLoadError: Naming the index of the export that failed; the
            original exception is chained.
    """
    exports = list(exports)
    logger.info("Starting batch load for %d modules", len(exports))

    loaded: list[ModuleDescriptor] = []
    for index, export in enumerate(exports):
        try:
            loaded.append(load_module(ctx, export))
        except Exception as exc:
            logger.exception("Failed to load module at index %d", index)
            raise ModuleLoadError(
                detail=f"Failed to load module at index {index}; aborting batch load: {exc}",
                extra={"index": index, "export": _export_name(export)},
            ) from exc

    logger.info("Loaded %d modules", len(loaded))
    return loaded


def import_module_factory(path: str) -> Any:
    """Resolve ``"package.module:attr"`` to a module export.

    ``attr`` defaults to ``module`` when omitted.

    Raises:
        InvalidModuleError: If the path is malformed.
        ModuleLoadError: If the module cannot be imported or lacks the attribute.
    """
    if not isinstance(path, str) or not path.strip():
        raise InvalidModuleError(detail="Module path must be a non-empty string", extra={"path": repr(path)})

    module_path, _, attr = path.strip().partition(":")
    attr = attr or DEFAULT_FACTORY_ATTR
    if not module_path:
        raise InvalidModuleError(detail=f"Malformed module path '{path}'", extra={"path": path})

    try:
        imported = importlib.import_module(module_path)
    except ImportError as exc:
        raise ModuleLoadError(
            detail=f"Cannot import module '{module_path}': {exc}",
            extra={"path": path},
        ) from exc

    try:
        return getattr(imported, attr)
    except AttributeError as exc:
        raise ModuleLoadError(
            detail=f"Module '{module_path}' has no attribute '{attr}'",
            extra={"path": path},
        ) from exc


def load_from_paths(ctx: ModuleContext, paths: Iterable[str]) -> list[ModuleDescriptor]:
    """Import each path and batch-load the resulting exports."""
    return compose_modules(ctx, [import_module_factory(path) for path in paths])


__all__ = [
    "compose_modules",
    "import_module_factory",
    "is_valid_module",
    "load_from_paths",
    "load_module",
    "normalize_module",
]
