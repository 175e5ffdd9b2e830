"""Module system: descriptors, asset registry, application host and loader."""

from __future__ import annotations

from .context import ContextMeta, ModuleContext
from .descriptor import LifecycleCallback, ModuleDescriptor, ModuleMeta, PostLoadCallback
from .host import Application, LifecycleFailure, ModuleState
from .loader import compose_modules, import_module_factory, load_from_paths, load_module
from .registry import AssetRegistry, MergeStrategy

__all__ = [
    "Application",
    "AssetRegistry",
    "ContextMeta",
    "LifecycleCallback",
    "LifecycleFailure",
    "MergeStrategy",
    "ModuleContext",
    "ModuleDescriptor",
    "ModuleMeta",
    "ModuleState",
    "PostLoadCallback",
    "compose_modules",
    "import_module_factory",
    "load_from_paths",
    "load_module",
]
