"""Custom exception classes for module loading and schema composition."""

from __future__ import annotations

from typing import Any


class ModulithError(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class. The fields mirror
    RFC 7807 problem details so errors can be surfaced by a transport layer
    without re-shaping.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        title: Short, human-readable summary of the problem type.
        extra: Additional context-specific information about the error.

    Example:
        raise ModulithError(
            detail="Module 'billing' failed to register",
            type="module-error",
            extra={"module_id": "billing"},
        )
    """

    default_title = "Composition Error"

    def __init__(
        self,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            detail: Human-readable error message.
            type: Error type identifier.
            title: Short summary of the problem type.
            extra: Additional context about the error.
        """
        self.detail = detail
        self.type = type
        self.title = title or self.default_title
        self.extra = extra or {}
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        """Return a problem-details style dictionary."""
        return {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            **self.extra,
        }


class InvalidModuleError(ModulithError):
    """Raised when a module export does not produce a valid descriptor.

    Example:
        raise InvalidModuleError(
            detail="Module must return an object with a valid string 'id'",
            extra={"export": "billing_module"},
        )
    """

    default_title = "Invalid Module"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="invalid-module", extra=extra)


class ModuleLoadError(ModulithError):
    """Raised when a batch load is aborted because one module failed."""

    default_title = "Module Load Failed"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="module-load-failed", extra=extra)


class RegistrationError(ModulithError):
    """Raised when assets are registered without a valid module id."""

    default_title = "Registration Error"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="registration-error", extra=extra)


class MissingApplicationError(ModulithError):
    """Raised when an operation needs ``ctx.app`` and the context has none."""

    default_title = "Application Missing"

    def __init__(
        self,
        detail: str = "Application instance not found in context",
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(detail=detail, type="missing-application", extra=extra)


class UnresolvedTypeError(ModulithError):
    """Raised while building the schema when a field references an unknown type.

    Example:
        raise UnresolvedTypeError(
            detail="Field 'User.plan' references unknown type 'PlanTC'",
            extra={"type_name": "User", "field": "plan", "reference": "PlanTC"},
        )
    """

    default_title = "Unresolved Type Reference"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="unresolved-type", extra=extra)


class ResolverConflictError(ModulithError):
    """Raised when two modules define the same root field under the ``error`` policy."""

    default_title = "Resolver Conflict"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="resolver-conflict", extra=extra)


class InvalidFieldError(ModulithError):
    """Raised when a field descriptor cannot be interpreted."""

    default_title = "Invalid Field"

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail=detail, type="invalid-field", extra=extra)


__all__ = [
    "InvalidFieldError",
    "InvalidModuleError",
    "MissingApplicationError",
    "ModuleLoadError",
    "ModulithError",
    "RegistrationError",
    "ResolverConflictError",
    "UnresolvedTypeError",
]
