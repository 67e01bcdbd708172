"""
Custom exception hierarchy for depbump.

This module defines structured exception types used across depbump.
All exceptions inherit from :class:`DepBumpError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, MutableMapping, Optional, Sequence

if TYPE_CHECKING:
    from depbump.models.error import ErrorKind


class DepBumpError(Exception):
    """Base exception for all depbump errors.

    All depbump-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class NoChangesError(DepBumpError):
    """Raised when an update attempt produced no changed files.

    An updater that returns nothing but unchanged files has silently done
    nothing; this is always fatal to the current attempt.

    Args:
        message: Error description.
        package_manager: Package manager of the job.
        dependency_names: Names of the dependencies that were requested.
    """

    __slots__ = ("package_manager", "dependency_names")

    def __init__(
        self,
        message: str = "The update produced no file changes",
        *,
        package_manager: Optional[str] = None,
        dependency_names: Optional[Sequence[str]] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "package_manager", package_manager)
        if dependency_names:
            details["dependencies"] = ", ".join(dependency_names)

        super().__init__(message, details)

        self.package_manager = package_manager
        self.dependency_names = list(dependency_names or [])


class UnsupportedPackageManagerError(DepBumpError):
    """Raised when no ecosystem is registered for a package manager.

    Args:
        package_manager: The unknown package manager identifier.
    """

    __slots__ = ("package_manager",)

    def __init__(self, package_manager: str) -> None:
        super().__init__(
            f"Unsupported package manager: {package_manager}",
            {"package_manager": package_manager},
        )
        self.package_manager = package_manager


class UpdaterError(DepBumpError):
    """Raised form of a classified package-manager failure.

    Instances are produced by :meth:`ClassifiedError.to_exception` and by
    :meth:`ErrorClassifier.handle_error`. The ``kind`` attribute is stable
    and suitable for programmatic branching.

    Args:
        message: Rendered, human-readable message.
        kind: Classified error kind.
        fields: Structured fields extracted from the raw output.
        code: Native tool code that matched, if any.
        retryable: Whether the caller may retry the attempt.
    """

    __slots__ = ("kind", "fields", "code", "retryable")

    def __init__(
        self,
        message: str,
        *,
        kind: "ErrorKind",
        fields: Optional[Mapping[str, str]] = None,
        code: Optional[str] = None,
        retryable: bool = False,
    ) -> None:
        details: MutableMapping[str, Any] = {"kind": kind.value}
        _add_if(details, "code", code)
        if fields:
            details.update(fields)

        super().__init__(message, details)

        self.kind = kind
        self.fields = dict(fields or {})
        self.code = code
        self.retryable = retryable

    def __str__(self) -> str:
        return self.message


class ConfigError(DepBumpError):
    """Raised when a configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class InputError(DepBumpError):
    """Raised when raw input handed to depbump cannot be used.

    Args:
        message: Error description.
        source: Where the input came from (file path or ``<stdin>``).
        excerpt: Offending input, truncated for safety.
    """

    __slots__ = ("source", "excerpt")

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        excerpt: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "source", source)
        if excerpt is not None:
            details["input"] = _truncate(excerpt)

        super().__init__(message, details)

        self.source = source
        self.excerpt = excerpt
