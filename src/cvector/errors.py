"""
Structured error types for correlation vector handling.

Every failure the library can report is a ``CorrelationVectorError``. The
hierarchy is small on purpose: a vector is either built from an unsupported
version, from a malformed string, from a string whose trailing extension
cannot be read as a counter, or with spin settings outside the supported
values.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode of the codec
    - **Errors as values:** Constructors return them inside ``Err`` / ``Ok.warning``
    - **Rich Context:** Errors carry the offending value for logging
    - **Error Chaining:** Preserve underlying exceptions as ``cause``

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                  CorrelationVectorError                   │
        │           (category, context, cause, to_dict)             │
        ├───────────────────────────────────────────────────────────┤
        │  InvalidVersionError   InvalidFormatError                 │
        │  (CONFIG)              (VALIDATION)                       │
        │                                                           │
        │  InvalidSpinParameters InvalidExtensionError              │
        │  Error (CONFIG)        (PARSE)                            │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidFormatError("bad base", value="abc.1")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.to_dict()["value"]
    "'abc.1'"

Tags:
    error-handling, exception-hierarchy, correlation-vector, observability

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories for classification and routing.

    Attributes:
        VALIDATION: Malformed correlation vector strings
        PARSE: Extension segments that cannot be read as a counter
        CONFIG: Unsupported versions or settings
        INTERNAL: Bugs, unexpected state
    """

    VALIDATION = "VALIDATION"     # Grammar, length, version inference
    PARSE = "PARSE"               # Numeric extension parsing
    CONFIG = "CONFIG"             # Unsupported version, bad settings
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        vector: The correlation vector string being processed
        version: Version tag in effect when the error was raised
        operation: Entry point that raised (``extend``, ``parse``, ``spin`` ...)
        metadata: Additional key-value pairs
    """

    vector: str | None = None
    version: int | None = None
    operation: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["vector", "version", "operation"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CorrelationVectorError(Exception):
    """
    Base exception for all correlation vector errors.

    Subclasses set ``default_category``. Instances carry a message, a
    category, an ``ErrorContext`` and an optional chained ``cause``.

    Examples:
        >>> error = CorrelationVectorError("unexpected state")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(operation="increment").context.operation
        'increment'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CorrelationVectorError:
        """
        Add context to this error (fluent API).

        Usage:
            return Err(InvalidFormatError("bad").with_context(operation="extend"))
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class InvalidVersionError(CorrelationVectorError):
    """An unsupported version was requested."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, version: Any, message: str | None = None, **kwargs: Any):
        self.version = version
        super().__init__(message or f"correlationvector: invalid version {version!r}", **kwargs)


class _ValueError(CorrelationVectorError):
    """Shared base for errors raised about a specific input string."""

    def __init__(self, message: str, *, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidFormatError(_ValueError):
    """
    A correlation vector string is malformed.

    Raised for a first separator at an unexpected offset (recoverable, reported
    as a warning) and for strict grammar failures (fatal).
    """

    default_category = ErrorCategory.VALIDATION


class InvalidExtensionError(_ValueError):
    """The trailing extension is missing, non-numeric, negative or out of range."""

    default_category = ErrorCategory.PARSE


class InvalidSpinParametersError(CorrelationVectorError):
    """A spin interval, periodicity or entropy is not one of the supported values."""

    default_category = ErrorCategory.CONFIG

    def __init__(self, parameter: str, value: Any, message: str | None = None, **kwargs: Any):
        self.parameter = parameter
        self.value = value
        super().__init__(message or f"correlationvector: invalid spin {parameter} {value!r}", **kwargs)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CorrelationVectorError",
    "InvalidVersionError",
    "InvalidFormatError",
    "InvalidExtensionError",
    "InvalidSpinParametersError",
]
