"""
Result type for correlation vector construction.

Building a vector from an incoming header must never abort the caller's
request path, so the constructors return a ``Result`` instead of raising:

- ``Ok(vector)``: construction succeeded.
- ``Ok(vector, warning=error)``: construction degraded gracefully (for example
  the version could not be inferred and V1 was assumed). The vector is usable
  and the error is surfaced for logging.
- ``Err(error)``: construction failed and no vector exists.

Manifesto:
    - **Errors as values:** A malformed header is data, not control flow
    - **Best effort visible:** ``Ok.warning`` keeps the degradation observable
    - **Immutability:** Frozen dataclasses, safe to share

Examples:
    >>> from cvector import extend
    >>> result = extend("not-a-vector")
    >>> result.is_ok(), result.warning is not None
    (True, True)
    >>> result.unwrap().value
    'not-a-vector.0'

    Pattern matching:

    >>> match parse("tul4NUsfs9Cl7mOf.x"):
    ...     case Ok(vector):
    ...         use(vector)
    ...     case Err(error):
    ...         log(error)

Tags:
    result-pattern, error-handling, functional-programming, correlation-vector

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from cvector.errors import CorrelationVectorError


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Successful result containing a value and an optional non-fatal warning.

    Examples:
        >>> Ok(42).unwrap()
        42
        >>> Ok(10).map(lambda x: x * 2).unwrap()
        20
        >>> Ok(1, warning=ValueError("degraded")).has_warning()
        True
    """

    value: T
    warning: Exception | None = None

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def has_warning(self) -> bool:
        return self.warning is not None

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get value or default (always returns value for Ok)."""
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value, keeping the warning."""
        return Ok(f(self.value), warning=self.warning)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def inspect_warning(self, f: Callable[[Exception], None]) -> Result[T]:
        """Call f with the warning, if any, for side effects; return self."""
        if self.warning is not None:
            f(self.warning)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {"ok": True, "value": str(self.value)}
        if self.warning is not None:
            result["warning"] = _error_dict(self.warning)
        return result

    def __repr__(self) -> str:
        if self.warning is None:
            return f"Ok({self.value!r})"
        return f"Ok({self.value!r}, warning={self.warning!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Failed result containing an error.

    Examples:
        >>> err = Err(ValueError("something went wrong"))
        >>> err.is_err()
        True
        >>> err.unwrap_or("default")
        'default'
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def has_warning(self) -> bool:
        return False

    @property
    def warning(self) -> None:
        return None

    def unwrap(self) -> T:
        """Raise the error. Use only when you're sure it's Ok."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        """Get default since this is Err."""
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """No-op for Err."""
        return Err(self.error)

    def inspect_warning(self, f: Callable[[Exception], None]) -> Result[T]:
        """No-op for Err."""
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": False, "error": _error_dict(self.error)}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


def _error_dict(error: Exception) -> dict[str, Any]:
    if isinstance(error, CorrelationVectorError):
        return error.to_dict()
    return {
        "error_type": type(error).__name__,
        "message": str(error),
    }


Result = Ok[T] | Err[T]


__all__ = ["Ok", "Err", "Result"]
