"""
The CorrelationVector entity and its constructors.

A vector is created once per hop through one of four entry points and then
mutated in place by :meth:`CorrelationVector.increment`:

- :meth:`CorrelationVector.create`: no incoming vector, generate a new base.
- :meth:`CorrelationVector.extend`: incoming vector at the entry point of an
  operation; it becomes the base of a new extension level starting at 0.
- :meth:`CorrelationVector.parse`: rebuild an entity from its own rendered
  value (the last extension is the counter).
- :meth:`CorrelationVector.spin`: like extend, but inserts a time-ordered
  spin value before the new level.

Manifesto:
    - **Never abort the caller:** Constructors return ``Result``; malformed
      input degrades to a usable V1 vector with a warning
    - **Bounded growth:** A vector freezes (``!``) instead of exceeding
      63 / 127 characters
    - **Lock-free increments:** snapshot → check → compare-and-swap, retry on
      contention

Architecture:
    ::

        incoming header ──► extend/parse/spin ──► Result[CorrelationVector]
                                                        │
        outbound call   ◄── increment() ◄───────────────┘
                              │
                              ├─ immutable?         → value (unchanged)
                              ├─ at MAX_EXTENSION?  → value (unchanged)
                              ├─ oversized?         → freeze, value + "!"
                              └─ CAS(snapshot, +1)  → base.candidate

Examples:
    >>> vector = CorrelationVector.extend("tul4NUsfs9Cl7mOf.1").unwrap()
    >>> vector.value
    'tul4NUsfs9Cl7mOf.1.0'
    >>> vector.increment()
    'tul4NUsfs9Cl7mOf.1.1'

Tags:
    correlation-vector, causality, tracing, concurrency, lock-free

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from cvector.atomic import AtomicInt32
from cvector.errors import CorrelationVectorError, InvalidExtensionError, InvalidFormatError
from cvector.format import (
    MAX_EXTENSION,
    MAX_EXTENSION_DIGITS,
    SEPARATOR,
    TERMINATOR,
    Version,
    coerce_version,
    generate_base,
    infer_version,
    is_extension_literal,
    is_immutable,
    is_oversized,
    significant_digits,
)
from cvector.logging import get_logger
from cvector.result import Err, Ok, Result
from cvector.spin import SpinParameters, generate_spin_value
from cvector.validation import validate as validate_format


logger = get_logger(__name__)


class CorrelationVector:
    """A lightweight vector for identifying and measuring causality."""

    __slots__ = ("_base_vector", "_extension", "_version", "_immutable")

    def __init__(
        self,
        base_vector: str,
        extension: int = 0,
        version: Version = Version.V1,
        immutable: bool = False,
    ):
        # A frozen vector never increments, so only a live counter is range bound.
        if extension < 0 or (extension > MAX_EXTENSION and not immutable):
            raise InvalidExtensionError(
                f"correlationvector: extension {extension} out of range", value=extension
            )
        version = coerce_version(version)
        self._base_vector = base_vector
        self._extension = AtomicInt32(extension)
        self._version = version
        self._immutable = immutable or is_oversized(base_vector, extension, version)

    # ── Constructors ─────────────────────────────────────────────

    @classmethod
    def new(cls) -> CorrelationVector:
        """Create a V1 vector. Use when no vector was found in the incoming message."""
        return cls(generate_base(Version.V1), 0, Version.V1)

    @classmethod
    def create(cls, version: Version = Version.V1) -> Result[CorrelationVector]:
        """Create a vector of the given version with a fresh random base."""
        try:
            version = coerce_version(version)
        except CorrelationVectorError as e:
            return Err(e.with_context(operation="create"))
        return Ok(cls(generate_base(version), 0, version))

    @classmethod
    def extend(cls, correlation_vector: str, *, validate: bool = False) -> Result[CorrelationVector]:
        """Create a new vector by extending an existing value.

        Do this at the entry point of an operation. A terminated input is
        returned unchanged, and an input with no room for ``.0`` is frozen.
        """
        if is_immutable(correlation_vector):
            return cls.parse(correlation_vector)

        version, warning = infer_version(correlation_vector)
        if validate:
            rejected = _strict_check(correlation_vector, version, "extend")
            if rejected is not None:
                return rejected

        if is_oversized(correlation_vector, 0, version):
            logger.debug("cv_frozen_on_extend", cv=correlation_vector, version=int(version))
            return cls.parse(correlation_vector + TERMINATOR)

        _log_degraded(warning, "extend", correlation_vector)
        return Ok(cls(correlation_vector, 0, version), warning=warning)

    @classmethod
    def parse(cls, correlation_vector: str) -> Result[CorrelationVector]:
        """Create a vector from its string representation."""
        version, warning = infer_version(correlation_vector)
        terminated = is_immutable(correlation_vector)

        p = correlation_vector.rfind(SEPARATOR)
        if p <= 0:
            return Err(
                InvalidFormatError(
                    "correlationvector: invalid correlation vector string",
                    value=correlation_vector,
                ).with_context(operation="parse")
            )

        end = len(correlation_vector) - 1 if terminated else len(correlation_vector)
        extension_value = correlation_vector[p + 1 : end]
        # A frozen vector may carry a segment wider than a live counter, but
        # never one longer than the vector itself.
        if (
            not is_extension_literal(extension_value)
            or len(extension_value) > version.max_length
            or (not terminated and _exceeds_counter(extension_value))
        ):
            return Err(
                InvalidExtensionError(
                    "correlationvector: invalid extension", value=extension_value
                ).with_context(vector=correlation_vector, operation="parse")
            )

        _log_degraded(warning, "parse", correlation_vector)
        return Ok(
            cls(correlation_vector[:p], int(extension_value), version, terminated),
            warning=warning,
        )

    @classmethod
    def spin(
        cls,
        correlation_vector: str,
        parameters: SpinParameters | None = None,
        *,
        validate: bool = False,
    ) -> Result[CorrelationVector]:
        """Create a new vector by appending a spin value to an existing one.

        The result renders as ``<correlation_vector>.<spin value>.0``.
        """
        if is_immutable(correlation_vector):
            return cls.parse(correlation_vector)

        version, warning = infer_version(correlation_vector)
        if validate:
            rejected = _strict_check(correlation_vector, version, "spin")
            if rejected is not None:
                return rejected

        base_vector = f"{correlation_vector}{SEPARATOR}{generate_spin_value(parameters)}"
        if is_oversized(base_vector, 0, version):
            logger.debug("cv_frozen_on_spin", cv=correlation_vector, version=int(version))
            return cls.parse(correlation_vector + TERMINATOR)

        _log_degraded(warning, "spin", correlation_vector)
        return Ok(cls(base_vector, 0, version), warning=warning)

    # ── Accessors ────────────────────────────────────────────────

    @property
    def base_vector(self) -> str:
        return self._base_vector

    @property
    def extension(self) -> int:
        return self._extension.load()

    @property
    def version(self) -> Version:
        return self._version

    @property
    def is_immutable(self) -> bool:
        return self._immutable

    @property
    def value(self) -> str:
        """The vector as a string, terminated with ``!`` once immutable."""
        value = f"{self._base_vector}{SEPARATOR}{self._extension.load()}"
        if self._immutable:
            value += TERMINATOR
        return value

    # ── Mutation ─────────────────────────────────────────────────

    def increment(self) -> str:
        """Increment the current extension and return the new value.

        Do this before passing the value to an outbound message header. Once
        the vector is full, the last value is returned with the terminator.

        The retry loop holds no lock; :class:`AtomicInt32` locks only around
        a single compare-and-store.
        """
        if self._immutable:
            return self.value

        while True:
            snapshot = self._extension.load()
            if snapshot == MAX_EXTENSION:
                logger.debug("cv_extension_overflow", cv=self.value)
                return self.value
            candidate = snapshot + 1

            if is_oversized(self._base_vector, candidate, self._version):
                if not self._immutable:
                    self._immutable = True
                    logger.debug("cv_frozen_on_increment", cv=self._base_vector, version=int(self._version))
                return self.value

            if self._extension.compare_and_swap(snapshot, candidate):
                return f"{self._base_vector}{SEPARATOR}{candidate}"

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"CorrelationVector({self.value!r}, version={self._version.name})"


def _strict_check(correlation_vector: str, version: Version, operation: str) -> Err | None:
    try:
        validate_format(correlation_vector, version)
    except InvalidFormatError as e:
        logger.debug("cv_rejected", cv=correlation_vector, operation=operation, reason=e.message)
        return Err(e.with_context(version=int(version), operation=operation))
    return None


def _exceeds_counter(extension_value: str) -> bool:
    return (
        significant_digits(extension_value) > MAX_EXTENSION_DIGITS
        or int(extension_value) > MAX_EXTENSION
    )


def _log_degraded(warning: Exception | None, operation: str, correlation_vector: str) -> None:
    if warning is not None:
        logger.debug("cv_version_defaulted", cv=correlation_vector, operation=operation, version=1)


def create(version: Version = Version.V1) -> Result[CorrelationVector]:
    """Module-level alias of :meth:`CorrelationVector.create`."""
    return CorrelationVector.create(version)


def extend(correlation_vector: str, *, validate: bool = False) -> Result[CorrelationVector]:
    """Module-level alias of :meth:`CorrelationVector.extend`."""
    return CorrelationVector.extend(correlation_vector, validate=validate)


def parse(correlation_vector: str) -> Result[CorrelationVector]:
    """Module-level alias of :meth:`CorrelationVector.parse`."""
    return CorrelationVector.parse(correlation_vector)


def spin(
    correlation_vector: str,
    parameters: SpinParameters | None = None,
    *,
    validate: bool = False,
) -> Result[CorrelationVector]:
    """Module-level alias of :meth:`CorrelationVector.spin`."""
    return CorrelationVector.spin(correlation_vector, parameters, validate=validate)


__all__ = ["CorrelationVector", "create", "extend", "parse", "spin"]
