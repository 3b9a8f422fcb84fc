"""Strict grammar check for incoming correlation vector strings.

Only runs when strict validation is enabled for a construction. It is
independent of the always-on oversize guard: a string can pass here and still
freeze on its next mutation purely from length growth.
"""

from __future__ import annotations

from cvector.errors import InvalidFormatError
from cvector.format import (
    MAX_EXTENSION,
    MAX_EXTENSION_DIGITS,
    SEPARATOR,
    Version,
    coerce_version,
    is_extension_literal,
    significant_digits,
)


def validate(correlation_vector: str, version: Version) -> None:
    """Raise InvalidFormatError unless ``correlation_vector`` is well formed for ``version``.

    Raises:
        InvalidVersionError: ``version`` is not supported.
        InvalidFormatError: the string is empty, too long, has a base of the
            wrong length, or an extension that is not a 32-bit decimal counter.
    """
    version = coerce_version(version)
    max_length = version.max_length

    if correlation_vector == "" or len(correlation_vector) > max_length:
        raise InvalidFormatError(
            f"correlationvector: the V{int(version)} correlation vector cannot be "
            f"empty or bigger than {max_length} characters",
            value=correlation_vector,
        )

    parts = correlation_vector.split(SEPARATOR)

    if len(parts) < 2 or len(parts[0]) != version.base_length:
        raise InvalidFormatError(
            f"correlationvector: invalid correlation vector {correlation_vector}. "
            f"invalid base value {parts[0]}",
            value=correlation_vector,
        )

    for part in parts[1:]:
        if (
            not is_extension_literal(part)
            or significant_digits(part) > MAX_EXTENSION_DIGITS
            or int(part) > MAX_EXTENSION
        ):
            raise InvalidFormatError(
                f"correlationvector: invalid correlation vector {correlation_vector}. "
                f"invalid extension value {part}",
                value=correlation_vector,
            )


def is_valid(correlation_vector: str, version: Version) -> bool:
    """Boolean form of :func:`validate`."""
    try:
        validate(correlation_vector, version)
    except InvalidFormatError:
        return False
    return True


__all__ = ["validate", "is_valid"]
