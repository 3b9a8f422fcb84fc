"""
Wire format of a correlation vector.

A correlation vector travels as plain text::

    <base>(.<extension>)+[!]

``<base>`` is a fixed-length random identifier (16 characters for V1, 22 for
V2), each ``<extension>`` is a non-negative decimal counter, and the trailing
``!`` marks a vector that has become immutable. The helpers in this module are
pure functions over that grammar; they hold no state.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │  tul4NUsfs9Cl7mOf . 1 . 0 !                               │
        │  └──── base ────┘   │   │ └─ terminator (immutable)       │
        │   index 16 ⇒ V1     │   └─ current extension              │
        │   index 22 ⇒ V2     └─ prior hop                          │
        └───────────────────────────────────────────────────────────┘

        Length ceiling: 63 (V1) / 127 (V2), enforced by freezing the
        vector, never by truncating it.

Tags:
    correlation-vector, wire-format, codec, versioning

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import base64
import secrets
from enum import IntEnum

from cvector.errors import InvalidFormatError, InvalidVersionError


MAX_VECTOR_LENGTH = 63
MAX_VECTOR_LENGTH_V2 = 127
BASE_LENGTH = 16
BASE_LENGTH_V2 = 22

SEPARATOR = "."
TERMINATOR = "!"

# Extensions are 32-bit signed counters on the wire.
MAX_EXTENSION = 2**31 - 1
MAX_EXTENSION_DIGITS = len(str(MAX_EXTENSION))


class Version(IntEnum):
    """Correlation vector protocol version."""

    V1 = 1
    V2 = 2

    @property
    def base_length(self) -> int:
        return BASE_LENGTH if self is Version.V1 else BASE_LENGTH_V2

    @property
    def max_length(self) -> int:
        return MAX_VECTOR_LENGTH if self is Version.V1 else MAX_VECTOR_LENGTH_V2


def coerce_version(version: object) -> Version:
    """Return ``version`` as a :class:`Version` or raise InvalidVersionError."""
    if isinstance(version, Version):
        return version
    if isinstance(version, int) and not isinstance(version, bool):
        try:
            return Version(version)
        except ValueError:
            pass
    raise InvalidVersionError(version)


def infer_version(correlation_vector: str) -> tuple[Version, InvalidFormatError | None]:
    """Infer the version from the offset of the first separator.

    Any offset other than 16 or 22 yields V1 together with an
    :class:`InvalidFormatError`; callers proceed with the V1 defaults.
    """
    index = correlation_vector.find(SEPARATOR)

    if index == BASE_LENGTH:
        return Version.V1, None
    if index == BASE_LENGTH_V2:
        return Version.V2, None

    return Version.V1, InvalidFormatError(
        "correlationvector: invalid correlation vector string",
        value=correlation_vector,
    )


def int_length(num: int) -> int:
    """Number of decimal digits of a non-negative integer."""
    if num == 0:
        return 1
    return len(str(num))


def is_immutable(correlation_vector: str) -> bool:
    """True iff the string carries the immutability terminator."""
    return correlation_vector != "" and correlation_vector.endswith(TERMINATOR)


def is_oversized(base_vector: str, extension: int, version: Version) -> bool:
    """Whether ``base_vector + "." + extension`` exceeds the version's ceiling.

    An empty base is never oversized.
    """
    if base_vector == "":
        return False

    cv_len = len(base_vector) + 1 + int_length(extension)
    return cv_len > version.max_length


def is_extension_literal(segment: str) -> bool:
    """True iff ``segment`` is a non-empty run of ASCII decimal digits."""
    return segment != "" and segment.isascii() and segment.isdigit()


def significant_digits(segment: str) -> int:
    """Number of digits in an extension literal, ignoring leading zeros.

    Lets callers bound a segment's magnitude before handing it to ``int()``,
    which refuses very long digit strings.
    """
    return len(segment.lstrip("0"))


def generate_base(version: Version) -> str:
    """Generate a random base identifier for ``version``.

    V1 encodes 12 random bytes (exactly 16 base64 characters); V2 encodes 16
    random bytes and keeps the first 22 characters, dropping the padding.
    """
    version = coerce_version(version)
    if version is Version.V1:
        return base64.b64encode(secrets.token_bytes(12)).decode("ascii")
    return base64.b64encode(secrets.token_bytes(16)).decode("ascii")[:BASE_LENGTH_V2]


__all__ = [
    "MAX_VECTOR_LENGTH",
    "MAX_VECTOR_LENGTH_V2",
    "BASE_LENGTH",
    "BASE_LENGTH_V2",
    "SEPARATOR",
    "TERMINATOR",
    "MAX_EXTENSION",
    "MAX_EXTENSION_DIGITS",
    "Version",
    "coerce_version",
    "infer_version",
    "int_length",
    "is_immutable",
    "is_oversized",
    "is_extension_literal",
    "significant_digits",
    "generate_base",
]
