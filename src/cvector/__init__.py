"""
cvector - Correlation Vector construction, parsing and propagation.

A correlation vector is a compact string token (``<base>.<ext>[.<ext>...][!]``)
carried across service boundaries to correlate the events of one causal chain.

Usage:
    from cvector import CorrelationVector

    vector = CorrelationVector.extend(incoming).unwrap()
    outbound_header = vector.increment()
"""

__version__ = "0.1.0"

from cvector.errors import (
    CorrelationVectorError,
    ErrorCategory,
    ErrorContext,
    InvalidExtensionError,
    InvalidFormatError,
    InvalidSpinParametersError,
    InvalidVersionError,
)
from cvector.factory import CorrelationVectorFactory
from cvector.format import (
    BASE_LENGTH,
    BASE_LENGTH_V2,
    MAX_EXTENSION,
    MAX_EXTENSION_DIGITS,
    MAX_VECTOR_LENGTH,
    MAX_VECTOR_LENGTH_V2,
    TERMINATOR,
    Version,
)
from cvector.result import Err, Ok, Result
from cvector.settings import CorrelationVectorSettings, get_settings
from cvector.spin import (
    SpinCounterInterval,
    SpinCounterPeriodicity,
    SpinEntropy,
    SpinParameters,
    SpinSequence,
)
from cvector.vector import CorrelationVector, create, extend, parse, spin

__all__ = [
    "__version__",
    # Entity
    "CorrelationVector",
    "create",
    "extend",
    "parse",
    "spin",
    "CorrelationVectorFactory",
    # Format
    "Version",
    "BASE_LENGTH",
    "BASE_LENGTH_V2",
    "MAX_VECTOR_LENGTH",
    "MAX_VECTOR_LENGTH_V2",
    "MAX_EXTENSION",
    "MAX_EXTENSION_DIGITS",
    "TERMINATOR",
    # Spin
    "SpinCounterInterval",
    "SpinCounterPeriodicity",
    "SpinEntropy",
    "SpinParameters",
    "SpinSequence",
    # Settings
    "CorrelationVectorSettings",
    "get_settings",
    # Results and errors
    "Ok",
    "Err",
    "Result",
    "CorrelationVectorError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidVersionError",
    "InvalidFormatError",
    "InvalidExtensionError",
    "InvalidSpinParametersError",
]
