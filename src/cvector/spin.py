"""
Spin sub-clock: a time-ordered, low-collision extension component.

Spinning a vector inserts one extra extension level holding a value derived
from a high-resolution clock, so events that share one logical hop can be
ordered without contending on the shared extension counter::

    tul4NUsfs9Cl7mOf.0  --spin-->  tul4NUsfs9Cl7mOf.0.<spin value>.0

Manifesto:
    - **Sortable:** Later calls in one process produce larger values, even
      within one tick
    - **Bounded:** The value never exceeds ``total_bits`` bits
    - **Collision resistant:** Random low-order bytes separate processes
      whose clocks agree

Architecture:
    ::

        ticks  = perf_counter_ns() // 100          (100 ns resolution)
        value  = ticks >> interval                  (drop fast-changing bits)
        value  = value << 8 | sequence              (calls so far this tick)
        value  = value << 8 | random byte           (repeat entropy times)
        value &= (1 << total_bits) - 1

        ┌──────────────────────┬──────────┬───────────────────────┐
        │ periodicity tick bits│ sequence │ entropy random bytes  │
        └──────────────────────┴──────────┴───────────────────────┘
         high                                                  low

    Interval controls resolution: FINE keeps ticks of ~6.5 ms, COARSE of
    ~1.7 s. Periodicity controls how long before the tick part wraps: SHORT
    wraps every 2**16 ticks (~7 minutes at FINE). The sequence byte restarts
    at zero on every new tick, so values are ordered across ticks and, for
    up to 256 calls, within one. With periodicity NONE there is no tick part
    to order and the value is pure entropy.

Examples:
    >>> params = SpinParameters(SpinCounterInterval.FINE,
    ...                         SpinCounterPeriodicity.SHORT, SpinEntropy.TWO)
    >>> params.total_bits
    40
    >>> generate_spin_value(params, clock=lambda: 1 << 20, rng=random.Random(0),
    ...                     sequence=SpinSequence()) >> 24
    16

Tags:
    correlation-vector, spin, clock, ordering, entropy

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable

from cvector.errors import InvalidSpinParametersError


# Width of the per-tick call counter between the tick and entropy bits.
SEQUENCE_BITS = 8


class SpinCounterInterval(IntEnum):
    """Number of low-order tick bits dropped (coarser = fewer retained bits)."""

    COARSE = 24
    MEDIUM = 20
    FINE = 16


class SpinCounterPeriodicity(IntEnum):
    """Number of tick bits retained in the spin value."""

    NONE = 0
    SHORT = 16
    MEDIUM = 24
    LONG = 32


class SpinEntropy(IntEnum):
    """Number of random bytes mixed into the spin value."""

    NONE = 0
    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4


@dataclass(frozen=True, slots=True)
class SpinParameters:
    """Resolution, periodicity and entropy of the spin sub-clock."""

    interval: SpinCounterInterval = SpinCounterInterval.FINE
    periodicity: SpinCounterPeriodicity = SpinCounterPeriodicity.SHORT
    entropy: SpinEntropy = SpinEntropy.TWO

    def __post_init__(self) -> None:
        for name, enum_type in (
            ("interval", SpinCounterInterval),
            ("periodicity", SpinCounterPeriodicity),
            ("entropy", SpinEntropy),
        ):
            value = getattr(self, name)
            try:
                object.__setattr__(self, name, enum_type(value))
            except ValueError as e:
                raise InvalidSpinParametersError(name, value, cause=e) from e

    @property
    def ticks_bits_to_drop(self) -> int:
        return int(self.interval)

    @property
    def sequence_bits(self) -> int:
        return SEQUENCE_BITS if self.periodicity else 0

    @property
    def entropy_bits(self) -> int:
        return int(self.entropy) * 8

    @property
    def total_bits(self) -> int:
        return int(self.periodicity) + self.sequence_bits + self.entropy_bits


class SpinSequence:
    """Count of spin values generated so far in the current tick.

    Kept per interval, since each interval has its own notion of a tick.
    The count restarts at zero whenever the tick changes.
    """

    __slots__ = ("_last", "_lock")

    def __init__(self) -> None:
        self._last: dict[int, tuple[int, int]] = {}
        self._lock = threading.Lock()

    def advance(self, interval: int, tick: int) -> int:
        """Record one call at ``tick`` and return its position within the tick."""
        with self._lock:
            last_tick, count = self._last.get(interval, (None, -1))
            count = count + 1 if last_tick == tick else 0
            self._last[interval] = (tick, count)
            return count

    def __repr__(self) -> str:
        return f"SpinSequence({len(self._last)} intervals)"


DEFAULT_SPIN_PARAMETERS = SpinParameters()

_rng = random.SystemRandom()
_sequence = SpinSequence()


def ticks() -> int:
    """Monotonic clock reading in 100 ns units."""
    return time.perf_counter_ns() // 100


def generate_spin_value(
    parameters: SpinParameters | None = None,
    *,
    clock: Callable[[], int] | None = None,
    rng: random.Random | None = None,
    sequence: SpinSequence | None = None,
) -> int:
    """Compute one spin value.

    Args:
        parameters: Spin configuration, defaults to FINE / SHORT / TWO.
        clock: Tick source in 100 ns units; defaults to :func:`ticks`.
        rng: Random source for entropy bytes; defaults to the system RNG.
        sequence: Per-tick call counter; defaults to the process-wide one.
    """
    parameters = parameters or DEFAULT_SPIN_PARAMETERS
    clock = clock or ticks
    rng = rng or _rng
    sequence = sequence or _sequence

    value = clock() >> parameters.ticks_bits_to_drop
    if parameters.sequence_bits:
        count = sequence.advance(parameters.ticks_bits_to_drop, value)
        value = (value << parameters.sequence_bits) | (count & ((1 << parameters.sequence_bits) - 1))
    for _ in range(int(parameters.entropy)):
        value = (value << 8) | rng.getrandbits(8)

    return value & ((1 << parameters.total_bits) - 1)


__all__ = [
    "SEQUENCE_BITS",
    "SpinCounterInterval",
    "SpinCounterPeriodicity",
    "SpinEntropy",
    "SpinParameters",
    "SpinSequence",
    "DEFAULT_SPIN_PARAMETERS",
    "ticks",
    "generate_spin_value",
]
