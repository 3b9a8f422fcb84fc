"""Single-word compare-and-swap cell used by the extension counter."""

from __future__ import annotations

import threading


class AtomicInt32:
    """Integer cell with atomic load and compare-and-swap.

    The interpreter has no native atomic integer, so ``compare_and_swap`` holds
    an internal lock for the duration of one comparison and store. Callers
    build their own optimistic retry loops on top of it.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    def load(self) -> int:
        return self._value

    def compare_and_swap(self, expected: int, new: int) -> bool:
        """Store ``new`` iff the current value is ``expected``."""
        with self._lock:
            if self._value != expected:
                return False
            self._value = new
            return True

    def __repr__(self) -> str:
        return f"AtomicInt32({self._value})"
