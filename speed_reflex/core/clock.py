"""Time source used for hold, hit and pass timing.

Controllers never call the system clock directly; they receive a ``Clock``
so tests can drive elapsed time deterministically.
"""
import time
from typing import Callable

Clock = Callable[[], float]


def monotonic_clock() -> float:
    """Default clock: monotonic seconds."""
    return time.monotonic()
