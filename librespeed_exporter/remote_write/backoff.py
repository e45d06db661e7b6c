"""Retry delay computation for remote write delivery."""

import math
import random
from typing import Callable

MAX_BACKOFF_SECONDS = 30.0

DelayFunc = Callable[[int], float]


def compute_backoff(attempt: int, rng: random.Random | None = None) -> float:
    """Exponential backoff with jitter.

    For retry number ``attempt`` (1-based) the delay is drawn uniformly from
    ``[2**(attempt - 1), 2**attempt)`` seconds and capped at 30 seconds. The
    upper bound is exclusive even when float rounding of the jitter reaches it.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got {attempt}")

    base = float(2 ** (attempt - 1))
    jitter = (rng or random).random() * base
    delay = min(base + jitter, math.nextafter(2 * base, 0))
    return min(delay, MAX_BACKOFF_SECONDS)
