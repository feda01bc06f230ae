"""Value range statistics over finite samples."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np

__all__ = ["ValueRange", "compute_value_range", "DEFAULT_RANGE"]


@dataclass(frozen=True)
class ValueRange:
    """Finite ``(min, max)`` display bounds in data units."""

    min: float
    max: float

    def as_tuple(self) -> tuple:
        return (self.min, self.max)


DEFAULT_RANGE = ValueRange(0.0, 1.0)


def compute_value_range(samples: Union[np.ndarray, Iterable[float]]) -> ValueRange:
    """Return min/max over finite samples.

    NaN and +/-inf are ignored. With no finite samples the range is
    ``(0, 1)``; a collapsed range is widened to ``(min, min + 1)``.
    """
    arr = np.asarray(samples, dtype=np.float64).ravel()
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return DEFAULT_RANGE
    min_val = float(finite.min())
    max_val = float(finite.max())
    if abs(max_val - min_val) < sys.float_info.epsilon:
        max_val = min_val + 1.0
    return ValueRange(min_val, max_val)
