"""Display mapping: normalize -> stretch -> contrast/bias for raw samples.

Contrast/bias follow DS9: ``clamp((x - bias) * contrast + 0.5, 0, 1)``.
Linear, Log and Symmetric modes each keep their own contrast/bias so that
switching modes never discards an adjustment.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple, Union

import numpy as np

from viewarr.config import (
    DEFAULT_BIAS,
    DEFAULT_CONTRAST,
    LOG_EXPONENT,
    MAX_BIAS,
    MAX_CONTRAST,
    MIN_BIAS,
    MIN_CONTRAST,
    STRETCH_DEFAULT_TOL,
)
from viewarr.logger import get_logger

LOGGER = get_logger(__name__)

ArrayLike = Union[np.ndarray, float]


class StretchType(Enum):
    """Nonlinear curve applied to normalized samples."""

    LINEAR = "linear"
    LOG = "log"


class DisplayMode(Enum):
    """Contrast/bias slot selector."""

    LINEAR = "linear"
    LOG = "log"
    SYMMETRIC = "symmetric"


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(float(value), low), high)


@dataclass
class ContrastBias:
    """DS9-style contrast (0-10) and bias (0-1)."""

    contrast: float = DEFAULT_CONTRAST
    bias: float = DEFAULT_BIAS

    def is_default(self) -> bool:
        return (
            abs(self.contrast - DEFAULT_CONTRAST) < STRETCH_DEFAULT_TOL
            and abs(self.bias - DEFAULT_BIAS) < STRETCH_DEFAULT_TOL
        )

    def clone(self) -> "ContrastBias":
        return ContrastBias(self.contrast, self.bias)


def apply_stretch(x: ArrayLike, stretch_type: StretchType, exponent: float = LOG_EXPONENT) -> ArrayLike:
    """Apply the stretch curve to normalized values in ``[0, 1]``.

    Log uses ``log10(a*x + 1) / log10(a)``, which maps 0 -> 0 and 1 -> 1.
    """
    if stretch_type is StretchType.LOG:
        if isinstance(x, np.ndarray):
            return np.log10(exponent * x + 1.0) / math.log10(exponent)
        return math.log10(exponent * x + 1.0) / math.log10(exponent)
    return x


def apply_contrast_bias(x: ArrayLike, contrast: float, bias: float) -> ArrayLike:
    """Apply DS9 contrast/bias and clamp to ``[0, 1]``."""
    if isinstance(x, np.ndarray):
        return np.clip((x - bias) * contrast + 0.5, 0.0, 1.0)
    return _clamp((x - bias) * contrast + 0.5, 0.0, 1.0)


def normalize_value(value: float, scale_min: float, scale_max: float) -> float:
    """Normalize into ``[0, 1]``; non-finite values or a degenerate range give 0."""
    span = scale_max - scale_min
    if math.isfinite(value) and abs(span) > sys.float_info.epsilon:
        return _clamp((value - scale_min) / span, 0.0, 1.0)
    return 0.0


def apply_full_stretch(
    value: float,
    scale_min: float,
    scale_max: float,
    cb: ContrastBias,
    stretch_type: StretchType,
    reversed_: bool = False,
    exponent: float = LOG_EXPONENT,
) -> float:
    """Run one sample through the full pipeline; returns a value in ``[0, 1]``."""
    normalized = normalize_value(value, scale_min, scale_max)
    stretched = apply_stretch(normalized, stretch_type, exponent)
    out = apply_contrast_bias(stretched, cb.contrast, cb.bias)
    if reversed_:
        out = 1.0 - out
    return out


def stretch_array(
    values: np.ndarray,
    scale_min: float,
    scale_max: float,
    cb: ContrastBias,
    stretch_type: StretchType,
    reversed_: bool = False,
    exponent: float = LOG_EXPONENT,
) -> np.ndarray:
    """Vectorized :func:`apply_full_stretch` over an array of raw samples."""
    data = np.asarray(values, dtype=np.float64)
    span = scale_max - scale_min
    if abs(span) > sys.float_info.epsilon:
        with np.errstate(invalid="ignore"):
            normalized = np.clip((data - scale_min) / span, 0.0, 1.0)
        normalized = np.where(np.isfinite(data), normalized, 0.0)
    else:
        normalized = np.zeros_like(data)
    stretched = apply_stretch(normalized, stretch_type, exponent)
    out = apply_contrast_bias(stretched, cb.contrast, cb.bias)
    if reversed_:
        out = 1.0 - out
    return out


def scaling_range(min_val: float, max_val: float, symmetric: bool) -> Tuple[float, float]:
    """Return the scaling range; symmetric mode spans ``(-m, m)`` with ``m = max(|min|, |max|)``."""
    if symmetric:
        abs_max = max(abs(min_val), abs(max_val))
        return (-abs_max, abs_max)
    return (min_val, max_val)


@dataclass
class StretchPipeline:
    """Per-mode contrast/bias state plus stretch type, symmetric and reverse flags.

    Parameters
    ----------
    stretch_type : StretchType
        Active stretch curve.
    symmetric : bool
        Whether the scaling range is symmetric about zero.
    reversed : bool
        Whether the final output is inverted.
    slots : dict[DisplayMode, ContrastBias]
        Independent contrast/bias for each display mode.
    dirty : bool
        Set whenever a parameter changes; cleared by the renderer.
    """

    stretch_type: StretchType = StretchType.LINEAR
    symmetric: bool = False
    reversed: bool = False
    max_contrast: float = MAX_CONTRAST
    log_exponent: float = LOG_EXPONENT
    slots: Dict[DisplayMode, ContrastBias] = field(
        default_factory=lambda: {mode: ContrastBias() for mode in DisplayMode}
    )
    dirty: bool = True

    def mode(self) -> DisplayMode:
        """Return the slot selected by ``(stretch_type, symmetric)``."""
        if self.symmetric:
            return DisplayMode.SYMMETRIC
        if self.stretch_type is StretchType.LOG:
            return DisplayMode.LOG
        return DisplayMode.LINEAR

    def _slot(self) -> ContrastBias:
        return self.slots[self.mode()]

    def current(self) -> ContrastBias:
        """Return the effective contrast/bias; bias is pinned to 0.5 in symmetric mode."""
        slot = self._slot()
        if self.symmetric:
            return ContrastBias(slot.contrast, DEFAULT_BIAS)
        return slot.clone()

    def set_stretch_type(self, stretch_type: StretchType) -> None:
        if self.stretch_type is stretch_type:
            return
        self.stretch_type = stretch_type
        self.dirty = True

    def set_symmetric(self, enabled: bool) -> None:
        if self.symmetric == bool(enabled):
            return
        self.symmetric = bool(enabled)
        self.dirty = True

    def set_reversed(self, reversed_: bool) -> None:
        if self.reversed == bool(reversed_):
            return
        self.reversed = bool(reversed_)
        self.dirty = True

    def set_contrast(self, contrast: float) -> None:
        """Set contrast for the active slot (clamped); non-finite input is ignored."""
        if not math.isfinite(contrast):
            return
        self._slot().contrast = _clamp(contrast, MIN_CONTRAST, self.max_contrast)
        self.dirty = True

    def set_bias(self, bias: float) -> None:
        """Set bias for the active slot (clamped); ignored in symmetric mode or when non-finite."""
        if self.symmetric or not math.isfinite(bias):
            return
        self._slot().bias = _clamp(bias, MIN_BIAS, MAX_BIAS)
        self.dirty = True

    def adjust(self, dx: float, dy: float, viewport_size: Tuple[float, float]) -> None:
        """Adjust contrast/bias from a drag delta.

        Horizontal drag moves bias (not in symmetric mode); dragging up raises
        contrast because screen Y grows downward.
        """
        view_w, view_h = viewport_size
        if view_w <= 0 or view_h <= 0 or not (math.isfinite(dx) and math.isfinite(dy)):
            return
        slot = self._slot()
        if not self.symmetric:
            slot.bias = _clamp(slot.bias + dx / view_w, MIN_BIAS, MAX_BIAS)
        slot.contrast = _clamp(
            slot.contrast - (dy / view_h) * self.max_contrast, MIN_CONTRAST, self.max_contrast
        )
        self.dirty = True

    def reset_current(self) -> None:
        """Restore defaults for the active slot only."""
        self.slots[self.mode()] = ContrastBias()
        self.dirty = True

    def reset_all(self) -> None:
        """Restore defaults for every slot and switch to the linear mode."""
        self.slots = {mode: ContrastBias() for mode in DisplayMode}
        self.stretch_type = StretchType.LINEAR
        self.symmetric = False
        self.dirty = True

    def is_modified(self) -> bool:
        """Return True if the active slot differs from defaults (contrast only when symmetric)."""
        slot = self._slot()
        if self.symmetric:
            return abs(slot.contrast - DEFAULT_CONTRAST) >= STRETCH_DEFAULT_TOL
        return not slot.is_default()

    def apply(self, value: float, scale_min: float, scale_max: float) -> float:
        """Map a single raw sample with the current parameters."""
        return apply_full_stretch(
            value,
            scale_min,
            scale_max,
            self.current(),
            self.stretch_type,
            self.reversed,
            self.log_exponent,
        )

    def apply_array(self, values: np.ndarray, scale_min: float, scale_max: float) -> np.ndarray:
        """Map an array of raw samples with the current parameters."""
        return stretch_array(
            values,
            scale_min,
            scale_max,
            self.current(),
            self.stretch_type,
            self.reversed,
            self.log_exponent,
        )

    def colorbar_values(self, height: int) -> np.ndarray:
        """Stretched values for a vertical colorbar; the highest value comes first."""
        t = np.linspace(1.0, 0.0, int(height))
        cb = self.current()
        out = apply_contrast_bias(apply_stretch(t, self.stretch_type, self.log_exponent), cb.contrast, cb.bias)
        if self.reversed:
            out = 1.0 - out
        return out
