"""Text formatting and parsing for host overlays and numeric entry fields."""

from __future__ import annotations

import math
from typing import Optional

__all__ = [
    "format_scientific",
    "format_zoom_multiple",
    "format_pixel_value",
    "format_range_label",
    "parse_float_text",
]


def format_scientific(value: float) -> str:
    """Compact label: scientific notation for very large/small magnitudes."""
    if value == 0.0:
        return "0"
    if abs(value) >= 1e4 or abs(value) < 1e-2:
        return f"{value:.2e}"
    return f"{value:.2f}"


def format_zoom_multiple(zoom: float) -> str:
    return f"{zoom:.3f}x"


def format_range_label(value: float, is_integer: bool) -> str:
    """Colorbar end label; integer data shows truncated integers."""
    if is_integer and math.isfinite(value):
        return str(int(value))
    return format_scientific(value)


def format_pixel_value(x: int, y: int, value: float, is_integer: bool) -> str:
    """Hover readout for a pixel."""
    if is_integer and math.isfinite(value):
        return f"Pixel ({x}, {y}): {int(value)}"
    return f"Pixel ({x}, {y}): {value:.6f}"


def parse_float_text(text: object) -> Optional[float]:
    """Parse user-typed numeric text.

    Returns None for empty, malformed or non-finite input so callers can
    leave state unchanged and revert the displayed text.
    """
    if text is None:
        return None
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value
