"""Raw sample buffers delivered by the host.

The host hands over a flat, row-major buffer plus a dtype tag; samples are
converted once to float64. Row 0 is the bottom row of the displayed image.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from viewarr.logger import get_logger

LOGGER = get_logger(__name__)

# Rust-style tags as used by typed-array hosts.
RUST_DTYPES: Dict[str, str] = {
    "i8": "i1",
    "u8": "u1",
    "i16": "<i2",
    "u16": "<u2",
    "i32": "<i4",
    "u32": "<u4",
    "i64": "<i8",
    "u64": "<u8",
    "f32": "<f4",
    "f64": "<f8",
}

# numpy dtype codes (the "u8"/"i8" codes mean 8 bytes here, not 8 bits).
NUMPY_DTYPES: Dict[str, str] = {
    "b": "i1",
    "i1": "i1",
    "B": "u1",
    "u1": "u1",
    "i2": "<i2",
    "u2": "<u2",
    "i4": "<i4",
    "u4": "<u4",
    "i8": "<i8",
    "u8": "<u8",
    "f4": "<f4",
    "f8": "<f8",
}


@dataclass
class ImageBuffer:
    """Read-only raster samples.

    Parameters
    ----------
    pixels : np.ndarray
        Flat float64 samples, row-major, ``width * height`` long.
    width, height : int
        Image dimensions in pixels.
    is_integer : bool
        Whether the source data was integer-typed; affects display formatting only.
    """

    pixels: np.ndarray
    width: int
    height: int
    is_integer: bool = False

    def __post_init__(self) -> None:
        self.width = int(self.width)
        self.height = int(self.height)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid image dimensions: {self.width}x{self.height}")
        pixels = np.asarray(self.pixels, dtype=np.float64).ravel()
        expected = self.width * self.height
        if pixels.size != expected:
            raise ValueError(
                f"Buffer size mismatch: expected {expected} pixels "
                f"({self.width}x{self.height}), got {pixels.size}"
            )
        pixels.setflags(write=False)
        self.pixels = pixels

    @property
    def shape(self) -> tuple:
        """Return ``(height, width)``."""
        return (self.height, self.width)

    def as_2d(self) -> np.ndarray:
        """Return a ``(height, width)`` view with row 0 first."""
        return self.pixels.reshape(self.height, self.width)

    def value_at(self, x: int, y: int) -> Optional[float]:
        """Return the raw sample at image pixel ``(x, y)`` or None if out of bounds."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return float(self.pixels[y * self.width + x])
        return None


def resolve_dtype(tag: str, convention: str = "numpy") -> np.dtype:
    """Resolve a host dtype tag to a numpy dtype.

    Unknown tags fall back to float64.
    """
    if convention not in ("numpy", "rust"):
        raise ValueError(f"Unknown dtype convention: {convention}")
    primary = NUMPY_DTYPES if convention == "numpy" else RUST_DTYPES
    secondary = RUST_DTYPES if convention == "numpy" else NUMPY_DTYPES
    code = primary.get(tag) or secondary.get(tag)
    if code is None:
        LOGGER.warning("Unknown dtype tag %r; interpreting buffer as float64", tag)
        code = "<f8"
    return np.dtype(code)


def from_bytes(
    buffer: bytes,
    width: int,
    height: int,
    dtype: str = "f8",
    convention: str = "numpy",
) -> ImageBuffer:
    """Decode a raw little-endian byte buffer into an :class:`ImageBuffer`."""
    np_dtype = resolve_dtype(dtype, convention)
    raw = np.frombuffer(buffer, dtype=np_dtype)
    is_integer = np_dtype.kind in ("i", "u")
    LOGGER.debug("Decoded %d samples as %s (%dx%d)", raw.size, np_dtype, width, height)
    return ImageBuffer(raw.astype(np.float64), width, height, is_integer)
