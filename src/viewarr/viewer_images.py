"""Image data, value range and bitmap rendering for the viewer."""

from __future__ import annotations

import math
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np

from viewarr.config import COLORBAR_HEIGHT
from viewarr.display_mapping import scaling_range
from viewarr.formatting import parse_float_text
from viewarr.image_buffer import ImageBuffer
from viewarr.image_stats import ValueRange, compute_value_range
from viewarr.logger import get_logger
from viewarr.lut_manager import map_array

if TYPE_CHECKING:
    from viewarr.display_mapping import StretchPipeline
    from viewarr.view_transform import ViewTransform

LOGGER = get_logger(__name__)


class ViewerImageMixin:
    """Mixin for image loading, value range and rendering."""

    buffer: Optional[ImageBuffer]
    original_range: ValueRange
    current_range: ValueRange
    transform: "ViewTransform"
    pipeline: "StretchPipeline"

    def set_image(self, buffer: ImageBuffer) -> None:
        """Load new samples and recompute the auto range.

        Pan is reset and the pivot re-centered only when dimensions change;
        zoom and rotation are always kept.
        """
        old_dims = self.dimensions()
        dims_changed = (buffer.width, buffer.height) != old_dims
        value_range = compute_value_range(buffer.pixels)
        self.buffer = buffer
        self.original_range = value_range
        self.current_range = value_range
        self.hover_info = None
        self.pipeline.dirty = True
        if dims_changed:
            self.transform.reset_pan()
            self.transform.set_pivot_to_center(buffer.width, buffer.height)
        LOGGER.debug(
            "Loaded %dx%d image (range %.6g..%.6g, dims_changed=%s)",
            buffer.width,
            buffer.height,
            value_range.min,
            value_range.max,
            dims_changed,
        )
        self._emit_state_change()

    def set_image_data(
        self, pixels: np.ndarray, width: int, height: int, is_integer: Optional[bool] = None
    ) -> None:
        """Convenience wrapper building an :class:`ImageBuffer` from an array."""
        arr = np.asarray(pixels)
        if is_integer is None:
            is_integer = arr.dtype.kind in ("i", "u")
        self.set_image(ImageBuffer(arr, width, height, bool(is_integer)))

    def has_image(self) -> bool:
        return self.buffer is not None

    def dimensions(self) -> Tuple[int, int]:
        """Return ``(width, height)``, or ``(0, 0)`` without an image."""
        if self.buffer is None:
            return (0, 0)
        return (self.buffer.width, self.buffer.height)

    def is_integer(self) -> bool:
        return bool(self.buffer is not None and self.buffer.is_integer)

    def value_at(self, x: int, y: int) -> Optional[float]:
        if self.buffer is None:
            return None
        return self.buffer.value_at(x, y)

    # ------------------------------------------------------------------
    # Value range
    # ------------------------------------------------------------------

    def value_range(self) -> Tuple[float, float]:
        return self.current_range.as_tuple()

    def set_value_range(self, min_val: float, max_val: float) -> bool:
        """Override the display range; rejected unless both bounds are finite and ``min < max``."""
        min_val = float(min_val)
        max_val = float(max_val)
        if not (math.isfinite(min_val) and math.isfinite(max_val)) or min_val >= max_val:
            LOGGER.warning("Rejected value range (%r, %r)", min_val, max_val)
            return False
        self.current_range = ValueRange(min_val, max_val)
        self.pipeline.dirty = True
        self._emit_state_change()
        return True

    def set_value_range_text(self, min_text: str, max_text: str) -> bool:
        """Apply typed display limits; on parse failure nothing changes."""
        min_val = parse_float_text(min_text)
        max_val = parse_float_text(max_text)
        if min_val is None or max_val is None:
            LOGGER.warning("Could not parse value range %r..%r", min_text, max_text)
            return False
        return self.set_value_range(min_val, max_val)

    def reset_value_range(self) -> None:
        """Restore the auto-computed range."""
        self.current_range = self.original_range
        self.pipeline.dirty = True
        self._emit_state_change()

    def scaling_range(self) -> Tuple[float, float]:
        return scaling_range(self.current_range.min, self.current_range.max, self.pipeline.symmetric)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build_color_image(self) -> Optional[np.ndarray]:
        """Return an ``(height, width, 4)`` uint8 RGBA bitmap in buffer row order.

        Row 0 is the bottom of the displayed image; draw with the origin at
        the bottom (e.g. ``imshow(..., origin="lower")``).
        """
        if self.buffer is None:
            return None
        scale_min, scale_max = self.scaling_range()
        values = self.pipeline.apply_array(self.buffer.as_2d(), scale_min, scale_max)
        return map_array(self.colormap(), values)

    def build_colorbar(self) -> np.ndarray:
        """Return a ``(256, 1, 4)`` colorbar bitmap with the highest value in row 0."""
        values = self.pipeline.colorbar_values(COLORBAR_HEIGHT)
        return map_array(self.colormap(), values.reshape(COLORBAR_HEIGHT, 1))

    def render_if_dirty(self) -> Optional[Tuple[Optional[np.ndarray], np.ndarray]]:
        """Rebuild the bitmap and colorbar when parameters changed.

        Returns ``(image, colorbar)`` and clears the dirty flag, or None when
        nothing changed since the last render.
        """
        if not self.pipeline.dirty:
            return None
        self.pipeline.dirty = False
        return self.build_color_image(), self.build_colorbar()
