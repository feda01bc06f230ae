"""Array viewer instance owning image, view and display state.

This module provides ArrayViewer, which owns the sample buffer, the view
transform and the stretch pipeline for one viewer. Hosts (GUI toolkits,
notebooks, scripts) translate their input events into calls on it and read
back bitmaps and state; callbacks report state changes and clicks.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from viewarr.config import DEFAULT_CONFIG, ViewerConfig
from viewarr.display_mapping import StretchPipeline
from viewarr.image_buffer import ImageBuffer
from viewarr.image_stats import DEFAULT_RANGE, ValueRange
from viewarr.logger import get_logger
from viewarr.lut_manager import Colormap, colormap_from_name
from viewarr.view_transform import ViewTransform
from viewarr.viewer_display import ViewerDisplayMixin
from viewarr.viewer_images import ViewerImageMixin
from viewarr.viewer_view import HoverInfo, ViewerViewMixin

LOGGER = get_logger(__name__)

StateCallback = Callable[[Dict[str, Any]], None]
ClickCallback = Callable[[Dict[str, Any]], None]


class ArrayViewer(ViewerImageMixin, ViewerViewMixin, ViewerDisplayMixin):
    """State owner for a single viewer.

    Notes
    -----
    All state mutations go through this object. It has no internal locking;
    hosts driving one instance from several threads must serialize access.
    Independent instances share nothing.
    """

    def __init__(self, config: ViewerConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.buffer: Optional[ImageBuffer] = None
        self.original_range: ValueRange = DEFAULT_RANGE
        self.current_range: ValueRange = DEFAULT_RANGE
        self.transform = ViewTransform(config)
        self.pipeline = StretchPipeline(
            max_contrast=config.max_contrast,
            log_exponent=config.log_exponent,
            dirty=False,
        )
        self._colormap = Colormap.GRAYSCALE
        self._last_diverging = colormap_from_name(config.default_diverging)
        self.hover_info: Optional[HoverInfo] = None
        self.adjusting_stretch = False
        self._state_callbacks: List[StateCallback] = []
        self._click_callbacks: List[ClickCallback] = []

    @property
    def dirty(self) -> bool:
        """True when the bitmap must be rebuilt."""
        return self.pipeline.dirty

    def state(self) -> Dict[str, Any]:
        """Snapshot of user-visible state."""
        cb = self.pipeline.current()
        vmin, vmax = self.current_range.as_tuple()
        return {
            "contrast": cb.contrast,
            "bias": cb.bias,
            "stretch_mode": self.stretch_mode(),
            "zoom": self.transform.zoom,
            "pan": self.transform.pan_offset,
            "rotation": self.transform.rotation_degrees,
            "pivot": self.transform.pivot_point,
            "colormap": self._colormap.value,
            "colormap_reversed": self.pipeline.reversed,
            "vmin": vmin,
            "vmax": vmax,
        }

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def on_state_change(self, callback: StateCallback) -> None:
        """Register a callback receiving :meth:`state` after each mutation."""
        self._state_callbacks.append(callback)

    def on_click(self, callback: ClickCallback) -> None:
        """Register a callback receiving ``{x, y, value}`` for image clicks."""
        self._click_callbacks.append(callback)

    def clear_callbacks(self) -> None:
        self._state_callbacks.clear()
        self._click_callbacks.clear()
        LOGGER.debug("Cleared viewer callbacks")

    def _emit_state_change(self) -> None:
        if not self._state_callbacks:
            return
        snapshot = self.state()
        for callback in list(self._state_callbacks):
            callback(snapshot)

    def _emit_click(self, payload: Dict[str, Any]) -> None:
        for callback in list(self._click_callbacks):
            callback(dict(payload))
