"""Stretch mode, contrast/bias and colormap state for the viewer.

Mode-switch rules:
- selecting a diverging palette turns symmetric mode on;
- turning symmetric mode on selects the last diverging palette unless one is active;
- turning symmetric mode off while a diverging palette is active falls back to grayscale;
- switching to log stretch turns symmetric mode off.
"""

from __future__ import annotations

from typing import Optional, Union, TYPE_CHECKING

from viewarr.display_mapping import ContrastBias, DisplayMode, StretchType
from viewarr.logger import get_logger
from viewarr.lut_manager import Colormap, colormap_from_name, is_diverging

if TYPE_CHECKING:
    from viewarr.display_mapping import StretchPipeline

LOGGER = get_logger(__name__)

_MODE_LABELS = {
    DisplayMode.LINEAR: "Linear",
    DisplayMode.LOG: "Log",
    DisplayMode.SYMMETRIC: "Symmetric",
}


class ViewerDisplayMixin:
    """Mixin for display (stretch/colormap) state mutations."""

    pipeline: "StretchPipeline"
    _colormap: Colormap
    _last_diverging: Colormap

    # ------------------------------------------------------------------
    # Stretch mode
    # ------------------------------------------------------------------

    def stretch_type(self) -> StretchType:
        return self.pipeline.stretch_type

    def stretch_mode(self) -> str:
        """Return ``"linear"``, ``"log"`` or ``"symmetric"``."""
        return self.pipeline.mode().value

    def set_stretch_mode(self, mode: str) -> bool:
        """Switch mode by name; unknown names are ignored."""
        if mode == "linear":
            self.set_symmetric(False)
            self.set_stretch_type(StretchType.LINEAR)
        elif mode == "log":
            self.set_symmetric(False)
            self.set_stretch_type(StretchType.LOG)
        elif mode == "symmetric":
            self.set_stretch_type(StretchType.LINEAR)
            self.set_symmetric(True)
        else:
            LOGGER.warning("Ignoring unknown stretch mode %r", mode)
            return False
        return True

    def set_stretch_type(self, stretch_type: StretchType) -> None:
        if self.pipeline.stretch_type is stretch_type:
            return
        # Log stretch does not suit signed data.
        if stretch_type is StretchType.LOG and self.pipeline.symmetric:
            self._leave_symmetric()
        self.pipeline.set_stretch_type(stretch_type)
        LOGGER.debug("Stretch type -> %s", stretch_type.value)
        self._emit_state_change()

    def toggle_stretch_type(self) -> None:
        if self.pipeline.stretch_type is StretchType.LINEAR:
            self.set_stretch_type(StretchType.LOG)
        else:
            self.set_stretch_type(StretchType.LINEAR)

    def is_symmetric(self) -> bool:
        return self.pipeline.symmetric

    def set_symmetric(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if self.pipeline.symmetric == enabled:
            return
        if enabled:
            if self.pipeline.stretch_type is StretchType.LOG:
                self.pipeline.set_stretch_type(StretchType.LINEAR)
            self.pipeline.set_symmetric(True)
            if not is_diverging(self._colormap):
                self._colormap = self._last_diverging
        else:
            self._leave_symmetric()
        LOGGER.debug("Symmetric mode -> %s", enabled)
        self._emit_state_change()

    def toggle_symmetric(self) -> None:
        self.set_symmetric(not self.pipeline.symmetric)

    def _leave_symmetric(self) -> None:
        self.pipeline.set_symmetric(False)
        if is_diverging(self._colormap):
            self._colormap = Colormap.GRAYSCALE
            self.pipeline.dirty = True

    # ------------------------------------------------------------------
    # Colormap
    # ------------------------------------------------------------------

    def colormap(self) -> Colormap:
        return self._colormap

    def set_colormap(self, colormap: Union[Colormap, str]) -> None:
        """Select a palette; a diverging palette switches symmetric mode on."""
        if isinstance(colormap, str):
            colormap = colormap_from_name(colormap)
        if is_diverging(colormap):
            self._last_diverging = colormap
            if not self.pipeline.symmetric:
                self.pipeline.set_stretch_type(StretchType.LINEAR)
                self.pipeline.set_symmetric(True)
        self._colormap = colormap
        self.pipeline.dirty = True
        self._emit_state_change()

    def is_reversed(self) -> bool:
        return self.pipeline.reversed

    def toggle_reverse(self) -> None:
        self.pipeline.set_reversed(not self.pipeline.reversed)
        self._emit_state_change()

    # ------------------------------------------------------------------
    # Contrast / bias
    # ------------------------------------------------------------------

    def current_contrast_bias(self) -> ContrastBias:
        return self.pipeline.current()

    def set_contrast(self, contrast: float) -> None:
        self.pipeline.set_contrast(contrast)
        self._emit_state_change()

    def set_bias(self, bias: float) -> None:
        self.pipeline.set_bias(bias)
        self._emit_state_change()

    def drag_stretch(self, dx: float, dy: float, viewport_size) -> None:
        """Contrast/bias drag (right button in most hosts)."""
        self.pipeline.adjust(dx, dy, viewport_size)
        self._emit_state_change()

    def set_adjusting_stretch(self, adjusting: bool) -> None:
        self.adjusting_stretch = bool(adjusting)

    def reset_current_stretch(self) -> None:
        self.pipeline.reset_current()
        self._emit_state_change()

    def reset_all_stretch(self) -> None:
        """Reset every mode's contrast/bias and return to linear stretch."""
        self.pipeline.reset_all()
        if is_diverging(self._colormap):
            self._colormap = Colormap.GRAYSCALE
        self._emit_state_change()

    def is_stretch_modified(self) -> bool:
        return self.pipeline.is_modified()

    def stretch_info_text(self) -> Optional[str]:
        """Overlay text shown while adjusting contrast/bias."""
        if not getattr(self, "adjusting_stretch", False):
            return None
        cb = self.pipeline.current()
        label = _MODE_LABELS[self.pipeline.mode()]
        return f"{label} | Contrast: {cb.contrast:.2f} | Bias: {cb.bias:.2f}"
