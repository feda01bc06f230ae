"""Viewer constants and the configuration dataclass built from them."""

from __future__ import annotations

from dataclasses import dataclass

# Zoom step multiplier for zoom in/out (buttons/keyboard).
ZOOM_STEP = 1.25
# Scroll wheel uses a smaller step for finer control.
SCROLL_ZOOM_STEP = 1.08
# 10% of fit-to-view.
MIN_ZOOM = 0.1
# 5000% of fit-to-view.
MAX_ZOOM = 50.0
# Zoom changes smaller than this after clamping are ignored.
ZOOM_EPSILON = 1e-4

# DS9 defaults and limits for contrast/bias.
DEFAULT_CONTRAST = 1.0
DEFAULT_BIAS = 0.5
MIN_CONTRAST = 0.0
MAX_CONTRAST = 10.0
MIN_BIAS = 0.0
MAX_BIAS = 1.0
# Log stretch exponent (DS9 default for optical images).
LOG_EXPONENT = 1000.0

# Fraction of the zoomed image that must stay inside the viewport when clamping pan.
PAN_MARGIN = 0.1

# Tolerances for "is default" checks.
ZOOM_DEFAULT_TOL = 1e-3
PAN_DEFAULT_TOL_PX = 0.5
ROTATION_DEFAULT_TOL_DEG = 1e-3
STRETCH_DEFAULT_TOL = 1e-3

# Lookup tables are fixed at 256 entries.
LUT_SIZE = 256
COLORBAR_HEIGHT = 256


@dataclass(frozen=True)
class ViewerConfig:
    """Tunable viewer behavior.

    Notes
    -----
    ``clamp_pan`` keeps at least ``pan_margin`` of the zoomed image visible
    after every drag pan. It is off by default, matching unbounded panning.
    """

    zoom_step: float = ZOOM_STEP
    scroll_zoom_step: float = SCROLL_ZOOM_STEP
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM
    max_contrast: float = MAX_CONTRAST
    log_exponent: float = LOG_EXPONENT
    pan_margin: float = PAN_MARGIN
    clamp_pan: bool = False
    default_diverging: str = "RdBu"


DEFAULT_CONFIG = ViewerConfig()
