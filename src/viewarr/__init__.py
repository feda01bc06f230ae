"""viewarr package."""

from viewarr.config import DEFAULT_CONFIG, ViewerConfig
from viewarr.display_mapping import ContrastBias, DisplayMode, StretchPipeline, StretchType
from viewarr.geometry import Rect
from viewarr.image_buffer import ImageBuffer, from_bytes
from viewarr.image_stats import ValueRange, compute_value_range
from viewarr.lut_manager import Colormap
from viewarr.registry import ViewerRegistry
from viewarr.view_transform import ViewTransform
from viewarr.viewer import ArrayViewer

__all__ = [
    "__version__",
    "ArrayViewer",
    "Colormap",
    "ContrastBias",
    "DEFAULT_CONFIG",
    "DisplayMode",
    "ImageBuffer",
    "Rect",
    "StretchPipeline",
    "StretchType",
    "ValueRange",
    "ViewTransform",
    "ViewerConfig",
    "ViewerRegistry",
    "compute_value_range",
    "from_bytes",
]

__version__ = "1.0.0"
