"""LUT registry for colormap lookup.

Grayscale is computed directly; every other palette is a fixed 256-entry RGB
table sampled once from the matching matplotlib colormap.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

import matplotlib
import numpy as np

from viewarr.config import LUT_SIZE

RGB = Tuple[int, int, int]


class Colormap(Enum):
    """Available palettes; values are display names."""

    GRAYSCALE = "Gray"
    INFERNO = "Inferno"
    MAGMA = "Magma"
    RDBU = "RdBu"
    RDYLBU = "RdYlBu"


@dataclass(frozen=True)
class LutSpec:
    """LUT specification for a colormap."""

    colormap: Colormap
    matplotlib_cmap_name: Optional[str]
    diverging: bool = False


LUTS: List[LutSpec] = [
    LutSpec(Colormap.GRAYSCALE, None),
    LutSpec(Colormap.INFERNO, "inferno"),
    LutSpec(Colormap.MAGMA, "magma"),
    LutSpec(Colormap.RDBU, "RdBu", diverging=True),
    LutSpec(Colormap.RDYLBU, "RdYlBu", diverging=True),
]

_SPECS: Dict[Colormap, LutSpec] = {spec.colormap: spec for spec in LUTS}


def lut_names() -> List[str]:
    """Return display names for all LUTs."""
    return [spec.colormap.value for spec in LUTS]


def colormap_from_name(name: str) -> Colormap:
    """Look up a colormap by display name (case-insensitive).

    Raises
    ------
    KeyError
        If no colormap has that name.
    """
    lowered = name.strip().lower()
    for cmap in Colormap:
        if cmap.value.lower() == lowered or cmap.name.lower() == lowered:
            return cmap
    raise KeyError(f"Unknown colormap: {name}")


def is_diverging(cmap: Colormap) -> bool:
    """Diverging palettes are only valid in symmetric mode."""
    return _SPECS[cmap].diverging


def standard_colormaps() -> List[Colormap]:
    return [spec.colormap for spec in LUTS if not spec.diverging]


def diverging_colormaps() -> List[Colormap]:
    return [spec.colormap for spec in LUTS if spec.diverging]


@lru_cache(maxsize=None)
def lut_for(cmap: Colormap) -> np.ndarray:
    """Return the ``(256, 3)`` uint8 table for a palette.

    Grayscale has a table too (for callers that want one), but :func:`map_value`
    and :func:`map_array` compute it directly.
    """
    spec = _SPECS[cmap]
    if spec.matplotlib_cmap_name is None:
        ramp = np.arange(LUT_SIZE, dtype=np.uint8)
        table = np.stack([ramp, ramp, ramp], axis=1)
    else:
        mpl_cmap = matplotlib.colormaps[spec.matplotlib_cmap_name]
        rgba = mpl_cmap(np.linspace(0.0, 1.0, LUT_SIZE))
        table = np.round(rgba[:, :3] * 255.0).astype(np.uint8)
    table.setflags(write=False)
    return table


def lut_index(t: float) -> int:
    """Nearest-neighbor table index ``clamp(floor(t*255), 0, 255)``."""
    return int(min(max(np.floor(t * (LUT_SIZE - 1)), 0), LUT_SIZE - 1))


def map_value(cmap: Colormap, t: float) -> RGB:
    """Map a normalized value in ``[0, 1]`` to an RGB triple."""
    t = min(max(float(t), 0.0), 1.0)
    if cmap is Colormap.GRAYSCALE:
        v = int(np.floor(t * 255.0 + 0.5))
        return (v, v, v)
    r, g, b = lut_for(cmap)[lut_index(t)]
    return (int(r), int(g), int(b))


def map_array(cmap: Colormap, values: np.ndarray, alpha: bool = True) -> np.ndarray:
    """Map an array of normalized values to uint8 RGB(A) with a trailing channel axis."""
    t = np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0)
    if cmap is Colormap.GRAYSCALE:
        v = np.floor(t * 255.0 + 0.5).astype(np.uint8)
        rgb = np.stack([v, v, v], axis=-1)
    else:
        idx = np.clip(np.floor(t * (LUT_SIZE - 1)), 0, LUT_SIZE - 1).astype(np.intp)
        rgb = lut_for(cmap)[idx]
    if not alpha:
        return rgb
    opaque = np.full(rgb.shape[:-1] + (1,), 255, dtype=np.uint8)
    return np.concatenate([rgb, opaque], axis=-1)
