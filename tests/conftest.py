import os

import matplotlib
import numpy as np
import pytest

# Colormap tables are sampled from matplotlib; keep it headless.
os.environ.setdefault("MPLBACKEND", "Agg")
matplotlib.use(os.environ.get("MPLBACKEND", "Agg"), force=True)

from viewarr.geometry import Rect  # noqa: E402
from viewarr.viewer import ArrayViewer  # noqa: E402


@pytest.fixture
def viewport():
    """Square 400x400 viewport at the origin."""
    return Rect(0.0, 0.0, 400.0, 400.0)


@pytest.fixture
def viewer():
    """Viewer holding a 200x100 ramp image."""
    v = ArrayViewer()
    v.set_image_data(np.arange(200 * 100, dtype=np.float64), 200, 100)
    return v
