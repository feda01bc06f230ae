"""Tests for the viewer instance: image state, view operations and mode rules."""

import numpy as np
import pytest

from viewarr.config import ViewerConfig
from viewarr.display_mapping import StretchType
from viewarr.geometry import Rect
from viewarr.lut_manager import Colormap
from viewarr.viewer import ArrayViewer


def _small_viewer(values, width, height):
    v = ArrayViewer()
    v.set_image_data(np.asarray(values), width, height)
    return v


class TestImageState:
    """Test loading images and the value range."""

    def test_empty_viewer(self):
        """Test defaults before any image is loaded."""
        v = ArrayViewer()
        assert not v.has_image()
        assert v.dimensions() == (0, 0)
        assert v.value_range() == (0.0, 1.0)
        assert v.build_color_image() is None
        assert v.render_if_dirty() is None
        state = v.state()
        assert state["colormap"] == "Gray"
        assert state["stretch_mode"] == "linear"
        assert state["zoom"] == 1.0

    def test_load_sets_range_and_pivot(self, viewer):
        """Test auto range and centered pivot."""
        assert viewer.value_range() == (0.0, 19999.0)
        assert viewer.pivot_point() == (99.5, 49.5)
        assert not viewer.is_integer()

    def test_integer_detection(self):
        """Test that integer arrays are flagged."""
        v = _small_viewer(np.arange(6, dtype=np.int32), 3, 2)
        assert v.is_integer()
        assert v.value_at(2, 1) == 5.0

    def test_same_dimensions_keep_view(self, viewer):
        """Test that reloading same-size data keeps pan and zoom."""
        viewer.pan_by((10.0, 0.0))
        viewer.set_zoom(2.0)
        viewer.set_pivot_point(3.0, 4.0)
        viewer.set_image_data(np.zeros(200 * 100), 200, 100)
        assert viewer.transform.pan_offset == (10.0, 0.0)
        assert viewer.zoom_level() == 2.0
        assert viewer.pivot_point() == (3.0, 4.0)

    def test_new_dimensions_reset_pan(self, viewer):
        """Test that a size change resets pan and the pivot but keeps zoom."""
        viewer.pan_by((10.0, 0.0))
        viewer.set_zoom(2.0)
        viewer.set_rotation(30.0)
        viewer.set_image_data(np.zeros(50 * 20), 50, 20)
        assert viewer.transform.pan_offset == (0.0, 0.0)
        assert viewer.zoom_level() == 2.0
        assert viewer.rotation() == 30.0
        assert viewer.pivot_point() == (24.5, 9.5)

    def test_set_value_range(self, viewer):
        """Test user range override and reset."""
        assert viewer.set_value_range(10.0, 20.0)
        assert viewer.value_range() == (10.0, 20.0)
        viewer.reset_value_range()
        assert viewer.value_range() == (0.0, 19999.0)

    @pytest.mark.parametrize("bounds", [(5.0, 5.0), (6.0, 5.0), (float("nan"), 1.0), (0.0, float("inf"))])
    def test_invalid_value_range_rejected(self, viewer, bounds):
        """Test that invalid ranges leave state unchanged."""
        assert not viewer.set_value_range(*bounds)
        assert viewer.value_range() == (0.0, 19999.0)

    def test_value_range_text(self, viewer):
        """Test typed range entry."""
        assert not viewer.set_value_range_text("abc", "5")
        assert viewer.value_range() == (0.0, 19999.0)
        assert viewer.set_value_range_text("1", "5")
        assert viewer.value_range() == (1.0, 5.0)


class TestModeRules:
    """Test interaction between stretch modes and palettes."""

    def test_diverging_palette_enables_symmetric(self, viewer):
        """Test that picking RdBu turns symmetric mode on."""
        viewer.set_colormap("RdBu")
        assert viewer.is_symmetric()
        assert viewer.stretch_mode() == "symmetric"

    def test_leaving_symmetric_drops_diverging(self, viewer):
        """Test fallback to grayscale when symmetric is turned off."""
        viewer.set_colormap(Colormap.RDBU)
        viewer.set_symmetric(False)
        assert viewer.colormap() is Colormap.GRAYSCALE

    def test_entering_symmetric_picks_last_diverging(self, viewer):
        """Test that the remembered diverging palette is restored."""
        viewer.set_symmetric(True)
        assert viewer.colormap() is Colormap.RDBU
        viewer.set_colormap(Colormap.RDYLBU)
        viewer.set_symmetric(False)
        viewer.set_symmetric(True)
        assert viewer.colormap() is Colormap.RDYLBU

    def test_symmetric_keeps_standard_palette(self, viewer):
        """Test that a standard palette may be used in symmetric mode."""
        viewer.set_symmetric(True)
        viewer.set_colormap(Colormap.INFERNO)
        assert viewer.is_symmetric()
        assert viewer.colormap() is Colormap.INFERNO

    def test_log_disables_symmetric(self, viewer):
        """Test that switching to log leaves symmetric mode."""
        viewer.set_colormap(Colormap.RDBU)
        viewer.set_stretch_type(StretchType.LOG)
        assert not viewer.is_symmetric()
        assert viewer.colormap() is Colormap.GRAYSCALE
        assert viewer.stretch_mode() == "log"

    def test_symmetric_forces_linear(self, viewer):
        """Test that symmetric mode uses the linear curve."""
        viewer.set_stretch_mode("log")
        viewer.set_stretch_mode("symmetric")
        assert viewer.stretch_type() is StretchType.LINEAR
        assert viewer.is_symmetric()

    def test_unknown_stretch_mode(self, viewer):
        """Test that unknown names are ignored."""
        assert not viewer.set_stretch_mode("sqrt")
        assert viewer.stretch_mode() == "linear"

    def test_toggle_stretch_type(self, viewer):
        """Test linear/log toggle."""
        viewer.toggle_stretch_type()
        assert viewer.stretch_mode() == "log"
        viewer.toggle_stretch_type()
        assert viewer.stretch_mode() == "linear"

    def test_reset_all_stretch(self, viewer):
        """Test full stretch reset from symmetric mode."""
        viewer.set_colormap(Colormap.RDBU)
        viewer.set_contrast(4.0)
        viewer.reset_all_stretch()
        assert viewer.stretch_mode() == "linear"
        assert viewer.colormap() is Colormap.GRAYSCALE
        assert not viewer.is_stretch_modified()

    def test_stretch_info_text(self, viewer):
        """Test the overlay shown while dragging."""
        assert viewer.stretch_info_text() is None
        viewer.set_adjusting_stretch(True)
        assert viewer.stretch_info_text() == "Linear | Contrast: 1.00 | Bias: 0.50"

    def test_non_finite_setters_leave_state(self, viewer):
        """Test that NaN or infinite numeric input never reaches the bitmap."""
        viewer.set_contrast(float("nan"))
        viewer.set_bias(float("inf"))
        viewer.set_zoom(float("nan"))
        viewer.set_rotation(float("inf"))
        assert not viewer.is_stretch_modified()
        assert viewer.zoom_level() == 1.0
        assert viewer.rotation() == 0.0
        assert viewer.build_color_image().shape == (100, 200, 4)

    def test_drag_stretch(self, viewer):
        """Test contrast/bias drag."""
        viewer.drag_stretch(40.0, -40.0, (400.0, 400.0))
        cb = viewer.current_contrast_bias()
        assert cb.bias == pytest.approx(0.6)
        assert cb.contrast == pytest.approx(2.0)
        assert viewer.is_stretch_modified()


class TestRendering:
    """Test bitmap generation."""

    def test_symmetric_grayscale_scenario(self):
        """Test that -10, 0, 10 render black, mid-gray and white."""
        v = _small_viewer([-10.0, 0.0, 10.0], 3, 1)
        v.set_symmetric(True)
        v.set_colormap(Colormap.GRAYSCALE)
        img = v.build_color_image()
        assert img.shape == (1, 3, 4)
        np.testing.assert_array_equal(img[0, :, :3], [[0, 0, 0], [128, 128, 128], [255, 255, 255]])
        assert (img[..., 3] == 255).all()

    def test_nan_renders_as_minimum(self):
        """Test that NaN samples map to the bottom of the palette."""
        v = _small_viewer([np.nan, 0.0, 1.0], 3, 1)
        img = v.build_color_image()
        np.testing.assert_array_equal(img[0, 0, :3], [0, 0, 0])

    def test_reverse(self):
        """Test that reverse inverts grayscale."""
        v = _small_viewer([0.0, 1.0], 2, 1)
        v.toggle_reverse()
        img = v.build_color_image()
        assert img[0, 0, 0] == 255
        assert img[0, 1, 0] == 0

    def test_render_if_dirty(self, viewer):
        """Test that rendering clears the dirty flag."""
        result = viewer.render_if_dirty()
        assert result is not None
        image, colorbar = result
        assert image.shape == (100, 200, 4)
        assert colorbar.shape == (256, 1, 4)
        assert viewer.render_if_dirty() is None
        viewer.set_contrast(2.0)
        assert viewer.render_if_dirty() is not None

    def test_view_change_does_not_dirty(self, viewer):
        """Test that zoom does not require a new bitmap."""
        viewer.render_if_dirty()
        viewer.set_zoom(3.0)
        assert not viewer.dirty

    def test_colorbar_top_is_max(self, viewer):
        """Test colorbar orientation."""
        bar = viewer.build_colorbar()
        assert bar[0, 0, 0] == 255
        assert bar[-1, 0, 0] == 0


class TestViewOperations:
    """Test zoom, pan, rotation and pointer handling."""

    def test_zoom_buttons(self, viewer, viewport):
        """Test step zoom and the zoom label."""
        viewer.zoom_in(viewport)
        assert viewer.zoom_level() == pytest.approx(1.25)
        assert viewer.zoom_text() == "1.250x"
        viewer.zoom_out(viewport)
        assert viewer.zoom_level() == pytest.approx(1.0)

    def test_scroll_zoom(self, viewer, viewport):
        """Test wheel zoom inside and outside the viewport."""
        viewer.scroll_zoom(1.0, (500.0, 500.0), viewport)
        assert viewer.zoom_level() == 1.0
        viewer.scroll_zoom(1.0, (100.0, 100.0), viewport)
        assert viewer.zoom_level() == pytest.approx(1.08)
        viewer.scroll_zoom(-1.0, (100.0, 100.0), viewport)
        assert viewer.zoom_level() == pytest.approx(1.0)

    def test_zoom_to_fit_resets_rotation(self, viewer):
        """Test full view reset."""
        viewer.set_zoom(4.0)
        viewer.set_rotation(45.0)
        viewer.zoom_to_fit()
        assert viewer.is_default_view()

    def test_rotation_text(self, viewer):
        """Test typed rotation entry."""
        assert viewer.set_rotation_text("370")
        assert viewer.rotation() == pytest.approx(10.0)
        assert not viewer.set_rotation_text("abc")
        assert viewer.rotation() == pytest.approx(10.0)

    def test_clamped_pan(self, viewport):
        """Test optional pan clamping."""
        v = ArrayViewer(ViewerConfig(clamp_pan=True))
        v.set_image_data(np.zeros(200 * 100), 200, 100)
        v.pan_by((1000.0, -1000.0), viewport)
        assert v.transform.pan_offset == pytest.approx((360.0, -280.0))

    def test_unclamped_pan_by_default(self, viewer, viewport):
        """Test that panning is unbounded by default."""
        viewer.pan_by((1000.0, -1000.0), viewport)
        assert viewer.transform.pan_offset == (1000.0, -1000.0)

    def test_hover_unrotated(self, viewport):
        """Test hover readout with the Y flip."""
        v = _small_viewer(np.arange(16), 4, 4)
        assert v.hover((50.0, 50.0), viewport) == (0, 3, 12.0)
        assert v.hover_text() == "Pixel (0, 3): 12"
        assert v.hover(None, viewport) is None
        assert v.hover_text() is None

    def test_hover_rotated(self, viewport):
        """Test that hover honors rotation about the pivot."""
        v = _small_viewer(np.arange(16), 4, 4)
        v.set_rotation(90.0)
        assert v.pixel_at((50.0, 50.0), viewport) == (0, 0)

    def test_click_callback(self):
        """Test click payloads."""
        v = _small_viewer(np.array([5, 6, 7]), 3, 1)
        viewport = Rect(0.0, 0.0, 300.0, 100.0)
        clicks = []
        v.on_click(clicks.append)
        assert v.click((150.0, 50.0), viewport) == (1, 0, 6.0)
        assert v.click((150.0, 150.0), viewport) is None
        assert clicks == [{"x": 1, "y": 0, "value": 6.0}]

    def test_center_on_screen_point(self, viewport):
        """Test alt-click centering without rotation."""
        v = _small_viewer(np.arange(16), 4, 4)
        assert v.center_on_screen_point((350.0, 50.0), viewport)
        assert v.transform.pan_offset == pytest.approx((-150.0, 150.0))
        assert v.pixel_at(viewport.center, viewport) == (3, 3)

    def test_center_on_screen_point_rotated(self, viewport):
        """Test alt-click centering with rotation."""
        v = _small_viewer(np.arange(16), 4, 4)
        v.set_rotation(45.0)
        target = v.pixel_at((200.0, 120.0), viewport)
        assert target is not None
        assert v.center_on_screen_point((200.0, 120.0), viewport)
        assert v.pixel_at(viewport.center, viewport) == target
        assert v.rotation() == 45.0

    def test_center_outside_image(self, viewer, viewport):
        """Test that clicks off the image do nothing."""
        assert not viewer.center_on_screen_point((200.0, 10.0), viewport)
        assert viewer.transform.pan_offset == (0.0, 0.0)

    def test_pivot_from_screen(self, viewer, viewport):
        """Test that the pivot marker lands under the click."""
        viewer.set_rotation(30.0)
        assert viewer.set_pivot_from_screen((137.0, 222.0), viewport)
        assert viewer.pivot_screen_position(viewport) == pytest.approx((137.0, 222.0))
        assert not viewer.set_pivot_from_screen((10.0, 10.0), viewport)

    def test_image_corners(self, viewer, viewport):
        """Test the drawn quad with and without rotation."""
        assert viewer.image_corners(viewport) == [(0.0, 100.0), (400.0, 100.0), (400.0, 300.0), (0.0, 300.0)]
        viewer.set_rotation(90.0)
        corners = viewer.image_corners(viewport)
        assert corners[0] == pytest.approx((300.0, 0.0))

    def test_pivot_marker_flag(self, viewer):
        """Test marker visibility toggle."""
        assert not viewer.show_pivot_marker()
        viewer.set_show_pivot_marker(True)
        assert viewer.show_pivot_marker()


class TestViewBounds:
    """Test visible region queries and requests."""

    def test_no_image(self):
        """Test zeros without an image."""
        assert ArrayViewer().get_view_bounds(400.0, 400.0) == (0.0, 0.0, 0.0, 0.0)

    def test_fit(self, viewer):
        """Test that the whole image is visible at fit."""
        assert viewer.get_view_bounds(400.0, 400.0) == pytest.approx((0.0, 200.0, 0.0, 100.0))

    def test_zoomed(self, viewer):
        """Test bounds after zooming in."""
        viewer.set_zoom(2.0)
        assert viewer.get_view_bounds(400.0, 400.0) == pytest.approx((50.0, 150.0, 0.0, 100.0))

    def test_panned_away(self, viewer):
        """Test zeros when nothing is visible."""
        viewer.pan_by((10000.0, 0.0))
        assert viewer.get_view_bounds(400.0, 400.0) == (0.0, 0.0, 0.0, 0.0)

    def test_set_view_bounds(self, viewer):
        """Test zooming to a region."""
        assert viewer.set_view_bounds(50.0, 150.0, 25.0, 75.0, 400.0, 400.0)
        assert viewer.zoom_level() == pytest.approx(2.0)
        xmin, xmax, ymin, ymax = viewer.get_view_bounds(400.0, 400.0)
        assert (xmin, xmax) == pytest.approx((50.0, 150.0))
        assert ymin <= 25.0 and ymax >= 75.0

    def test_set_view_bounds_lower_region(self, viewer):
        """Test that the Y flip is honored when centering a region."""
        viewer.set_view_bounds(0.0, 50.0, 0.0, 25.0, 400.0, 400.0)
        xmin, xmax, ymin, ymax = viewer.get_view_bounds(400.0, 400.0)
        assert (xmin, xmax) == pytest.approx((0.0, 50.0))
        assert ymin == pytest.approx(0.0)
        assert ymax == pytest.approx(12.5 + 25.0)

    def test_empty_region_ignored(self, viewer):
        """Test that degenerate regions are rejected."""
        assert not viewer.set_view_bounds(10.0, 10.0, 0.0, 5.0, 400.0, 400.0)
        assert viewer.zoom_level() == 1.0


class TestCallbacks:
    """Test state-change notification."""

    def test_state_change_fires(self, viewer):
        """Test that mutations report the new state."""
        states = []
        viewer.on_state_change(states.append)
        viewer.set_zoom(2.0)
        viewer.set_colormap("Inferno")
        assert states[0]["zoom"] == 2.0
        assert states[-1]["colormap"] == "Inferno"

    def test_clear_callbacks(self, viewer):
        """Test that cleared callbacks stop firing."""
        states = []
        viewer.on_state_change(states.append)
        viewer.clear_callbacks()
        viewer.set_zoom(2.0)
        assert states == []

    def test_state_keys(self, viewer):
        """Test the snapshot contents."""
        state = viewer.state()
        for key in ("contrast", "bias", "stretch_mode", "zoom", "rotation", "pivot",
                    "colormap", "colormap_reversed", "vmin", "vmax"):
            assert key in state
        assert state["vmax"] == 19999.0
