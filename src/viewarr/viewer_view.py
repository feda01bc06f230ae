"""Zoom, pan, rotation and pointer handling for the viewer."""

from __future__ import annotations

from typing import List, Optional, Tuple, TYPE_CHECKING

from viewarr.formatting import format_pixel_value, format_zoom_multiple, parse_float_text
from viewarr.geometry import Point, Rect
from viewarr.logger import get_logger
from viewarr.view_transform import fit_to_view

if TYPE_CHECKING:
    from viewarr.config import ViewerConfig
    from viewarr.view_transform import ViewTransform

LOGGER = get_logger(__name__)

HoverInfo = Tuple[int, int, float]


class ViewerViewMixin:
    """Mixin for view transform mutations and screen-space queries."""

    config: "ViewerConfig"
    transform: "ViewTransform"
    hover_info: Optional[HoverInfo]

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def base_display_size(self, viewport_size: Point) -> Point:
        """Fit-to-view size of the image for a viewport (zero without an image)."""
        return fit_to_view(self.dimensions(), viewport_size)

    def image_rect(self, viewport_rect: Rect) -> Optional[Rect]:
        """Screen rect of the unrotated image, or None without an image."""
        if not self.has_image():
            return None
        base = self.base_display_size(viewport_rect.size)
        return self.transform.calculate_image_rect(viewport_rect, base)

    def image_corners(self, viewport_rect: Rect) -> Optional[List[Point]]:
        """Screen corners of the (possibly rotated) image quad."""
        rect = self.image_rect(viewport_rect)
        if rect is None:
            return None
        if not self.transform.is_rotated():
            return list(rect.corners())
        return self.transform.calculate_rotated_corners(rect, self.dimensions())

    def pivot_screen_position(self, viewport_rect: Rect) -> Optional[Point]:
        """Where to draw the pivot marker."""
        rect = self.image_rect(viewport_rect)
        if rect is None:
            return None
        return self.transform.pivot_to_screen(rect, self.dimensions())

    # ------------------------------------------------------------------
    # Zoom and pan
    # ------------------------------------------------------------------

    def zoom_in(self, viewport_rect: Rect, center: Optional[Point] = None) -> None:
        self.transform.zoom_in(center, viewport_rect.center)
        self._emit_state_change()

    def zoom_out(self, viewport_rect: Rect, center: Optional[Point] = None) -> None:
        self.transform.zoom_out(center, viewport_rect.center)
        self._emit_state_change()

    def scroll_zoom(self, scroll_y: float, pointer: Point, viewport_rect: Rect) -> None:
        """Zoom by the finer scroll step around the pointer; ignored outside the viewport."""
        if scroll_y == 0.0 or not viewport_rect.contains(pointer):
            return
        step = self.config.scroll_zoom_step
        factor = step if scroll_y > 0.0 else 1.0 / step
        self.transform.zoom_around_point(factor, pointer, viewport_rect.center)
        self._emit_state_change()

    def zoom_to_fit(self) -> None:
        """Full reset: zoom, pan and rotation (pivot kept)."""
        self.transform.reset()
        LOGGER.debug("View reset to fit")
        self._emit_state_change()

    def reset_zoom_pan(self) -> None:
        """Reset zoom and pan only, keeping rotation and pivot."""
        self.transform.reset_zoom_pan()
        self._emit_state_change()

    def set_zoom(self, level: float) -> None:
        self.transform.set_zoom(level)
        self._emit_state_change()

    def zoom_level(self) -> float:
        return self.transform.zoom

    def is_default_view(self) -> bool:
        return self.transform.is_default()

    def pan_by(self, delta: Point, viewport_rect: Optional[Rect] = None) -> None:
        """Apply a drag delta; clamped when ``config.clamp_pan`` is set."""
        self.transform.pan_by(delta)
        if self.config.clamp_pan and viewport_rect is not None and self.has_image():
            base = self.base_display_size(viewport_rect.size)
            zoomed = (base[0] * self.transform.zoom, base[1] * self.transform.zoom)
            self.transform.clamp_pan_offset(viewport_rect.size, zoomed)
        self._emit_state_change()

    # ------------------------------------------------------------------
    # Rotation and pivot
    # ------------------------------------------------------------------

    def rotation(self) -> float:
        return self.transform.rotation_degrees

    def set_rotation(self, degrees: float) -> None:
        self.transform.set_rotation(degrees)
        self._emit_state_change()

    def rotate_by(self, delta_degrees: float) -> None:
        self.transform.rotate_by(delta_degrees)
        self._emit_state_change()

    def set_rotation_text(self, text: str) -> bool:
        """Apply a typed rotation angle; on parse failure nothing changes."""
        degrees = parse_float_text(text)
        if degrees is None:
            LOGGER.warning("Could not parse rotation %r", text)
            return False
        self.set_rotation(degrees)
        return True

    def pivot_point(self) -> Point:
        return self.transform.pivot_point

    def set_pivot_point(self, x: float, y: float) -> None:
        self.transform.set_pivot_point(x, y)
        self._emit_state_change()

    def set_pivot_to_center(self) -> None:
        width, height = self.dimensions()
        if width and height:
            self.transform.set_pivot_to_center(width, height)
            self._emit_state_change()

    def set_pivot_from_screen(self, screen_pos: Point, viewport_rect: Rect) -> bool:
        """Place the pivot under a click (unrotated mapping keeps the marker under the cursor)."""
        rect = self.image_rect(viewport_rect)
        if rect is None:
            return False
        pos = self.transform.screen_to_image_for_pivot(screen_pos, rect, self.dimensions())
        if pos is None:
            return False
        self.set_pivot_point(*pos)
        return True

    def show_pivot_marker(self) -> bool:
        return self.transform.show_pivot_marker

    def set_show_pivot_marker(self, show: bool) -> None:
        self.transform.show_pivot_marker = bool(show)
        self._emit_state_change()

    # ------------------------------------------------------------------
    # Pointer queries
    # ------------------------------------------------------------------

    def pixel_at(self, screen_pos: Point, viewport_rect: Rect) -> Optional[Tuple[int, int]]:
        """Image pixel under a screen position, honoring rotation."""
        rect = self.image_rect(viewport_rect)
        if rect is None:
            return None
        return self.transform.screen_to_image_rotated(screen_pos, rect, self.dimensions())

    def hover(self, screen_pos: Optional[Point], viewport_rect: Rect) -> Optional[HoverInfo]:
        """Update and return ``(x, y, value)`` for the pixel under the pointer."""
        self.hover_info = None
        if screen_pos is not None:
            pixel = self.pixel_at(screen_pos, viewport_rect)
            if pixel is not None:
                value = self.value_at(*pixel)
                if value is not None:
                    self.hover_info = (pixel[0], pixel[1], value)
        return self.hover_info

    def hover_text(self) -> Optional[str]:
        if self.hover_info is None:
            return None
        x, y, value = self.hover_info
        return format_pixel_value(x, y, value, self.is_integer())

    def click(self, screen_pos: Point, viewport_rect: Rect) -> Optional[HoverInfo]:
        """Report a click on the image to click callbacks."""
        info = self.hover(screen_pos, viewport_rect)
        if info is not None:
            x, y, value = info
            self._emit_click({"x": x, "y": y, "value": value})
        return info

    def center_on_screen_point(self, screen_pos: Point, viewport_rect: Rect) -> bool:
        """Pan so the pixel under ``screen_pos`` moves to the viewport center."""
        rect = self.image_rect(viewport_rect)
        if rect is None:
            return False
        size = self.dimensions()
        pixel = self.transform.screen_to_image_rotated(screen_pos, rect, size)
        if pixel is None:
            return False
        if self.transform.is_rotated():
            # Rotation is about a pivot that moves with pan, so a plain shift works.
            current = self.transform.image_to_screen_rotated(pixel, rect, size)
            center = viewport_rect.center
            self.transform.pan_by((center[0] - current[0], center[1] - current[1]))
        else:
            base_rect = Rect.from_center_size(
                (viewport_rect.width / 2.0, viewport_rect.height / 2.0),
                self.base_display_size(viewport_rect.size),
            )
            self.transform.center_on_image_point(
                (pixel[0] + 0.5, pixel[1] + 0.5), size, viewport_rect.size, base_rect
            )
        self._emit_state_change()
        return True

    def zoom_text(self) -> str:
        return format_zoom_multiple(self.transform.zoom)

    # ------------------------------------------------------------------
    # View bounds
    # ------------------------------------------------------------------

    def get_view_bounds(self, viewport_width: float, viewport_height: float) -> Tuple[float, float, float, float]:
        """Visible image region as ``(xmin, xmax, ymin, ymax)`` in pixel-edge coordinates.

        Rotation is ignored. Returns zeros without an image or when nothing is visible.
        """
        empty = (0.0, 0.0, 0.0, 0.0)
        if not self.has_image() or viewport_width <= 0 or viewport_height <= 0:
            return empty
        img_w, img_h = self.dimensions()
        viewport_rect = Rect(0.0, 0.0, float(viewport_width), float(viewport_height))
        rect = self.image_rect(viewport_rect)
        visible = viewport_rect.intersect(rect)
        if visible.width <= 0 or visible.height <= 0:
            return empty
        rel_x_min = (visible.x - rect.x) / rect.width
        rel_x_max = (visible.max[0] - rect.x) / rect.width
        # Flip Y: the top of the visible region is the highest image row.
        rel_y_max = 1.0 - (visible.y - rect.y) / rect.height
        rel_y_min = 1.0 - (visible.max[1] - rect.y) / rect.height
        return (
            max(rel_x_min * img_w, 0.0),
            min(rel_x_max * img_w, float(img_w)),
            max(rel_y_min * img_h, 0.0),
            min(rel_y_max * img_h, float(img_h)),
        )

    def set_view_bounds(
        self,
        xmin: float,
        xmax: float,
        ymin: float,
        ymax: float,
        viewport_width: float,
        viewport_height: float,
    ) -> bool:
        """Zoom and pan so the given image region fills the viewport."""
        if not self.has_image() or viewport_width <= 0 or viewport_height <= 0:
            return False
        region_w = xmax - xmin
        region_h = ymax - ymin
        if region_w <= 0 or region_h <= 0:
            return False
        img_w, img_h = self.dimensions()
        viewport_size = (float(viewport_width), float(viewport_height))
        base = self.base_display_size(viewport_size)
        # Zoom at which the region spans the viewport on each axis; the smaller one fits both.
        zoom_x = (img_w / region_w) * (viewport_size[0] / base[0])
        zoom_y = (img_h / region_h) * (viewport_size[1] / base[1])
        self.transform.set_zoom(min(zoom_x, zoom_y))
        center = ((xmin + xmax) / 2.0, (ymin + ymax) / 2.0)
        base_rect = Rect.from_center_size((viewport_size[0] / 2.0, viewport_size[1] / 2.0), base)
        self.transform.center_on_image_point(center, (img_w, img_h), viewport_size, base_rect)
        self._emit_state_change()
        return True
