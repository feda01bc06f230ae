"""Pan/zoom/rotation state and screen <-> image coordinate conversions.

All functions are GUI-free and fully testable.

Conventions
-----------
- Screen coords: (x, y) with origin at the top-left, y increasing downward.
- Image pixel coords: (x, y) integer indices; row 0 is the *bottom* row of the
  displayed image (FITS convention), so screen y is flipped.
- Continuous image coords: (x, y) floats where pixel ``i`` spans ``[i, i+1)``
  in the view-bounds helpers, and where pixel centers sit at integer values
  for the pivot (``set_pivot_to_center`` puts it at ``((w-1)/2, (h-1)/2)``).
- ``pan_offset`` is a screen-space offset of the zoomed image from its
  centered position in the viewport.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from viewarr.config import (
    DEFAULT_CONFIG,
    PAN_DEFAULT_TOL_PX,
    ROTATION_DEFAULT_TOL_DEG,
    ZOOM_DEFAULT_TOL,
    ZOOM_EPSILON,
    ViewerConfig,
)
from viewarr.geometry import Point, Rect, rotate_point

__all__ = [
    "ViewTransform",
    "fit_to_view",
    "normalize_degrees",
]

ImageSize = Tuple[int, int]


def normalize_degrees(degrees: float) -> float:
    """Wrap an angle into ``(-180, 180]``."""
    wrapped = math.fmod(float(degrees), 360.0)
    if wrapped > 180.0:
        wrapped -= 360.0
    elif wrapped <= -180.0:
        wrapped += 360.0
    return wrapped


def fit_to_view(image_size: ImageSize, viewport_size: Point) -> Point:
    """Return the base display size that fits the image in the viewport.

    Aspect ratio is preserved; this is the displayed size at zoom 1.0.
    """
    img_w, img_h = image_size
    view_w, view_h = viewport_size
    if img_w <= 0 or img_h <= 0 or view_w <= 0 or view_h <= 0:
        return (0.0, 0.0)
    img_aspect = img_w / img_h
    view_aspect = view_w / view_h
    if img_aspect > view_aspect:
        return (float(view_w), view_w / img_aspect)
    return (view_h * img_aspect, float(view_h))


class ViewTransform:
    """Zoom, pan, rotation and pivot for one viewer.

    Parameters
    ----------
    config : ViewerConfig, optional
        Zoom limits and step sizes.

    Notes
    -----
    Zoom is clamped and rotation renormalized on every mutation. The instance
    has a single owner; callers sharing it across threads must serialize.
    """

    def __init__(self, config: ViewerConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.zoom: float = 1.0
        self.pan_offset: Point = (0.0, 0.0)
        self.rotation_degrees: float = 0.0
        self.pivot_point: Point = (0.0, 0.0)
        self.show_pivot_marker: bool = False

    def __repr__(self) -> str:
        return (
            f"ViewTransform(zoom={self.zoom:.4g}, pan_offset={self.pan_offset}, "
            f"rotation_degrees={self.rotation_degrees:.4g}, pivot_point={self.pivot_point})"
        )

    # ------------------------------------------------------------------
    # Resets and state queries
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Reset zoom, pan and rotation; the pivot is preserved."""
        self.zoom = 1.0
        self.pan_offset = (0.0, 0.0)
        self.rotation_degrees = 0.0

    def reset_zoom_pan(self) -> None:
        """Reset zoom and pan only, keeping rotation and pivot."""
        self.zoom = 1.0
        self.pan_offset = (0.0, 0.0)

    def reset_pan(self) -> None:
        """Reset pan only, keeping zoom."""
        self.pan_offset = (0.0, 0.0)

    def is_default(self) -> bool:
        """Return True when zoom is 1, pan is zero and there is no rotation."""
        return (
            abs(self.zoom - 1.0) < ZOOM_DEFAULT_TOL
            and math.hypot(*self.pan_offset) < PAN_DEFAULT_TOL_PX
            and abs(self.rotation_degrees) < ROTATION_DEFAULT_TOL_DEG
        )

    def is_rotated(self) -> bool:
        return abs(self.rotation_degrees) >= ROTATION_DEFAULT_TOL_DEG

    # ------------------------------------------------------------------
    # Zoom and pan
    # ------------------------------------------------------------------

    def _clamp_zoom(self, zoom: float) -> float:
        return min(max(float(zoom), self.config.min_zoom), self.config.max_zoom)

    def set_zoom(self, zoom: float) -> None:
        """Set zoom directly (clamped); pan is left untouched. Non-finite input is ignored."""
        if not math.isfinite(zoom):
            return
        self.zoom = self._clamp_zoom(zoom)

    def zoom_in(self, center: Optional[Point], viewport_center: Point) -> None:
        """Zoom in by one step around ``center`` (default: viewport center)."""
        if center is None:
            center = viewport_center
        self.zoom_around_point(self.config.zoom_step, center, viewport_center)

    def zoom_out(self, center: Optional[Point], viewport_center: Point) -> None:
        """Zoom out by one step around ``center`` (default: viewport center)."""
        if center is None:
            center = viewport_center
        self.zoom_around_point(1.0 / self.config.zoom_step, center, viewport_center)

    def zoom_around_point(self, zoom_delta: float, screen_pos: Point, viewport_center: Point) -> None:
        """Multiply zoom by ``zoom_delta`` keeping the content under ``screen_pos`` fixed.

        With ``d = screen_pos - viewport_center`` and ``ratio = new_zoom / old_zoom``
        the pan becomes ``d * (1 - ratio) + pan * ratio``.
        """
        if zoom_delta == 1.0 or not math.isfinite(zoom_delta) or zoom_delta <= 0.0:
            return
        old_zoom = self.zoom
        new_zoom = self._clamp_zoom(old_zoom * zoom_delta)
        if abs(new_zoom - old_zoom) < ZOOM_EPSILON:
            return
        ratio = new_zoom / old_zoom
        dx = screen_pos[0] - viewport_center[0]
        dy = screen_pos[1] - viewport_center[1]
        pan_x, pan_y = self.pan_offset
        self.pan_offset = (
            dx * (1.0 - ratio) + pan_x * ratio,
            dy * (1.0 - ratio) + pan_y * ratio,
        )
        self.zoom = new_zoom

    def pan_by(self, delta: Point) -> None:
        """Add a screen-space delta to the pan offset."""
        if not (math.isfinite(delta[0]) and math.isfinite(delta[1])):
            return
        self.pan_offset = (self.pan_offset[0] + delta[0], self.pan_offset[1] + delta[1])

    def clamp_pan_offset(self, viewport_size: Point, zoomed_image_size: Point) -> None:
        """Restrict pan so at least ``pan_margin`` of the zoomed image stays visible.

        On each axis the image's leading edge sits at ``(view - zoomed) / 2 + pan``
        from the viewport origin, so the bound is ``|pan| <= (view + zoomed) / 2 - margin``.
        """
        margin = self.config.pan_margin
        clamped = []
        for pan, view, zoomed in zip(self.pan_offset, viewport_size, zoomed_image_size):
            limit = max(0.0, 0.5 * (view + zoomed) - zoomed * margin)
            clamped.append(min(max(pan, -limit), limit))
        self.pan_offset = (clamped[0], clamped[1])

    def center_on_image_point(
        self,
        image_pos: Point,
        image_size: ImageSize,
        viewport_size: Point,
        base_image_rect: Rect,
    ) -> None:
        """Pan so the continuous image point ``image_pos`` lands on the viewport center.

        ``image_pos`` uses pixel-edge coordinates (pixel ``i`` spans ``[i, i+1)``)
        and honors the Y flip. Zoom is unchanged.
        """
        rel_x = image_pos[0] / image_size[0]
        rel_y = 1.0 - image_pos[1] / image_size[1]
        zoomed_w = base_image_rect.width * self.zoom
        zoomed_h = base_image_rect.height * self.zoom
        # Screen position of the point inside the zoomed image.
        inner_x = rel_x * zoomed_w
        inner_y = rel_y * zoomed_h
        center_x = viewport_size[0] / 2.0
        center_y = viewport_size[1] / 2.0
        offset_x = (viewport_size[0] - zoomed_w) / 2.0
        offset_y = (viewport_size[1] - zoomed_h) / 2.0
        self.pan_offset = (center_x - inner_x - offset_x, center_y - inner_y - offset_y)

    # ------------------------------------------------------------------
    # Rotation and pivot
    # ------------------------------------------------------------------

    def set_rotation(self, degrees: float) -> None:
        """Set rotation (counter-clockwise about the pivot), wrapped into ``(-180, 180]``.

        Non-finite angles leave the rotation unchanged.
        """
        if not math.isfinite(degrees):
            return
        self.rotation_degrees = normalize_degrees(degrees)

    def rotate_by(self, delta_degrees: float) -> None:
        self.set_rotation(self.rotation_degrees + delta_degrees)

    def set_pivot_point(self, x: float, y: float) -> None:
        """Set the pivot in continuous image coordinates (not clamped to bounds)."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return
        self.pivot_point = (float(x), float(y))

    def set_pivot_to_center(self, width: int, height: int) -> None:
        self.pivot_point = ((width - 1) / 2.0, (height - 1) / 2.0)

    def pivot_to_screen(self, image_rect: Rect, image_size: ImageSize) -> Point:
        """Screen position of the pivot in the unrotated layout.

        Rotation is about this point, so it does not move when rotating.
        """
        return self._continuous_to_screen(self.pivot_point, image_rect, image_size)

    # ------------------------------------------------------------------
    # Rect and coordinate math
    # ------------------------------------------------------------------

    def calculate_image_rect(self, viewport_rect: Rect, base_display_size: Point) -> Rect:
        """Return the screen rect where the (unrotated) image is drawn."""
        base_w, base_h = base_display_size
        zoomed_w = base_w * self.zoom
        zoomed_h = base_h * self.zoom
        # Center in the viewport, keep the center fixed under zoom, then pan.
        offset_x = (viewport_rect.width - base_w) / 2.0 + (base_w - zoomed_w) / 2.0 + self.pan_offset[0]
        offset_y = (viewport_rect.height - base_h) / 2.0 + (base_h - zoomed_h) / 2.0 + self.pan_offset[1]
        return Rect(viewport_rect.x + offset_x, viewport_rect.y + offset_y, zoomed_w, zoomed_h)

    def screen_to_image(
        self, screen_pos: Point, image_rect: Rect, image_size: ImageSize
    ) -> Optional[Tuple[int, int]]:
        """Convert a screen position to image pixel indices, ignoring rotation.

        Returns None when ``screen_pos`` is outside ``image_rect``.
        """
        if not image_rect.contains(screen_pos):
            return None
        if image_rect.width <= 0 or image_rect.height <= 0:
            return None
        rel_x = (screen_pos[0] - image_rect.x) / image_rect.width
        # Screen Y grows downward but image row 0 is at the bottom.
        rel_y = 1.0 - (screen_pos[1] - image_rect.y) / image_rect.height
        # The far edge floors to the size itself; fold it into the last pixel.
        img_x = min(max(int(math.floor(rel_x * image_size[0])), 0), image_size[0] - 1)
        img_y = min(max(int(math.floor(rel_y * image_size[1])), 0), image_size[1] - 1)
        if 0 <= img_x < image_size[0] and 0 <= img_y < image_size[1]:
            return img_x, img_y
        return None

    def image_to_screen(self, image_pos: Tuple[int, int], image_rect: Rect, image_size: ImageSize) -> Point:
        """Screen position of the center of image pixel ``image_pos``, ignoring rotation."""
        return self._continuous_to_screen((float(image_pos[0]), float(image_pos[1])), image_rect, image_size)

    def _continuous_to_screen(self, image_pos: Point, image_rect: Rect, image_size: ImageSize) -> Point:
        rel_x = (image_pos[0] + 0.5) / image_size[0]
        rel_y = 1.0 - (image_pos[1] + 0.5) / image_size[1]
        return (
            image_rect.x + rel_x * image_rect.width,
            image_rect.y + rel_y * image_rect.height,
        )

    def screen_to_image_rotated(
        self, screen_pos: Point, image_rect: Rect, image_size: ImageSize
    ) -> Optional[Tuple[int, int]]:
        """Rotation-aware inverse mapping.

        The screen point is un-rotated about the pivot before the bounds test,
        since rotation changes which screen region covers the image.
        """
        if not self.is_rotated():
            return self.screen_to_image(screen_pos, image_rect, image_size)
        pivot = self.pivot_to_screen(image_rect, image_size)
        unrotated = rotate_point(screen_pos, pivot, -self.rotation_degrees)
        return self.screen_to_image(unrotated, image_rect, image_size)

    def image_to_screen_rotated(
        self, image_pos: Tuple[int, int], image_rect: Rect, image_size: ImageSize
    ) -> Point:
        """Screen position of a pixel center with rotation applied."""
        pos = self.image_to_screen(image_pos, image_rect, image_size)
        if not self.is_rotated():
            return pos
        pivot = self.pivot_to_screen(image_rect, image_size)
        return rotate_point(pos, pivot, self.rotation_degrees)

    def screen_to_image_for_pivot(
        self, screen_pos: Point, image_rect: Rect, image_size: ImageSize
    ) -> Optional[Point]:
        """Continuous image coordinate for placing a pivot at ``screen_pos``.

        Deliberately uses the unrotated layout: the pivot marker is drawn at
        ``pivot_to_screen``, which ignores rotation, so this keeps the marker
        exactly under the click. Returns None outside ``image_rect``.
        """
        if not image_rect.contains(screen_pos):
            return None
        if image_rect.width <= 0 or image_rect.height <= 0:
            return None
        rel_x = (screen_pos[0] - image_rect.x) / image_rect.width
        rel_y = 1.0 - (screen_pos[1] - image_rect.y) / image_rect.height
        return (rel_x * image_size[0] - 0.5, rel_y * image_size[1] - 0.5)

    def calculate_rotated_corners(self, image_rect: Rect, image_size: ImageSize) -> List[Point]:
        """Rotate the four corners of ``image_rect`` about the pivot's screen position.

        Order: top-left, top-right, bottom-right, bottom-left of the unrotated rect.
        """
        pivot = self.pivot_to_screen(image_rect, image_size)
        return [rotate_point(corner, pivot, self.rotation_degrees) for corner in image_rect.corners()]
