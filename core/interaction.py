"""
Pointer handling for the square crop selector.

Everything here works on plain floats so the canvas widget only has to
forward pointer positions relative to the displayed image box.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from core.crop_region import (
    MIN_SIZE, Corner, CropRegion, ImageFrame, initial_region, move_region, resize_region,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class DragMode(Enum):
    MOVE = "move"
    RESIZE = "resize"


@dataclass(frozen=True)
class DragSession:
    mode: DragMode
    start_region: CropRegion
    start_pointer: Point
    corner: Optional[Corner] = None


def scale_factor(frame: ImageFrame, displayed_width: float, displayed_height: float):
    """Returns (scale_x, scale_y) mapping displayed pixels to source pixels, or None."""
    if displayed_width <= 0 or displayed_height <= 0:
        return None
    return frame.width / displayed_width, frame.height / displayed_height


class CropController:
    def __init__(self, min_size: float = MIN_SIZE):
        self.min_size = min_size
        self.frame: Optional[ImageFrame] = None
        self.region: Optional[CropRegion] = None
        self.session: Optional[DragSession] = None

    def set_frame(self, frame: Optional[ImageFrame]):
        """Replace the image wholesale. The region restarts at the centered square."""
        self.session = None
        self.frame = frame
        self.region = initial_region(frame) if frame else None

    def clear(self):
        self.set_frame(None)

    @property
    def is_dragging(self):
        return self.session is not None

    # ---- Gesture start ----
    def begin_move(self, pointer: Point) -> bool:
        if not self.frame:
            return False
        self.session = DragSession(DragMode.MOVE, self.region, tuple(pointer))
        return True

    def begin_resize(self, corner: Corner, pointer: Point) -> bool:
        if not self.frame:
            return False
        self.session = DragSession(DragMode.RESIZE, self.region, tuple(pointer), corner)
        return True

    def hit_test(self, point: Point, displayed_width: float, displayed_height: float,
                 handle_radius: float = 8.0):
        """
        Classify a displayed-space point as a handle, the region body or nothing.

        Returns ("resize", corner), ("move", None) or None. Handles win over the
        body so that a press on a corner always resizes.
        """
        if not self.frame:
            return None
        scale = scale_factor(self.frame, displayed_width, displayed_height)
        if scale is None:
            return None
        sx, sy = scale
        r = self.region
        left, top = r.x / sx, r.y / sy
        right, bottom = r.right / sx, r.bottom / sy
        px, py = point

        corners = {
            Corner.TOP_LEFT: (left, top),
            Corner.TOP_RIGHT: (right, top),
            Corner.BOTTOM_LEFT: (left, bottom),
            Corner.BOTTOM_RIGHT: (right, bottom),
        }
        for corner, (cx, cy) in corners.items():
            if abs(px - cx) <= handle_radius and abs(py - cy) <= handle_radius:
                return ("resize", corner)

        if left <= px <= right and top <= py <= bottom:
            return ("move", None)
        return None

    def begin_at(self, point: Point, displayed_width: float, displayed_height: float,
                 handle_radius: float = 8.0) -> bool:
        """Start whichever gesture the point selects. False when it selects none."""
        hit = self.hit_test(point, displayed_width, displayed_height, handle_radius)
        if hit is None:
            return False
        mode, corner = hit
        if mode == "resize":
            return self.begin_resize(corner, point)
        return self.begin_move(point)

    # ---- Gesture update ----
    def pointer_move(self, pointer: Point, displayed_width: float, displayed_height: float):
        """
        Apply a pointer move to the active drag and commit the result.

        The displayed size is passed on every call since the layout box can
        change mid-gesture (window resize). Returns the new region, or None if
        the event was ignored.
        """
        if not self.frame or not self.session:
            return None
        scale = scale_factor(self.frame, displayed_width, displayed_height)
        if scale is None:
            logger.debug("Ignoring pointer move on degenerate display box %sx%s",
                         displayed_width, displayed_height)
            return None

        sx, sy = scale
        start_px, start_py = self.session.start_pointer
        dx = (pointer[0] - start_px) * sx
        dy = (pointer[1] - start_py) * sy

        if self.session.mode is DragMode.MOVE:
            self.region = move_region(self.session.start_region, dx, dy, self.frame)
        else:
            self.region = resize_region(self.session.start_region, self.session.corner,
                                        dx, dy, self.frame, self.min_size)
        return self.region

    def end(self):
        """Pointer up or pointer left the surface. The region stays as it is."""
        self.session = None
