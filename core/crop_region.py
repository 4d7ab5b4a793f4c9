from dataclasses import dataclass
from enum import Enum

MIN_SIZE = 50.0

# Slack for float comparisons near the image edges
EPSILON = 1e-9


@dataclass(frozen=True)
class ImageFrame:
    """Natural pixel dimensions of the loaded source image."""
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid image dimensions: {self.width}x{self.height}")

    @property
    def short_side(self):
        return min(self.width, self.height)


@dataclass(frozen=True)
class CropRegion:
    """Square selection in source pixels: top-left corner plus side length."""
    x: float
    y: float
    size: float

    @property
    def right(self):
        return self.x + self.size

    @property
    def bottom(self):
        return self.y + self.size

    def is_within(self, frame: ImageFrame, min_size: float = MIN_SIZE) -> bool:
        min_size = effective_min_size(frame, min_size)
        return (
            self.x >= -EPSILON
            and self.y >= -EPSILON
            and self.right <= frame.width + EPSILON
            and self.bottom <= frame.height + EPSILON
            and self.size >= min_size - EPSILON
        )

    def to_box(self) -> tuple:
        """Integer (left, top, right, bottom) box. The only place rounding happens."""
        left = int(round(self.x))
        top = int(round(self.y))
        side = int(round(self.size))
        return (left, top, left + side, top + side)


class Corner(Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def moves_left(self):
        return self in (Corner.TOP_LEFT, Corner.BOTTOM_LEFT)

    @property
    def moves_top(self):
        return self in (Corner.TOP_LEFT, Corner.TOP_RIGHT)


def clamp(value, low, high):
    return max(low, min(high, value))


def effective_min_size(frame: ImageFrame, min_size: float = MIN_SIZE) -> float:
    # Images whose short side is below the minimum only admit their largest square
    return min(float(min_size), float(frame.short_side))


def initial_region(frame: ImageFrame) -> CropRegion:
    """Largest square that fits, centered on the image."""
    size = float(frame.short_side)
    return CropRegion(
        x=(frame.width - size) / 2,
        y=(frame.height - size) / 2,
        size=size,
    )


# ---- Move ----
def move_region(start: CropRegion, dx: float, dy: float, frame: ImageFrame) -> CropRegion:
    """Translate `start` by (dx, dy) source pixels, clamped so it stays on the image."""
    new_x = clamp(start.x + dx, 0.0, frame.width - start.size)
    new_y = clamp(start.y + dy, 0.0, frame.height - start.size)
    return CropRegion(new_x, new_y, start.size)


# ---- Resize ----
def corner_delta(corner: Corner, dx: float, dy: float) -> float:
    """
    Growth amount for a corner drag. Outward along the corner's diagonal grows,
    inward shrinks; the axis with the larger movement wins.
    """
    if corner is Corner.TOP_LEFT:
        return max(-dx, -dy)
    if corner is Corner.TOP_RIGHT:
        return max(dx, -dy)
    if corner is Corner.BOTTOM_LEFT:
        return max(-dx, dy)
    return max(dx, dy)


def max_size_for_corner(start: CropRegion, corner: Corner, frame: ImageFrame) -> float:
    """Largest side reachable while the corner opposite `corner` stays put."""
    room_x = start.right if corner.moves_left else frame.width - start.x
    room_y = start.bottom if corner.moves_top else frame.height - start.y
    return min(room_x, room_y)


def resize_region(start: CropRegion, corner: Corner, dx: float, dy: float,
                  frame: ImageFrame, min_size: float = MIN_SIZE) -> CropRegion:
    low = effective_min_size(frame, min_size)
    high = max(low, max_size_for_corner(start, corner, frame))
    new_size = clamp(start.size + corner_delta(corner, dx, dy), low, high)

    # Anchor the opposite corner
    new_x = start.right - new_size if corner.moves_left else start.x
    new_y = start.bottom - new_size if corner.moves_top else start.y

    # Only matters when the start region itself sat below the minimum
    new_x = clamp(new_x, 0.0, frame.width - new_size)
    new_y = clamp(new_y, 0.0, frame.height - new_size)
    return CropRegion(new_x, new_y, new_size)
