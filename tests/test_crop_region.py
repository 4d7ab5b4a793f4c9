import random

import pytest

from core.crop_region import (
    MIN_SIZE, Corner, CropRegion, ImageFrame, corner_delta, effective_min_size,
    initial_region, max_size_for_corner, move_region, resize_region,
)

FRAME = ImageFrame(1000, 600)


def assert_valid(region, frame=FRAME, min_size=MIN_SIZE):
    assert region.is_within(frame, min_size), region


def test_initial_region_is_largest_centered_square() -> None:
    assert initial_region(FRAME) == CropRegion(x=200, y=0, size=600)
    assert initial_region(ImageFrame(400, 900)) == CropRegion(x=0, y=250, size=400)


def test_image_frame_rejects_empty_dimensions() -> None:
    with pytest.raises(ValueError, match="Invalid image dimensions"):
        ImageFrame(0, 10)


def test_move_clamps_to_image_bounds() -> None:
    start = initial_region(FRAME)

    moved = move_region(start, -300, 100, FRAME)

    assert moved == CropRegion(x=0, y=0, size=600)


def test_move_inside_bounds_keeps_offset() -> None:
    start = CropRegion(100, 100, 300)

    assert move_region(start, 50, -40, FRAME) == CropRegion(150, 60, 300)
    assert move_region(start, 5000, 5000, FRAME) == CropRegion(700, 300, 300)


@pytest.mark.parametrize(
    "corner, dx, dy, expected",
    [
        (Corner.TOP_LEFT, -10, -30, 30),
        (Corner.TOP_LEFT, 20, 5, -5),
        (Corner.TOP_RIGHT, 40, -10, 40),
        (Corner.TOP_RIGHT, -20, 10, -10),
        (Corner.BOTTOM_LEFT, -5, 25, 25),
        (Corner.BOTTOM_LEFT, 10, -10, -10),
        (Corner.BOTTOM_RIGHT, 15, 30, 30),
        (Corner.BOTTOM_RIGHT, -15, -30, -15),
    ],
)
def test_corner_delta_uses_larger_axis_movement(corner, dx, dy, expected) -> None:
    assert corner_delta(corner, dx, dy) == expected


def test_bottom_right_growth_limited_by_image_height() -> None:
    start = initial_region(FRAME)

    resized = resize_region(start, Corner.BOTTOM_RIGHT, 50, 50, FRAME)

    assert resized == CropRegion(200, 0, 600)


def test_max_size_for_corner_uses_room_toward_moving_edges() -> None:
    start = CropRegion(100, 50, 300)

    assert max_size_for_corner(start, Corner.TOP_LEFT, FRAME) == 350
    assert max_size_for_corner(start, Corner.TOP_RIGHT, FRAME) == 350
    assert max_size_for_corner(start, Corner.BOTTOM_LEFT, FRAME) == 400
    assert max_size_for_corner(start, Corner.BOTTOM_RIGHT, FRAME) == 550


def test_resize_floors_at_min_size_and_keeps_opposite_corner() -> None:
    start = initial_region(FRAME)

    resized = resize_region(start, Corner.TOP_LEFT, 5000, 5000, FRAME)

    assert resized.size == MIN_SIZE
    assert resized.right == pytest.approx(start.right)
    assert resized.bottom == pytest.approx(start.bottom)
    assert_valid(resized)


def test_bottom_right_resize_keeps_origin() -> None:
    start = CropRegion(100, 100, 300)

    resized = resize_region(start, Corner.BOTTOM_RIGHT, 50, 20, FRAME)

    assert (resized.x, resized.y) == (100, 100)
    assert resized.size == 350


def test_top_left_resize_keeps_bottom_right_point() -> None:
    start = initial_region(FRAME)

    resized = resize_region(start, Corner.TOP_LEFT, 100, 100, FRAME)

    assert resized == CropRegion(300, 100, 500)
    assert (resized.right, resized.bottom) == (800, 600)


@pytest.mark.parametrize(
    "corner, fixed",
    [
        (Corner.TOP_RIGHT, lambda r: (r.x, r.bottom)),
        (Corner.BOTTOM_LEFT, lambda r: (r.right, r.y)),
    ],
)
def test_other_corners_anchor_their_opposite(corner, fixed) -> None:
    start = CropRegion(300, 150, 200)

    grown = resize_region(start, corner, 30 if corner is Corner.TOP_RIGHT else -30,
                          -30 if corner is Corner.TOP_RIGHT else 30, FRAME)

    assert grown.size == 230
    assert fixed(grown) == pytest.approx(fixed(start))


def test_image_smaller_than_min_size_keeps_its_largest_square() -> None:
    tiny = ImageFrame(40, 30)
    start = initial_region(tiny)

    assert effective_min_size(tiny) == 30
    resized = resize_region(start, Corner.BOTTOM_RIGHT, -20, -20, tiny)

    assert resized == CropRegion(5, 0, 30)
    assert_valid(resized, tiny)


def test_to_box_rounds_only_at_the_end() -> None:
    region = CropRegion(10.4, 20.6, 99.5)

    assert region.to_box() == (10, 21, 110, 121)


def test_random_gestures_never_break_invariants() -> None:
    rng = random.Random(1234)
    for frame in (FRAME, ImageFrame(600, 1000), ImageFrame(51, 2000), ImageFrame(333, 333)):
        region = initial_region(frame)
        for _ in range(500):
            dx = rng.uniform(-3000, 3000)
            dy = rng.uniform(-3000, 3000)
            if rng.random() < 0.4:
                region = move_region(region, dx, dy, frame)
            else:
                region = resize_region(region, rng.choice(list(Corner)), dx, dy, frame)
            assert_valid(region, frame)
