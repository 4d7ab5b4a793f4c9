import pytest

from core.crop_region import Corner, CropRegion, ImageFrame
from core.interaction import CropController, DragMode, scale_factor


@pytest.fixture
def controller():
    controller = CropController()
    controller.set_frame(ImageFrame(1000, 600))
    return controller


def test_scale_factor_maps_display_to_source() -> None:
    assert scale_factor(ImageFrame(1000, 600), 500, 300) == (2.0, 2.0)
    assert scale_factor(ImageFrame(1000, 600), 0, 300) is None


def test_set_frame_starts_with_centered_square(controller) -> None:
    assert controller.region == CropRegion(200, 0, 600)
    assert controller.session is None


def test_events_without_image_are_ignored() -> None:
    controller = CropController()

    assert controller.begin_move((10, 10)) is False
    assert controller.begin_resize(Corner.TOP_LEFT, (10, 10)) is False
    assert controller.pointer_move((20, 20), 100, 100) is None
    assert controller.hit_test((10, 10), 100, 100) is None
    assert controller.region is None


def test_move_drag_clamps_at_scale_one(controller) -> None:
    controller.begin_move((500, 300))

    region = controller.pointer_move((200, 400), 1000, 600)

    assert region == CropRegion(0, 0, 600)
    assert controller.region == region


def test_move_drag_converts_screen_delta_by_scale(controller) -> None:
    controller.begin_move((0, 0))

    assert controller.pointer_move((10, 0), 500, 300) == CropRegion(220, 0, 600)


def test_scale_is_recomputed_on_every_move(controller) -> None:
    controller.begin_move((0, 0))
    controller.pointer_move((10, 0), 500, 300)

    # Window got larger mid-drag: same pointer, half the source delta
    assert controller.pointer_move((10, 0), 1000, 600) == CropRegion(210, 0, 600)


def test_resize_drag_uses_start_snapshot(controller) -> None:
    controller.begin_resize(Corner.TOP_LEFT, (100, 0))
    controller.pointer_move((150, 50), 1000, 600)

    region = controller.pointer_move((200, 100), 1000, 600)

    assert region == CropRegion(300, 100, 500)
    assert controller.session.mode is DragMode.RESIZE


def test_end_clears_session_without_changing_region(controller) -> None:
    controller.begin_move((0, 0))
    moved = controller.pointer_move((-50, 0), 1000, 600)

    controller.end()

    assert controller.session is None
    assert controller.region == moved
    assert controller.pointer_move((-300, 0), 1000, 600) is None
    assert controller.region == moved


def test_degenerate_display_box_is_ignored(controller) -> None:
    controller.begin_move((0, 0))

    assert controller.pointer_move((10, 10), 0, 0) is None
    assert controller.region == CropRegion(200, 0, 600)


def test_hit_test_prefers_handles_over_body(controller) -> None:
    # Displayed at half size: region spans x 100..400, y 0..300
    assert controller.hit_test((101, 2), 500, 300) == ("resize", Corner.TOP_LEFT)
    assert controller.hit_test((399, 298), 500, 300) == ("resize", Corner.BOTTOM_RIGHT)
    assert controller.hit_test((250, 150), 500, 300) == ("move", None)
    assert controller.hit_test((50, 150), 500, 300) is None


def test_begin_at_starts_matching_gesture(controller) -> None:
    assert controller.begin_at((400, 0), 500, 300) is True
    assert controller.session.corner is Corner.TOP_RIGHT

    controller.end()
    assert controller.begin_at((250, 150), 500, 300) is True
    assert controller.session.mode is DragMode.MOVE

    controller.end()
    assert controller.begin_at((20, 20), 500, 300) is False
    assert controller.session is None


def test_new_frame_replaces_region_and_ends_drag(controller) -> None:
    controller.begin_move((0, 0))

    controller.set_frame(ImageFrame(300, 500))

    assert controller.session is None
    assert controller.region == CropRegion(0, 100, 300)
