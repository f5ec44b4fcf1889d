"""Tests for the pure geometry decisions in scanlens.geometry.layout."""

import pytest

from scanlens.geometry import layout
from scanlens.geometry.model import CELL_METRICS, PIXEL_METRICS, Corner, Orientation, Point, Size

VIEWPORT = Size(1280, 800)
PANEL = Size(550, 400)


# ─── Sizes and positions ──────────────────────────────────────────────


@pytest.mark.parametrize(
    "current, delta, window, expected",
    [
        (550, 100, 1280, 650),
        (550, 1000, 1280, 1232),
        (550, -200, 1280, 550),
        (550, 0, 400, 352),
    ],
)
def test_bounded_width(current, delta, window, expected):
    size = layout.calculate_bounded_size(
        current, delta, is_width=True, viewport=Size(window, 800), metrics=PIXEL_METRICS
    )
    assert size == expected


def test_bounded_height_uses_height_minimum():
    size = layout.calculate_bounded_size(
        100, 0, is_width=False, viewport=VIEWPORT, metrics=PIXEL_METRICS
    )
    assert size == 400


@pytest.mark.parametrize(
    "corner, expected",
    [
        (Corner.TOP_LEFT, Point(24, 24)),
        (Corner.TOP_RIGHT, Point(706, 24)),
        (Corner.BOTTOM_LEFT, Point(24, 376)),
        (Corner.BOTTOM_RIGHT, Point(706, 376)),
    ],
)
def test_calculate_position_anchors_inside_safe_area(corner, expected):
    assert layout.calculate_position(corner, PANEL, VIEWPORT, PIXEL_METRICS) == expected


def test_calculate_position_clamps_oversized_panels():
    position = layout.calculate_position(Corner.BOTTOM_RIGHT, Size(2000, 2000), VIEWPORT, PIXEL_METRICS)
    assert position == Point(24, 24)


@pytest.mark.parametrize(
    "corner, orientation, expected",
    [
        (Corner.TOP_LEFT, Orientation.HORIZONTAL, Point(-1, 24)),
        (Corner.BOTTOM_RIGHT, Orientation.HORIZONTAL, Point(1261, 728)),
        (Corner.TOP_RIGHT, Orientation.VERTICAL, Point(1208, -1)),
        (Corner.BOTTOM_LEFT, Orientation.VERTICAL, Point(24, 781)),
    ],
)
def test_collapsed_position_hugs_the_edge(corner, orientation, expected):
    assert layout.collapsed_position(corner, orientation, VIEWPORT, PIXEL_METRICS) == expected


def test_centered_on_pointer_is_clamped():
    assert layout.centered_on_pointer(Point(80, 300), PANEL, VIEWPORT, PIXEL_METRICS) == Point(24, 100)
    assert layout.centered_on_pointer(Point(640, 400), PANEL, VIEWPORT, PIXEL_METRICS) == Point(365, 200)


# ─── Corner selection ─────────────────────────────────────────────────


@pytest.mark.parametrize(
    "pointer, initial, expected",
    [
        (Point(1000, 700), Point(900, 700), Corner.BOTTOM_RIGHT),
        (Point(300, 100), Point(600, 100), Corner.TOP_LEFT),
        (Point(1000, 200), Point(990, 400), Corner.TOP_RIGHT),
        (Point(100, 700), Point(110, 690), Corner.BOTTOM_LEFT),
        (Point(1000, 100), None, Corner.TOP_RIGHT),
    ],
)
def test_get_best_corner(pointer, initial, expected):
    assert layout.get_best_corner(pointer, initial, VIEWPORT, threshold=40) == expected


def test_horizontal_movement_wins_over_vertical():
    corner = layout.get_best_corner(Point(200, 700), Point(700, 100), VIEWPORT, threshold=40)
    assert corner is Corner.BOTTOM_LEFT


# ─── Overflow and collapse ────────────────────────────────────────────


def test_outside_fraction_counts_overlap_once():
    fraction = layout.outside_fraction(Point(-300, -200), PANEL, VIEWPORT)
    assert fraction == pytest.approx(170000 / 220000)


def test_outside_fraction_of_empty_panel_is_zero():
    assert layout.outside_fraction(Point(-10, -10), Size(0, 0), VIEWPORT) == 0.0


def test_drag_far_up_and_left_collapses_to_top_left_horizontal():
    decision = layout.decide_drag_move(
        Point(500, 500), Point(100, 100), Point(100, 200), PANEL, VIEWPORT, PIXEL_METRICS
    )

    assert decision.position == Point(-300, -200)
    assert decision.collapse == layout.CollapseTarget(Corner.TOP_LEFT, Orientation.HORIZONTAL)


def test_small_drag_only_moves():
    decision = layout.decide_drag_move(
        Point(500, 500), Point(100, 100), Point(510, 520), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision == layout.DragMoveDecision(Point(110, 120))


def test_exactly_threshold_area_outside_collapses():
    # 140 of 400 rows above the top edge: 35% of the area.
    decision = layout.decide_drag_move(
        Point(500, 500), Point(100, 0), Point(500, 360), PANEL, VIEWPORT, PIXEL_METRICS
    )

    assert layout.outside_fraction(decision.position, PANEL, VIEWPORT) == PIXEL_METRICS.collapse_area_fraction
    assert decision.collapse == layout.CollapseTarget(Corner.TOP_LEFT, Orientation.VERTICAL)


def test_just_under_threshold_only_moves():
    decision = layout.decide_drag_move(
        Point(500, 500), Point(100, 0), Point(500, 361), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision == layout.DragMoveDecision(Point(100, -139))


def test_drag_past_bottom_edge_collapses_vertically():
    decision = layout.decide_drag_move(
        Point(0, 0), Point(706, 376), Point(-200, 250), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision.collapse == layout.CollapseTarget(Corner.BOTTOM_RIGHT, Orientation.VERTICAL)


def test_hidden_readout_collapses_before_area_threshold():
    args = (Point(0, 0), Point(706, 376), Point(124, 0), PANEL, VIEWPORT, PIXEL_METRICS)

    assert layout.decide_drag_move(*args).collapse is None
    decision = layout.decide_drag_move(*args, readout_visible=True)
    assert decision.collapse == layout.CollapseTarget(Corner.BOTTOM_RIGHT, Orientation.HORIZONTAL)


def test_zero_readout_width_disables_readout_collapse():
    metrics = PIXEL_METRICS.with_overrides(readout_width=0)
    decision = layout.decide_drag_move(
        Point(0, 0), Point(706, 376), Point(124, 0), PANEL, VIEWPORT, metrics, readout_visible=True
    )
    assert decision.collapse is None


@pytest.mark.parametrize(
    "corner, orientation, delta, expected",
    [
        (Corner.TOP_LEFT, Orientation.HORIZONTAL, Point(60, 0), True),
        (Corner.TOP_LEFT, Orientation.HORIZONTAL, Point(40, 0), False),
        (Corner.TOP_LEFT, Orientation.HORIZONTAL, Point(-80, 0), False),
        (Corner.BOTTOM_RIGHT, Orientation.HORIZONTAL, Point(-60, 0), True),
        (Corner.TOP_RIGHT, Orientation.VERTICAL, Point(0, 60), True),
        (Corner.BOTTOM_LEFT, Orientation.VERTICAL, Point(0, -60), True),
        (Corner.BOTTOM_LEFT, Orientation.VERTICAL, Point(0, 60), False),
    ],
)
def test_should_expand_from_collapsed(corner, orientation, delta, expected):
    assert layout.should_expand_from_collapsed(corner, orientation, delta, 50) is expected


# ─── Drag end ─────────────────────────────────────────────────────────


def test_short_movement_is_a_click():
    decision = layout.decide_drag_end(
        Point(800, 400), Point(830, 420), Corner.BOTTOM_RIGHT, Point(706, 376), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision == layout.DragEndDecision(layout.DragEndKind.CLICK, Corner.BOTTOM_RIGHT, Point(706, 376))


def test_long_movement_snaps_to_new_corner():
    decision = layout.decide_drag_end(
        Point(1000, 700), Point(400, 400), Corner.BOTTOM_RIGHT, Point(706, 376), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision == layout.DragEndDecision(layout.DragEndKind.SNAP, Corner.TOP_LEFT, Point(24, 24))


def test_movement_back_to_same_corner_stays():
    decision = layout.decide_drag_end(
        Point(1000, 700), Point(1000, 780), Corner.BOTTOM_RIGHT, Point(706, 376), PANEL, VIEWPORT, PIXEL_METRICS
    )
    assert decision.kind is layout.DragEndKind.STAY


def test_focused_inspection_raises_snap_threshold():
    args = (Point(770, 700), Point(700, 700), Corner.BOTTOM_RIGHT, Point(706, 376), PANEL, VIEWPORT, PIXEL_METRICS)

    assert layout.decide_drag_end(*args).kind is layout.DragEndKind.SNAP
    assert layout.decide_drag_end(*args, focused=True).kind is layout.DragEndKind.STAY


def test_cell_metrics_fit_a_small_terminal():
    viewport = Size(120, 40)
    size = layout.bounded_size(Size(CELL_METRICS.min_width, CELL_METRICS.min_height), viewport, CELL_METRICS)

    assert size == Size(40, 12)
    assert layout.calculate_position(Corner.BOTTOM_RIGHT, size, viewport, CELL_METRICS) == Point(79, 27)
