"""Pure geometry decisions for the floating inspector panel.

Every function here is a pure function of (pointer, viewport, geometry,
metrics). The state machine in machine.py sequences them; nothing here
touches storage or listeners.

// [LAW:single-enforcer] calculate_position() is the only corner → position mapping.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

from scanlens.geometry.model import Corner, GeometryMetrics, Orientation, Point, Size


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


# ─── Sizes and positions ──────────────────────────────────────────────


def calculate_bounded_size(
    current: float,
    delta: float,
    *,
    is_width: bool,
    viewport: Size,
    metrics: GeometryMetrics,
) -> int:
    """Clamp current + delta into [minimum, viewport - 2 x safe area].

    The viewport cap wins when the viewport is smaller than the minimum.
    """
    window = viewport.width if is_width else viewport.height
    minimum = metrics.min_width if is_width else metrics.min_height
    maximum = window - metrics.safe_area * 2
    return int(round(min(max(minimum, current + delta), maximum)))


def bounded_size(size: Size, viewport: Size, metrics: GeometryMetrics) -> Size:
    return Size(
        calculate_bounded_size(size.width, 0, is_width=True, viewport=viewport, metrics=metrics),
        calculate_bounded_size(size.height, 0, is_width=False, viewport=viewport, metrics=metrics),
    )


def calculate_position(corner: Corner, size: Size, viewport: Size, metrics: GeometryMetrics) -> Point:
    """Anchor position of an expanded panel in corner, inside the safe area."""
    safe = metrics.safe_area
    width = min(size.width, viewport.width - safe * 2)
    height = min(size.height, viewport.height - safe * 2)

    x = safe if corner.is_left else viewport.width - width - safe
    y = safe if corner.is_top else viewport.height - height - safe

    x = _clamp(x, safe, viewport.width - width - safe)
    y = _clamp(y, safe, viewport.height - height - safe)
    return Point(int(round(x)), int(round(y)))


def collapsed_position(
    corner: Corner,
    orientation: Orientation,
    viewport: Size,
    metrics: GeometryMetrics,
) -> Point:
    """Position that keeps the collapsed affordance flush with the viewport edge."""
    size = metrics.collapsed_size(orientation)
    safe = metrics.safe_area
    if orientation is Orientation.HORIZONTAL:
        x = -1 if corner.is_left else viewport.width - size.width + 1
        y = safe if corner.is_top else viewport.height - size.height - safe
    else:
        x = safe if corner.is_left else viewport.width - size.width - safe
        y = -1 if corner.is_top else viewport.height - size.height + 1
    return Point(x, y)


def centered_on_pointer(pointer: Point, size: Size, viewport: Size, metrics: GeometryMetrics) -> Point:
    """Centre size on pointer, clamped inside the safe margin."""
    safe = metrics.safe_area
    x = _clamp(pointer.x - size.width / 2, safe, viewport.width - size.width - safe)
    y = _clamp(pointer.y - size.height / 2, safe, viewport.height - size.height - safe)
    return Point(int(round(x)), int(round(y)))


# ─── Corner selection ─────────────────────────────────────────────────


def get_best_corner(
    pointer: Point,
    initial: Point | None,
    viewport: Size,
    threshold: float = 100,
) -> Corner:
    """Corner to snap to after a drag ends at pointer.

    A decisive horizontal movement picks the side by direction and the half
    by pointer height; a decisive vertical movement does the converse. With
    no decisive movement the pointer's quadrant wins.
    """
    dx = pointer.x - initial.x if initial is not None else 0
    dy = pointer.y - initial.y if initial is not None else 0
    in_bottom = pointer.y > viewport.height / 2
    in_right = pointer.x > viewport.width / 2

    if abs(dx) > threshold:
        return Corner.from_halves(top=not in_bottom, left=dx < 0)
    if abs(dy) > threshold:
        return Corner.from_halves(top=dy < 0, left=not in_right)
    return Corner.from_halves(top=not in_bottom, left=not in_right)


def quadrant_corner(position: Point, size: Size, viewport: Size) -> Corner:
    """Corner of the viewport quadrant holding the panel's centre."""
    center_x = position.x + size.width / 2
    center_y = position.y + size.height / 2
    return Corner.from_halves(
        top=center_y < viewport.height / 2,
        left=center_x < viewport.width / 2,
    )


# ─── Overflow ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Overflow:
    left: float
    right: float
    top: float
    bottom: float

    @property
    def horizontal(self) -> float:
        return max(self.left, self.right)

    @property
    def vertical(self) -> float:
        return max(self.top, self.bottom)


def measure_overflow(position: Point, size: Size, viewport: Size) -> Overflow:
    return Overflow(
        left=max(0, -position.x),
        right=max(0, position.x + size.width - viewport.width),
        top=max(0, -position.y),
        bottom=max(0, position.y + size.height - viewport.height),
    )


def outside_fraction(position: Point, size: Size, viewport: Size) -> float:
    """Fraction of the panel's area lying outside the viewport."""
    if size.area <= 0:
        return 0.0
    overflow = measure_overflow(position, size, viewport)
    horizontal = min(size.width, overflow.left + overflow.right)
    vertical = min(size.height, overflow.top + overflow.bottom)
    area_outside = horizontal * size.height + vertical * size.width - horizontal * vertical
    return area_outside / size.area


def readout_off_screen(position: Point, size: Size, viewport: Size, readout_width: int) -> bool:
    """True when the pinned readout at the panel's right edge is fully hidden."""
    right = position.x + size.width
    left = right - readout_width
    return (
        right <= 0
        or left >= viewport.width
        or position.y + size.height <= 0
        or position.y >= viewport.height
    )


def collapse_orientation(overflow: Overflow) -> Orientation:
    if overflow.horizontal > overflow.vertical:
        return Orientation.HORIZONTAL
    return Orientation.VERTICAL


def should_expand_from_collapsed(
    corner: Corner,
    orientation: Orientation,
    delta: Point,
    threshold: float,
) -> bool:
    """True when delta pulls the affordance outward, away from its edge."""
    if orientation is Orientation.HORIZONTAL:
        return delta.x > threshold if corner.is_left else delta.x < -threshold
    return delta.y > threshold if corner.is_top else delta.y < -threshold


def movement(start: Point, end: Point) -> float:
    return math.hypot(end.x - start.x, end.y - start.y)


# ─── Drag decisions ───────────────────────────────────────────────────


@dataclass(frozen=True)
class CollapseTarget:
    corner: Corner
    orientation: Orientation


@dataclass(frozen=True)
class DragMoveDecision:
    position: Point
    collapse: CollapseTarget | None = None


def decide_drag_move(
    start_pointer: Point,
    start_position: Point,
    pointer: Point,
    size: Size,
    viewport: Size,
    metrics: GeometryMetrics,
    *,
    readout_visible: bool = False,
) -> DragMoveDecision:
    """Live position for a drag frame, and whether it collapses the panel."""
    position = Point(
        start_position.x + pointer.x - start_pointer.x,
        start_position.y + pointer.y - start_pointer.y,
    )
    should_collapse = outside_fraction(position, size, viewport) >= metrics.collapse_area_fraction
    if not should_collapse and readout_visible and metrics.readout_width > 0:
        should_collapse = readout_off_screen(position, size, viewport, metrics.readout_width)
    if not should_collapse:
        return DragMoveDecision(position)

    overflow = measure_overflow(position, size, viewport)
    target = CollapseTarget(
        corner=quadrant_corner(position, size, viewport),
        orientation=collapse_orientation(overflow),
    )
    return DragMoveDecision(position, target)


class DragEndKind(enum.Enum):
    CLICK = "click"  # too little movement; return to the current anchor
    STAY = "stay"  # moved, but the best corner is the current one
    SNAP = "snap"  # animate to a new corner


@dataclass(frozen=True)
class DragEndDecision:
    kind: DragEndKind
    corner: Corner
    position: Point


def decide_drag_end(
    start_pointer: Point,
    pointer: Point,
    corner: Corner,
    anchor: Point,
    size: Size,
    viewport: Size,
    metrics: GeometryMetrics,
    *,
    focused: bool = False,
) -> DragEndDecision:
    if movement(start_pointer, pointer) < metrics.click_threshold:
        return DragEndDecision(DragEndKind.CLICK, corner, anchor)

    threshold = metrics.snap_threshold_focused if focused else metrics.snap_threshold
    best = get_best_corner(pointer, start_pointer, viewport, threshold)
    if best is corner:
        return DragEndDecision(DragEndKind.STAY, corner, anchor)
    return DragEndDecision(DragEndKind.SNAP, best, calculate_position(best, size, viewport, metrics))
