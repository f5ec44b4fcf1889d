"""Panel geometry value types and metrics.

Pure data, no behavior beyond small derivations.

// [LAW:one-source-of-truth] GeometryMetrics carries every size/threshold constant;
//   PIXEL_METRICS and CELL_METRICS are the two shipped unit systems.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace


class Corner(enum.Enum):
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def is_top(self) -> bool:
        return self in (Corner.TOP_LEFT, Corner.TOP_RIGHT)

    @property
    def is_left(self) -> bool:
        return self in (Corner.TOP_LEFT, Corner.BOTTOM_LEFT)

    @classmethod
    def from_halves(cls, *, top: bool, left: bool) -> Corner:
        if top:
            return cls.TOP_LEFT if left else cls.TOP_RIGHT
        return cls.BOTTOM_LEFT if left else cls.BOTTOM_RIGHT


class Orientation(enum.Enum):
    """Which way the collapsed affordance is laid out.

    HORIZONTAL hugs a left/right edge, VERTICAL hugs a top/bottom edge.
    """

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class GeometryMetrics:
    """Sizes and thresholds in the host's units (pixels or terminal cells)."""

    safe_area: int
    min_width: int
    min_height: int
    collapsed_horizontal: Size
    collapsed_vertical: Size
    collapse_area_fraction: float = 0.35
    click_threshold: float = 60
    snap_threshold: float = 40
    snap_threshold_focused: float = 80
    expand_threshold: float = 50
    readout_width: int = 100

    def collapsed_size(self, orientation: Orientation) -> Size:
        if orientation is Orientation.HORIZONTAL:
            return self.collapsed_horizontal
        return self.collapsed_vertical

    def with_overrides(self, **changes) -> GeometryMetrics:
        return replace(self, **changes)


PIXEL_METRICS = GeometryMetrics(
    safe_area=24,
    min_width=550,
    min_height=400,
    collapsed_horizontal=Size(20, 48),
    collapsed_vertical=Size(48, 20),
)

# Terminal cells are roughly twice as tall as they are wide.
CELL_METRICS = GeometryMetrics(
    safe_area=1,
    min_width=40,
    min_height=12,
    collapsed_horizontal=Size(3, 3),
    collapsed_vertical=Size(6, 1),
    click_threshold=4,
    snap_threshold=3,
    snap_threshold_focused=6,
    expand_threshold=4,
    readout_width=8,
)

METRICS_BY_NAME: dict[str, GeometryMetrics] = {
    "pixels": PIXEL_METRICS,
    "cells": CELL_METRICS,
}


@dataclass(frozen=True)
class PanelGeometry:
    """Settled panel geometry.

    When collapsed, size is the affordance size for orientation. When
    expanded, size is bounded by the viewport. last_dimensions is the most
    recent expanded size, restored on expand.
    """

    corner: Corner
    position: Point
    size: Size
    last_dimensions: Size
    collapsed: bool = False
    orientation: Orientation = Orientation.HORIZONTAL

    def evolve(self, **changes) -> PanelGeometry:
        return replace(self, **changes)
