"""Geometry state machine for the floating inspector panel.

States are {expanded, collapsed} x corner x {idle, dragging}. Pointer and
window events are transition methods; every decision is delegated to the
pure functions in layout.py.

Frames carry the visual transform for the consumer. Transient frames
(mid-drag) are applied directly and never persisted; settled frames are
animated and persisted, with the write as the last action of the
transition.

// [LAW:single-enforcer] _settle() is the only place geometry is committed.
// [LAW:no-shared-mutable-globals] Drag state is a DragState value, not closure locals.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from scanlens.geometry import layout
from scanlens.geometry.model import (
    PIXEL_METRICS,
    Corner,
    GeometryMetrics,
    Orientation,
    PanelGeometry,
    Point,
    Size,
)
from scanlens.geometry.persistence import GeometryStore

logger = logging.getLogger(__name__)

DEFAULT_CORNER = Corner.BOTTOM_RIGHT


class DragPhase(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COLLAPSED_DRAG = "collapsed-drag"


@dataclass(frozen=True)
class DragState:
    phase: DragPhase
    start_point: Point
    start_position: Point


@dataclass(frozen=True)
class GeometryFrame:
    """Visual transform for one geometry change."""

    position: Point
    size: Size
    animated: bool
    transient: bool
    reason: str


GeometryListener = Callable[[PanelGeometry, GeometryFrame], None]
StateListener = Callable[[str], None]

_IDLE_DRAG = DragState(DragPhase.IDLE, Point(0, 0), Point(0, 0))


def _point(x: float, y: float) -> Point:
    return Point(int(round(x)), int(round(y)))


def default_geometry(viewport: Size, metrics: GeometryMetrics) -> PanelGeometry:
    size = layout.bounded_size(Size(metrics.min_width, metrics.min_height), viewport, metrics)
    return PanelGeometry(
        corner=DEFAULT_CORNER,
        position=layout.calculate_position(DEFAULT_CORNER, size, viewport, metrics),
        size=size,
        last_dimensions=size,
    )


def fit_to_viewport(geometry: PanelGeometry, viewport: Size, metrics: GeometryMetrics) -> PanelGeometry:
    """Recompute size and position for the corner, keeping corner and collapse state."""
    if geometry.collapsed:
        return geometry.evolve(
            size=metrics.collapsed_size(geometry.orientation),
            position=layout.collapsed_position(geometry.corner, geometry.orientation, viewport, metrics),
        )
    size = layout.bounded_size(geometry.last_dimensions, viewport, metrics)
    return geometry.evolve(
        size=size,
        position=layout.calculate_position(geometry.corner, size, viewport, metrics),
    )


class GeometryStateMachine:
    """Tracks panel position, size, corner affinity and collapse state."""

    def __init__(
        self,
        viewport: Size,
        *,
        store: GeometryStore | None = None,
        metrics: GeometryMetrics = PIXEL_METRICS,
        readout_visible: bool = False,
    ):
        self.metrics = metrics
        self.readout_visible = readout_visible
        self.inspection_focused = False
        self._viewport = viewport
        self._store = store
        self._drag = _IDLE_DRAG
        self._listeners: list[GeometryListener] = []
        self._state_listeners: list[StateListener] = []
        self._storage_reported = False

        loaded = store.load() if store is not None else None
        if loaded is None:
            self._geometry = default_geometry(viewport, metrics)
        else:
            self._geometry = fit_to_viewport(loaded, viewport, metrics)

    # ─── Introspection ────────────────────────────────────────────────

    @property
    def geometry(self) -> PanelGeometry:
        return self._geometry

    def get_panel_geometry(self) -> PanelGeometry:
        return self._geometry

    @property
    def viewport(self) -> Size:
        return self._viewport

    @property
    def drag(self) -> DragState:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag.phase is not DragPhase.IDLE

    @property
    def storage_available(self) -> bool:
        return self._store is not None and self._store.available

    # ─── Subscriptions ────────────────────────────────────────────────

    def on_geometry_change(self, callback: GeometryListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def on_state_change(self, callback: StateListener) -> Callable[[], None]:
        self._state_listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._state_listeners:
                self._state_listeners.remove(callback)

        return _unsubscribe

    # ─── Pointer transitions ──────────────────────────────────────────

    def pointer_down(self, x: float, y: float) -> bool:
        """Begin a drag sequence. Returns False if one is already running."""
        if self.is_dragging:
            return False
        start = _point(x, y)
        phase = DragPhase.COLLAPSED_DRAG if self._geometry.collapsed else DragPhase.DRAGGING
        self._drag = DragState(phase, start, self._geometry.position)
        return True

    def pointer_move(self, x: float, y: float) -> None:
        pointer = _point(x, y)
        if self._drag.phase is DragPhase.DRAGGING:
            self._drag_move(pointer)
        elif self._drag.phase is DragPhase.COLLAPSED_DRAG:
            self._collapsed_drag_move(pointer)

    def pointer_up(self, x: float, y: float) -> None:
        drag = self._drag
        self._drag = _IDLE_DRAG
        if drag.phase is not DragPhase.DRAGGING:
            return

        geometry = self._geometry
        decision = layout.decide_drag_end(
            drag.start_point,
            _point(x, y),
            geometry.corner,
            geometry.position,
            geometry.size,
            self._viewport,
            self.metrics,
            focused=self.inspection_focused,
        )
        if decision.kind is not layout.DragEndKind.SNAP:
            self._emit(geometry, animated=True, transient=False, reason=decision.kind.value)
            return
        self._settle(
            geometry.evolve(corner=decision.corner, position=decision.position),
            reason="snap",
        )

    def cancel_drag(self) -> None:
        """Abort a drag and animate back to the settled position."""
        drag = self._drag
        self._drag = _IDLE_DRAG
        if drag.phase is DragPhase.DRAGGING:
            self._emit(self._geometry, animated=True, transient=False, reason="cancel")

    def _drag_move(self, pointer: Point) -> None:
        drag = self._drag
        geometry = self._geometry
        decision = layout.decide_drag_move(
            drag.start_point,
            drag.start_position,
            pointer,
            geometry.size,
            self._viewport,
            self.metrics,
            readout_visible=self.readout_visible,
        )
        if decision.collapse is None:
            frame = GeometryFrame(decision.position, geometry.size, animated=False, transient=True, reason="drag")
            self._notify(geometry, frame)
            return

        self._drag = _IDLE_DRAG
        self._collapse(decision.collapse.corner, decision.collapse.orientation, reason="drag-collapse")

    def _collapsed_drag_move(self, pointer: Point) -> None:
        drag = self._drag
        geometry = self._geometry
        delta = Point(pointer.x - drag.start_point.x, pointer.y - drag.start_point.y)
        if not layout.should_expand_from_collapsed(
            geometry.corner, geometry.orientation, delta, self.metrics.expand_threshold
        ):
            return

        size = layout.bounded_size(geometry.last_dimensions, self._viewport, self.metrics)
        position = layout.centered_on_pointer(pointer, size, self._viewport, self.metrics)
        self._drag = _IDLE_DRAG
        self._settle(
            geometry.evolve(collapsed=False, size=size, position=position),
            reason="drag-expand",
            state="expanded",
        )
        # Keep following the same pointer as an ordinary drag.
        self._drag = DragState(DragPhase.DRAGGING, pointer, position)

    # ─── Programmatic transitions ─────────────────────────────────────

    def request_collapse(self, orientation: Orientation = Orientation.HORIZONTAL) -> None:
        if self._geometry.collapsed:
            return
        self._drag = _IDLE_DRAG
        self._collapse(self._geometry.corner, orientation, reason="request-collapse")

    def request_expand(self) -> None:
        if not self._geometry.collapsed:
            return
        self._drag = _IDLE_DRAG
        self._settle(
            fit_to_viewport(self._geometry.evolve(collapsed=False), self._viewport, self.metrics),
            reason="request-expand",
            state="expanded",
        )

    def resize(self, width: int, height: int) -> None:
        """Viewport changed: refit without touching corner or collapse state."""
        self.cancel_drag()
        self._viewport = Size(int(width), int(height))
        fitted = fit_to_viewport(self._geometry, self._viewport, self.metrics)
        if fitted == self._geometry:
            return
        self._settle(fitted, reason="resize")

    def set_size(self, width: int, height: int) -> None:
        """Panel resized by the user. Ignored while collapsed."""
        if self._geometry.collapsed:
            return
        requested = Size(int(width), int(height))
        size = layout.bounded_size(requested, self._viewport, self.metrics)
        self._settle(
            self._geometry.evolve(
                size=size,
                last_dimensions=size,
                position=layout.calculate_position(self._geometry.corner, size, self._viewport, self.metrics),
            ),
            reason="set-size",
        )

    def reset(self) -> None:
        """Forget stored geometry and return to defaults."""
        self._drag = _IDLE_DRAG
        if self._store is not None:
            self._store.clear()
        self._settle(default_geometry(self._viewport, self.metrics), reason="reset")

    def _collapse(self, corner: Corner, orientation: Orientation, *, reason: str) -> None:
        geometry = self._geometry
        collapsed = geometry.evolve(
            corner=corner,
            collapsed=True,
            orientation=orientation,
            last_dimensions=geometry.size,
        )
        self._settle(fit_to_viewport(collapsed, self._viewport, self.metrics), reason=reason, state="collapsed")

    # ─── Commit and notify ────────────────────────────────────────────

    def _settle(self, geometry: PanelGeometry, *, reason: str, state: str | None = None) -> None:
        self._geometry = geometry
        self._emit(geometry, animated=True, transient=False, reason=reason)
        if state is not None:
            self._emit_state(state)
        # The write is always the last step of a settled transition.
        if self._store is not None and not self._store.save(geometry):
            self._report_storage_unavailable()

    def _emit(self, geometry: PanelGeometry, *, animated: bool, transient: bool, reason: str) -> None:
        frame = GeometryFrame(geometry.position, geometry.size, animated=animated, transient=transient, reason=reason)
        self._notify(geometry, frame)

    def _notify(self, geometry: PanelGeometry, frame: GeometryFrame) -> None:
        for listener in list(self._listeners):
            try:
                listener(geometry, frame)
            except Exception:
                logger.exception("Geometry listener failed")

    def _report_storage_unavailable(self) -> None:
        if self._storage_reported:
            return
        self._storage_reported = True
        self._emit_state("storage-unavailable")

    def _emit_state(self, state: str) -> None:
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Geometry state listener failed")
