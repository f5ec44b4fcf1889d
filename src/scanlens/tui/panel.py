"""Floating inspector panel widget.

The panel never decides geometry itself. Mouse gestures on the drag handle
(or on the collapsed chevron) become pointer transitions on a
GeometryStateMachine, and every frame the machine emits is applied to
styles.offset / width / height.

// [LAW:single-enforcer] _apply_frame() is the only writer of panel styles.
"""

from __future__ import annotations

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widget import Widget
from textual.widgets import Static

from scanlens.geometry.machine import GeometryFrame, GeometryStateMachine
from scanlens.geometry.model import PanelGeometry
from scanlens.tui.chip import Chip, ChevronChip
from scanlens.tui.inspector_view import InspectorView


class _PointerSource:
    """Mixin: forwards captured mouse gestures to the owning panel."""

    _panel: InspectorPanel | None = None
    _pressed: bool = False

    def on_mouse_down(self, event: events.MouseDown) -> None:
        panel = self._panel
        if panel is None or not panel.begin_drag(event.screen_x, event.screen_y):
            return
        self._pressed = True
        self.capture_mouse()

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self._pressed and self._panel is not None:
            self._panel.drag_to(event.screen_x, event.screen_y)

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if not self._pressed:
            return
        self._pressed = False
        self.release_mouse()
        if self._panel is not None:
            self._panel.end_drag(event.screen_x, event.screen_y)


class DragHandle(_PointerSource, Static):
    """Title bar. The only part of the expanded panel that starts a drag."""

    DEFAULT_CSS = """
    DragHandle {
        width: 1fr;
        height: 1;
        background: $primary-darken-1;
        color: $text;
        text-style: bold;
    }
    """

    def __init__(self, panel: InspectorPanel, title: str = "scanlens", **kwargs):
        super().__init__(title, **kwargs)
        self._panel = panel


class CollapsedChevron(_PointerSource, ChevronChip):
    def __init__(self, panel: InspectorPanel, **kwargs):
        super().__init__("", **kwargs)
        self._panel = panel

    async def on_click(self, event) -> None:
        event.stop()
        if self._panel is not None:
            self._panel.expand()


class InspectorPanel(Widget):
    """Draggable, edge-collapsing panel hosting an InspectorView."""

    DEFAULT_CSS = """
    InspectorPanel {
        width: 40;
        height: 12;
        background: $panel;
        border: round $primary;
    }

    InspectorPanel.-collapsed {
        border: none;
        background: $accent;
    }

    InspectorPanel #header-row {
        height: 1;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._machine: GeometryStateMachine | None = None
        self._unsubscribe = None
        self.last_frame: GeometryFrame | None = None
        self.handle = DragHandle(self, id="drag-handle")
        self.view = InspectorView(id="inspector-view")
        self.chevron = CollapsedChevron(self, id="collapsed-chevron")
        self.header_row = Horizontal(
            self.handle,
            Chip("_", action="app.collapse_panel", id="collapse-chip"),
            id="header-row",
        )

    def compose(self) -> ComposeResult:
        yield self.header_row
        yield self.view
        yield self.chevron

    @property
    def machine(self) -> GeometryStateMachine | None:
        return self._machine

    def bind(self, machine: GeometryStateMachine) -> None:
        """Follow machine and apply its current geometry immediately."""
        self.unbind()
        self._machine = machine
        self._unsubscribe = machine.on_geometry_change(self._apply_frame)
        geometry = machine.geometry
        self._apply_frame(
            geometry,
            GeometryFrame(geometry.position, geometry.size, animated=False, transient=False, reason="bind"),
        )

    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._machine = None

    def on_unmount(self) -> None:
        self.unbind()

    # ─── Gestures ─────────────────────────────────────────────────────

    def begin_drag(self, x: float, y: float) -> bool:
        return self._machine is not None and self._machine.pointer_down(x, y)

    def drag_to(self, x: float, y: float) -> None:
        if self._machine is not None:
            self._machine.pointer_move(x, y)

    def end_drag(self, x: float, y: float) -> None:
        if self._machine is not None:
            self._machine.pointer_up(x, y)

    def collapse(self) -> None:
        if self._machine is not None:
            self._machine.request_collapse()

    def expand(self) -> None:
        if self._machine is not None:
            self._machine.request_expand()

    # ─── Rendering ────────────────────────────────────────────────────

    def _apply_frame(self, geometry: PanelGeometry, frame: GeometryFrame) -> None:
        self.last_frame = frame
        self.styles.offset = (frame.position.x, frame.position.y)
        self.styles.width = frame.size.width
        self.styles.height = frame.size.height

        collapsed = geometry.collapsed
        self.set_class(collapsed, "-collapsed")
        self.header_row.display = not collapsed
        self.view.display = not collapsed
        self.chevron.display = collapsed
        if collapsed:
            self.chevron.point(geometry.corner, geometry.orientation)
