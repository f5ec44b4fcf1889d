"""Textual app hosting the floating inspector panel.

// [LAW:locality-or-seam] Thin coordinator: session → view, screen → machine,
//   session focus → machine snap threshold. No geometry or diff logic here.
"""

from __future__ import annotations

import logging

from textual import events
from textual.app import App, ComposeResult

from scanlens.config import InspectorConfig, load_config
from scanlens.core.context_resolver import ContextResolver
from scanlens.core.host import HostRuntime
from scanlens.core.session import InspectionSession, InspectionUpdate, SessionPhase, SessionStateChange
from scanlens.geometry.machine import GeometryStateMachine
from scanlens.geometry.model import Size
from scanlens.geometry.persistence import GeometryStore
from scanlens.io.storage import JsonFileStorage, PersistenceAdapter
from scanlens.tui.panel import InspectorPanel

logger = logging.getLogger(__name__)


def create_session(config: InspectorConfig) -> InspectionSession:
    return InspectionSession(
        resolver=ContextResolver(cache_enabled=config.context_cache),
        timeline_size=config.timeline_size,
    )


def create_store(config: InspectorConfig, adapter: PersistenceAdapter | None = None) -> GeometryStore | None:
    if adapter is None:
        if not config.persist_geometry:
            return None
        adapter = JsonFileStorage(config.storage_path)
    return GeometryStore(adapter)


class InspectorApp(App):
    """Inspector panel over a host UI."""

    CSS = """
    Screen {
        background: $background;
    }
    """

    def __init__(
        self,
        *,
        host: HostRuntime | None = None,
        session: InspectionSession | None = None,
        storage: PersistenceAdapter | None = None,
        config: InspectorConfig | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.config = config if config is not None else load_config(default_metrics="cells")
        self.session = session if session is not None else create_session(self.config)
        self.host = host
        self._storage = storage
        self.machine: GeometryStateMachine | None = None
        self.panel = InspectorPanel(id="inspector-panel")
        self._disposers: list = []

    def compose(self) -> ComposeResult:
        yield self.panel

    def on_mount(self) -> None:
        self.machine = GeometryStateMachine(
            Size(self.size.width, self.size.height),
            store=create_store(self.config, self._storage),
            metrics=self.config.geometry_metrics(),
            readout_visible=self.config.show_readout,
        )
        self.panel.bind(self.machine)
        self._disposers.append(self.session.on_inspection_update(self._on_inspection_update))
        self._disposers.append(self.session.on_state_change(self._on_session_state))
        self._disposers.append(self.machine.on_state_change(self._on_geometry_state))
        if self.host is not None:
            self.session.attach(self.host)

    def on_unmount(self) -> None:
        self.session.detach()
        for dispose in self._disposers:
            dispose()
        self._disposers.clear()

    def on_resize(self, event: events.Resize) -> None:
        if self.machine is not None:
            self.machine.resize(event.size.width, event.size.height)

    def action_collapse_panel(self) -> None:
        self.panel.collapse()

    def action_expand_panel(self) -> None:
        self.panel.expand()

    def _on_inspection_update(self, update: InspectionUpdate) -> None:
        self.panel.view.show_update(update)

    def _on_session_state(self, change: SessionStateChange) -> None:
        focused = change.phase is SessionPhase.FOCUSED
        if self.machine is not None:
            self.machine.inspection_focused = focused
        if not focused:
            self.panel.view.show_idle()

    def _on_geometry_state(self, state: str) -> None:
        if state == "storage-unavailable":
            self.notify("Panel layout will not be saved this session", severity="warning")
        logger.debug("Panel %s", state)
