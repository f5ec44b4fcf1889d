"""Inspection session: turns render notifications into InspectionUpdates.

One session follows one focused render node at a time:

    IDLE ──focus(node)──▶ FOCUSED ──detached / unmounted / cleared──▶ IDLE

A focus whose component kind differs from the previous one resets every
tracker and always emits (initial population). Later renders of the same
component accumulate into the trackers and emit only when something changed.

// [LAW:no-shared-mutable-globals] Trackers, context cache and timeline are owned
//   by the session instance; several sessions can run side by side.
// [LAW:single-enforcer] _process() is the only path that emits an update.
"""

from __future__ import annotations

import enum
import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field

from scanlens.core import collectors
from scanlens.core.change_tracker import ChangeTracker, TrackerSet
from scanlens.core.context_resolver import ContextResolver
from scanlens.core.host import HostRuntime, Unsubscribe
from scanlens.core.render_node import ComponentTag, RenderNode, display_name_of
from scanlens.core.values import safe_value

logger = logging.getLogger(__name__)

DEFAULT_TIMELINE_SIZE = 1000


class SessionPhase(enum.Enum):
    IDLE = "idle"
    FOCUSED = "focused"


@dataclass(frozen=True)
class SectionEntry:
    name: str | int
    value: object


@dataclass
class SectionSnapshot:
    current: list[SectionEntry] = field(default_factory=list)
    changed_keys: set[str | int] = field(default_factory=set)
    change_counts: dict[str | int, int] = field(default_factory=dict)

    def value_of(self, name: str | int, default: object = None) -> object:
        for entry in self.current:
            if entry.name == name:
                return entry.value
        return default


@dataclass(frozen=True)
class NodeInfo:
    identity: int
    display_name: str
    tag: ComponentTag

    @classmethod
    def from_node(cls, node: RenderNode) -> NodeInfo:
        return cls(identity=id(node), display_name=display_name_of(node), tag=node.tag)


@dataclass(frozen=True)
class InspectionData:
    props: SectionSnapshot
    state: SectionSnapshot
    context: SectionSnapshot

    @property
    def has_changes(self) -> bool:
        return bool(self.props.changed_keys or self.state.changed_keys or self.context.changed_keys)


@dataclass(frozen=True)
class InspectionUpdate:
    """The unit delivered to consumers per inspected render."""

    timestamp: float
    node: NodeInfo
    props: SectionSnapshot
    state: SectionSnapshot
    context: SectionSnapshot
    state_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionStateChange:
    phase: SessionPhase
    reason: str


UpdateListener = Callable[[InspectionUpdate], None]
StateListener = Callable[[SessionStateChange], None]


class InspectionSession:
    """Owns the change trackers for one inspector instance."""

    def __init__(
        self,
        *,
        resolver: ContextResolver | None = None,
        timeline_size: int = DEFAULT_TIMELINE_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        self._resolver = resolver if resolver is not None else ContextResolver()
        self._trackers = TrackerSet(clock=clock)
        self._clock = clock
        self._timeline: deque[InspectionUpdate] = deque(maxlen=max(1, timeline_size))
        self._phase = SessionPhase.IDLE
        self._focused: RenderNode | None = None
        self._host: HostRuntime | None = None
        self._host_unsubscribe: Unsubscribe | None = None
        self._update_listeners: list[UpdateListener] = []
        self._state_listeners: list[StateListener] = []

    # ─── Introspection ────────────────────────────────────────────────

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def focused_node(self) -> RenderNode | None:
        return self._focused

    @property
    def trackers(self) -> TrackerSet:
        return self._trackers

    @property
    def resolver(self) -> ContextResolver:
        return self._resolver

    @property
    def timeline(self) -> list[InspectionUpdate]:
        return list(self._timeline)

    # ─── Subscriptions ────────────────────────────────────────────────

    def on_inspection_update(self, callback: UpdateListener) -> Unsubscribe:
        self._update_listeners.append(callback)
        return _remover(self._update_listeners, callback)

    def on_state_change(self, callback: StateListener) -> Unsubscribe:
        self._state_listeners.append(callback)
        return _remover(self._state_listeners, callback)

    # ─── Host wiring ──────────────────────────────────────────────────

    def attach(self, host: HostRuntime) -> None:
        """Follow host render notifications. Replaces any previous host."""
        self.detach()
        self._host = host
        self._host_unsubscribe = host.on_node_updated(self._on_host_update)
        focused = host.get_focused_node()
        if focused is not None:
            self.focus(focused)

    def detach(self) -> None:
        if self._host_unsubscribe is not None:
            self._host_unsubscribe()
        self._host_unsubscribe = None
        self._host = None

    def _on_host_update(self, node: RenderNode | None) -> None:
        focused = self._host.get_focused_node() if self._host is not None else node
        if focused is None:
            if self._phase is SessionPhase.FOCUSED:
                self.clear_focus(reason="focus-lost")
            return
        if focused is not self._focused:
            self.focus(focused)
            return
        if node is focused:
            self.handle_node_updated(node)

    # ─── Transitions ──────────────────────────────────────────────────

    def focus(self, node: RenderNode | None) -> InspectionUpdate | None:
        """Focus node and process it as a render of the focused component."""
        if node is None:
            self.clear_focus()
            return None
        if not node.is_attached():
            self.clear_focus(reason="detached")
            return None

        previous_phase = self._phase
        previous_node = self._focused
        self._focused = node
        self._phase = SessionPhase.FOCUSED
        if previous_phase is SessionPhase.IDLE:
            self._emit_state(SessionStateChange(SessionPhase.FOCUSED, "focused"))
        elif previous_node is not node:
            self._emit_state(SessionStateChange(SessionPhase.FOCUSED, "focus-changed"))
        return self._process(node)

    def handle_node_updated(self, node: RenderNode) -> InspectionUpdate | None:
        """Process a render of the focused node. Other nodes are ignored."""
        if self._phase is SessionPhase.IDLE or node is not self._focused:
            return None
        if not node.is_attached():
            self.clear_focus(reason="detached")
            return None
        return self._process(node)

    def handle_node_unmounted(self, node: RenderNode) -> None:
        if node is self._focused:
            self.clear_focus(reason="unmounted")

    def clear_focus(self, reason: str = "cleared") -> None:
        was_focused = self._phase is SessionPhase.FOCUSED
        self._focused = None
        self._phase = SessionPhase.IDLE
        self.reset_tracking()
        if was_focused:
            self._emit_state(SessionStateChange(SessionPhase.IDLE, reason))

    def reset_tracking(self) -> None:
        """Forget every count, the last component kind and cached contexts."""
        self._trackers.reset()
        self._resolver.evict()
        self._timeline.clear()

    # ─── Collection ───────────────────────────────────────────────────

    def _process(self, node: RenderNode) -> InspectionUpdate | None:
        is_initial = self._trackers.is_new_component(node.kind)
        if is_initial:
            self.reset_tracking()
            self._trackers.is_new_component(node.kind)
            logger.debug("Inspecting new component %s", display_name_of(node))

        props = self._section("props", lambda: self._props_section(node))
        state = self._section("state", lambda: self._state_section(node))
        context = self._section("context", lambda: self._context_section(node, track=not is_initial))
        data = InspectionData(props, state, context)

        if not (data.has_changes or is_initial):
            return None

        update = InspectionUpdate(
            timestamp=self._clock(),
            node=NodeInfo.from_node(node),
            props=props,
            state=state,
            context=context,
            state_names=tuple(collectors.get_state_names(node)),
        )
        self._timeline.append(update)
        for listener in list(self._update_listeners):
            try:
                listener(update)
            except Exception:
                logger.exception("Inspection update listener failed")
        return update

    def _section(self, category: str, build: Callable[[], SectionSnapshot]) -> SectionSnapshot:
        try:
            return build()
        except Exception:
            logger.exception("Failed to collect %s section", category)
            return SectionSnapshot()

    def _props_section(self, node: RenderNode) -> SectionSnapshot:
        section = SectionSnapshot()
        if node.props is None:
            return section
        result = collectors.collect_props_changes(node)
        _fill_current(section, result)
        _track_into(section, self._trackers.props, result)
        return section

    def _state_section(self, node: RenderNode) -> SectionSnapshot:
        section = SectionSnapshot()
        result = collectors.collect_state_changes(node)
        _fill_current(section, result)
        _track_into(section, self._trackers.state, result)
        return section

    def _context_section(self, node: RenderNode, *, track: bool) -> SectionSnapshot:
        section = SectionSnapshot()
        result = collectors.collect_context_changes(node, self._resolver)
        _fill_current(section, result)
        if track:
            _track_into(section, self._trackers.context, result)
        return section

    def snapshot(self, node: RenderNode | None) -> InspectionData:
        """Collect all three sections without touching the trackers.

        Every reported change counts once.
        """
        if node is None:
            return InspectionData(SectionSnapshot(), SectionSnapshot(), SectionSnapshot())

        def _untracked(result: collectors.CollectorResult) -> SectionSnapshot:
            section = SectionSnapshot()
            _fill_current(section, result)
            for change in result.changes:
                section.changed_keys.add(change.name)
                section.change_counts[change.name] = 1
            return section

        props = self._section(
            "props",
            lambda: _untracked(collectors.collect_props_changes(node))
            if node.props is not None
            else SectionSnapshot(),
        )
        state = self._section("state", lambda: _untracked(collectors.collect_state_changes(node)))
        context = self._section(
            "context",
            lambda: _untracked(collectors.collect_context_changes(node, self._resolver)),
        )
        return InspectionData(props, state, context)

    def _emit_state(self, change: SessionStateChange) -> None:
        logger.debug("Inspection session %s (%s)", change.phase.value, change.reason)
        for listener in list(self._state_listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Session state listener failed")


def _fill_current(section: SectionSnapshot, result: collectors.CollectorResult) -> None:
    for name, value in result.current.items():
        section.current.append(SectionEntry(name, safe_value(value)))


def _track_into(section: SectionSnapshot, tracker: ChangeTracker, result: collectors.CollectorResult) -> None:
    for change in result.changes:
        outcome = tracker.track_change(
            change.name,
            safe_value(change.value),
            safe_value(change.prev_value),
        )
        if outcome.has_changed:
            section.changed_keys.add(change.name)
            section.change_counts[change.name] = outcome.count


def _remover(listeners: list, callback) -> Unsubscribe:
    def _unsubscribe() -> None:
        if callback in listeners:
            listeners.remove(callback)

    return _unsubscribe
