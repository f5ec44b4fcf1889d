"""Render node contract and an in-memory tree implementation.

The host UI runtime owns every render node. The inspection engine only reads
them through the RenderNode protocol below.

// [LAW:one-way-deps] This module imports nothing from the rest of scanlens.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


class ComponentTag(enum.Enum):
    """What kind of component instance a render node represents."""

    FUNCTION = "function"
    FORWARD_REF = "forward_ref"
    MEMO = "memo"
    SIMPLE_MEMO = "simple_memo"
    CLASS = "class"
    HOST = "host"

    @property
    def uses_named_state(self) -> bool:
        return self is ComponentTag.CLASS

    @property
    def is_composite(self) -> bool:
        return self is not ComponentTag.HOST


@dataclass(frozen=True)
class StateSlot:
    """One unit of a component instance's local state.

    Positional slots that are not stateful (effects, memos) still consume
    an index so keys stay stable across renders.
    """

    value: object
    name: str | None = None
    stateful: bool = True


@dataclass(eq=False)
class ContextSource:
    """A context provider type. Compared by identity."""

    display_name: str | None = None

    def __repr__(self) -> str:
        return f"ContextSource({self.display_name or 'UnnamedContext'})"


@dataclass(frozen=True)
class ContextDependency:
    """A context value observed by a render node."""

    source: ContextSource
    value: object


@runtime_checkable
class RenderNode(Protocol):
    """Read-only view of one component instance in the host's live tree."""

    kind: object
    tag: ComponentTag
    parent: RenderNode | None
    props: Mapping[str, object] | None

    def state_slots(self) -> Sequence[StateSlot]: ...

    def context_dependencies(self) -> Sequence[ContextDependency]: ...

    def previous_version(self) -> RenderNode | None: ...

    def is_attached(self) -> bool: ...


def display_name_of(node: RenderNode) -> str:
    """Best-effort human name for a node's component."""
    explicit = getattr(node, "display_name", None)
    if explicit:
        return str(explicit)
    kind = node.kind
    name = getattr(kind, "__qualname__", None) or getattr(kind, "__name__", None)
    if name:
        return str(name)
    return str(kind) if isinstance(kind, str) else type(kind).__name__


@dataclass(eq=False)
class TreeNode:
    """Mutable render node for hosts that keep their tree in Python.

    rerender() snapshots the current values into a persistent alternate
    before applying changes, so previous_version() always returns the same
    object. The alternate is double-buffered like a reconciler's work-in-
    progress tree: its identity never changes, only its contents.
    """

    kind: object
    tag: ComponentTag = ComponentTag.FUNCTION
    parent: TreeNode | None = None
    props: dict[str, object] | None = field(default_factory=dict)
    state: list[StateSlot] = field(default_factory=list)
    contexts: list[ContextDependency] = field(default_factory=list)
    display_name: str | None = None
    _alternate: TreeNode | None = field(default=None, repr=False)
    _attached: bool = field(default=True, repr=False)

    def state_slots(self) -> Sequence[StateSlot]:
        return tuple(self.state)

    def context_dependencies(self) -> Sequence[ContextDependency]:
        return tuple(self.contexts)

    def previous_version(self) -> TreeNode | None:
        return self._alternate

    def is_attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        self._attached = False

    def child(self, kind: object, **kwargs) -> TreeNode:
        """Create a node parented to this one."""
        return TreeNode(kind=kind, parent=self, **kwargs)

    def rerender(
        self,
        *,
        props: dict[str, object] | None = None,
        state: list[StateSlot] | None = None,
        contexts: list[ContextDependency] | None = None,
    ) -> TreeNode:
        """Commit a new render. Arguments left as None keep their values."""
        if self._alternate is None:
            self._alternate = TreeNode(
                kind=self.kind,
                tag=self.tag,
                parent=self.parent,
                display_name=self.display_name,
            )
        alt = self._alternate
        alt.kind = self.kind
        alt.parent = self.parent
        alt.props = dict(self.props) if self.props is not None else None
        alt.state = list(self.state)
        alt.contexts = list(self.contexts)

        if props is not None:
            self.props = dict(props)
        if state is not None:
            self.state = list(state)
        if contexts is not None:
            self.contexts = list(contexts)
        return self
