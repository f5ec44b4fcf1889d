"""Host runtime contract and an in-memory host.

// [LAW:one-way-deps] Depends only on render_node; the session depends on this.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from scanlens.core.render_node import RenderNode

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
NodeListener = Callable[[RenderNode | None], None]


class HostRuntime(Protocol):
    """What the inspection engine consumes from the live UI runtime."""

    def get_focused_node(self) -> RenderNode | None: ...

    def on_node_updated(self, callback: NodeListener) -> Unsubscribe: ...


class InMemoryHost:
    """Host runtime whose commits are driven by explicit calls.

    Notifications are delivered synchronously, in subscription order, from
    inside commit().
    """

    def __init__(self):
        self._focused: RenderNode | None = None
        self._listeners: list[NodeListener] = []

    def get_focused_node(self) -> RenderNode | None:
        return self._focused

    def focus(self, node: RenderNode | None) -> None:
        """Change focus and notify listeners with the newly focused node."""
        self._focused = node
        if node is not None:
            self.commit(node)
        else:
            for listener in list(self._listeners):
                self._deliver(listener, None)

    def on_node_updated(self, callback: NodeListener) -> Unsubscribe:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def commit(self, node: RenderNode) -> None:
        """Report that node rendered."""
        for listener in list(self._listeners):
            self._deliver(listener, node)

    def _deliver(self, listener: NodeListener, node: RenderNode | None) -> None:
        try:
            listener(node)
        except Exception:
            logger.exception("Node update listener failed")
