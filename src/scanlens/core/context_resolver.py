"""Inherited context resolution with a per-node cache.

Walking the ancestry of the focused node on every render is O(depth), so the
resolved map is memoized by node identity. The cache is never invalidated
when an ancestor's context value changes while the same node stays focused;
entries are dropped only by evict(). The inspection session evicts
everything whenever it resets tracking, so staleness is bounded to one focus
change. Pass cache_enabled=False to pay the walk on every call instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scanlens.core.render_node import ContextSource, RenderNode

logger = logging.getLogger(__name__)

UNNAMED_CONTEXT = "UnnamedContext"


@dataclass(frozen=True)
class ContextInfo:
    value: object
    display_name: str


class ContextResolver:
    """Resolves context values visible to a render node. Nearest ancestor wins."""

    def __init__(self, *, cache_enabled: bool = True):
        self.cache_enabled = cache_enabled
        # Keyed by id(); the node is kept alongside so the id cannot be reused
        # by another object while the entry lives.
        self._cache: dict[int, tuple[RenderNode, dict[ContextSource, ContextInfo]]] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def get_all_contexts(self, node: RenderNode | None) -> dict[ContextSource, ContextInfo]:
        if node is None:
            return {}

        if self.cache_enabled:
            cached = self._cache.get(id(node))
            if cached is not None and cached[0] is node:
                return cached[1]

        contexts = self._walk(node)
        if self.cache_enabled:
            self._cache[id(node)] = (node, contexts)
        return contexts

    def evict(self, node: RenderNode | None = None) -> None:
        """Drop the cached map for node, or every cached map when node is None."""
        if node is None:
            self._cache.clear()
            return
        cached = self._cache.get(id(node))
        if cached is not None and cached[0] is node:
            del self._cache[id(node)]

    @staticmethod
    def _walk(node: RenderNode) -> dict[ContextSource, ContextInfo]:
        contexts: dict[ContextSource, ContextInfo] = {}
        seen_nodes: set[int] = set()
        current: RenderNode | None = node
        while current is not None:
            # Malformed hosts can hand us a cycle; stop rather than spin.
            if id(current) in seen_nodes:
                logger.warning("Cycle in render node ancestry at %r", current)
                break
            seen_nodes.add(id(current))
            for dependency in current.context_dependencies() or ():
                source = dependency.source
                if source in contexts:
                    continue
                contexts[source] = ContextInfo(
                    value=dependency.value,
                    display_name=source.display_name or UNNAMED_CONTEXT,
                )
            current = current.parent
        return contexts
