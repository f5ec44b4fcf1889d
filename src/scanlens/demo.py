"""Self-contained demo host: a tiny component tree that re-renders on demand.

Used by `scanlens demo` and by the UI tests.
"""

from __future__ import annotations

import logging
import random

from scanlens.core.host import InMemoryHost
from scanlens.core.render_node import ComponentTag, ContextDependency, ContextSource, StateSlot, TreeNode
from scanlens.tui.app import InspectorApp

logger = logging.getLogger(__name__)

ThemeContext = ContextSource("ThemeContext")


def Counter(label, step=1):
    count, set_count = use_state(0)  # noqa: F841
    return label, step


def Toolbar(title, dense=False):
    open_menu, set_open_menu = use_state(False)  # noqa: F841
    return title, dense


def use_state(initial):
    """Stand-in hook so demo components read like real ones."""
    return initial, None


class DemoTree:
    """App → (Counter, Toolbar) with a theme context provided at the root."""

    def __init__(self, seed: int | None = None):
        self._random = random.Random(seed)
        self.host = InMemoryHost()
        self.root = TreeNode(
            kind="App",
            tag=ComponentTag.FUNCTION,
            props={},
            contexts=[ContextDependency(ThemeContext, "dark")],
        )
        self.counter = self.root.child(
            Counter,
            props={"label": "clicks", "step": 1},
            state=[StateSlot(0), StateSlot(None, stateful=False)],
        )
        self.toolbar = self.root.child(
            Toolbar,
            props={"title": "Inspector", "dense": False},
            state=[StateSlot(False)],
        )
        self.nodes = [self.counter, self.toolbar]
        self._focus_index = 0

    def focus_next(self) -> TreeNode:
        node = self.nodes[self._focus_index % len(self.nodes)]
        self._focus_index += 1
        self.host.focus(node)
        return node

    def tick(self) -> None:
        """Re-render every node with a small random change, then commit."""
        count = self.counter.state[0].value
        step = self.counter.props["step"]
        if self._random.random() < 0.3:
            step = self._random.randint(1, 3)
        self.counter.rerender(
            props={"label": "clicks", "step": step},
            state=[StateSlot(count + step), StateSlot(None, stateful=False)],
        )
        self.toolbar.rerender(props={"title": "Inspector", "dense": self._random.random() < 0.5})
        for node in self.nodes:
            self.host.commit(node)


class DemoApp(InspectorApp):
    BINDINGS = [
        ("t", "tick", "Re-render"),
        ("f", "focus_next", "Focus next"),
        ("c", "collapse_panel", "Collapse"),
        ("e", "expand_panel", "Expand"),
        ("r", "reset_layout", "Reset layout"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, tree: DemoTree | None = None, **kwargs):
        tree = tree if tree is not None else DemoTree()
        super().__init__(host=tree.host, **kwargs)
        self.demo_tree = tree

    def on_mount(self) -> None:
        # Textual runs InspectorApp.on_mount after this one; it attaches the
        # session, which picks up the host's focused node.
        self.demo_tree.focus_next()

    def action_tick(self) -> None:
        self.demo_tree.tick()

    def action_focus_next(self) -> None:
        node = self.demo_tree.focus_next()
        logger.debug("Demo focus -> %s", node.kind)

    def action_reset_layout(self) -> None:
        if self.machine is not None:
            self.machine.reset()
