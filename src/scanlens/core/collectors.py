"""Snapshot collectors for props, state and context.

Each collector reads one category from a node and from its previous version
and reports the current values plus the keys whose values differ.

// [LAW:one-source-of-truth] state_key() is the only place state keys are derived,
//   so tracker entries stay stable across renders of the same instance.
"""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field

from scanlens.core.context_resolver import ContextResolver
from scanlens.core.render_node import ContextSource, RenderNode
from scanlens.core.values import is_equal

_STATE_NAME_RE = re.compile(r"(?P<name>\w+)\s*,\s*set_?\w+\s*=\s*use_state\(")


@dataclass(frozen=True)
class Change:
    name: str | int
    value: object
    prev_value: object
    context_source: ContextSource | None = None


@dataclass
class CollectorResult:
    current: dict[str | int, object] = field(default_factory=dict)
    prev: dict[str | int, object] = field(default_factory=dict)
    changes: list[Change] = field(default_factory=list)


def get_props_order(node: RenderNode) -> list[str]:
    """Prop names in the order the component declares them.

    Only kinds with an introspectable signature contribute; everything else
    returns [] and the props keep their insertion order.
    """
    kind = node.kind
    if not callable(kind):
        return []
    try:
        signature = inspect.signature(kind)
    except (TypeError, ValueError):
        return []
    return [
        param.name
        for param in signature.parameters.values()
        if param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY)
        and param.name != "self"
    ]


def get_state_names(node: RenderNode) -> list[str]:
    """Names of positional state slots, recovered from component source.

    Matches `count, set_count = use_state(0)` style hooks. [] when the
    source is unavailable.
    """
    try:
        source = inspect.getsource(node.kind)
    except (OSError, TypeError):
        return []
    return [m.group("name") for m in _STATE_NAME_RE.finditer(source)]


def _ordered_prop_keys(node: RenderNode, props) -> list[str]:
    declared = [name for name in get_props_order(node) if name in props]
    rest = [name for name in props if name not in declared]
    return declared + rest


def collect_props_changes(node: RenderNode) -> CollectorResult:
    current_props = node.props or {}
    previous = node.previous_version()
    prev_props = (previous.props or {}) if previous is not None else {}

    result = CollectorResult()
    for key in _ordered_prop_keys(node, current_props):
        value = current_props[key]
        result.current[key] = value
        result.prev[key] = prev_props.get(key)
        if previous is not None and not is_equal(prev_props.get(key), value):
            result.changes.append(Change(key, value, prev_props.get(key)))
    return result


def state_key(node: RenderNode, index: int, slot) -> str | int:
    if node.tag.uses_named_state:
        return slot.name if slot.name is not None else str(index)
    return index


def get_state(node: RenderNode | None) -> dict[str | int, object]:
    """Stateful slots keyed by index (positional) or name (class components)."""
    if node is None or not node.tag.is_composite:
        return {}
    state: dict[str | int, object] = {}
    for index, slot in enumerate(node.state_slots() or ()):
        if not slot.stateful:
            continue
        state[state_key(node, index, slot)] = slot.value
    return state


def collect_state_changes(node: RenderNode) -> CollectorResult:
    previous = node.previous_version()
    current = get_state(node)
    prev = get_state(previous)

    result = CollectorResult(current=current, prev=prev)
    if previous is None:
        return result
    for key, value in current.items():
        if not is_equal(prev.get(key), value):
            result.changes.append(Change(key, value, prev.get(key)))
    return result


def collect_context_changes(node: RenderNode, resolver: ContextResolver) -> CollectorResult:
    current_contexts = resolver.get_all_contexts(node)
    previous = node.previous_version()
    prev_contexts = resolver.get_all_contexts(previous) if previous is not None else {}

    result = CollectorResult()
    seen_names: set[str] = set()
    for source, info in current_contexts.items():
        name = info.display_name
        if name in seen_names:
            continue
        seen_names.add(name)
        result.current[name] = info.value

        prev_info = prev_contexts.get(source)
        if prev_info is None:
            continue
        result.prev[name] = prev_info.value
        if not is_equal(prev_info.value, info.value):
            result.changes.append(Change(name, info.value, prev_info.value, context_source=source))
    return result
