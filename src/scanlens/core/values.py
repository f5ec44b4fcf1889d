"""Value safety for collected props/state/context.

// [LAW:single-enforcer] is_equal is the only comparison used by collectors and trackers.
// [LAW:dataflow-not-control-flow] Unsafe values become Unrepresentable data; nothing raises.
"""

from __future__ import annotations

import inspect
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Unrepresentable:
    """Placeholder for a value that cannot be safely shown or compared."""

    label: str
    type: str = "unrepresentable"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "label": self.label}


def is_awaitable(value: object) -> bool:
    """True for coroutines, futures and tasks (the open-promise case)."""
    try:
        return inspect.isawaitable(value)
    except Exception:
        return False


def safe_value(value: object) -> object:
    """Return value, or an Unrepresentable placeholder when it is unsafe."""
    if isinstance(value, Unrepresentable):
        return value
    if is_awaitable(value):
        return Unrepresentable("Promise")
    try:
        repr(value)
    except Exception:
        return Unrepresentable(type(value).__name__)
    return value


def _is_nan(value: object) -> bool:
    return isinstance(value, float) and math.isnan(value)


def is_equal(a: object, b: object) -> bool:
    """Structural equality that never raises.

    bool and int are distinct (True != 1 here). A comparison that raises or
    returns something without a truth value falls back to identity.
    """
    if a is b:
        return True
    if _is_nan(a) and _is_nan(b):
        return True
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    try:
        return bool(a == b)
    except Exception:
        return False
