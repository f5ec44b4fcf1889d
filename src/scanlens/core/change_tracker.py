"""Per-key change counting for props, state and context.

// [LAW:one-source-of-truth] A ChangeTracker entry is the only record of how
//   often a key changed since the last reset.
// [LAW:no-shared-mutable-globals] Trackers live on a TrackerSet owned by one session.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from scanlens.core.values import is_equal

ChangeKey = str | int


@dataclass
class ChangeTrackingEntry:
    count: int
    current_value: object
    previous_value: object
    last_updated: float


@dataclass(frozen=True)
class TrackResult:
    has_changed: bool
    count: int


class ChangeTracker:
    """Counts distinct value transitions per key."""

    def __init__(self, name: str, *, clock: Callable[[], float] = time.time):
        self.name = name
        self._clock = clock
        self._entries: dict[ChangeKey, ChangeTrackingEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: ChangeKey) -> bool:
        return key in self._entries

    def get(self, key: ChangeKey) -> ChangeTrackingEntry | None:
        return self._entries.get(key)

    def track_change(self, key: ChangeKey, current_value: object, previous_value: object) -> TrackResult:
        """Record an observation of key.

        First sighting counts 1 when current differs from previous, else 0.
        Afterwards the count moves only when current differs from the stored
        current value.
        """
        existing = self._entries.get(key)
        if existing is None:
            has_changed = not is_equal(current_value, previous_value)
            count = 1 if has_changed else 0
            self._entries[key] = ChangeTrackingEntry(
                count=count,
                current_value=current_value,
                previous_value=previous_value,
                last_updated=self._clock(),
            )
            return TrackResult(has_changed, count)

        if not is_equal(existing.current_value, current_value):
            existing.count += 1
            existing.previous_value = existing.current_value
            existing.current_value = current_value
            existing.last_updated = self._clock()
            return TrackResult(True, existing.count)

        return TrackResult(False, existing.count)

    def clear(self) -> None:
        self._entries.clear()


_NO_KIND = object()


class TrackerSet:
    """The props/state/context trackers plus the last-seen component kind."""

    def __init__(self, *, clock: Callable[[], float] = time.time):
        self.props = ChangeTracker("props", clock=clock)
        self.state = ChangeTracker("state", clock=clock)
        self.context = ChangeTracker("context", clock=clock)
        self._last_kind: object = _NO_KIND

    @property
    def last_kind(self) -> object | None:
        return None if self._last_kind is _NO_KIND else self._last_kind

    def is_new_component(self, kind: object) -> bool:
        """Compare kind to the last one seen and remember it."""
        is_new = self._last_kind is _NO_KIND or not _same_kind(self._last_kind, kind)
        self._last_kind = kind
        return is_new

    def reset(self) -> None:
        self.props.clear()
        self.state.clear()
        self.context.clear()
        self._last_kind = _NO_KIND


def _same_kind(a: object, b: object) -> bool:
    if a is b:
        return True
    try:
        return bool(a == b)
    except Exception:
        return False
