"""Persisted panel geometry: JSON codec plus a failure-tolerant store.

Two keys are written, each versioned so an upgrade can discard shapes it
does not understand:

    scanlens-widget-settings-v2   {"corner", "dimensions": {...}, "lastDimensions": {...}}
    scanlens-widget-collapsed-v1  {"corner", "orientation"} or null

// [LAW:single-enforcer] GeometryStore is the only writer of panel geometry.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from scanlens.geometry.model import Corner, Orientation, PanelGeometry, Point, Size
from scanlens.io.storage import PersistenceAdapter, StorageUnavailable

logger = logging.getLogger(__name__)

SETTINGS_KEY = "scanlens-widget-settings-v2"
COLLAPSED_KEY = "scanlens-widget-collapsed-v1"


class MalformedGeometry(ValueError):
    pass


def _int(raw: object, field: str) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise MalformedGeometry(f"{field} must be a number, got {raw!r}")
    if not math.isfinite(raw):
        raise MalformedGeometry(f"{field} must be finite, got {raw!r}")
    return int(round(raw))


def _dict(raw: object, field: str) -> dict:
    if not isinstance(raw, dict):
        raise MalformedGeometry(f"{field} must be an object, got {raw!r}")
    return raw


def _corner(raw: object) -> Corner:
    try:
        return Corner(raw)
    except ValueError as exc:
        raise MalformedGeometry(f"unknown corner {raw!r}") from exc


def encode_settings(geometry: PanelGeometry) -> dict:
    return {
        "corner": geometry.corner.value,
        "dimensions": {
            "width": geometry.size.width,
            "height": geometry.size.height,
            "position": {"x": geometry.position.x, "y": geometry.position.y},
        },
        "lastDimensions": {
            "width": geometry.last_dimensions.width,
            "height": geometry.last_dimensions.height,
        },
    }


def encode_collapsed(geometry: PanelGeometry) -> dict | None:
    if not geometry.collapsed:
        return None
    return {"corner": geometry.corner.value, "orientation": geometry.orientation.value}


def decode(settings: object, collapsed: object = None) -> PanelGeometry:
    """Rebuild geometry from stored JSON. Raises MalformedGeometry."""
    data = _dict(settings, "settings")
    corner = _corner(data.get("corner"))
    dimensions = _dict(data.get("dimensions"), "dimensions")
    position = _dict(dimensions.get("position"), "dimensions.position")
    size = Size(_int(dimensions.get("width"), "width"), _int(dimensions.get("height"), "height"))
    last_raw = data.get("lastDimensions")
    if last_raw is None:
        last = size
    else:
        last_dict = _dict(last_raw, "lastDimensions")
        last = Size(
            _int(last_dict.get("width"), "lastDimensions.width"),
            _int(last_dict.get("height"), "lastDimensions.height"),
        )

    geometry = PanelGeometry(
        corner=corner,
        position=Point(_int(position.get("x"), "x"), _int(position.get("y"), "y")),
        size=size,
        last_dimensions=last,
    )

    if collapsed is not None:
        collapsed_data = _dict(collapsed, "collapsed")
        try:
            orientation = Orientation(collapsed_data.get("orientation", "horizontal"))
        except ValueError as exc:
            raise MalformedGeometry(f"unknown orientation {collapsed_data.get('orientation')!r}") from exc
        geometry = geometry.evolve(
            corner=_corner(collapsed_data.get("corner")),
            collapsed=True,
            orientation=orientation,
        )
    return geometry


class GeometryStore:
    """Reads and writes geometry through a PersistenceAdapter.

    Once the adapter fails, the store stays unavailable for the rest of the
    session: reads return None and writes are skipped. There is no retry.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter | None,
        *,
        on_unavailable: Callable[[Exception], None] | None = None,
    ):
        self._adapter = adapter
        self._available = adapter is not None
        self._on_unavailable = on_unavailable

    @property
    def available(self) -> bool:
        return self._available

    def load(self) -> PanelGeometry | None:
        if not self._available:
            return None
        try:
            settings = self._adapter.get(SETTINGS_KEY)
            collapsed = self._adapter.get(COLLAPSED_KEY)
        except (StorageUnavailable, OSError) as exc:
            self._mark_unavailable(exc)
            return None
        if settings is None:
            return None
        try:
            return decode(settings, collapsed)
        except MalformedGeometry as exc:
            logger.warning("Discarding stored panel geometry: %s", exc)
            return None

    def save(self, geometry: PanelGeometry) -> bool:
        if not self._available:
            return False
        try:
            self._adapter.set(SETTINGS_KEY, encode_settings(geometry))
            self._adapter.set(COLLAPSED_KEY, encode_collapsed(geometry))
        except (StorageUnavailable, OSError) as exc:
            self._mark_unavailable(exc)
            return False
        return True

    def clear(self) -> None:
        if not self._available:
            return
        try:
            self._adapter.remove(SETTINGS_KEY)
            self._adapter.remove(COLLAPSED_KEY)
        except (StorageUnavailable, OSError) as exc:
            self._mark_unavailable(exc)

    def _mark_unavailable(self, exc: Exception) -> None:
        self._available = False
        logger.warning("Panel geometry storage unavailable, using in-memory state: %s", exc)
        if self._on_unavailable is not None:
            self._on_unavailable(exc)
