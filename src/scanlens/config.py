"""Runtime configuration from SCANLENS_* environment variables.

// [LAW:one-source-of-truth] InspectorConfig holds every tunable; callers never read env directly.
// [LAW:dataflow-not-control-flow] Malformed values resolve to defaults, never raise.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from scanlens.core.session import DEFAULT_TIMELINE_SIZE
from scanlens.geometry.model import METRICS_BY_NAME, GeometryMetrics
from scanlens.io.storage import get_config_path

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class InspectorConfig:
    metrics_name: str = "pixels"
    collapse_area_fraction: float | None = None
    click_threshold: float | None = None
    snap_threshold: float | None = None
    expand_threshold: float | None = None
    readout_width: int | None = None
    show_readout: bool = False
    timeline_size: int = DEFAULT_TIMELINE_SIZE
    context_cache: bool = True
    persist_geometry: bool = True
    storage_path: Path = field(default_factory=get_config_path)

    def geometry_metrics(self) -> GeometryMetrics:
        base = METRICS_BY_NAME.get(self.metrics_name, METRICS_BY_NAME["pixels"])
        overrides = {
            name: value
            for name, value in (
                ("collapse_area_fraction", self.collapse_area_fraction),
                ("click_threshold", self.click_threshold),
                ("snap_threshold", self.snap_threshold),
                ("expand_threshold", self.expand_threshold),
                ("readout_width", self.readout_width),
            )
            if value is not None
        }
        return base.with_overrides(**overrides) if overrides else base


def _raw(env: Mapping[str, str], name: str) -> str:
    return str(env.get(f"SCANLENS_{name}", "") or "").strip()


def _number(env: Mapping[str, str], name: str, cast):
    raw = _raw(env, name)
    if not raw:
        return None
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring malformed SCANLENS_%s=%r", name, raw)
        return None


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = _raw(env, name).lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    if raw:
        logger.warning("Ignoring malformed SCANLENS_%s=%r", name, raw)
    return default


def load_config(
    environ: Mapping[str, str] | None = None,
    *,
    default_metrics: str = "pixels",
) -> InspectorConfig:
    """Build config from environ (os.environ by default).

    default_metrics picks the unit system when SCANLENS_METRICS is unset;
    the terminal app passes "cells".
    """
    env = os.environ if environ is None else environ
    metrics_name = _raw(env, "METRICS").lower() or default_metrics
    if metrics_name not in METRICS_BY_NAME:
        logger.warning("Unknown SCANLENS_METRICS=%r, using %s", metrics_name, default_metrics)
        metrics_name = default_metrics

    fraction = _number(env, "COLLAPSE_FRACTION", float)
    if fraction is not None and not 0 < fraction <= 1:
        logger.warning("SCANLENS_COLLAPSE_FRACTION must be in (0, 1], got %r", fraction)
        fraction = None

    timeline_size = _number(env, "TIMELINE_SIZE", int)
    storage_raw = _raw(env, "STORAGE_PATH")

    return InspectorConfig(
        metrics_name=metrics_name,
        collapse_area_fraction=fraction,
        click_threshold=_number(env, "CLICK_THRESHOLD", float),
        snap_threshold=_number(env, "SNAP_THRESHOLD", float),
        expand_threshold=_number(env, "EXPAND_THRESHOLD", float),
        readout_width=_number(env, "READOUT_WIDTH", int),
        show_readout=_flag(env, "SHOW_READOUT", False),
        timeline_size=max(1, timeline_size) if timeline_size is not None else DEFAULT_TIMELINE_SIZE,
        context_cache=_flag(env, "CONTEXT_CACHE", True),
        persist_geometry=_flag(env, "PERSIST_GEOMETRY", True),
        storage_path=Path(storage_raw).expanduser() if storage_raw else get_config_path(),
    )
