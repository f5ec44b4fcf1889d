"""Textual in-process test harness for scanlens.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, press_and_settle, ...
"""

from tests.harness.app_runner import run_app, run_demo
from tests.harness.interactions import (
    press_and_settle,
    click_and_settle,
    resize_and_settle,
    drag_and_settle,
)
from tests.harness.content import panel_region, rendered_text

__all__ = [
    "run_app",
    "run_demo",
    "press_and_settle",
    "click_and_settle",
    "resize_and_settle",
    "drag_and_settle",
    "panel_region",
    "rendered_text",
]
