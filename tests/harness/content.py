"""Text and region extraction for in-process tests."""

import io

from rich.console import Console, RenderableType
from textual.geometry import Region

from scanlens.tui.app import InspectorApp


def rendered_text(renderable: RenderableType, width: int = 80) -> str:
    """Render a Rich renderable to plain text at a fixed width."""
    console = Console(record=True, width=width, color_system=None, file=io.StringIO())
    console.print(renderable)
    return console.export_text()


def panel_region(app: InspectorApp) -> Region:
    """Screen region the panel occupies after layout."""
    return app.panel.region
