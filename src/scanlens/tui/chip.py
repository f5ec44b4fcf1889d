"""Chip widgets: small clickable text controls for the panel header."""

from textual.widgets import Static

from scanlens.geometry.model import Corner, Orientation

# Glyph pointing away from the edge the collapsed panel hugs.
_CHEVRONS = {
    (Orientation.HORIZONTAL, True): "▶",  # left edge
    (Orientation.HORIZONTAL, False): "◀",  # right edge
    (Orientation.VERTICAL, True): "▼",  # top edge
    (Orientation.VERTICAL, False): "▲",  # bottom edge
}


def chevron_for(corner: Corner, orientation: Orientation) -> str:
    if orientation is Orientation.HORIZONTAL:
        return _CHEVRONS[(orientation, corner.is_left)]
    return _CHEVRONS[(orientation, corner.is_top)]


class Chip(Static):
    """One-line text control that runs an app action when clicked."""

    ALLOW_SELECT = False
    DEFAULT_CSS = """
    Chip {
        width: auto;
        height: 1;
        text-style: bold;
        background: $panel-lighten-2;
        color: $text;
    }

    Chip:hover {
        background: $panel-lighten-1;
    }
    """

    def __init__(self, label: str, *, action: str | None = None, **kwargs):
        super().__init__(label, **kwargs)
        self._action = action

    async def on_click(self, event) -> None:
        event.stop()
        if self._action:
            await self.run_action(self._action)


class ChevronChip(Chip):
    """Expand affordance shown while the panel is collapsed.

    Also a drag source: pulling it away from its edge expands the panel.
    """

    DEFAULT_CSS = """
    ChevronChip {
        width: 1fr;
        height: 1fr;
        content-align: center middle;
        background: $accent;
    }
    """

    def point(self, corner: Corner, orientation: Orientation) -> None:
        self.update(chevron_for(corner, orientation))
