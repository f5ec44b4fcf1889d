"""Rendering of InspectionUpdates for the panel body.

render_update() is pure Rich; InspectorView is the Textual widget that shows
the latest update.
"""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text
from textual.widgets import Static

from scanlens.core.session import InspectionUpdate, SectionSnapshot
from scanlens.core.values import Unrepresentable

MAX_VALUE_WIDTH = 60
_SECTIONS = (("Props", "props"), ("State", "state"), ("Context", "context"))


def format_value(value: object, width: int = MAX_VALUE_WIDTH) -> str:
    if isinstance(value, Unrepresentable):
        return f"<{value.label}>"
    try:
        text = repr(value)
    except Exception:
        return f"<{type(value).__name__}>"
    if len(text) > width:
        return text[: width - 1] + "…"
    return text


def _entry_label(section_name: str, name: str | int, state_names: tuple[str, ...]) -> str:
    if section_name == "state" and isinstance(name, int) and name < len(state_names):
        return state_names[name]
    return str(name)


def render_section(title: str, section_name: str, section: SectionSnapshot, state_names=()) -> Table:
    table = Table(title=title, title_justify="left", expand=True, show_edge=False, pad_edge=False)
    table.add_column("name", style="bold", no_wrap=True)
    table.add_column("value", overflow="ellipsis")
    table.add_column("×", justify="right", width=4)

    if not section.current:
        table.add_row(Text("(none)", style="dim"), "", "")
        return table

    for entry in section.current:
        changed = entry.name in section.changed_keys
        count = section.change_counts.get(entry.name)
        table.add_row(
            Text(_entry_label(section_name, entry.name, state_names), style="yellow" if changed else ""),
            format_value(entry.value),
            str(count) if count else "",
        )
    return table


def render_update(update: InspectionUpdate) -> RenderableType:
    header = Text(update.node.display_name, style="bold")
    tables = [
        render_section(title, name, getattr(update, name), update.state_names)
        for title, name in _SECTIONS
    ]
    return Group(header, *tables)


class InspectorView(Static):
    """Shows the most recent InspectionUpdate."""

    DEFAULT_CSS = """
    InspectorView {
        height: 1fr;
        overflow-y: auto;
        padding: 0 1;
    }
    """

    IDLE_TEXT = "Select a component to inspect"

    def __init__(self, **kwargs):
        super().__init__(self.IDLE_TEXT, **kwargs)
        self.last_update: InspectionUpdate | None = None

    def show_update(self, update: InspectionUpdate) -> None:
        self.last_update = update
        self.update(render_update(update))

    def show_idle(self) -> None:
        self.last_update = None
        self.update(self.IDLE_TEXT)
