"""A Rich-powered rendering of the current reader state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..services.state import StateController


CONTENT_LABELS: Dict[str, str] = {
    "bible": "📖 Bible",
    "commentary": "📝 Commentary",
    "appendices": "📎 Appendices",
}


@dataclass
class StateOverview:
    theme_mode: str
    text_style: str
    font_family: str
    text_size: float
    resource: Optional[str]
    location: Optional[str]
    content: Dict[str, bool]


class StateConsole:
    """Print the controller snapshot and re-render on every notification when watching."""

    def __init__(self, controller: StateController, *, console: Optional[Console] = None) -> None:
        self._controller = controller
        self._console = console or Console()

    def render(self) -> None:
        self._console.print(self._build_panel(self._collect()))

    def watch(self) -> None:
        self._controller.add_listener(self.render)

    def unwatch(self) -> None:
        self._controller.remove_listener(self.render)

    def _collect(self) -> StateOverview:
        controller = self._controller
        path = controller.path
        return StateOverview(
            theme_mode=controller.theme_mode.value,
            text_style=controller.text_style.value,
            font_family=controller.text_style.family,
            text_size=controller.text_size,
            resource=controller.resource,
            location=str(path) if path is not None else None,
            content={
                "bible": controller.bible is not None,
                "commentary": controller.commentary is not None,
                "appendices": controller.appendices is not None,
            },
        )

    @staticmethod
    def _build_panel(overview: StateOverview) -> Panel:
        table = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
        table.add_column("Setting", style="bold cyan")
        table.add_column("Value")
        table.add_row("Theme", overview.theme_mode)
        table.add_row("Text style", f"{overview.text_style} ({overview.font_family})")
        table.add_row("Text size", f"{overview.text_size:g}")
        table.add_row("Resource", overview.resource or Text("none", style="dim"))
        table.add_row("Location", overview.location or Text("no selection", style="dim"))

        badges = Text()
        for name, label in CONTENT_LABELS.items():
            ready = overview.content.get(name, False)
            badges.append(f"{label} ", style="green" if ready else "dim")
            badges.append("✓  " if ready else "…  ", style="green" if ready else "dim")

        return Panel(
            Group(table, badges),
            title="[bold magenta]Reader State",
            border_style="magenta",
        )


__all__ = ["StateConsole", "StateOverview"]
