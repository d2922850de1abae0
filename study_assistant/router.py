from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from study_assistant.models import Panel

DEFAULT_PANEL = Panel.CHAT
PANEL_ORDER = (Panel.CHAT, Panel.SCHEDULE, Panel.NOTES)


@dataclass(frozen=True)
class PanelView:
    panel: Panel
    message: str


PLACEHOLDERS = {
    Panel.CHAT: PanelView(Panel.CHAT, "AI Chat Assistant (To be built in Step 7)"),
    Panel.SCHEDULE: PanelView(Panel.SCHEDULE, "Study Schedule/Reminders (To be built in Step 8)"),
    Panel.NOTES: PanelView(Panel.NOTES, "Quick Notes Storage (To be built in Step 9)"),
}


def resolve_panel(selector: Any) -> Panel:
    if isinstance(selector, Panel):
        return selector
    try:
        return Panel(selector)
    except ValueError:
        return DEFAULT_PANEL


def render_panel(selector: Any) -> PanelView:
    return PLACEHOLDERS[resolve_panel(selector)]


def panel_labels() -> list[str]:
    return [panel.value for panel in PANEL_ORDER]
