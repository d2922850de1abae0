from __future__ import annotations

import pytest

from study_assistant.models import Panel
from study_assistant.router import PLACEHOLDERS, panel_labels, render_panel, resolve_panel


@pytest.mark.parametrize(
    ("selector", "expected"),
    [
        ("Chat", "AI Chat Assistant (To be built in Step 7)"),
        ("Schedule", "Study Schedule/Reminders (To be built in Step 8)"),
        ("Notes", "Quick Notes Storage (To be built in Step 9)"),
    ],
)
def test_each_label_renders_its_placeholder(selector: str, expected: str) -> None:
    view = render_panel(selector)

    assert view.message == expected
    assert view.panel.value == selector
    others = [v.message for p, v in PLACEHOLDERS.items() if p != view.panel]
    assert expected not in others


@pytest.mark.parametrize("selector", ["Settings", "", None, "chat", 3])
def test_unknown_selector_defaults_to_chat(selector: object) -> None:
    assert resolve_panel(selector) is Panel.CHAT
    assert render_panel(selector) is PLACEHOLDERS[Panel.CHAT]


def test_panel_enum_passes_through() -> None:
    assert resolve_panel(Panel.NOTES) is Panel.NOTES


def test_labels_keep_tab_order() -> None:
    assert panel_labels() == ["Chat", "Schedule", "Notes"]
