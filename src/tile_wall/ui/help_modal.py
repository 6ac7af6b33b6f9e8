"""Help modal for Tile Wall."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Static

_SECTION_ACTIONS: dict[str, list[str]] = {
    "Audio focus": ["focus_tile"],
    "Tiles": ["load_all", "mute_all", "pause_all", "play_all_muted"],
    "General": ["show_help", "quit_app"],
}

_ACTION_OVERRIDES: dict[str, str] = {
    "focus_tile": "Give audio to that tile (or click the tile)",
    "show_help": "Open help",
}

_TILE_HELP = (
    "Paste a URL or video ID into a tile and press Enter or Load. "
    "Reload rebuilds that tile's player. Tiles always start muted."
)


def _action_name(action: str) -> str:
    return action.split("(", 1)[0]


def _format_key(key: str) -> str:
    return "+".join(
        part.upper() if len(part) == 1 else part.capitalize()
        for part in key.split("+")
    )


def build_help_text(bindings: Iterable[Binding]) -> Text:
    by_action: dict[str, list[str]] = defaultdict(list)
    by_desc: dict[str, str] = {}
    for binding in bindings:
        name = _action_name(binding.action)
        by_action[name].append(binding.key)
        if binding.description:
            by_desc.setdefault(name, binding.description)

    content = Text()
    for position, (section, actions) in enumerate(_SECTION_ACTIONS.items()):
        if position:
            content.append("\n")
        content.append(f"{section}\n", style="bold #5fc9d6")
        for action in actions:
            keys = by_action.get(action)
            if not keys:
                continue
            key_text = ", ".join(_format_key(key) for key in keys)
            label = _ACTION_OVERRIDES.get(action, by_desc.get(action, action))
            content.append(f"{key_text} — {label}\n")

    content.append("\n")
    content.append("Usage\n", style="bold #5fc9d6")
    content.append(f"{_TILE_HELP}\n")
    content.append("Logs — %LOCALAPPDATA%/TileWall/logs or ~/.tile_wall/logs\n")
    return content


class HelpModal(ModalScreen[None]):
    """Help modal listing keybinds and usage."""

    def __init__(self, bindings: Iterable[Binding]) -> None:
        super().__init__()
        self._help_bindings = list(bindings)

    def compose(self) -> ComposeResult:
        with Vertical(id="help_modal"):
            yield Static("Tile Wall Help", id="help_title")
            with VerticalScroll(id="help_scroll"):
                yield Static(build_help_text(self._help_bindings), id="help_content")
            with Horizontal(id="help_footer"):
                yield Static("Esc/q — Close", id="help_hint")
                yield Button("Close", id="help_close")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help_close":
            self.dismiss(None)

    def on_key(self, event: events.Key) -> None:
        if event.key in {"escape", "q"}:
            self.dismiss(None)
