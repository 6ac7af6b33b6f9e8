"""Status bar controller for the TUI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from rich.text import Text

_LEVEL_STYLES = {"warn": "#ffcc66", "error": "#ff5f52"}


@dataclass(frozen=True)
class StatusMessage:
    text: str
    level: str
    until: Optional[float]


def truncate_line(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


class StatusController:
    """Status bar state and rendering."""

    def __init__(self, now: Callable[[], float]) -> None:
        self._now = now
        self._message: Optional[StatusMessage] = None
        self._sdk_ready = False

    def show_message(
        self,
        text: str,
        *,
        level: str = "info",
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is None:
            timeout = 6.0 if level in _LEVEL_STYLES else 3.0
        until = None if timeout == 0 else self._now() + max(0.0, timeout)
        self._message = StatusMessage(text=text, level=level, until=until)

    def set_sdk_ready(self, ready: bool) -> None:
        self._sdk_ready = ready

    def render_line(self, width: int, *, focused: object | None = None) -> Text:
        message = self.current_message()
        if message:
            line = truncate_line(message.text, width)
            style = _LEVEL_STYLES.get(message.level)
            return Text(line, style=style) if style else Text(line)
        return Text(truncate_line(self._render_hint(focused), width))

    def current_message(self) -> Optional[StatusMessage]:
        if not self._message:
            return None
        if self._message.until is None or self._message.until > self._now():
            return self._message
        self._message = None
        return None

    def _render_hint(self, focused: object | None) -> str:
        prefix = "" if self._sdk_ready else "Loading player SDK...  "
        if self._focus_in_source_input(focused):
            return prefix + "Enter: load tile  Tab: next tile  ?: help"
        return prefix + "1-6/click: audio focus  L: load all  M: mute all  ?: help"

    def _focus_in_source_input(self, widget: object | None) -> bool:
        current = widget
        while current is not None:
            widget_id = getattr(current, "id", None)
            if isinstance(widget_id, str) and widget_id.startswith("source_"):
                return True
            current = getattr(current, "parent", None)
        return False
