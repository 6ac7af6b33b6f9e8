"""Tile widget: one player slot in the wall grid."""

from __future__ import annotations

from typing import Any, Optional

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.message import Message
from textual.widgets import Button, Input, Static

from tile_wall.tiles import SlotState


def render_tile_state(
    state: SlotState, video_id: Optional[str], *, active: bool, sdk_ready: bool
) -> Text:
    """Return the text shown in a tile's screen area."""
    if state is SlotState.EMPTY:
        hint = "No video. Press Load" if sdk_ready else "Waiting for player SDK"
        return Text(hint, style="#8b93a7")
    if state is SlotState.CONSTRUCTING:
        return Text(f"Loading {video_id}...", style="#8b93a7")
    if active:
        return Text(f"{video_id}  AUDIO", style="bold #35c2aa")
    return Text(f"{video_id}  muted")


class TileView(Vertical):
    """Tile with its source input, load/reload buttons and player screen.

    Also acts as the mount for the tile's player. A terminal has no native
    window to embed into, so ``window_handle`` stays None and VLC opens its
    own video window.
    """

    class Selected(Message):
        """Posted when the tile is clicked outside its buttons and input."""

        def __init__(self, index: int) -> None:
            super().__init__()
            self.index = index

    def __init__(self, index: int, source: str, **kwargs: Any) -> None:
        kwargs.setdefault("id", f"tile_{index}")
        kwargs.setdefault("classes", "tile")
        super().__init__(**kwargs)
        self.index = index
        self.window_handle: Optional[int] = None
        self._source = source

    def compose(self) -> ComposeResult:
        with Horizontal(classes="tile_header"):
            yield Static(f"#{self.index + 1}", classes="tile_badge")
            yield Button("Load", id=f"load_{self.index}", classes="tile_button")
            yield Button("Reload", id=f"reload_{self.index}", classes="tile_button")
        yield Input(
            value=self._source,
            placeholder="YouTube URL or video ID",
            id=f"source_{self.index}",
        )
        yield Static("", id=f"screen_{self.index}", classes="tile_screen")

    def clear(self) -> None:
        self._screen_update(Text("Loading...", style="#8b93a7"))

    def show_state(
        self,
        state: SlotState,
        video_id: Optional[str],
        *,
        active: bool,
        sdk_ready: bool,
    ) -> None:
        self.set_class(active, "active")
        self._screen_update(
            render_tile_state(state, video_id, active=active, sdk_ready=sdk_ready)
        )

    def _screen_update(self, content: Text) -> None:
        try:
            screen = self.query_one(f"#screen_{self.index}", Static)
        except NoMatches:
            return
        screen.update(content)

    def on_click(self, event: events.Click) -> None:
        current = getattr(event, "widget", None)
        while current is not None and current is not self:
            if isinstance(current, (Button, Input)):
                return
            current = current.parent
        self.post_message(self.Selected(self.index))
