"""Textual terminal for the interactive session."""

from __future__ import annotations

import asyncio
from typing import Callable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Static

from raggy_notes.session.controller import SessionController
from raggy_notes.session.events import EventKind, InputEvent
from raggy_notes.session.state import SessionState, View

HELP_TEXT = {
    View.CHAT: "Ctrl+Q/Ctrl+C: Quit | Tab: Switch tabs | Enter: Send message",
    View.SEARCH: "Ctrl+Q/Ctrl+C: Quit | Tab: Switch tabs | Enter: Search | Up/Down: Navigate results",
    View.SETTINGS: "Ctrl+Q/Ctrl+C: Quit | Tab: Switch tabs",
}


class NotesApp(App[None]):
    """Feeds key presses to a ``SessionController`` and renders its state."""

    CSS = """
    #tabs { height: 1; }
    #body { height: 1fr; }
    #messages, #results, #preview, #settings { border: solid $accent; height: 1fr; overflow-y: auto; }
    #results { width: 2fr; }
    #preview { width: 3fr; }
    #input { height: 3; border: solid $accent; color: yellow; }
    #status { height: 1; }
    """

    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        Binding("ctrl+q", "session_key('quit')", priority=True, show=False),
        Binding("ctrl+c", "session_key('quit')", priority=True, show=False),
        Binding("tab", "session_key('next_view')", priority=True, show=False),
        Binding("shift+tab", "session_key('previous_view')", priority=True, show=False),
        Binding("enter", "session_key('submit')", priority=True, show=False),
        Binding("backspace", "session_key('backspace')", priority=True, show=False),
        Binding("left", "session_key('left')", priority=True, show=False),
        Binding("right", "session_key('right')", priority=True, show=False),
        Binding("up", "session_key('up')", priority=True, show=False),
        Binding("down", "session_key('down')", priority=True, show=False),
    ]

    def __init__(self, controller_factory: Callable[["NotesApp"], SessionController], settings_lines: list[str]) -> None:
        super().__init__()
        self._controller_factory = controller_factory
        self._settings_lines = settings_lines
        self._events: asyncio.Queue[InputEvent] = asyncio.Queue()

    def compose(self) -> ComposeResult:
        yield Static(id="tabs")
        with Horizontal(id="body"):
            yield Static(id="messages")
            yield Static(id="results")
            yield Static(id="preview")
            yield Static("\n".join(self._settings_lines), id="settings")
        yield Static(id="input")
        yield Static(id="status")

    def on_mount(self) -> None:
        controller = self._controller_factory(self)
        self.run_worker(controller.run(), exclusive=True)

    def action_session_key(self, name: str) -> None:
        self._events.put_nowait(InputEvent(EventKind(name)))

    def on_key(self, event: events.Key) -> None:
        if event.is_printable and event.character:
            event.stop()
            self._events.put_nowait(InputEvent.key(event.character))

    # Terminal protocol

    async def read_event(self) -> InputEvent:
        return await self._events.get()

    def restore(self) -> None:
        self.exit()

    def draw(self, state: SessionState) -> None:
        self.query_one("#tabs", Static).update(_tab_bar(state.view))
        self.query_one("#messages", Static).display = state.view is View.CHAT
        self.query_one("#results", Static).display = state.view is View.SEARCH
        self.query_one("#preview", Static).display = state.view is View.SEARCH
        self.query_one("#settings", Static).display = state.view is View.SETTINGS

        self.query_one("#messages", Static).update("\n".join(state.messages))
        self.query_one("#results", Static).update(_results(state))
        self.query_one("#preview", Static).update(_preview(state))

        buffer = Text(state.input)
        buffer.stylize("reverse", state.cursor, state.cursor + 1)
        if state.cursor >= len(state.input):
            buffer.append(" ", style="reverse")
        self.query_one("#input", Static).update(buffer)

        self.query_one("#status", Static).update(_status_line(state))


def _tab_bar(active: View) -> Text:
    bar = Text()
    for view in View:
        style = "bold yellow" if view is active else "white"
        bar.append(view.value[0], style=f"{style} underline")
        bar.append(view.value[1:] + "  ", style=style)
    return bar


def _status_line(state: SessionState) -> Text:
    if state.status:
        return Text(state.status, style="white on blue", justify="center")
    return Text(HELP_TEXT[state.view], style="bright_black")


def _results(state: SessionState) -> Text:
    if not state.search_results:
        return Text("No search results yet. Type a query and press Enter.")
    lines = Text()
    for index, result in enumerate(state.search_results):
        style = "reverse" if index == state.selected_result else ""
        lines.append(result.title, style=f"bold {style}".strip())
        lines.append(f" ({result.score:.2f})\n", style=f"bright_black {style}".strip())
    return lines


def _preview(state: SessionState) -> Text:
    result = state.selected
    if result is None:
        return Text("Select a result to see preview")
    preview = Text()
    for label, value in (("Title: ", result.title), ("File: ", result.file_path), ("Score: ", f"{result.score:.2f}")):
        preview.append(label, style="bold")
        preview.append(f"{value}\n")
    preview.append("\n")
    preview.append(result.content)
    return preview


__all__ = ["NotesApp"]
