"""Interactive session state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from raggy_notes.models.results import SearchResult

WELCOME_MESSAGE = "Welcome to Raggy Notes! How can I help you today?"
CONNECTED_STATUS = "Connected to Ollama and Qdrant"


class View(Enum):
    CHAT = "Chat"
    SEARCH = "Search"
    SETTINGS = "Settings"


_RING = (View.CHAT, View.SEARCH, View.SETTINGS)


@dataclass
class SessionState:
    """Everything the terminal renders. Mutated only by the session controller."""

    view: View = View.CHAT
    input: str = ""
    cursor: int = 0
    messages: list[str] = field(default_factory=list)
    search_results: list[SearchResult] = field(default_factory=list)
    selected_result: int | None = None
    status: str | None = None

    @classmethod
    def start(cls) -> "SessionState":
        state = cls()
        state.add_ai_message(WELCOME_MESSAGE)
        state.set_status(CONNECTED_STATUS)
        return state

    # status

    def set_status(self, message: str) -> None:
        self.status = message

    def clear_status(self) -> None:
        self.status = None

    # views

    def next_view(self) -> None:
        self.view = _RING[(_RING.index(self.view) + 1) % len(_RING)]

    def previous_view(self) -> None:
        self.view = _RING[(_RING.index(self.view) - 1) % len(_RING)]

    # input buffer

    def insert_char(self, char: str) -> None:
        self.input = self.input[: self.cursor] + char + self.input[self.cursor :]
        self.cursor += len(char)

    def delete_char(self) -> None:
        if self.cursor > 0:
            self.input = self.input[: self.cursor - 1] + self.input[self.cursor :]
            self.cursor -= 1

    def move_cursor_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_cursor_right(self) -> None:
        if self.cursor < len(self.input):
            self.cursor += 1

    def submit_input(self) -> str:
        """Take the buffer as a user message, log it and reset the buffer."""
        message = self.input
        self.input = ""
        self.cursor = 0
        self.messages.append(f"You: {message}")
        return message

    def add_ai_message(self, message: str) -> None:
        self.messages.append(f"AI: {message}")

    # search results

    def replace_results(self, results: list[SearchResult]) -> None:
        self.search_results = list(results)
        self.selected_result = 0 if self.search_results else None

    def clear_results(self) -> None:
        self.search_results = []
        self.selected_result = None

    def next_result(self) -> None:
        if not self.search_results:
            return
        if self.selected_result is None:
            self.selected_result = 0
        elif self.selected_result < len(self.search_results) - 1:
            self.selected_result += 1

    def previous_result(self) -> None:
        if not self.search_results:
            return
        if self.selected_result is None:
            self.selected_result = len(self.search_results) - 1
        elif self.selected_result > 0:
            self.selected_result -= 1

    @property
    def selected(self) -> SearchResult | None:
        if self.selected_result is None:
            return None
        return self.search_results[self.selected_result]


__all__ = ["SessionState", "View", "WELCOME_MESSAGE", "CONNECTED_STATUS"]
