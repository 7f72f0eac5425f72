"""Interactive session controller."""

from __future__ import annotations

import asyncio
from typing import Protocol

from raggy_notes.core.errors import RaggyError, UnexpectedError
from raggy_notes.core.logging import get_logger
from raggy_notes.llm.client import InferenceClient
from raggy_notes.models.results import SearchResult
from raggy_notes.retrieval.engine import RetrievalEngine
from raggy_notes.retrieval.vector_store import VectorStore
from raggy_notes.session.events import EventKind, InputEvent
from raggy_notes.session.state import CONNECTED_STATUS, SessionState, View

logger = get_logger(__name__)

THINKING_STATUS = "Thinking..."
SEARCHING_STATUS = "Searching..."
SEARCH_LIMIT = 10


class Terminal(Protocol):
    async def read_event(self) -> InputEvent: ...

    def draw(self, state: SessionState) -> None: ...

    def restore(self) -> None: ...


class SessionController:
    """Drive chat and search from terminal input.

    One request at a time: while a chat or search call is awaited no further
    input is handled. The only concurrent task is the timer that clears the
    startup status.
    """

    def __init__(
        self,
        terminal: Terminal,
        engine: RetrievalEngine,
        inference: InferenceClient,
        store: VectorStore,
        status_clear_seconds: float = 3.0,
        search_limit: int = SEARCH_LIMIT,
    ) -> None:
        self.terminal = terminal
        self.engine = engine
        self.inference = inference
        self.store = store
        self.status_clear_seconds = status_clear_seconds
        self.search_limit = search_limit
        self.state = SessionState.start()

    async def run(self) -> None:
        timer = asyncio.create_task(asyncio.sleep(self.status_clear_seconds))
        timer_seen = False
        reader: asyncio.Task[InputEvent] | None = None
        try:
            while True:
                self.terminal.draw(self.state)
                if reader is None:
                    reader = asyncio.ensure_future(self.terminal.read_event())
                waiting: set[asyncio.Future] = {reader}
                if not timer_seen:
                    waiting.add(timer)
                done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
                if timer in done and not timer_seen:
                    timer_seen = True
                    self.on_status_timeout()
                if reader in done:
                    event = reader.result()
                    reader = None
                    if not await self.handle(event):
                        return
        finally:
            for task in (reader, timer):
                if task is not None and not task.done():
                    task.cancel()
            self.terminal.restore()

    def on_status_timeout(self) -> None:
        # the user may already have replaced the banner
        if self.state.status == CONNECTED_STATUS:
            self.state.clear_status()

    async def handle(self, event: InputEvent) -> bool:
        """Apply one input event. Returns False when the session should end."""
        state = self.state
        kind = event.kind
        if kind is EventKind.QUIT:
            return False
        if kind is EventKind.CHAR:
            state.insert_char(event.char)
        elif kind is EventKind.BACKSPACE:
            state.delete_char()
        elif kind is EventKind.LEFT:
            state.move_cursor_left()
        elif kind is EventKind.RIGHT:
            state.move_cursor_right()
        elif kind is EventKind.UP:
            if state.view is View.SEARCH:
                state.previous_result()
        elif kind is EventKind.DOWN:
            if state.view is View.SEARCH:
                state.next_result()
        elif kind is EventKind.NEXT_VIEW:
            state.next_view()
        elif kind is EventKind.PREVIOUS_VIEW:
            state.previous_view()
        elif kind is EventKind.SUBMIT:
            if state.view is View.CHAT:
                await self.submit_chat()
            elif state.view is View.SEARCH:
                await self.submit_search()
        return True

    async def submit_chat(self) -> None:
        state = self.state
        if not state.input:
            return
        question = state.submit_input()
        state.set_status(THINKING_STATUS)
        self.terminal.draw(state)
        try:
            state.add_ai_message(await self.engine.answer(question))
        except RaggyError as exc:
            logger.warning("Chat request failed: %s", exc)
            state.add_ai_message(f"Error generating response: {exc}")
        except Exception as exc:
            logger.exception("Chat request crashed")
            state.add_ai_message(f"Error generating response: {UnexpectedError(exc)}")
        state.clear_status()

    async def submit_search(self) -> None:
        state = self.state
        if not state.input:
            return
        query = state.submit_input()
        state.clear_results()
        state.set_status(SEARCHING_STATUS)
        self.terminal.draw(state)
        try:
            await self._search(query)
        except Exception as exc:
            logger.exception("Search request crashed")
            state.add_ai_message(f"Error searching notes: {UnexpectedError(exc)}")
        finally:
            state.clear_status()

    async def _search(self, query: str) -> None:
        state = self.state
        try:
            embeddings = await self.inference.embed(query)
        except RaggyError as exc:
            logger.warning("Search embedding failed: %s", exc)
            state.add_ai_message(f"Error generating embedding: {exc}")
            return
        try:
            hits = await self.store.search(embeddings[0] if embeddings else [], self.search_limit)
        except RaggyError as exc:
            logger.warning("Search failed: %s", exc)
            state.add_ai_message(f"Error searching notes: {exc}")
            return
        if not hits:
            state.add_ai_message("No relevant notes found for your query.")
            return
        state.add_ai_message(f"Found {len(hits)} relevant notes.")
        state.replace_results([SearchResult.from_scored(hit) for hit in hits])


__all__ = ["SessionController", "Terminal", "THINKING_STATUS", "SEARCHING_STATUS"]
