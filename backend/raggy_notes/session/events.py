"""Discrete input events delivered by the terminal."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EventKind(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    NEXT_VIEW = "next_view"
    PREVIOUS_VIEW = "previous_view"
    SUBMIT = "submit"
    QUIT = "quit"


@dataclass(frozen=True, slots=True)
class InputEvent:
    kind: EventKind
    char: str = ""

    @classmethod
    def key(cls, char: str) -> "InputEvent":
        return cls(EventKind.CHAR, char)


__all__ = ["EventKind", "InputEvent"]
