"""Normalized key events fed to the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Key(str, Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    LEFT = "left"
    RIGHT = "right"
    ENTER = "enter"
    ESCAPE = "escape"
    BACKSPACE = "backspace"
    DELETE = "delete"
    CHAR = "char"


@dataclass(frozen=True)
class KeyEvent:
    key: Key
    char: str = ""

    @classmethod
    def of_char(cls, char: str) -> KeyEvent:
        return cls(Key.CHAR, char)

    @property
    def is_printable(self) -> bool:
        return self.key is Key.CHAR and len(self.char) == 1 and self.char.isprintable()
