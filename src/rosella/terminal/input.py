"""Low-level terminal input decoding.

Translates raw bytes read from stdin into normalized key events. Escape
sequences are expected to arrive whole within one read, which holds for
terminal emulators writing into a raw-mode tty.
"""

from __future__ import annotations

import codecs

from rosella.ui.keys import Key, KeyEvent

_CSI_KEYS = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
}

_TILDE_KEYS = {
    "3": Key.DELETE,
    "5": Key.PAGE_UP,
    "6": Key.PAGE_DOWN,
}

_CONTROL_KEYS = {
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\x7f": Key.BACKSPACE,
    "\x08": Key.BACKSPACE,
    # Ctrl-C never raises in raw mode; treat it as escape.
    "\x03": Key.ESCAPE,
}


class KeyDecoder:
    """Stateful decoder; keeps partial UTF-8 characters between reads."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, data: bytes) -> list[KeyEvent]:
        return _parse(self._decoder.decode(data))


def decode_keys(data: bytes) -> list[KeyEvent]:
    return KeyDecoder().feed(data)


def _parse_escape(text: str, start: int) -> tuple[KeyEvent | None, int]:
    """Parse the sequence starting at the ESC at ``start``.

    Returns the event (None for unrecognized sequences) and the index just
    past the consumed characters.
    """
    following = start + 1
    if following >= len(text) or text[following] not in "[O":
        return KeyEvent(Key.ESCAPE), following

    # Scan parameter bytes up to the final byte of the sequence.
    index = following + 1
    while index < len(text) and not ("\x40" <= text[index] <= "\x7e"):
        index += 1
    if index >= len(text):
        return KeyEvent(Key.ESCAPE), following

    final = text[index]
    params = text[following + 1 : index]
    end = index + 1
    if final in _CSI_KEYS and params in ("", "1"):
        return KeyEvent(_CSI_KEYS[final]), end
    if final == "~" and params in _TILDE_KEYS:
        return KeyEvent(_TILDE_KEYS[params]), end
    return None, end


def _parse(text: str) -> list[KeyEvent]:
    events: list[KeyEvent] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\x1b":
            event, index = _parse_escape(text, index)
            if event is not None:
                events.append(event)
            continue
        if char == "\r" and text.startswith("\r\n", index):
            events.append(KeyEvent(Key.ENTER))
            index += 2
            continue
        if char in _CONTROL_KEYS:
            events.append(KeyEvent(_CONTROL_KEYS[char]))
        elif char.isprintable():
            events.append(KeyEvent.of_char(char))
        index += 1
    return events
