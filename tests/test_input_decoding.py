from __future__ import annotations

import pytest

from rosella.terminal.input import KeyDecoder, decode_keys
from rosella.ui.keys import Key, KeyEvent


@pytest.mark.parametrize(
    ("data", "key"),
    [
        (b"\x1b[A", Key.UP),
        (b"\x1b[B", Key.DOWN),
        (b"\x1b[C", Key.RIGHT),
        (b"\x1b[D", Key.LEFT),
        (b"\x1bOA", Key.UP),
        (b"\x1b[5~", Key.PAGE_UP),
        (b"\x1b[6~", Key.PAGE_DOWN),
        (b"\x1b[3~", Key.DELETE),
        (b"\x7f", Key.BACKSPACE),
        (b"\x08", Key.BACKSPACE),
        (b"\r", Key.ENTER),
        (b"\n", Key.ENTER),
        (b"\x1b", Key.ESCAPE),
        (b"\x03", Key.ESCAPE),
    ],
)
def test_special_keys(data: bytes, key: Key) -> None:
    assert decode_keys(data) == [KeyEvent(key)]


def test_printable_characters_and_crlf() -> None:
    assert decode_keys(b"ab\r\n") == [
        KeyEvent.of_char("a"),
        KeyEvent.of_char("b"),
        KeyEvent(Key.ENTER),
    ]


def test_escape_followed_by_text_yields_escape_then_char() -> None:
    assert decode_keys(b"\x1bq") == [KeyEvent(Key.ESCAPE), KeyEvent.of_char("q")]


def test_unknown_sequences_and_controls_are_dropped() -> None:
    assert decode_keys(b"\x1b[15~\x1b[1;5Cx\t") == [KeyEvent.of_char("x")]


def test_utf8_split_across_reads() -> None:
    decoder = KeyDecoder()
    encoded = "ş".encode()
    assert decoder.feed(encoded[:1]) == []
    assert decoder.feed(encoded[1:]) == [KeyEvent.of_char("ş")]


def test_burst_of_arrows() -> None:
    assert decode_keys(b"\x1b[B\x1b[B\x1b[A") == [
        KeyEvent(Key.DOWN),
        KeyEvent(Key.DOWN),
        KeyEvent(Key.UP),
    ]
