"""Terminal session package."""

from .controller import TerminalController
from .input import KeyDecoder, decode_keys

__all__ = [
    "decode_keys",
    "KeyDecoder",
    "TerminalController",
]
