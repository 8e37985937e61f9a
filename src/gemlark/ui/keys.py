# =============================================================================
# Key Input
# =============================================================================
# Raw terminal input arrives one byte at a time. Bytes are decoded once into
# input events and then looked up in a keymap built from the configured
# keybindings:
#
#   PlainKey(byte)          any byte other than ESC
#   EscapeSequence(bytes)   ESC plus the two bytes that follow it
#
# Arrow up/down are the only escape sequences with a meaning (scrolling).
# =============================================================================

from dataclasses import dataclass, fields
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, Union

if TYPE_CHECKING:
    from gemlark.config import KeyBindings

ESC = b"\x1b"

# Normal and application cursor-key modes
ARROW_UP = (b"\x1b[A", b"\x1bOA")
ARROW_DOWN = (b"\x1b[B", b"\x1bOB")


@dataclass(frozen=True)
class PlainKey:
    """A single non-escape byte."""
    byte: bytes

    @property
    def char(self) -> str:
        return self.byte.decode("latin-1")


@dataclass(frozen=True)
class EscapeSequence:
    """ESC followed by (up to) two more bytes."""
    data: bytes


InputEvent = Union[PlainKey, EscapeSequence]


class Command(Enum):
    """Everything the pager can be asked to do."""
    SCROLL_UP = auto()
    SCROLL_DOWN = auto()
    QUIT = auto()
    OPEN = auto()
    GOTO_LINK = auto()
    REFRESH = auto()
    BACK = auto()
    HOME = auto()
    GO_UP = auto()
    SET_BOOKMARK = auto()
    GOTO_BOOKMARK = auto()
    DELETE_BOOKMARK = auto()


def read_event(read_byte: Callable[[], bytes]) -> InputEvent | None:
    """
    Read one input event.

    Args:
        read_byte: Returns the next input byte, or b"" at end of input.

    Returns:
        The decoded event, or None at end of input.
    """
    byte = read_byte()
    if not byte:
        return None
    if byte == ESC:
        return EscapeSequence(byte + read_byte() + read_byte())
    return PlainKey(byte)


def build_keymap(bindings: "KeyBindings") -> dict[str, Command]:
    """
    Map each configured key character to its command.

    Field names of KeyBindings match Command member names.
    """
    return {
        getattr(bindings, f.name): Command[f.name.upper()]
        for f in fields(bindings)
    }


def lookup(event: InputEvent, keymap: dict[str, Command]) -> Command | None:
    """The command bound to `event`, or None for unbound keys."""
    if isinstance(event, EscapeSequence):
        if event.data in ARROW_UP:
            return Command.SCROLL_UP
        if event.data in ARROW_DOWN:
            return Command.SCROLL_DOWN
        return None
    return keymap.get(event.char)
