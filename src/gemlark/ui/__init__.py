# =============================================================================
# UI Module
# =============================================================================
# Raw-terminal user interface for gemlark.
#
# Structure:
#   - terminal: terminal modes, byte/line input, screen output
#   - keys: input events (plain keys, escape sequences) and the keymap
#   - pager: the page view and command dispatch
#
# Everything is single-threaded and blocking: one byte is read at a time
# and nothing happens in the background.
# =============================================================================

from gemlark.ui.keys import Command, EscapeSequence, PlainKey
from gemlark.ui.pager import Action, Pager, PagerResult
from gemlark.ui.terminal import Terminal

__all__ = [
    "Action",
    "Command",
    "EscapeSequence",
    "Pager",
    "PagerResult",
    "PlainKey",
    "Terminal",
]
