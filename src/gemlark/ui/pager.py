# =============================================================================
# Pager
# =============================================================================
# Shows the current page and blocks for a command.
#
#   - Arrow up/down scroll by one line. Scrolling past either end is a no-op.
#   - Unbound keys are ignored.
#   - Every other command ends the pager loop and returns a PagerResult
#     telling the navigator what to do next.
#
# Commands that need a line of input (URL, link number, bookmark
# description or number) switch the terminal to line mode for that one read.
# Switching back to paging mode is done on the next Pager.run().
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from gemlark.core.page import Page
from gemlark.core.url import URL
from gemlark.storage import Bookmark
from gemlark.ui.keys import Command, build_keymap, lookup, read_event

if TYPE_CHECKING:
    from gemlark.core.session import Session
    from gemlark.ui.terminal import Terminal

logger = logging.getLogger(__name__)


class Action(Enum):
    """What the navigator should do once the pager returns."""
    NAVIGATE = auto()   # Resolve `target` against the browsing context
    VISIT = auto()      # Fetch `url` as-is
    REFRESH = auto()    # Fetch the current URL again
    BACK = auto()       # History back
    REPEAT = auto()     # Show the current page again without fetching
    QUIT = auto()


@dataclass(frozen=True)
class PagerResult:
    action: Action
    target: str = ""
    url: URL | None = None


class Pager:
    """
    Interactive view of `session.page`.

    Attributes:
        top: Index of the first line on screen.
        rows: Terminal rows (the last one is the status line).
        cols: Terminal columns.
    """

    def __init__(self, terminal: "Terminal", session: "Session") -> None:
        self.terminal = terminal
        self.session = session
        self.keymap = build_keymap(session.config.keybindings)
        self.top = 0
        self.rows, self.cols = terminal.size()

    @property
    def page(self) -> Page:
        return self.session.page or Page.blank()

    @property
    def view_height(self) -> int:
        return max(self.rows - 1, 1)

    @property
    def bottom(self) -> int:
        """Number of lines shown so far (index one past the last visible line)."""
        return min(self.top + self.view_height, len(self.page.lines))

    # -------------------------------------------------------------------------
    # Main Loop
    # -------------------------------------------------------------------------

    def run(self) -> PagerResult:
        """Display the page and handle keys until a command ends the loop."""
        self.terminal.paging_mode()
        self.top = 0
        self.redraw()

        while True:
            event = read_event(self.terminal.read_byte)
            if event is None:
                logger.debug("End of input, quitting")
                return PagerResult(Action.QUIT)

            command = lookup(event, self.keymap)
            if command is None:
                continue
            if command is Command.SCROLL_UP:
                if self.scroll_up():
                    self.redraw()
                continue
            if command is Command.SCROLL_DOWN:
                if self.scroll_down():
                    self.redraw()
                continue

            logger.debug(f"Command: {command.name}")
            return self.dispatch(command)

    def scroll_up(self) -> bool:
        """Move the view up one line. Returns False at the top."""
        if self.top == 0:
            return False
        self.top -= 1
        return True

    def scroll_down(self) -> bool:
        """Move the view down one line. Returns False once the last line is shown."""
        if self.bottom >= len(self.page.lines):
            return False
        self.top += 1
        return True

    def redraw(self) -> None:
        lines = self.page.lines[self.top:self.bottom]
        self.terminal.draw(lines, status=self._status())

    def _status(self) -> str:
        url = self.session.current_url
        where = str(url) if url else self.page.title
        total = len(self.page.lines)
        return f" {where}  [{self.bottom}/{total}]"[: self.cols]

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def dispatch(self, command: Command) -> PagerResult:
        """Run a non-scroll command and say what should happen next."""
        handler = {
            Command.QUIT: lambda: PagerResult(Action.QUIT),
            Command.OPEN: self._open_url,
            Command.GOTO_LINK: self._goto_link,
            Command.REFRESH: lambda: PagerResult(Action.REFRESH),
            Command.BACK: lambda: PagerResult(Action.BACK),
            Command.HOME: lambda: PagerResult(
                Action.NAVIGATE, target=self.session.config.homepage
            ),
            Command.GO_UP: self._go_up,
            Command.SET_BOOKMARK: self._set_bookmark,
            Command.GOTO_BOOKMARK: self._goto_bookmark,
            Command.DELETE_BOOKMARK: self._delete_bookmark,
        }[command]
        return handler()

    def _open_url(self) -> PagerResult:
        raw = self.terminal.read_line("URL: ").strip()
        if not raw:
            return PagerResult(Action.REPEAT)
        if "://" not in raw:
            raw = f"gemini://{raw}"
        return PagerResult(Action.NAVIGATE, target=raw)

    def _goto_link(self) -> PagerResult:
        answer = self.terminal.read_line("Link number: ").strip()
        index = int(answer) if answer.isascii() and answer.isdigit() else 0
        # Out of range gives an empty target
        return PagerResult(Action.NAVIGATE, target=self.page.link_target(index))

    def _go_up(self) -> PagerResult:
        url = self.session.current_url
        if url is None:
            return PagerResult(Action.REPEAT)
        return PagerResult(Action.VISIT, url=url.parent())

    def _set_bookmark(self) -> PagerResult:
        url = self.session.current_url
        if url is not None:
            description = self.terminal.read_line("Description (optional): ").strip()
            self.session.bookmarks.add(Bookmark(str(url), description))
        return PagerResult(Action.REPEAT)

    def _goto_bookmark(self) -> PagerResult:
        bookmarks = self.session.bookmarks.load()
        listing = [
            f"{i:>3}  {b.url}  {b.description}".rstrip()
            for i, b in enumerate(bookmarks, start=1)
        ] or ["No bookmarks."]
        self.terminal.draw(listing)

        answer = self.terminal.read_line("Bookmark number: ").strip()
        bookmark = (
            self.session.bookmarks.get(int(answer))
            if answer.isascii() and answer.isdigit()
            else None
        )
        if bookmark is None:
            return PagerResult(Action.REPEAT)
        return PagerResult(Action.NAVIGATE, target=bookmark.url)

    def _delete_bookmark(self) -> PagerResult:
        url = self.session.current_url
        if url is not None:
            self.session.bookmarks.delete(str(url))
        return PagerResult(Action.REPEAT)
