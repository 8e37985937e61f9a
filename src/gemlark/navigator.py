# =============================================================================
# Navigator
# =============================================================================
# The browsing loop as an explicit state machine:
#
#   RESOLVING ──> FETCHING ──> RENDERING ──> PAGING ──> (RESOLVING | ...)
#                   │  ^                       │
#                   v  │                       v
#              INPUT_PROMPT                   DONE
#
#   RESOLVING     raw reference -> URL (against the browsing context)
#   FETCHING      one request; the outcome picks the next state
#   INPUT_PROMPT  status 1x: read a line, re-request with it as the query
#   RENDERING     body -> Page (gemtext rendered, anything else as-is)
#   PAGING        show the page, wait for a command
#   DONE          user quit
#
# Recovery after a failed fetch is always user-driven: a message is shown
# and a key press is awaited before anything else happens.
# =============================================================================

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from gemlark.core.page import Page
from gemlark.core.url import URL, ResolutionError, encode_query, resolve
from gemlark.gemini import (
    CertRequired,
    Failure,
    FailureKind,
    GeminiClient,
    InputRequested,
    Redirect,
    Rendered,
)
from gemlark.gemini.status import describe
from gemlark.rendering import GemtextRenderer
from gemlark.ui.pager import Action, Pager

if TYPE_CHECKING:
    from gemlark.core.session import Session
    from gemlark.ui.terminal import Terminal

logger = logging.getLogger(__name__)

CONTINUE_HINT = "Press any key to continue."


class State(Enum):
    """States of the browsing loop."""
    RESOLVING = auto()
    FETCHING = auto()
    INPUT_PROMPT = auto()
    RENDERING = auto()
    PAGING = auto()
    DONE = auto()


class Navigator:
    """
    Drives fetch -> render -> page -> command until the user quits.

    Usage:
        >>> navigator = Navigator(session, terminal)
        >>> navigator.start("gemini://geminiprotocol.net/")
        >>> navigator.run()
        0

    Attributes:
        state: Current state of the loop.
        session: Browsing state shared with every component.
    """

    # Redirects followed in a row before giving up
    MAX_REDIRECTS = 5

    def __init__(
        self,
        session: "Session",
        terminal: "Terminal",
        client: GeminiClient | None = None,
        renderer: GemtextRenderer | None = None,
    ) -> None:
        self.session = session
        self.terminal = terminal
        self.client = client or GeminiClient()
        self.renderer = renderer or GemtextRenderer(
            session.config.styles, margin=session.config.margin
        )
        self.state = State.PAGING

        self._raw = ""
        self._url: URL | None = None
        self._outcome: Rendered | InputRequested | None = None
        self._redirects = 0

    # -------------------------------------------------------------------------
    # Entry Points
    # -------------------------------------------------------------------------

    def start(self, raw: str) -> None:
        """Begin by resolving `raw`."""
        self._raw = raw
        self.state = State.RESOLVING

    def open_document(self, text: str, title: str) -> None:
        """Begin by paging a local gemtext document (no network involved)."""
        _, cols = self.terminal.size()
        page = self.renderer.render_page(text, cols, title=title)
        self.session.show(None, page)
        self.terminal.set_title(page.title)
        self.state = State.PAGING

    def run(self) -> int:
        """Step until DONE. Returns the process exit code."""
        while self.state is not State.DONE:
            self.step()
        return 0

    def step(self) -> None:
        """Run the handler for the current state once."""
        handler = {
            State.RESOLVING: self._resolving,
            State.FETCHING: self._fetching,
            State.INPUT_PROMPT: self._input_prompt,
            State.RENDERING: self._rendering,
            State.PAGING: self._paging,
        }[self.state]
        handler()

    # -------------------------------------------------------------------------
    # States
    # -------------------------------------------------------------------------

    def _resolving(self) -> None:
        if not self._raw.strip():
            # e.g. a link number that doesn't exist
            self.state = State.PAGING
            return

        try:
            url = resolve(self._raw, self.session.context)
        except ResolutionError as e:
            logger.warning(f"Cannot resolve {self._raw!r}: {e}")
            self.terminal.wait_key([str(e), "", CONTINUE_HINT])
            self.state = State.PAGING
            return

        self._visit(url)

    def _fetching(self) -> None:
        url = self._url
        outcome = self.client.fetch(url, self.session)

        if isinstance(outcome, Rendered):
            self._outcome = outcome
            self.state = State.RENDERING

        elif isinstance(outcome, InputRequested):
            self._outcome = outcome
            self.state = State.INPUT_PROMPT

        elif isinstance(outcome, Redirect):
            self._redirects += 1
            if self._redirects > self.MAX_REDIRECTS:
                self._recover(Failure(
                    FailureKind.TOO_MANY_REDIRECTS,
                    f"Gave up after {self.MAX_REDIRECTS} redirects at {url}",
                    url=url,
                ))
                return
            logger.info(f"Redirect {url} -> {outcome.target}")
            # The redirecting URL doesn't stay in history
            self.session.history.pop()
            self._url = outcome.target

        elif isinstance(outcome, CertRequired):
            self._certificate_required(outcome)

        else:
            self._recover(outcome)

    def _input_prompt(self) -> None:
        request = self._outcome
        answer = self.terminal.read_line(
            f"{request.prompt or 'Input'}: ", echo=not request.sensitive
        )

        # The prompting URL is replaced by the one carrying the answer
        self.session.history.pop()

        if not answer:
            self.state = State.PAGING
            return

        self._url = request.url.with_query(encode_query(answer))
        self.state = State.FETCHING

    def _rendering(self) -> None:
        outcome = self._outcome
        text = outcome.body.decode("utf-8", errors="replace")

        if outcome.is_gemtext:
            _, cols = self.terminal.size()
            page = self.renderer.render_page(
                text, cols, title=str(outcome.url), charset=outcome.charset
            )
        else:
            page = Page.from_text(
                text, title=str(outcome.url), mime=outcome.mime, charset=outcome.charset
            )

        self.session.show(outcome.url, page)
        self.terminal.set_title(f"{page.title} [{page.charset}]")
        self.state = State.PAGING

    def _paging(self) -> None:
        if self.session.page is None:
            self.session.page = Page.blank()

        result = Pager(self.terminal, self.session).run()

        if result.action is Action.QUIT:
            self.state = State.DONE
        elif result.action is Action.NAVIGATE:
            self.start(result.target)
        elif result.action is Action.VISIT:
            self._visit(result.url)
        elif result.action is Action.REFRESH:
            if self.session.current_url is not None:
                self._visit(self.session.current_url)
        elif result.action is Action.BACK:
            self._go_back()
        # Action.REPEAT: stay in PAGING

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _visit(self, url: URL) -> None:
        self._url = url
        self._redirects = 0
        self.state = State.FETCHING

    def _go_back(self) -> None:
        """
        History back: pop two entries, fetch the second.

        With nothing in history the current page stays on screen.
        """
        url = self.session.history.back()
        if url is None:
            self.state = State.PAGING
            return
        logger.debug(f"Back to {url}")
        self._visit(url)

    def _recover(self, failure: Failure) -> None:
        """
        Show a failure and wait for a key, then pick the fallback.

        - Unsupported scheme and 50/51: history back.
        - Everything else: drop the attempted entry and show the page that
          was on screen (a blank page if there was none).
        """
        logger.warning(f"Fetch failed: {failure.kind.name} {failure.message}")
        self.terminal.wait_key([failure.message, "", CONTINUE_HINT])

        if failure.kind in (FailureKind.UNSUPPORTED_SCHEME, FailureKind.PERMANENT):
            self._go_back()
            return

        self.session.history.pop()
        if self.session.page is None:
            self.session.page = Page.blank(failure.message)
        self.state = State.PAGING

    def _certificate_required(self, outcome: CertRequired) -> None:
        """Explain how to create a certificate, then retry or go back."""
        retry_key = self.session.config.keybindings.refresh
        title = f"{outcome.status} {describe(outcome.status)}"
        lines = [f"{title}: {outcome.detail}" if outcome.detail else title, ""]
        lines += self.session.certificates.generation_hint(outcome.host)
        lines += ["", f"Press {retry_key} to retry, any other key to go back."]

        key = self.terminal.wait_key(lines)

        if key.decode("latin-1") == retry_key:
            self.session.history.pop()
            self._visit(outcome.url)
        else:
            self._go_back()
