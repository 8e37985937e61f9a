# =============================================================================
# Pytest Configuration and Fixtures
# =============================================================================
# Shared fixtures for the gemlark test suite.
# =============================================================================

import pytest
import tempfile
from pathlib import Path

from gemlark.config import Config
from gemlark.core import Session
from gemlark.gemini import GeminiClient, GeminiConnectionError
from gemlark.storage import BookmarkStore, CertificateRegistry


class FakeTerminal:
    """
    Scripted stand-in for gemlark.ui.terminal.Terminal.

    Key presses come from `keys`, answers to prompts from `answers`. Running
    out of keys reads as end of input, which makes the pager quit.
    """

    def __init__(self, keys: bytes = b"", answers=(), rows: int = 10, cols: int = 40):
        self.keys = bytearray(keys)
        self.answers = list(answers)
        self.rows = rows
        self.cols = cols
        self.mode = None
        self.draws: list[list[str]] = []
        self.prompts: list[tuple[str, bool]] = []
        self.messages: list[list[str]] = []
        self.titles: list[str] = []

    def size(self):
        return self.rows, self.cols

    def paging_mode(self):
        self.mode = "paging"

    def line_mode(self, echo=True):
        self.mode = "line"

    def read_byte(self):
        if not self.keys:
            return b""
        byte = bytes(self.keys[:1])
        del self.keys[:1]
        return byte

    def read_line(self, prompt, echo=True):
        self.prompts.append((prompt, echo))
        self.line_mode(echo)
        return self.answers.pop(0) if self.answers else ""

    def wait_key(self, lines):
        self.messages.append(list(lines))
        self.paging_mode()
        return self.read_byte()

    def draw(self, lines, status=""):
        self.draws.append(list(lines))

    def set_title(self, title):
        self.titles.append(title)


class FakeClient(GeminiClient):
    """GeminiClient answering from a dict of URL -> raw response bytes."""

    def __init__(self, responses: dict[str, bytes] | None = None):
        super().__init__()
        self.responses = dict(responses or {})
        self.requests: list[bytes] = []
        self.certificates: list = []

    def _transact(self, url, request, certificate):
        self.requests.append(request)
        self.certificates.append(certificate)
        if str(url) not in self.responses:
            raise GeminiConnectionError(f"Failed to connect to {url.host}:{url.port}")
        return self.responses[str(url)]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config():
    """Default configuration with a known homepage."""
    return Config(margin=2, homepage="gemini://home.example/")


@pytest.fixture
def session(temp_dir, config):
    """A fresh Session with stores under the temporary directory."""
    return Session(
        config=config,
        bookmarks=BookmarkStore(temp_dir / "bookmarks.txt"),
        certificates=CertificateRegistry(temp_dir / "certs"),
    )


@pytest.fixture
def sample_gemtext():
    """A small gemtext document touching every line type."""
    return (
        "# Welcome\n"
        "Some introductory text.\n"
        "=> /docs Documentation\n"
        "=> gemini://other.example/\n"
        "## Section\n"
        "* first item\n"
        "> a quote\n"
        "```\n"
        "  raw  text  \n"
        "```\n"
        "### End\n"
    )


def gemini_response(status: int, meta: str = "", body: bytes = b"") -> bytes:
    """Raw bytes of a Gemini response."""
    header = f"{status} {meta}".rstrip() if meta else f"{status}"
    return header.encode("utf-8") + b"\r\n" + body
