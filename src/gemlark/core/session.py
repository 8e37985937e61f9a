# =============================================================================
# Browsing Session
# =============================================================================
# All mutable browsing state lives in one Session object that is passed to
# every component call: the current URL, the context used for relative
# links, the history stack, the stores and the page on screen.
#
# History contract:
#   Every fetch pushes its target BEFORE the outcome is known, so the top of
#   the stack is always the attempted URL. "Back" pops the top entry and the
#   one beneath it, then navigates to that second entry, which the next
#   fetch pushes again. One page back is shown and the stack depth is
#   restored by the re-push.
# =============================================================================

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gemlark.core.url import DEFAULT_PORT, URL

if TYPE_CHECKING:
    from gemlark.config import Config
    from gemlark.core.page import Page
    from gemlark.storage import BookmarkStore, CertificateRegistry


@dataclass(frozen=True)
class BrowsingContext:
    """
    Host and path of the page currently displayed.

    Only used to resolve relative references. The port is carried along so
    links on a non-default port stay on that port.
    """
    host: str
    path: str = ""
    port: int = DEFAULT_PORT

    @classmethod
    def from_url(cls, url: URL) -> "BrowsingContext":
        return cls(host=url.host, path=url.path, port=url.port)


@dataclass(frozen=True)
class HistoryEntry:
    """A visited URL without its query."""
    scheme: str
    host: str
    port: int
    path: str

    @classmethod
    def from_url(cls, url: URL) -> "HistoryEntry":
        return cls(*url.history_entry())

    def to_url(self) -> URL:
        return URL(scheme=self.scheme, host=self.host, port=self.port, path=self.path)


class HistoryStack:
    """
    Append-only stack of attempted navigations.

    Usage:
        >>> history = HistoryStack()
        >>> history.push(resolve("gemini://a/"))
        >>> history.push(resolve("gemini://b/"))
        >>> history.back()
        URL(scheme='gemini', host='a', port=1965, path='', query='')
        >>> len(history)
        0
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def push(self, url: URL) -> None:
        self._entries.append(HistoryEntry.from_url(url))

    def pop(self) -> HistoryEntry | None:
        """Remove and return the top entry, or None if the stack is empty."""
        if not self._entries:
            return None
        return self._entries.pop()

    def peek(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def back(self) -> URL | None:
        """
        Pop the top two entries and return the second one as a URL.

        With a single entry, that entry is popped and returned (the current
        page is re-fetched). Returns None when the stack is empty.
        """
        first = self.pop()
        second = self.pop()
        target = second or first
        return target.to_url() if target else None

    def entries(self) -> list[HistoryEntry]:
        """Copy of the stack, bottom first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class Session:
    """
    Everything the browsing engine needs between commands.

    Attributes:
        config: Read-only configuration.
        bookmarks: Persisted bookmark list.
        certificates: Client certificate lookup by host.
        history: Attempted navigations (see the module notes).
        current_url: URL of the page on screen, None before the first
                     successful fetch or when showing a local file.
        context: Base for relative references. Updated once per successful
                 fetch.
        page: The page on screen.
    """
    config: "Config"
    bookmarks: "BookmarkStore"
    certificates: "CertificateRegistry"
    history: HistoryStack = field(default_factory=HistoryStack)
    current_url: URL | None = None
    context: BrowsingContext | None = None
    page: "Page | None" = None

    def show(self, url: URL | None, page: "Page") -> None:
        """Make a freshly fetched page the current one."""
        self.page = page
        self.current_url = url
        if url is not None:
            self.context = BrowsingContext.from_url(url)
