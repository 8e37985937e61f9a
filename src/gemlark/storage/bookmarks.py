# =============================================================================
# Bookmark Store
# =============================================================================
# Bookmarks are kept in a plain text file, one per line:
#
#   <url> <description>
#
# The description may be empty. Duplicates are allowed. Deleting removes
# every line whose URL starts with the given URL, ignoring case.
# =============================================================================

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bookmark:
    """A saved URL and an optional description."""
    url: str
    description: str = ""

    def to_line(self) -> str:
        return f"{self.url} {self.description}".rstrip() + "\n"

    @classmethod
    def from_line(cls, line: str) -> "Bookmark":
        url, _, description = line.strip().partition(" ")
        return cls(url=url, description=description.strip())


class BookmarkStore:
    """
    File-backed bookmark list.

    The file is re-read on every access so that several gemlark processes
    see each other's changes.

    Usage:
        >>> store = BookmarkStore(Path("bookmarks.txt"))
        >>> store.add(Bookmark("gemini://example.org/", "Example"))
        >>> [b.url for b in store.load()]
        ['gemini://example.org/']
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[Bookmark]:
        """All bookmarks in file order. A missing file means no bookmarks."""
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            return [Bookmark.from_line(line) for line in f if line.strip()]

    def add(self, bookmark: Bookmark) -> None:
        """Append a bookmark to the end of the file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(bookmark.to_line())
        logger.info(f"Bookmarked {bookmark.url}")

    def delete(self, url: str) -> int:
        """
        Remove bookmarks whose URL starts with `url`, case-insensitively.

        Returns:
            Number of bookmarks removed.
        """
        bookmarks = self.load()
        prefix = url.lower()
        kept = [b for b in bookmarks if not b.url.lower().startswith(prefix)]
        removed = len(bookmarks) - len(kept)

        if removed:
            with open(self.path, "w", encoding="utf-8") as f:
                f.writelines(b.to_line() for b in kept)
            logger.info(f"Removed {removed} bookmark(s) matching {url}")

        return removed

    def get(self, index: int) -> Bookmark | None:
        """Bookmark number `index` (1-based), or None if out of range."""
        bookmarks = self.load()
        if 1 <= index <= len(bookmarks):
            return bookmarks[index - 1]
        return None
