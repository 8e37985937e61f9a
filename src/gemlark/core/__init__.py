# =============================================================================
# gemlark Core Module
# =============================================================================
# Core domain models. These are plain Python dataclasses and functions with
# no external dependencies; they can be imported anywhere without causing
# circular imports.
#
#   - URL / resolve: URL parsing and relative reference resolution
#   - Session: Browsing state threaded through every component
#   - HistoryStack: Push-before-fetch navigation history
#   - Page / Link: A rendered document and its link table
# =============================================================================

from gemlark.core.page import Link, Page
from gemlark.core.session import BrowsingContext, HistoryEntry, HistoryStack, Session
from gemlark.core.url import URL, ResolutionError, encode_query, resolve

__all__ = [
    "URL",
    "resolve",
    "encode_query",
    "ResolutionError",
    "BrowsingContext",
    "HistoryEntry",
    "HistoryStack",
    "Session",
    "Page",
    "Link",
]
