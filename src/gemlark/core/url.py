# =============================================================================
# URL Resolution
# =============================================================================
# Parses raw URL strings and resolves relative references against the page
# currently on screen.
#
# Gemini URLs look like:
#
#   gemini://[user@]host[:port]/path[?query]
#
# Resolution rules:
#   - An explicit "scheme://" marker wins; the browsing context is ignored.
#   - "scheme:rest" without "//" (mailto:, about:) is kept opaque so it can
#     be refused as an unsupported scheme. "host:1965/path" is not a scheme.
#   - "//host/path" reuses the context scheme (always gemini for us).
#   - "/path" replaces the path on the context's host.
#   - "path" is joined to the directory of the context's path.
#
# Everything here is a pure string transformation. No network or file
# access happens in this module.
# =============================================================================

import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gemlark.core.session import BrowsingContext


DEFAULT_SCHEME = "gemini"
DEFAULT_PORT = 1965

# Bytes allowed through unescaped in query strings
_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.~_-"
)

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*):(//)?")

# "host:port" or "host:port/path" typed without a scheme
_HOST_PORT_RE = re.compile(r"^[^/:]+:[0-9]+(/|$)")

# Longest DNS label
_MAX_LABEL = 63


@dataclass(frozen=True)
class URL:
    """
    A parsed, absolute URL.

    Attributes:
        scheme: URL scheme, lower-cased ("gemini" unless stated otherwise).
        host: Hostname, without any user@ segment or port. Empty only for
              opaque references like "mailto:...".
        port: TCP port (1965 when absent or non-numeric in the input).
        path: Path without its leading slash. Trailing slashes are kept.
        query: Query string without the "?" ("" when absent).

    Example:
        >>> url = resolve("gemini://example.org/docs/")
        >>> url.host, url.port, url.path
        ('example.org', 1965, 'docs/')
    """
    scheme: str
    host: str
    port: int = DEFAULT_PORT
    path: str = ""
    query: str = ""

    @property
    def is_gemini(self) -> bool:
        """True when this URL can be fetched by the protocol client."""
        return self.scheme == DEFAULT_SCHEME

    @property
    def authority(self) -> str:
        """host[:port], omitting the port when it is the default."""
        if self.port == DEFAULT_PORT:
            return self.host
        return f"{self.host}:{self.port}"

    def history_entry(self) -> tuple[str, str, int, str]:
        """The (scheme, host, port, path) tuple kept in the history stack."""
        return (self.scheme, self.host, self.port, self.path)

    def with_query(self, query: str) -> "URL":
        """Same URL with its query replaced."""
        return replace(self, query=query)

    def parent(self) -> "URL":
        """
        The URL one path segment up, dropping the query.

        "a/b/c" and "a/b/c/" both become "a/b/"; a single segment becomes
        the root.
        """
        head, _, _ = self.path.rstrip("/").rpartition("/")
        return replace(self, path=f"{head}/" if head else "", query="")

    def __str__(self) -> str:
        if not self.host:
            # Opaque reference such as mailto:someone@example.org
            text = f"{self.scheme}:{self.path}"
        else:
            text = f"{self.scheme}://{self.authority}/{self.path}"
        if self.query:
            text += f"?{self.query}"
        return text


# =============================================================================
# Resolution
# =============================================================================

def resolve(raw: str, context: "BrowsingContext | None" = None) -> URL:
    """
    Resolve a raw URL string into an absolute URL.

    Args:
        raw: The reference as typed by the user, found in a link line or
             sent by a server in a redirect.
        context: Host and path of the page currently displayed. Only used
                 for references without a scheme.

    Returns:
        The resolved URL.

    Raises:
        ResolutionError: If the authority has no host or the host has an
                         empty or over-long label.
    """
    raw = raw.strip()
    reference, _, query = raw.partition("?")

    match = _SCHEME_RE.match(reference)
    if match and match.group(2):
        scheme = match.group(1).lower()
        return _parse_authority(scheme, reference[match.end():], query)

    if match and not _HOST_PORT_RE.match(reference):
        scheme = match.group(1).lower()
        if scheme == DEFAULT_SCHEME:
            raise ResolutionError(f"No host in URL: {raw!r}")
        return URL(scheme=scheme, host="", path=reference[match.end():], query=query)

    if reference.startswith("//"):
        return _parse_authority(DEFAULT_SCHEME, reference[2:], query)

    if context is None:
        # Bare "host/path" typed with no page on screen
        return _parse_authority(DEFAULT_SCHEME, reference, query)

    if reference.startswith("/"):
        path = reference
    else:
        directory, _, _ = context.path.rpartition("/")
        path = f"{directory}/{reference}" if directory else reference
        path = _remove_dot_segments(path)

    return URL(
        scheme=DEFAULT_SCHEME,
        host=context.host,
        port=context.port,
        path=path.lstrip("/"),
        query=query,
    )


def _parse_authority(scheme: str, rest: str, query: str) -> URL:
    """Split "[user@]host[:port]/path" into a URL."""
    authority, _, path = rest.partition("/")

    # user@ is accepted and dropped
    _, _, hostport = authority.rpartition("@")

    host, sep, port_text = hostport.rpartition(":")
    if not sep:
        host, port_text = hostport, ""
    port = int(port_text) if port_text.isascii() and port_text.isdigit() else DEFAULT_PORT

    if not host:
        raise ResolutionError(f"No host in URL authority: {authority!r}")

    # A single trailing dot (fully qualified name) is allowed
    for label in host.removesuffix(".").split("."):
        if not label or len(label) > _MAX_LABEL:
            raise ResolutionError(f"Invalid host name: {host!r}")

    return URL(
        scheme=scheme,
        host=host.lower(),
        port=port,
        path=path.lstrip("/"),
        query=query,
    )


def _remove_dot_segments(path: str) -> str:
    """Collapse "." and ".." segments of a joined relative path."""
    segments: list[str] = []
    parts = path.split("/")
    for part in parts:
        if part == ".":
            continue
        if part == "..":
            if segments:
                segments.pop()
            continue
        segments.append(part)

    # "a/.." and "a/." still name a directory
    if parts[-1] in (".", ".."):
        segments.append("")
    return "/".join(segments)


# =============================================================================
# Query Encoding
# =============================================================================

def encode_query(text: str) -> str:
    """
    Percent-encode user input for use as a Gemini query.

    Bytes in [A-Za-z0-9.~_-] pass through; every other byte of the UTF-8
    encoding becomes %XX with upper-case hex digits.

    Example:
        >>> encode_query("a b?c")
        'a%20b%3Fc'
    """
    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}"
        for byte in text.encode("utf-8")
    )


# =============================================================================
# Exceptions
# =============================================================================

class ResolutionError(ValueError):
    """Raised when a URL cannot be resolved (e.g. the authority has no host)."""
    pass
