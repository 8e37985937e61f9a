# =============================================================================
# Gemini Client
# =============================================================================
# Performs one Gemini request/response exchange and classifies the result.
#
# Wire protocol:
#   request:  <absolute-url>\r\n
#   response: <2-digit-status> <meta>\r\n<body bytes until close>
#
# Key responsibilities:
#   - Rejecting non-gemini URLs before anything else happens
#   - Pushing the target onto the history stack before the network call
#   - Presenting a client certificate when one is registered for the host
#   - Turning every outcome (including connection failures) into a
#     FetchOutcome value; nothing here raises to the caller
#
# Design notes:
#   - One TLS connection at a time, fully read and closed before returning
#   - Server certificates are not verified (Gemini servers are commonly
#     self-signed)
#   - Connect and read are bounded by TIMEOUT seconds
# =============================================================================

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from gemlark.core.session import BrowsingContext
from gemlark.core.url import URL, ResolutionError, resolve
from gemlark.gemini.status import (
    FailureKind,
    StatusFamily,
    describe,
    failure_kind,
    family,
)

if TYPE_CHECKING:
    from gemlark.core.session import Session
    from gemlark.storage import ClientCertificate

# Set up logging for this module
logger = logging.getLogger(__name__)

CRLF = b"\r\n"


# =============================================================================
# Responses
# =============================================================================

@dataclass(frozen=True)
class Response:
    """
    A raw Gemini response split into its parts.

    Attributes:
        status: Two-digit status code.
        meta: Remainder of the header line (MIME type, prompt, URL or message).
        body: Everything after the header line.
    """
    status: int
    meta: str
    body: bytes = b""


def parse_response(raw: bytes) -> Response:
    """
    Split raw response bytes into status, meta and body.

    Raises:
        GeminiResponseError: If the header line is missing or malformed.
    """
    header, sep, body = raw.partition(CRLF)
    if not sep:
        raise GeminiResponseError("Response header is not terminated by CRLF")

    text = header.decode("utf-8", errors="replace")
    status_text, meta = text[:2], text[2:]
    if len(status_text) != 2 or not (status_text.isascii() and status_text.isdigit()):
        raise GeminiResponseError(f"Invalid status in header: {text!r}")
    if meta and not meta[0].isspace():
        raise GeminiResponseError(f"Missing space after status: {text!r}")

    return Response(status=int(status_text), meta=meta.strip(), body=body)


def normalize_charset(value: str) -> str:
    """
    Map a charset name onto one of "utf8", "iso8859" or "ascii".

    Anything unrecognised is treated as UTF-8, the Gemini default.
    """
    name = value.strip().strip('"').lower().replace("-", "").replace("_", "")
    if name.startswith("iso8859") or name in ("latin1", "l1"):
        return "iso8859"
    if name in ("ascii", "usascii"):
        return "ascii"
    return "utf8"


def parse_meta(meta: str) -> tuple[str, str]:
    """
    Extract the MIME type and normalised charset from a 2x meta line.

    Example:
        >>> parse_meta("text/gemini; charset=ISO-8859-1")
        ('text/gemini', 'iso8859')
    """
    mime, *params = meta.split(";")
    charset = "utf8"
    for param in params:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset":
            charset = normalize_charset(value)
    return mime.strip().lower() or "text/gemini", charset


# =============================================================================
# Fetch Outcomes
# =============================================================================

@dataclass(frozen=True)
class Rendered:
    """A 2x response: content to show."""
    url: URL
    body: bytes
    mime: str = "text/gemini"
    charset: str = "utf8"

    @property
    def is_gemtext(self) -> bool:
        return self.mime.startswith("text/gemini")


@dataclass(frozen=True)
class InputRequested:
    """A 1x response: the server wants a line of input for `url`."""
    url: URL
    prompt: str
    sensitive: bool = False


@dataclass(frozen=True)
class Redirect:
    """A 3x response: `target` is already resolved against `url`."""
    url: URL
    target: URL
    permanent: bool = False


@dataclass(frozen=True)
class Failure:
    """
    Any outcome that produced no page.

    Attributes:
        kind: Classification used to pick the recovery path.
        detail: Message for the user (server meta or local error text).
        status: Status code when the server answered, else None.
        url: The URL that failed.
    """
    kind: FailureKind
    detail: str
    status: int | None = None
    url: URL | None = None

    @property
    def message(self) -> str:
        if self.status is None:
            return self.detail
        title = f"{self.status} {describe(self.status)}"
        return f"{title}: {self.detail}" if self.detail else title


@dataclass(frozen=True)
class CertRequired:
    """A 6x response: the host wants (another) client certificate."""
    url: URL
    host: str
    status: int
    detail: str = ""


FetchOutcome = Union[Rendered, InputRequested, Redirect, Failure, CertRequired]


def request_line(url: URL) -> bytes:
    """The bytes sent to the server for `url`."""
    return str(url).encode("utf-8") + CRLF


def classify(url: URL, response: Response) -> FetchOutcome:
    """
    Turn a parsed response into a FetchOutcome.

    Args:
        url: The URL that was requested. Redirect targets resolve against it.
        response: The parsed response.
    """
    status, meta = response.status, response.meta
    status_family = family(status)

    if status_family is StatusFamily.INPUT:
        return InputRequested(url=url, prompt=meta, sensitive=status == 11)

    if status_family is StatusFamily.SUCCESS:
        mime, charset = parse_meta(meta)
        return Rendered(url=url, body=response.body, mime=mime, charset=charset)

    if status_family is StatusFamily.REDIRECT:
        try:
            target = resolve(meta, BrowsingContext.from_url(url))
        except ResolutionError as e:
            return Failure(FailureKind.MALFORMED_RESPONSE, str(e), status, url)
        return Redirect(url=url, target=target, permanent=status == 31)

    if status_family in (StatusFamily.TEMPORARY_FAILURE, StatusFamily.PERMANENT_FAILURE):
        return Failure(failure_kind(status), meta, status, url)

    if status_family is StatusFamily.CERTIFICATE_REQUIRED:
        return CertRequired(url=url, host=url.host, status=status, detail=meta)

    return Failure(
        FailureKind.MALFORMED_RESPONSE,
        f"Unknown status {status} {meta}".rstrip(),
        status,
        url,
    )


# =============================================================================
# Client
# =============================================================================

class GeminiClient:
    """
    Blocking Gemini client.

    Usage:
        >>> client = GeminiClient()
        >>> outcome = client.fetch(resolve("gemini://example.org/"), session)
        >>> if isinstance(outcome, Rendered):
        ...     print(outcome.body.decode())
    """

    # Timeout for connect and each read (seconds)
    TIMEOUT = 30

    # Bytes per recv() call
    CHUNK_SIZE = 65536

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout if timeout is not None else self.TIMEOUT

    def fetch(self, url: URL, session: "Session") -> FetchOutcome:
        """
        Request `url` and classify the response.

        The URL is pushed onto the session's history before connecting,
        whatever the outcome turns out to be. Non-gemini URLs are rejected
        before that push.
        """
        if not url.is_gemini:
            logger.info(f"Refusing unsupported scheme: {url}")
            return Failure(
                FailureKind.UNSUPPORTED_SCHEME,
                f"Unsupported scheme {url.scheme!r}: {url}",
                url=url,
            )

        session.history.push(url)

        certificate = session.certificates.lookup(url.host)
        try:
            raw = self._transact(url, request_line(url), certificate)
            response = parse_response(raw)
        except GeminiConnectionError as e:
            logger.warning(f"Fetch failed for {url}: {e}")
            return Failure(FailureKind.CONNECT_ERROR, str(e), url=url)
        except GeminiResponseError as e:
            logger.warning(f"Malformed response from {url}: {e}")
            return Failure(FailureKind.MALFORMED_RESPONSE, str(e), url=url)

        logger.info(f"{url} -> {response.status} {response.meta}")
        return classify(url, response)

    def _ssl_context(self, certificate: "ClientCertificate | None") -> ssl.SSLContext:
        """TLS context without server verification, with the client pair loaded."""
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        if certificate is not None:
            logger.debug(f"Presenting client certificate {certificate.cert_path}")
            context.load_cert_chain(certificate.cert_path, certificate.key_path)
        return context

    def _transact(
        self,
        url: URL,
        request: bytes,
        certificate: "ClientCertificate | None",
    ) -> bytes:
        """
        Send `request` to url's host and read until the server closes.

        Raises:
            GeminiConnectionError: On DNS, TCP, TLS or timeout failures.
        """
        logger.debug(f"Connecting to {url.host}:{url.port}")

        try:
            context = self._ssl_context(certificate)
            with socket.create_connection((url.host, url.port), timeout=self.timeout) as sock:
                with context.wrap_socket(sock, server_hostname=url.host) as tls:
                    logger.debug(f"Established {tls.version()} connection")
                    tls.sendall(request)
                    chunks = []
                    while True:
                        chunk = tls.recv(self.CHUNK_SIZE)
                        if not chunk:
                            break
                        chunks.append(chunk)
        except (OSError, ssl.SSLError, UnicodeError) as e:
            raise GeminiConnectionError(
                f"Failed to connect to {url.host}:{url.port}: {e}"
            ) from e

        return b"".join(chunks)


# =============================================================================
# Exceptions
# =============================================================================

class GeminiError(Exception):
    """Base exception for Gemini protocol operations."""
    pass


class GeminiConnectionError(GeminiError):
    """Raised when a connection or TLS handshake fails."""
    pass


class GeminiResponseError(GeminiError):
    """Raised when a response header cannot be parsed."""
    pass
