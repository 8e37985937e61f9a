# =============================================================================
# Gemini Module
# =============================================================================
# Handles the Gemini protocol:
#   - One TLS request/response exchange per fetch
#   - Client certificates presented per host
#   - Classification of every status code into a FetchOutcome
# =============================================================================

from gemlark.gemini.client import (
    CertRequired,
    Failure,
    FetchOutcome,
    GeminiClient,
    GeminiConnectionError,
    GeminiError,
    GeminiResponseError,
    InputRequested,
    Redirect,
    Rendered,
    Response,
    classify,
    parse_response,
)
from gemlark.gemini.status import FailureKind, StatusFamily

__all__ = [
    # Client
    "GeminiClient",
    "Response",
    "parse_response",
    "classify",
    # Outcomes
    "FetchOutcome",
    "Rendered",
    "InputRequested",
    "Redirect",
    "Failure",
    "CertRequired",
    "FailureKind",
    "StatusFamily",
    # Exceptions
    "GeminiError",
    "GeminiConnectionError",
    "GeminiResponseError",
]
