# =============================================================================
# Gemini Status Codes
# =============================================================================
# Every Gemini response starts with a two-digit status. The first digit is
# the family; clients that don't know a specific code must treat it like
# the family's base code (x0).
#
#   1x  input            5x  permanent failure
#   2x  success          6x  client certificate required
#   3x  redirect
#   4x  temporary failure
# =============================================================================

from enum import Enum, auto


class StatusFamily(Enum):
    """The tens-digit grouping of a status code."""
    INPUT = 1
    SUCCESS = 2
    REDIRECT = 3
    TEMPORARY_FAILURE = 4
    PERMANENT_FAILURE = 5
    CERTIFICATE_REQUIRED = 6


class FailureKind(Enum):
    """Why a fetch did not produce a page."""
    UNSUPPORTED_SCHEME = auto()     # Not a gemini:// URL
    CONNECT_ERROR = auto()          # DNS, TCP, TLS or timeout failure
    MALFORMED_RESPONSE = auto()     # Header isn't "<2 digits> <meta>\r\n"
    TOO_MANY_REDIRECTS = auto()     # Redirect chain over the limit
    TEMPORARY = auto()              # 40-44
    PERMANENT = auto()              # 50, 51
    REQUEST_REFUSED = auto()        # 52, 53
    BAD_REQUEST = auto()            # 59


STATUS_DESCRIPTIONS = {
    10: "Input",
    11: "Sensitive input",
    20: "Success",
    30: "Temporary redirect",
    31: "Permanent redirect",
    40: "Temporary failure",
    41: "Server unavailable",
    42: "CGI error",
    43: "Proxy error",
    44: "Slow down",
    50: "Permanent failure",
    51: "Not found",
    52: "Gone",
    53: "Proxy request refused",
    59: "Bad request",
    60: "Client certificate required",
    61: "Certificate not authorised",
    62: "Certificate not valid",
}


def family(status: int) -> StatusFamily | None:
    """The family of `status`, or None for codes outside 10-69."""
    try:
        return StatusFamily(status // 10)
    except ValueError:
        return None


def describe(status: int) -> str:
    """Human-readable name of a status, falling back to its family's base code."""
    if status in STATUS_DESCRIPTIONS:
        return STATUS_DESCRIPTIONS[status]
    return STATUS_DESCRIPTIONS.get(status // 10 * 10, f"Unknown status {status}")


def failure_kind(status: int) -> FailureKind:
    """
    Failure kind for a 4x or 5x status.

    Unknown 4x codes are temporary failures; unknown 5x codes are permanent
    failures.
    """
    if status // 10 == 4:
        return FailureKind.TEMPORARY
    if status in (52, 53):
        return FailureKind.REQUEST_REFUSED
    if status == 59:
        return FailureKind.BAD_REQUEST
    return FailureKind.PERMANENT
