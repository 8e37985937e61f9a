# =============================================================================
# gemlark: A Terminal Client for the Gemini Protocol
# =============================================================================
#
# gemlark fetches gemini:// pages over TLS, renders gemtext into styled,
# wrapped terminal text and lets you page through it and follow links with
# single-key commands.
#
# Features:
#   - Full Gemini status handling (input, redirects, failures, certificates)
#   - Per-host client certificates
#   - Gemtext rendering with configurable ANSI styles
#   - History, bookmarks and configurable keybindings
#   - XDG Base Directory compliant
#
# =============================================================================

__version__ = "0.1.0"
__app_name__ = "gemlark"

# Main entry point - this is what gets called by the 'gemlark' command
from gemlark.app import main

__all__ = ["main", "__version__", "__app_name__"]
