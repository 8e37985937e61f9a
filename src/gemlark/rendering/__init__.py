# =============================================================================
# Rendering Module
# =============================================================================
# Turns text/gemini documents into terminal output.
#
# The rendering pipeline:
#   1. Split the body into logical lines
#   2. Track preformatted blocks (``` toggles)
#   3. Classify each line (headers, quotes, links, list items, paragraphs)
#   4. Wrap each logical line to the terminal width minus the margins
#   5. Add margin padding and ANSI styles, and number the links
#
# Non-gemtext responses never come through here; they are paged as-is.
# =============================================================================

from gemlark.rendering.gemtext import GemtextRenderer, LineType, RenderResult

__all__ = ["GemtextRenderer", "LineType", "RenderResult"]
