# =============================================================================
# Gemtext Rendering
# =============================================================================
# Converts a text/gemini document into wrapped, styled terminal lines and a
# link table.
#
# Line types (first match wins, outside preformatted blocks):
#
#   ###  header3       >   quote
#   ##   header2       =>  link
#   #    header1       *   list item
#                      anything else: paragraph
#
# A line starting with ``` toggles preformatted mode and is itself dropped.
# Preformatted lines get the left margin only: no wrapping, no styling.
#
# Every other logical line is wrapped on its own to (columns - 2 * margin)
# and each physical line is emitted as:
#
#   <margin spaces><style><text><reset>
# =============================================================================

import logging
import textwrap
from dataclasses import dataclass, field
from enum import Enum, auto

from gemlark.config import RESET, StyleSet
from gemlark.core.page import Link, Page

logger = logging.getLogger(__name__)


class LineType(Enum):
    """Gemtext line categories."""
    HEADER1 = auto()
    HEADER2 = auto()
    HEADER3 = auto()
    QUOTE = auto()
    LINK = auto()
    LIST_ITEM = auto()
    PARAGRAPH = auto()


# Checked in order; "### " must come before "## " and "# "
_PREFIXES = [
    ("### ", LineType.HEADER3),
    ("## ", LineType.HEADER2),
    ("# ", LineType.HEADER1),
    ("> ", LineType.QUOTE),
    ("=>", LineType.LINK),
    ("* ", LineType.LIST_ITEM),
]

_HEADER_STYLES = {
    LineType.HEADER1: "header1",
    LineType.HEADER2: "header2",
    LineType.HEADER3: "header3",
}

PREFORMAT_TOGGLE = "```"


def classify_line(line: str) -> LineType:
    """Category of a line outside a preformatted block."""
    for prefix, line_type in _PREFIXES:
        if line.startswith(prefix):
            return line_type
    return LineType.PARAGRAPH


def parse_link(line: str) -> tuple[str, str] | None:
    """
    Split a link line into (target, label).

    The label falls back to the target. Returns None when there is no
    target at all.

    Example:
        >>> parse_link("=> /a  Link A")
        ('/a', 'Link A')
    """
    parts = line[2:].strip().split(maxsplit=1)
    if not parts:
        return None
    target = parts[0]
    label = parts[1].strip() if len(parts) > 1 else target
    return target, label


@dataclass
class RenderResult:
    """
    Result of rendering a gemtext document.

    Attributes:
        lines: Physical terminal lines in document order.
        links: Link table in document order, indexed from 1.
        title: Text of the first level-1 heading, or "".
    """
    lines: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    title: str = ""


class GemtextRenderer:
    """
    Renders gemtext for a terminal of a given width.

    Usage:
        >>> renderer = GemtextRenderer(StyleSet(), margin=2)
        >>> result = renderer.render("# Hello\\n=> /a A link\\n", columns=80)
        >>> result.links[0].target
        '/a'
    """

    def __init__(self, styles: StyleSet, margin: int = 2) -> None:
        self.styles = styles
        self.margin = margin

    def wrap_width(self, columns: int) -> int:
        """Columns available for text once both margins are taken."""
        return max(columns - 2 * self.margin, 1)

    def render(self, text: str, columns: int) -> RenderResult:
        """
        Render a gemtext document.

        Args:
            text: Decoded document body.
            columns: Terminal width.

        Returns:
            Wrapped, styled lines and the link table.
        """
        result = RenderResult()
        width = self.wrap_width(columns)
        pad = " " * self.margin
        preformatted = False

        for line in _split_lines(text):
            if line.startswith(PREFORMAT_TOGGLE):
                preformatted = not preformatted
                continue

            if preformatted:
                result.lines.append(pad + line)
                continue

            line_type = classify_line(line)

            if line_type is LineType.LINK:
                parsed = parse_link(line)
                if parsed is None:
                    # "=>" with nothing after it is shown as text
                    result.lines.extend(self._block(line, width, "", "", ""))
                    continue
                target, label = parsed
                link = Link(index=len(result.links) + 1, target=target, label=label)
                result.links.append(link)
                result.lines.extend(
                    self._block(label, width, f"[{link.index}] ", "link-bullet", "link-text")
                )

            elif line_type is LineType.LIST_ITEM:
                result.lines.extend(
                    self._block(line[2:].strip(), width, "* ", "list-bullet", "list-text")
                )

            elif line_type is LineType.QUOTE:
                result.lines.extend(
                    self._block(line[1:].strip(), width, "> ", "quote", "quote", repeat_bullet=True)
                )

            elif line_type in _HEADER_STYLES:
                if line_type is LineType.HEADER1 and not result.title:
                    result.title = line[2:].strip()
                result.lines.extend(
                    self._block(line, width, "", "", _HEADER_STYLES[line_type])
                )

            else:
                result.lines.extend(self._block(line, width, "", "", ""))

        logger.debug(f"Rendered {len(result.lines)} lines, {len(result.links)} links")
        return result

    def render_page(self, text: str, columns: int, *, title: str = "",
                    charset: str = "utf8") -> Page:
        """Render straight into a Page, using `title` when there's no heading."""
        result = self.render(text, columns)
        return Page(
            lines=result.lines,
            links=result.links,
            title=result.title or title,
            charset=charset,
        )

    def _block(
        self,
        text: str,
        width: int,
        bullet: str,
        bullet_style: str,
        text_style: str,
        repeat_bullet: bool = False,
    ) -> list[str]:
        """
        Wrap one logical line into styled physical lines.

        The bullet takes the first physical line's leading columns; later
        lines are indented by the same amount, or carry the bullet again when
        `repeat_bullet` is set (quotes).
        """
        pad = " " * self.margin
        if not text.strip():
            return [pad.rstrip()] if not bullet else [pad + self._styled(bullet, bullet_style)]

        wrapped = textwrap.wrap(
            text,
            width=max(width - len(bullet), 1),
            break_on_hyphens=False,
        )

        lines = []
        for i, chunk in enumerate(wrapped):
            if i == 0 or repeat_bullet:
                lead = self._styled(bullet, bullet_style) if bullet else ""
            else:
                lead = " " * len(bullet)
            lines.append(pad + lead + self._styled(chunk, text_style))
        return lines

    def _styled(self, text: str, category: str) -> str:
        """`text` wrapped in the category's style and a reset."""
        if not category:
            return text + RESET
        return self.styles.sequence(category) + text + RESET


def _split_lines(text: str) -> list[str]:
    """Split on LF, dropping CRs and the empty item after a final newline."""
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines
