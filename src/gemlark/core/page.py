# =============================================================================
# Page Model
# =============================================================================
# A page is what the pager shows: a list of physical terminal lines (already
# wrapped and styled) plus the link table built while rendering.
# =============================================================================

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Link:
    """
    One entry of a page's link table.

    Attributes:
        index: 1-based position among the document's links.
        target: The raw reference from the link line (not yet resolved).
        label: Link text, or the target when the line had no label.
    """
    index: int
    target: str
    label: str


@dataclass
class Page:
    """
    A rendered document ready for paging.

    Attributes:
        lines: Physical lines to display, in document order.
        links: Link table, indexed from 1.
        title: Text used for the terminal title.
        mime: MIME type from the response header.
        charset: Normalised charset from the response header. Recorded only.
    """
    lines: list[str] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)
    title: str = ""
    mime: str = "text/gemini"
    charset: str = "utf8"

    def link_target(self, index: int) -> str:
        """
        Raw target of link number `index`.

        Out-of-range indices give an empty target, which the navigator
        treats as "stay on this page".
        """
        if 1 <= index <= len(self.links):
            return self.links[index - 1].target
        return ""

    @classmethod
    def from_text(cls, text: str, *, title: str = "", mime: str = "text/plain",
                  charset: str = "utf8") -> "Page":
        """Page for content shown as-is (no gemtext rendering, no links)."""
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        return cls(lines=[line.rstrip("\r") for line in lines], title=title,
                   mime=mime, charset=charset)

    @classmethod
    def blank(cls, message: str = "") -> "Page":
        """Placeholder shown when a request failed and nothing was on screen."""
        return cls(lines=[message] if message else [], title="gemlark")
