"""
Document paginator: lays markdown-like text out on fixed-size A4 pages.

Units are millimetres measured from the top edge of the page. The layout is
computed completely before anything is drawn so every footer knows the
total page count.

Page geometry:
- page 1 carries a 30 mm title banner, body starts at y=40
- later pages carry a 15 mm "(continued)" banner, body restarts at y=25
- a line is never started below y=280; footer "Page i of N" sits at y=290

Heading markers `# `, `## ` and `### ` select bold 18/16/14 pt text with
extra space before and after; everything else is 12 pt body text.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from projectflow.core.logging import log_event

PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN_X = 20.0
COLUMN_WIDTH = 170.0
BANNER_HEIGHT = 30.0
CONTINUATION_BANNER_HEIGHT = 15.0
BODY_START_Y = 40.0
CONTINUATION_START_Y = 25.0
BOTTOM_LIMIT_Y = 280.0
FOOTER_Y = 290.0
LINE_HEIGHT = 7.0

TITLE_FONT_SIZE = 24
SUBTITLE_FONT_SIZE = 12
CONTINUATION_FONT_SIZE = 12
FOOTER_FONT_SIZE = 10
BODY_FONT_SIZE = 12

BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

_PT_PER_MM = 72.0 / 25.4


@dataclass(frozen=True)
class HeadingStyle:
    marker: str
    font_size: int
    space_before: float
    space_after: float


# Longest marker first so "### " is not read as "# ".
HEADING_STYLES: Tuple[HeadingStyle, ...] = (
    HeadingStyle("### ", 14, 2.0, 1.0),
    HeadingStyle("## ", 16, 3.0, 2.0),
    HeadingStyle("# ", 18, 5.0, 3.0),
)

_LEVEL_BY_MARKER = {"# ": 1, "## ": 2, "### ": 3}

_TYPOGRAPHY = {
    "\u2018": "'", "\u2019": "'", "\u201c": '"', "\u201d": '"',
    "\u2013": "-", "\u2014": "-", "\u2022": "*", "\u2026": "...",
    "\u00a0": " ", "\t": "    ",
}


@dataclass(frozen=True)
class LayoutLine:
    """One wrapped line before placement."""

    text: str
    level: int = 0
    first: bool = True
    last: bool = True

    @property
    def font_name(self) -> str:
        return BOLD_FONT if self.level else BODY_FONT

    @property
    def font_size(self) -> int:
        style = heading_style(self.level)
        return style.font_size if style else BODY_FONT_SIZE


@dataclass(frozen=True)
class PlacedLine:
    text: str
    level: int
    font_name: str
    font_size: int
    x: float
    y: float


@dataclass
class PageLayout:
    number: int
    lines: List[PlacedLine] = field(default_factory=list)

    @property
    def is_continuation(self) -> bool:
        return self.number > 1


@dataclass
class DocumentLayout:
    title: str
    subtitle: Optional[str]
    pages: List[PageLayout]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def continuation_title(self) -> str:
        return f"{self.title} (continued)"

    def footer(self, page_number: int) -> str:
        return f"Page {page_number} of {self.page_count}"


def heading_style(level: int) -> Optional[HeadingStyle]:
    for style in HEADING_STYLES:
        if _LEVEL_BY_MARKER[style.marker] == level:
            return style
    return None


def pdf_safe(text: str) -> str:
    """Map text onto what the standard Type 1 fonts can encode."""
    for src, dst in _TYPOGRAPHY.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", "replace").decode("latin-1")


def normalize_sections(text: str) -> str:
    """Separate leading prose from headed sections, keeping the markers."""
    parts = re.split(r"\n(?=#)", (text or "").replace("\r\n", "\n").strip())
    return "\n\n".join(part.strip() for part in parts if part.strip())


def classify(paragraph: str) -> Tuple[int, str]:
    for style in HEADING_STYLES:
        if paragraph.startswith(style.marker):
            return _LEVEL_BY_MARKER[style.marker], paragraph[len(style.marker):].strip()
    return 0, paragraph


def _hard_wrap(line: str, font_name: str, font_size: int, width_pt: float) -> List[str]:
    if stringWidth(line, font_name, font_size) <= width_pt:
        return [line]
    pieces: List[str] = []
    current = ""
    for ch in line:
        if current and stringWidth(current + ch, font_name, font_size) > width_pt:
            pieces.append(current)
            current = ch.lstrip()
        else:
            current += ch
    if current:
        pieces.append(current)
    return pieces


def wrap_paragraph(text: str, font_name: str, font_size: int, width_mm: float = COLUMN_WIDTH) -> List[str]:
    """Word-wrap to the column using font metrics; overlong words are split."""
    if not text.strip():
        return [""]
    width_pt = width_mm * _PT_PER_MM
    wrapped: List[str] = []
    for line in simpleSplit(text, font_name, font_size, width_pt):
        wrapped.extend(_hard_wrap(line, font_name, font_size, width_pt))
    return wrapped or [""]


def layout_lines(body: str) -> Iterator[LayoutLine]:
    for paragraph in normalize_sections(pdf_safe(body)).split("\n"):
        level, content = classify(paragraph)
        probe = LayoutLine(text="", level=level)
        pieces = wrap_paragraph(content, probe.font_name, probe.font_size)
        for i, piece in enumerate(pieces):
            yield LayoutLine(text=piece, level=level, first=i == 0, last=i == len(pieces) - 1)


def paginate(body: str, title: str, subtitle: Optional[str] = None) -> DocumentLayout:
    """Place every line of ``body`` and return the finished page layout."""
    pages = [PageLayout(number=1)]
    y = BODY_START_Y

    for line in layout_lines(body):
        if y > BOTTOM_LIMIT_Y:
            pages.append(PageLayout(number=len(pages) + 1))
            y = CONTINUATION_START_Y

        style = heading_style(line.level)
        if style and line.first:
            y += style.space_before

        pages[-1].lines.append(
            PlacedLine(
                text=line.text,
                level=line.level,
                font_name=line.font_name,
                font_size=line.font_size,
                x=MARGIN_X,
                y=y,
            )
        )

        y += LINE_HEIGHT
        if style and line.last:
            y += style.space_after

    layout = DocumentLayout(title=pdf_safe(title), subtitle=pdf_safe(subtitle) if subtitle else None, pages=pages)
    log_event(
        "info",
        "documentation.paginated",
        event_type="documentation.paginated",
        extra={"pages": layout.page_count},
    )
    return layout
