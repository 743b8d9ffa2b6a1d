"""
PDF rendering of a paginated documentation layout with reportlab.

The paginator measures from the top edge in millimetres; reportlab draws
from the bottom edge in points, so every y is flipped through _y().
"""

import base64
import io
from typing import Optional, Tuple

from reportlab.lib.colors import Color, white, black
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from projectflow.features.documentation.paginator import (
    BANNER_HEIGHT,
    BODY_FONT,
    BOLD_FONT,
    CONTINUATION_BANNER_HEIGHT,
    CONTINUATION_FONT_SIZE,
    FOOTER_FONT_SIZE,
    FOOTER_Y,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    SUBTITLE_FONT_SIZE,
    TITLE_FONT_SIZE,
    DocumentLayout,
    PageLayout,
    paginate,
)

BANNER_COLOR = Color(40 / 255, 50 / 255, 78 / 255)
FOOTER_COLOR = Color(100 / 255, 100 / 255, 100 / 255)

CREATOR = "ProjectFlow Documentation Generator"
AUTHOR = "ProjectFlow"


def _y(top_mm: float) -> float:
    return (PAGE_HEIGHT - top_mm) * mm


def _banner(pdf: canvas.Canvas, height_mm: float) -> None:
    pdf.setFillColor(BANNER_COLOR)
    pdf.rect(0, _y(height_mm), PAGE_WIDTH * mm, height_mm * mm, stroke=0, fill=1)


def _draw_first_banner(pdf: canvas.Canvas, layout: DocumentLayout) -> None:
    _banner(pdf, BANNER_HEIGHT)
    pdf.setFillColor(white)
    pdf.setFont(BOLD_FONT, TITLE_FONT_SIZE)
    pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _y(20), layout.title)
    if layout.subtitle:
        pdf.setFont(BODY_FONT, SUBTITLE_FONT_SIZE)
        pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _y(28), layout.subtitle)


def _draw_continuation_banner(pdf: canvas.Canvas, layout: DocumentLayout) -> None:
    _banner(pdf, CONTINUATION_BANNER_HEIGHT)
    pdf.setFillColor(white)
    pdf.setFont(BODY_FONT, CONTINUATION_FONT_SIZE)
    pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _y(10), layout.continuation_title)


def _draw_page(pdf: canvas.Canvas, layout: DocumentLayout, page: PageLayout) -> None:
    if page.is_continuation:
        _draw_continuation_banner(pdf, layout)
    else:
        _draw_first_banner(pdf, layout)

    pdf.setFillColor(black)
    for line in page.lines:
        if not line.text:
            continue
        pdf.setFont(line.font_name, line.font_size)
        pdf.drawString(line.x * mm, _y(line.y), line.text)

    pdf.setFillColor(FOOTER_COLOR)
    pdf.setFont(BODY_FONT, FOOTER_FONT_SIZE)
    pdf.drawCentredString(PAGE_WIDTH / 2 * mm, _y(FOOTER_Y), layout.footer(page.number))


def render_pdf(layout: DocumentLayout) -> bytes:
    """Draw every page of ``layout`` and return the PDF bytes."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(layout.title)
    pdf.setSubject(f"Technical documentation for {layout.title}")
    pdf.setCreator(CREATOR)
    pdf.setAuthor(AUTHOR)

    for page in layout.pages:
        _draw_page(pdf, layout, page)
        pdf.showPage()

    pdf.save()
    return buffer.getvalue()


def render_documentation(body: str, project_name: str, tech_stack_name: Optional[str] = None) -> Tuple[bytes, str, int]:
    """Paginate and render; returns (pdf bytes, base64 string, page count)."""
    subtitle = f"Tech Stack: {tech_stack_name}" if tech_stack_name else None
    layout = paginate(body, title=f"{project_name} Documentation", subtitle=subtitle)
    pdf_bytes = render_pdf(layout)
    return pdf_bytes, base64.b64encode(pdf_bytes).decode("ascii"), layout.page_count
