from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Callable

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from ..layout import Paginator, wrap_paragraph, wrap_text
from ..utils import (
    DEFAULT_PRIMARY_COLOR,
    FOOTER_COLOR,
    MUTED_COLOR,
    ProposalExportRequest,
    Section,
    normalize_html,
    split_paragraphs,
)

BLACK = colors.black

TITLE_FONT = "Helvetica-Bold"
TITLE_SIZE = 24
TITLE_LEADING = 12 * mm

SUBTITLE_FONT = "Helvetica"
SUBTITLE_SIZE = 12
SUBTITLE_LEADING = 8 * mm

COMPANY_FONT = "Helvetica"
COMPANY_SIZE = 10
COMPANY_LEADING = 7 * mm

RULE_WIDTH = 0.5 * mm
RULE_GAP = 10 * mm

HEADING_FONT = "Helvetica-Bold"
HEADING_SIZE = 16
HEADING_LEADING = 8 * mm
HEADING_INDENT = 4 * mm
ACCENT_BAR_WIDTH = 1.2 * mm

BODY_FONT = "Helvetica"
BODY_SIZE = 11
BODY_LEADING = 7 * mm
PARAGRAPH_GAP = BODY_LEADING
SECTION_GAP = 5 * mm

FOOTER_FONT = "Helvetica-Oblique"
FOOTER_SIZE = 9
FOOTER_BASELINE = 10 * mm


def font_measure(font_name: str, font_size: float) -> Callable[[str], float]:
    """Width of a string in points, from the font's own glyph metrics."""

    def measure(text: str) -> float:
        return stringWidth(text, font_name, font_size)

    return measure


class FooterCanvas(canvas.Canvas):
    """
    Canvas that holds every page back until ``save()``.

    The total page count is only known once layout is finished, so pages are
    kept as saved states and stamped with the running footer in a second pass.
    """

    def __init__(self, *args, footer_text: str = "", footer_margin: float = 20 * mm, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self.footer_text = footer_text
        self.footer_margin = footer_margin
        self._saved_page_states: list[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for number, state in enumerate(self._saved_page_states, start=1):
            self.__dict__.update(state)
            self.draw_footer(number, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)

    def draw_footer(self, page_number: int, total_pages: int) -> None:
        page_width = self._pagesize[0]
        self.saveState()
        self.setFont(FOOTER_FONT, FOOTER_SIZE)
        self.setFillColor(colors.HexColor(FOOTER_COLOR))
        if self.footer_text:
            self.drawCentredString(page_width / 2.0, FOOTER_BASELINE, self.footer_text)
        self.drawRightString(
            page_width - self.footer_margin,
            FOOTER_BASELINE,
            f"Page {page_number} of {total_pages}",
        )
        self.restoreState()


class PdfRenderer:
    """
    Lays a proposal out on fixed-size pages with reportlab.

    Wrapping is done here rather than by Platypus so every line is measured
    against the content width and the paginator decides every page break.
    """

    def __init__(
        self,
        page_size: tuple[float, float] = A4,
        margin: float = 20 * mm,
        footer_label: str = "Generated with Proposal Studio",
        compress: bool = True,
        canvas_class: type[FooterCanvas] = FooterCanvas,
        default_color: str = DEFAULT_PRIMARY_COLOR,
    ):
        self.page_size = page_size
        self.margin = margin
        self.footer_label = footer_label
        self.compress = compress
        self.canvas_class = canvas_class
        self.default_color = default_color

    @property
    def content_width(self) -> float:
        return self.page_size[0] - 2 * self.margin

    def footer_text(self, generated_at: datetime) -> str:
        stamp = generated_at.strftime("%B %d, %Y")
        return f"{self.footer_label} • {stamp}" if self.footer_label else stamp

    def render(self, request: ProposalExportRequest, generated_at: datetime | None = None) -> bytes:
        generated_at = generated_at or datetime.now()
        buffer = BytesIO()
        pdf = self.canvas_class(
            buffer,
            pagesize=self.page_size,
            pageCompression=1 if self.compress else 0,
            footer_text=self.footer_text(generated_at),
            footer_margin=self.margin,
        )
        pdf.setTitle(request.title)
        pdf.setSubject(f"{request.type} proposal")
        if request.company_name:
            pdf.setAuthor(request.company_name)
        pdf.setCreator(self.footer_label or "Proposal Studio")

        paginator = Paginator(
            pdf,
            page_height=self.page_size[1],
            top_margin=self.margin,
            bottom_margin=self.margin,
        )
        brand = colors.HexColor(request.brand_color(self.default_color))
        self._draw_title_block(pdf, paginator, request, brand)
        for section in request.sections:
            self._draw_section(pdf, paginator, section, brand)

        pdf.showPage()
        pdf.save()
        data = buffer.getvalue()
        buffer.close()
        return data

    def _draw_lines(
        self,
        pdf: canvas.Canvas,
        paginator: Paginator,
        lines: list[str],
        font_name: str,
        font_size: float,
        leading: float,
        color: colors.Color,
        x: float | None = None,
    ) -> None:
        x = self.margin if x is None else x
        for line in lines:
            paginator.ensure_space(leading)
            # A new page resets the graphics state, so font and colour go on every line.
            pdf.setFont(font_name, font_size)
            pdf.setFillColor(color)
            pdf.drawString(x, paginator.cursor, line)
            paginator.advance(leading)

    def _draw_title_block(
        self,
        pdf: canvas.Canvas,
        paginator: Paginator,
        request: ProposalExportRequest,
        brand: colors.Color,
    ) -> None:
        width = self.content_width
        muted = colors.HexColor(MUTED_COLOR)
        title_lines = wrap_text(request.title.strip(), font_measure(TITLE_FONT, TITLE_SIZE), width)
        self._draw_lines(pdf, paginator, title_lines, TITLE_FONT, TITLE_SIZE, TITLE_LEADING, BLACK)

        subtitle = " ".join(part for part in ((request.type or "").strip().upper(), "PROPOSAL") if part)
        subtitle_lines = wrap_text(subtitle, font_measure(SUBTITLE_FONT, SUBTITLE_SIZE), width)
        self._draw_lines(pdf, paginator, subtitle_lines, SUBTITLE_FONT, SUBTITLE_SIZE, SUBTITLE_LEADING, muted)

        if request.company_name:
            company_lines = wrap_text(request.company_name.strip(), font_measure(COMPANY_FONT, COMPANY_SIZE), width)
            self._draw_lines(pdf, paginator, company_lines, COMPANY_FONT, COMPANY_SIZE, COMPANY_LEADING, muted)

        rule_y = paginator.cursor + 3 * mm
        pdf.saveState()
        pdf.setStrokeColor(brand)
        pdf.setLineWidth(RULE_WIDTH)
        pdf.line(self.margin, rule_y, self.page_size[0] - self.margin, rule_y)
        pdf.restoreState()
        paginator.advance(RULE_GAP)

    def _draw_section(self, pdf: canvas.Canvas, paginator: Paginator, section: Section, brand: colors.Color) -> None:
        heading_width = self.content_width - HEADING_INDENT
        heading_lines = wrap_text(section.title.strip(), font_measure(HEADING_FONT, HEADING_SIZE), heading_width)
        if not heading_lines:
            heading_lines = [""]
        heading_height = len(heading_lines) * HEADING_LEADING

        # Reserve the heading together with one body line so it never ends a page alone.
        paginator.ensure_space(heading_height + BODY_LEADING)

        bar_top = paginator.cursor + 4.5 * mm
        bar_bottom = paginator.cursor - (len(heading_lines) - 1) * HEADING_LEADING - 1.5 * mm
        pdf.saveState()
        pdf.setFillColor(brand)
        pdf.rect(self.margin, bar_bottom, ACCENT_BAR_WIDTH, bar_top - bar_bottom, stroke=0, fill=1)
        pdf.restoreState()
        self._draw_lines(
            pdf,
            paginator,
            heading_lines,
            HEADING_FONT,
            HEADING_SIZE,
            HEADING_LEADING,
            BLACK,
            x=self.margin + HEADING_INDENT,
        )

        body_measure = font_measure(BODY_FONT, BODY_SIZE)
        for index, paragraph in enumerate(split_paragraphs(normalize_html(section.content))):
            if index:
                paginator.advance(PARAGRAPH_GAP)
            lines = wrap_paragraph(paragraph, body_measure, self.content_width)
            self._draw_lines(pdf, paginator, lines, BODY_FONT, BODY_SIZE, BODY_LEADING, BLACK)

        paginator.advance(SECTION_GAP)
