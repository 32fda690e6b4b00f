from __future__ import annotations

import re
from datetime import datetime
from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Mm, Pt, RGBColor

from ..utils import (
    DEFAULT_PRIMARY_COLOR,
    FOOTER_COLOR,
    MUTED_COLOR,
    ProposalExportRequest,
    normalize_html,
    split_paragraphs,
)

BODY_SIZE = Pt(11)
PAGE_SIZES_MM = {"A4": (210, 297), "LETTER": (215.9, 279.4)}


# Control characters that XML text may not contain.
_XML_ILLEGAL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _rgb(color: str) -> RGBColor:
    return RGBColor.from_string(color.lstrip("#"))


def _xml_text(text: str) -> str:
    return _XML_ILLEGAL_RE.sub("", text)


def _subtitle(request: ProposalExportRequest) -> str:
    return " ".join(part for part in ((request.type or "").strip().upper(), "PROPOSAL") if part)


def _add_accent_rule(paragraph, color: RGBColor) -> None:
    """Bottom border on an empty paragraph, drawn in the brand colour."""
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "12")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), str(color))
    borders.append(bottom)
    p_pr.append(borders)


class DocxRenderer:
    """
    Builds a flat run of headings and justified paragraphs with python-docx.

    Word reflows and paginates the result itself, so nothing here measures
    text or tracks pages; the footer is a single closing paragraph.
    """

    def __init__(
        self,
        page_size: str = "A4",
        margin_mm: float = 20,
        footer_label: str = "Generated with Proposal Studio",
        default_color: str = DEFAULT_PRIMARY_COLOR,
    ):
        self.page_size = page_size
        self.margin_mm = margin_mm
        self.footer_label = footer_label
        self.default_color = default_color

    def render(self, request: ProposalExportRequest, generated_at: datetime | None = None) -> bytes:
        generated_at = generated_at or datetime.now()
        brand = _rgb(request.brand_color(self.default_color))
        muted = _rgb(MUTED_COLOR)
        doc = Document()

        width_mm, height_mm = PAGE_SIZES_MM.get(self.page_size, PAGE_SIZES_MM["A4"])
        for section in doc.sections:
            section.page_width = Mm(width_mm)
            section.page_height = Mm(height_mm)
            section.left_margin = section.right_margin = Mm(self.margin_mm)
            section.top_margin = section.bottom_margin = Mm(self.margin_mm)

        core = doc.core_properties
        core.title = _xml_text(request.title)
        core.subject = _xml_text(f"{request.type} proposal")
        if request.company_name:
            core.author = _xml_text(request.company_name)

        doc.add_heading(_xml_text(request.title.strip()), level=0)

        subtitle = doc.add_paragraph()
        r = subtitle.add_run(_xml_text(_subtitle(request)))
        r.font.size = Pt(12)
        r.font.color.rgb = muted

        if request.company_name:
            company = doc.add_paragraph()
            r = company.add_run(_xml_text(request.company_name.strip()))
            r.font.size = Pt(10)
            r.font.color.rgb = muted

        _add_accent_rule(doc.add_paragraph(), brand)

        for section in request.sections:
            heading = doc.add_heading(_xml_text(section.title.strip()), level=1)
            for run in heading.runs:
                run.font.color.rgb = brand
            for text in split_paragraphs(normalize_html(section.content)):
                p = doc.add_paragraph()
                p.alignment = WD_ALIGN_PARAGRAPH.JUSTIFY
                r = p.add_run(_xml_text(text))
                r.font.size = BODY_SIZE

        footer = doc.add_paragraph()
        footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
        footer.paragraph_format.space_before = Pt(24)
        stamp = generated_at.strftime("%B %d, %Y")
        r = footer.add_run(f"{self.footer_label} • {stamp}" if self.footer_label else stamp)
        r.italic = True
        r.font.size = Pt(9)
        r.font.color.rgb = _rgb(FOOTER_COLOR)

        buffer = BytesIO()
        doc.save(buffer)
        return buffer.getvalue()


def _rtf_escape(text: str) -> str:
    out: list[str] = []
    for ch in text:
        if ch in "\\{}":
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\line ")
        elif ord(ch) > 127:
            code = ord(ch)
            if code > 0xFFFF:
                # RTF \u takes a signed 16-bit value; astral characters become '?'.
                out.append("?")
            else:
                out.append(f"\\u{code if code < 32768 else code - 65536}?")
        else:
            out.append(ch)
    return "".join(out)


class RtfRenderer:
    """Degraded DOCX path: the same block sequence as plain RTF text."""

    def __init__(
        self,
        footer_label: str = "Generated with Proposal Studio",
        default_color: str = DEFAULT_PRIMARY_COLOR,
    ):
        self.footer_label = footer_label
        self.default_color = default_color

    def render(self, request: ProposalExportRequest, generated_at: datetime | None = None) -> bytes:
        generated_at = generated_at or datetime.now()
        r, g, b = _rgb(request.brand_color(self.default_color))
        mr, mg, mb = _rgb(MUTED_COLOR)
        parts = [
            "{\\rtf1\\ansi\\deff0",
            "{\\fonttbl{\\f0\\fswiss Helvetica;}}",
            f"{{\\colortbl;\\red{r}\\green{g}\\blue{b};\\red{mr}\\green{mg}\\blue{mb};}}",
            f"\\f0\\fs48\\b {_rtf_escape(request.title.strip())}\\b0\\par",
            f"\\fs24\\cf2 {_rtf_escape(_subtitle(request))}\\cf0\\par",
        ]
        if request.company_name:
            parts.append(f"\\fs20\\cf2 {_rtf_escape(request.company_name.strip())}\\cf0\\par")
        parts.append("\\par")
        for section in request.sections:
            parts.append(f"\\pard\\fs32\\b\\cf1 {_rtf_escape(section.title.strip())}\\cf0\\b0\\par")
            for text in split_paragraphs(normalize_html(section.content)):
                parts.append(f"\\pard\\qj\\fs22 {_rtf_escape(text)}\\par")
            parts.append("\\par")
        stamp = generated_at.strftime("%B %d, %Y")
        footer = f"{self.footer_label} • {stamp}" if self.footer_label else stamp
        parts.append(f"\\pard\\qc\\fs18\\i {_rtf_escape(footer)}\\i0\\par")
        parts.append("}")
        return "\n".join(parts).encode("ascii")
