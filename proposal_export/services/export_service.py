from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm

from ..conf import ExportSettings, get_export_settings
from ..exceptions import ExportError, RenderingFailure, UnsupportedFormat, UpstreamUnavailable
from ..utils import ProposalExportRequest, export_filename
from .docx_renderer import DocxRenderer, RtfRenderer
from .pdf_renderer import PdfRenderer

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
RTF_CONTENT_TYPE = "application/rtf"

_PDF_PAGE_SIZES = {"A4": A4, "LETTER": LETTER}

Render = Callable[[ProposalExportRequest, datetime], bytes]


class ExportFormat(str, Enum):
    PDF = "PDF"
    DOCX = "DOCX"

    @classmethod
    def parse(cls, value: "ExportFormat | str | None") -> "ExportFormat":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            raise UnsupportedFormat(
                f"Unsupported export format {value!r}; choose PDF or DOCX.",
                details={"format": value},
            ) from None


@dataclass(frozen=True)
class ExportResult:
    buffer: bytes
    file_name: str
    content_type: str
    size_bytes: int


@dataclass(frozen=True)
class _Backend:
    render: Render
    content_type: str
    extension: str


def _select_backend(fmt: ExportFormat, config: ExportSettings) -> _Backend:
    if fmt is ExportFormat.PDF:
        if config.pdf_backend == "disabled":
            raise UpstreamUnavailable("PDF export is temporarily unavailable. Please use DOCX export instead.")
        renderer = PdfRenderer(
            page_size=_PDF_PAGE_SIZES[config.page_size],
            margin=config.margin_mm * mm,
            footer_label=config.footer_label,
            compress=config.pdf_compression,
            default_color=config.default_primary_color,
        )
        return _Backend(renderer.render, PDF_CONTENT_TYPE, "pdf")

    if config.docx_backend == "disabled":
        raise UpstreamUnavailable("DOCX export is temporarily unavailable. Please use PDF export instead.")
    if config.docx_backend == "rtf":
        # Degraded mode: RTF bytes, still offered under the .docx name.
        renderer = RtfRenderer(footer_label=config.footer_label, default_color=config.default_primary_color)
        return _Backend(renderer.render, RTF_CONTENT_TYPE, "docx")
    renderer = DocxRenderer(
        page_size=config.page_size,
        margin_mm=config.margin_mm,
        footer_label=config.footer_label,
        default_color=config.default_primary_color,
    )
    return _Backend(renderer.render, DOCX_CONTENT_TYPE, "docx")


def export_proposal(
    request: ProposalExportRequest,
    export_format: ExportFormat | str,
    generated_at: datetime | None = None,
) -> ExportResult:
    """
    Render ``request`` in the requested format.

    Raises UnsupportedFormat before any work for unknown formats,
    ConfigurationError when ``settings.PROPOSAL_EXPORT`` is invalid,
    UpstreamUnavailable when that format's backend is switched off, and
    RenderingFailure for anything that goes wrong while rendering. A result
    is only returned once the whole document has been serialized.
    """
    fmt = ExportFormat.parse(export_format)
    config = get_export_settings()
    backend = _select_backend(fmt, config)

    try:
        buffer = backend.render(request, generated_at or datetime.now())
    except ExportError:
        raise
    except Exception as exc:
        logger.exception("%s export failed for %r", fmt.value, request.title)
        raise RenderingFailure("Failed to export proposal", details=str(exc)) from exc

    return ExportResult(
        buffer=buffer,
        file_name=export_filename(request.title, backend.extension),
        content_type=backend.content_type,
        size_bytes=len(buffer),
    )
