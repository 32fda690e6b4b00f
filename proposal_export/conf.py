from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

from .exceptions import ConfigurationError
from .utils import parse_hex_color

DEFAULTS = {
    "PAGE_SIZE": "A4",
    "MARGIN_MM": 20,
    "FOOTER_LABEL": "Generated with Proposal Studio",
    "DEFAULT_PRIMARY_COLOR": "#4F46E5",
    "PDF_COMPRESSION": True,
    "PDF_BACKEND": "canvas",
    "DOCX_BACKEND": "structured",
}

PDF_BACKENDS = {"canvas", "disabled"}
DOCX_BACKENDS = {"structured", "rtf", "disabled"}
PAGE_SIZES = {"A4", "LETTER"}


@dataclass(frozen=True)
class ExportSettings:
    page_size: str
    margin_mm: float
    footer_label: str
    default_primary_color: str
    pdf_compression: bool
    pdf_backend: str
    docx_backend: str


def get_export_settings() -> ExportSettings:
    """
    Read ``settings.PROPOSAL_EXPORT`` on every call so ``override_settings``
    takes effect in tests. Unknown backend names, page sizes and colours
    raise ConfigurationError.
    """
    raw = dict(DEFAULTS)
    raw.update(getattr(settings, "PROPOSAL_EXPORT", None) or {})

    page_size = str(raw["PAGE_SIZE"]).upper()
    if page_size not in PAGE_SIZES:
        raise ConfigurationError(f"PROPOSAL_EXPORT['PAGE_SIZE'] must be one of {sorted(PAGE_SIZES)}")
    pdf_backend = str(raw["PDF_BACKEND"]).lower()
    if pdf_backend not in PDF_BACKENDS:
        raise ConfigurationError(f"PROPOSAL_EXPORT['PDF_BACKEND'] must be one of {sorted(PDF_BACKENDS)}")
    docx_backend = str(raw["DOCX_BACKEND"]).lower()
    if docx_backend not in DOCX_BACKENDS:
        raise ConfigurationError(f"PROPOSAL_EXPORT['DOCX_BACKEND'] must be one of {sorted(DOCX_BACKENDS)}")
    try:
        default_color = parse_hex_color(raw["DEFAULT_PRIMARY_COLOR"])
    except ValueError as exc:
        raise ConfigurationError(str(exc), details={"DEFAULT_PRIMARY_COLOR": raw["DEFAULT_PRIMARY_COLOR"]}) from exc
    if default_color is None:
        raise ConfigurationError("PROPOSAL_EXPORT['DEFAULT_PRIMARY_COLOR'] must not be blank")

    return ExportSettings(
        page_size=page_size,
        margin_mm=float(raw["MARGIN_MM"]),
        footer_label=str(raw["FOOTER_LABEL"]),
        default_primary_color=default_color,
        pdf_compression=bool(raw["PDF_COMPRESSION"]),
        pdf_backend=pdf_backend,
        docx_backend=docx_backend,
    )
