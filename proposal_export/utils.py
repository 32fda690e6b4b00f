from __future__ import annotations

import re
from dataclasses import dataclass, field

from reportlab.lib import colors

DEFAULT_PRIMARY_COLOR = "#4F46E5"
MUTED_COLOR = "#646464"
FOOTER_COLOR = "#969696"


@dataclass(frozen=True)
class Section:
    title: str
    content: str = ""
    order: int = 0


@dataclass(frozen=True)
class ProposalExportRequest:
    title: str
    type: str
    sections: tuple[Section, ...] = field(default_factory=tuple)
    company_name: str | None = None
    primary_color: str | None = None

    def __post_init__(self) -> None:
        if not (self.title or "").strip():
            raise ValueError("Proposal title must not be empty.")
        # Callers may hand over a list; freeze it so the request stays immutable.
        object.__setattr__(self, "sections", tuple(self.sections))

    def brand_color(self, default: str = DEFAULT_PRIMARY_COLOR) -> str:
        return self.primary_color or default


def parse_hex_color(value: str | None) -> str | None:
    """
    Normalize ``#RRGGBB`` (leading hash optional) to upper-case ``#RRGGBB``.
    Blank input returns None; malformed input raises ValueError.
    """
    if value is None or not str(value).strip():
        return None
    value = str(value).strip()
    if not value.startswith("#"):
        value = "#" + value
    if len(value) != 7 or not (value[1:].isascii() and value[1:].isalnum()):
        raise ValueError(f"Invalid colour {value!r}; expected #RRGGBB.")
    colors.HexColor(value, htmlOnly=True)
    return value.upper()


def export_filename(title: str, extension: str) -> str:
    """'Q1 Proposal: Acme/Co' -> 'Q1_Proposal__Acme_Co.pdf'"""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title or '')}.{extension}"


# Order matters: block closers become paragraph breaks before the catch-all
# tag strip, and &amp; is decoded right after &nbsp; and before the others.
_HTML_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"</p>", re.IGNORECASE), "\n\n"),
    (re.compile(r"<br\s*/?>", re.IGNORECASE), "\n"),
    (re.compile(r"</div>", re.IGNORECASE), "\n\n"),
    (re.compile(r"</h[1-6]>", re.IGNORECASE), "\n\n"),
    (re.compile(r"</li>", re.IGNORECASE), "\n"),
    (re.compile(r"<li\b[^>]*>", re.IGNORECASE), "• "),
    (re.compile(r"</?(?:ul|ol)\b[^>]*>", re.IGNORECASE), "\n"),
    (re.compile(r"<[^>]+>"), ""),
)

_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&apos;", "'"),
)

_EXCESS_BLANK_LINES_RE = re.compile(r"\n\s*\n\s*\n+")


def normalize_html(html: str | None) -> str:
    """
    Turn rich-text editor HTML into plain text.

    Paragraphs are separated by one blank line, list items become
    "• item" lines. Never raises; empty input gives an empty string.
    """
    if not html:
        return ""
    text = str(html)
    for pattern, replacement in _HTML_RULES:
        text = pattern.sub(replacement, text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    text = _EXCESS_BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()


def split_paragraphs(text: str) -> list[str]:
    """Split normalized text on blank lines, dropping empty chunks."""
    if not text:
        return []
    return [chunk.strip("\n") for chunk in re.split(r"\n[ \t]*\n", text) if chunk.strip()]
