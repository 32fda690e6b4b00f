"""
Line wrapping and page allocation for the PDF renderer.

Both pieces work in PDF points with reportlab's bottom-left origin: the
cursor is the baseline of the next thing to draw and moves down the page.
"""

from __future__ import annotations

from typing import Callable, Protocol

Measure = Callable[[str], float]


def wrap_text(text: str, measure: Measure, max_width: float) -> list[str]:
    """
    Greedy word wrap on single spaces.

    A token wider than ``max_width`` is never split; it goes out as a line
    of its own. Empty input gives an empty list.
    """
    lines: list[str] = []
    current = ""
    for token in (text or "").split(" "):
        candidate = f"{current} {token}" if current else token
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = token
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def wrap_paragraph(paragraph: str, measure: Measure, max_width: float) -> list[str]:
    """Wrap each hard line of a paragraph separately so list items stay on their own lines."""
    lines: list[str] = []
    for hard_line in paragraph.split("\n"):
        lines.extend(wrap_text(hard_line.strip(), measure, max_width))
    return lines


class PageSink(Protocol):
    def showPage(self) -> None: ...


class Paginator:
    """
    Tracks the vertical cursor for one export call.

    Callers ask ``ensure_space(h)`` before placing an element of height
    ``h`` and ``advance(h)`` after drawing it. An element taller than an
    empty page still gets placed; it overflows the bottom margin.
    """

    def __init__(self, sink: PageSink, page_height: float, top_margin: float, bottom_margin: float):
        self.sink = sink
        self.page_height = page_height
        self.top_margin = top_margin
        self.bottom_margin = bottom_margin
        self.page_count = 1
        self.cursor = self.top
        self._page_has_content = False

    @property
    def top(self) -> float:
        return self.page_height - self.top_margin

    @property
    def remaining(self) -> float:
        return self.cursor - self.bottom_margin

    def ensure_space(self, height: float) -> bool:
        """Start a new page if ``height`` does not fit; return True when it did."""
        if self.cursor - height >= self.bottom_margin:
            return False
        if not self._page_has_content:
            # Fresh page already; another one would only add a blank page.
            return False
        self.sink.showPage()
        self.page_count += 1
        self.cursor = self.top
        self._page_has_content = False
        return True

    def advance(self, height: float) -> None:
        self.cursor -= height
        self._page_has_content = True
