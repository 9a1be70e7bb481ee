"""
Draw commands: resolved, absolutely positioned drawing instructions.

Coordinates use a top-left origin in points. Text ``y`` is the baseline.
The layout engine produces these; the PDF generator consumes them. Tests
inspect them directly without touching a rendering backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Panel:
    """Filled (optionally rounded, optionally stroked) rectangle."""

    x: float
    y: float
    width: float
    height: float
    fill: str
    radius: float = 0.0
    stroke: Optional[str] = None
    stroke_width: float = 0.5

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class Text:
    """
    Single line of text.

    ``align`` is one of left / center / right / justify. For center and
    right the anchor is derived from ``x`` and ``width``; justify spreads
    the words across ``width``.
    """

    x: float
    y: float
    text: str
    font: str
    size: float
    color: str
    align: str = "left"
    width: Optional[float] = None

    @property
    def bottom(self) -> float:
        # Descenders stay well within a quarter of the font size
        return self.y + self.size * 0.25


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float = 1.0

    @property
    def bottom(self) -> float:
        return max(self.y1, self.y2)


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str
    stroke: Optional[str] = None
    stroke_width: float = 1.0

    @property
    def bottom(self) -> float:
        return self.cy + self.r


@dataclass(frozen=True)
class Image:
    """Raster image loaded from ``path`` when rendered."""

    x: float
    y: float
    width: float
    height: float
    path: str

    @property
    def bottom(self) -> float:
        return self.y + self.height


DrawCommand = Union[Panel, Text, Line, Circle, Image]


# =============================================================================
# Pages & Documents
# =============================================================================


@dataclass(frozen=True)
class Page:
    """
    One finished page.

    ``content`` is drawn in phase 1; ``footer`` is stamped in phase 2 once
    the total page count is known.
    """

    number: int
    template: str
    content: tuple[DrawCommand, ...]
    footer: tuple[DrawCommand, ...] = ()

    @property
    def commands(self) -> tuple[DrawCommand, ...]:
        return self.content + self.footer

    def texts(self) -> list[str]:
        """All text runs on the page, in drawing order."""
        return [c.text for c in self.commands if isinstance(c, Text)]

    def footer_texts(self) -> list[str]:
        return [c.text for c in self.footer if isinstance(c, Text)]


@dataclass(frozen=True)
class Document:
    """A complete multi-page proposal, ready for the output sink."""

    pages: tuple[Page, ...]
    page_width: float
    page_height: float
    title: str = ""
    author: str = ""

    @property
    def page_count(self) -> int:
        return len(self.pages)
