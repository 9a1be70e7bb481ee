"""
Pagination controller.

Sequences page creation and keeps a vertical cursor per page. Works in two
explicit phases:

1. Content: the layout engine opens pages, draws into them and closes them.
   Nothing here knows how many pages there will be.
2. Finalisation: once every page exists, a footer stamper is called for each
   page with (page_number, total_pages). Footer commands go into a separate
   slot on the page; content commands are never touched.

Overflow is not handled: content that runs into the footer band is logged
and left to collide visually.
"""

from __future__ import annotations

import logging
from typing import Callable, Final, Optional, Sequence

from .commands import Circle, Document, DrawCommand, Image, Line, Page, Panel
from .theme import LayoutTheme


logger = logging.getLogger(__name__)


# Where the cursor starts on each page template
TEMPLATE_START_OFFSETS: Final[dict[str, str]] = {
    "cover": "top",
    "technical": "margin",
    "investment": "margin",
}

FooterStamper = Callable[[int, int], Sequence[DrawCommand]]


class PaginationError(RuntimeError):
    """Raised when pages are opened, closed or finalised out of order."""


class PaginationController:
    """Running cursor plus the list of finished pages for one document."""

    def __init__(self, theme: LayoutTheme):
        self.theme = theme
        self._pages: list[Page] = []
        self._commands: list[DrawCommand] = []
        self._template: Optional[str] = None
        self._cursor: float = 0.0
        self._finalized = False

    # =========================================================================
    # Phase 1: Content
    # =========================================================================

    def start_offset(self, template: str) -> float:
        """Cursor start position for a page template."""
        if TEMPLATE_START_OFFSETS.get(template, "margin") == "top":
            return 0.0
        return self.theme.margin

    def start_page(self, template: str) -> float:
        """
        Open a new page and reset the cursor.

        Returns:
            The cursor start offset for the template
        """
        if self._finalized:
            raise PaginationError("Document already finalised")
        if self._template is not None:
            raise PaginationError(f"Page '{self._template}' is still open")

        self._template = template
        self._commands = []
        self._cursor = self.start_offset(template)
        logger.debug("Started page %d (%s)", len(self._pages) + 1, template)
        return self._cursor

    @property
    def cursor(self) -> float:
        return self._cursor

    @property
    def page_number(self) -> int:
        """1-based number of the open page (or the next one)."""
        return len(self._pages) + 1

    def move_to(self, y: float) -> float:
        self._cursor = y
        return self._cursor

    def advance(self, dy: float) -> float:
        self._cursor += dy
        return self._cursor

    def add(self, command: DrawCommand) -> DrawCommand:
        """Append a content command to the open page."""
        if self._template is None:
            raise PaginationError("No open page")

        if command.bottom > self.theme.footer_top:
            logger.warning(
                "Content on page %d (%s) reaches into the footer band at y=%.1f",
                self.page_number,
                self._template,
                command.bottom,
            )
        self._commands.append(command)
        return command

    def extend(self, commands: Sequence[DrawCommand]) -> None:
        for command in commands:
            self.add(command)

    def finish_page(self) -> Page:
        """Close the open page."""
        if self._template is None:
            raise PaginationError("No open page")

        page = Page(
            number=self.page_number,
            template=self._template,
            content=tuple(self._commands),
        )
        self._pages.append(page)
        self._template = None
        self._commands = []
        return page

    @property
    def pages(self) -> tuple[Page, ...]:
        return tuple(self._pages)

    # =========================================================================
    # Phase 2: Finalisation
    # =========================================================================

    def finalize(self, stamp_footer: FooterStamper, title: str = "", author: str = "") -> Document:
        """
        Stamp footers on every finished page and build the Document.

        Args:
            stamp_footer: Called with (page_number, total_pages); returns the
                          footer commands for that page
            title: PDF metadata title
            author: PDF metadata author

        Raises:
            PaginationError: If a page is still open or finalize already ran
        """
        if self._template is not None:
            raise PaginationError(f"Page '{self._template}' is still open")
        if self._finalized:
            raise PaginationError("Document already finalised")

        total = len(self._pages)
        footer_top = self.theme.footer_top
        stamped: list[Page] = []

        for page in self._pages:
            footer = tuple(stamp_footer(page.number, total))
            for command in footer:
                if _top(command) < footer_top:
                    raise PaginationError(
                        f"Footer command on page {page.number} leaves the footer band"
                    )
            stamped.append(Page(
                number=page.number,
                template=page.template,
                content=page.content,
                footer=footer,
            ))

        self._pages = stamped
        self._finalized = True
        logger.debug("Finalised document with %d pages", total)

        return Document(
            pages=tuple(stamped),
            page_width=self.theme.page_width,
            page_height=self.theme.page_height,
            title=title,
            author=author,
        )


def _top(command: DrawCommand) -> float:
    """Highest (smallest) y a command occupies."""
    if isinstance(command, Circle):
        return command.cy - command.r
    if isinstance(command, Line):
        return min(command.y1, command.y2)
    if isinstance(command, (Panel, Image)):
        return command.y
    # Text: ascenders reach roughly one font size above the baseline
    return command.y - command.size
