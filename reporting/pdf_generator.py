"""
Proposta Comercial - PDF Output

Draws a laid-out Document onto a ReportLab canvas and streams the bytes.

Library Choice: ReportLab
- Pure Python, no browser/rendering engine required
- Deterministic output with invariant=1 (same input = same PDF bytes)
- Low-level canvas matches the absolutely positioned draw commands

The layout itself lives in reporting.layout; this module only converts the
top-left-origin commands into PDF coordinates (bottom-left origin) and
handles delivery: chunked streaming, file output and in-memory buffers.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Final, Iterator, Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from core.models import ProposalRecord
from utils.formatting import attachment_filename

from .commands import Circle, Document, DrawCommand, Image, Line, Panel, Text
from .layout import ProposalLayout


logger = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024
SPOOL_MAX_SIZE: Final[int] = 1024 * 1024


# =============================================================================
# Result & Error Types
# =============================================================================


@dataclass
class ReportSuccess:
    """Returned when a PDF file was written."""
    path: Path
    page_count: int


class RenderFailure(RuntimeError):
    """Any failure while laying out or drawing a proposal."""


# =============================================================================
# Canvas Backend
# =============================================================================


class CanvasRenderer:
    """Paints draw commands onto a ReportLab canvas."""

    def __init__(self, pdf: canvas.Canvas, page_height: float):
        self.pdf = pdf
        self.page_height = page_height

    def _y(self, y: float) -> float:
        return self.page_height - y

    def draw(self, command: DrawCommand) -> None:
        if isinstance(command, Panel):
            self._panel(command)
        elif isinstance(command, Text):
            self._text(command)
        elif isinstance(command, Line):
            self._line(command)
        elif isinstance(command, Circle):
            self._circle(command)
        elif isinstance(command, Image):
            self._image(command)
        else:
            raise TypeError(f"Unknown draw command: {command!r}")

    def _panel(self, c: Panel) -> None:
        pdf = self.pdf
        pdf.setFillColor(HexColor(c.fill))
        has_stroke = c.stroke is not None
        if has_stroke:
            pdf.setStrokeColor(HexColor(c.stroke))
            pdf.setLineWidth(c.stroke_width)
        bottom = self._y(c.y + c.height)
        if c.radius > 0:
            pdf.roundRect(c.x, bottom, c.width, c.height, c.radius, stroke=1 if has_stroke else 0, fill=1)
        else:
            pdf.rect(c.x, bottom, c.width, c.height, stroke=1 if has_stroke else 0, fill=1)

    def _text(self, c: Text) -> None:
        pdf = self.pdf
        pdf.setFont(c.font, c.size)
        pdf.setFillColor(HexColor(c.color))
        y = self._y(c.y)

        if c.align == "center" and c.width is not None:
            pdf.drawCentredString(c.x + c.width / 2, y, c.text)
        elif c.align == "right" and c.width is not None:
            pdf.drawRightString(c.x + c.width, y, c.text)
        elif c.align == "justify" and c.width is not None and c.text.count(" ") > 0:
            # Spread the slack over the inter-word spaces
            slack = c.width - stringWidth(c.text, c.font, c.size)
            text_obj = pdf.beginText(c.x, y)
            text_obj.setFont(c.font, c.size)
            text_obj.setWordSpace(max(0.0, slack / c.text.count(" ")))
            text_obj.textOut(c.text)
            pdf.drawText(text_obj)
        else:
            pdf.drawString(c.x, y, c.text)

    def _line(self, c: Line) -> None:
        pdf = self.pdf
        pdf.setStrokeColor(HexColor(c.color))
        pdf.setLineWidth(c.width)
        pdf.line(c.x1, self._y(c.y1), c.x2, self._y(c.y2))

    def _circle(self, c: Circle) -> None:
        pdf = self.pdf
        pdf.setFillColor(HexColor(c.fill))
        has_stroke = c.stroke is not None
        if has_stroke:
            pdf.setStrokeColor(HexColor(c.stroke))
            pdf.setLineWidth(c.stroke_width)
        pdf.circle(c.cx, self._y(c.cy), c.r, stroke=1 if has_stroke else 0, fill=1)

    def _image(self, c: Image) -> None:
        self.pdf.drawImage(
            ImageReader(c.path),
            c.x,
            self._y(c.y + c.height),
            width=c.width,
            height=c.height,
            preserveAspectRatio=True,
            mask="auto",
        )


# =============================================================================
# Generator
# =============================================================================


class ProposalPDFGenerator:
    """
    Output sink for proposal documents.

    Usage:
        generator = ProposalPDFGenerator()
        document = generator.render(record)
        for chunk in generator.emit(document):
            response.write(chunk)
    """

    OUTPUT_DIR = Path(__file__).parent.parent / "data" / "proposals"

    def __init__(self, layout: Optional[ProposalLayout] = None):
        self.layout = layout or ProposalLayout()

    # =========================================================================
    # Layout
    # =========================================================================

    def render(self, record: ProposalRecord) -> Document:
        """
        Lay out a record.

        Raises:
            RenderFailure: If layout fails for any reason
        """
        try:
            return self.layout.render_document(record)
        except Exception as e:
            raise RenderFailure(f"Layout failed for proposal {record.id}: {e}") from e

    # =========================================================================
    # Output
    # =========================================================================

    def write_to(self, document: Document, fileobj: BinaryIO) -> None:
        """
        Draw every page of ``document`` and write the PDF to ``fileobj``.

        Raises:
            RenderFailure: If any drawing operation fails
        """
        pdf = canvas.Canvas(
            fileobj,
            pagesize=(document.page_width, document.page_height),
            invariant=1,
        )
        pdf.setTitle(document.title)
        pdf.setAuthor(document.author)
        pdf.setSubject("Proposta Comercial - Energia Solar Fotovoltaica")

        renderer = CanvasRenderer(pdf, document.page_height)
        try:
            for page in document.pages:
                for command in page.commands:
                    renderer.draw(command)
                pdf.showPage()
            pdf.save()
        except Exception as e:
            raise RenderFailure(f"Drawing failed: {e}") from e

        logger.info("Wrote PDF '%s' (%d pages)", document.title, document.page_count)

    def emit(self, document: Document, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """
        Render ``document`` and return an iterator over the PDF bytes.

        Drawing happens before this returns, so a RenderFailure surfaces to
        the caller before the first chunk is sent. The bytes are spooled
        (memory, then disk past SPOOL_MAX_SIZE) and read back in chunks;
        exhausting the iterator releases the spool.
        """
        spool = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        try:
            self.write_to(document, spool)
        except Exception:
            spool.close()
            raise
        spool.seek(0)
        return _iter_chunks(spool, chunk_size)

    def stream(self, record: ProposalRecord, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """Lay out and emit a record in one step."""
        return self.emit(self.render(record), chunk_size)

    def generate_to_buffer(self, record: ProposalRecord) -> bytes:
        """Generate PDF and return as bytes."""
        buffer = BytesIO()
        self.write_to(self.render(record), buffer)
        return buffer.getvalue()

    def generate_report(self, record: ProposalRecord, output_dir: Optional[Path] = None) -> ReportSuccess:
        """
        Generate a proposal PDF on disk.

        Args:
            record: Proposal to render
            output_dir: Target directory (defaults to OUTPUT_DIR)

        Returns:
            ReportSuccess with the written path
        """
        output_dir = Path(output_dir) if output_dir else self.OUTPUT_DIR
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / attachment_filename(record.client_name)

        document = self.render(record)
        buffer = BytesIO()
        self.write_to(document, buffer)
        output_path.write_bytes(buffer.getvalue())

        return ReportSuccess(path=output_path, page_count=document.page_count)


def _iter_chunks(spool: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    try:
        while True:
            chunk = spool.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        spool.close()


def generate_report(record: ProposalRecord, output_dir: Optional[Path] = None) -> ReportSuccess:
    """
    Convenience function to generate a proposal PDF.

    Args:
        record: ProposalRecord to render
        output_dir: Optional target directory

    Returns:
        ReportSuccess with the file path and page count
    """
    return ProposalPDFGenerator().generate_report(record, output_dir)
