"""
Reporting module for the solar proposal engine.

Lays out a ProposalRecord as a fixed three-page document of draw commands
and renders it to PDF with ReportLab.

Usage:
    from reporting import render_document, ProposalPDFGenerator
    from core.models import create_sample_proposal

    record = create_sample_proposal()
    document = render_document(record)
    pdf_bytes = b"".join(ProposalPDFGenerator().emit(document))
"""

from .commands import Circle, Document, DrawCommand, Image, Line, Page, Panel, Text
from .layout import ProposalLayout, fit_text, render_document, wrap_text
from .pagination import PaginationController, PaginationError
from .pdf_generator import ProposalPDFGenerator, RenderFailure, ReportSuccess, generate_report
from .theme import VARIANTS, LayoutTheme, Palette, ProposalVariant, get_variant

__all__ = [
    # Draw commands
    "Circle",
    "Document",
    "DrawCommand",
    "Image",
    "Line",
    "Page",
    "Panel",
    "Text",
    # Layout
    "ProposalLayout",
    "fit_text",
    "render_document",
    "wrap_text",
    # Pagination
    "PaginationController",
    "PaginationError",
    # Output
    "ProposalPDFGenerator",
    "RenderFailure",
    "ReportSuccess",
    "generate_report",
    # Theme
    "VARIANTS",
    "LayoutTheme",
    "Palette",
    "ProposalVariant",
    "get_variant",
]
