"""
Proposal Layout Engine - Proposta Comercial (3 pages, fixed template)

Turns a ProposalRecord into a Document of absolutely positioned draw
commands. The template is fixed:

1. Cover: company identity, client card, headline figures, about us
2. Technical: system sizing cards, equipment table, warranties, timeline
3. Investment: price panel, inclusions, financing, validity, acceptance

Geometry is top-left origin, in points. The engine is a pure function of the
record and the injected LayoutTheme / ProposalVariant; it keeps no state
between renders.

Text overflow policy:
- Labels, headers and table cells are single-line and truncated with "…"
- Paragraph bodies are word-wrapped and justified (last line left-aligned)
- Vertical overflow is not handled (see reporting.pagination)

The engine does not validate. A record that skipped core.validation may
produce meaningless output.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from core.models import ProposalRecord
from utils.formatting import (
    format_brl,
    format_long_date,
    format_number,
    format_optional,
    pluralize,
)

from .commands import Circle, Document, DrawCommand, Image, Line, Panel, Text
from .pagination import PaginationController
from .theme import LayoutTheme, ProposalVariant, get_variant


logger = logging.getLogger(__name__)

ELLIPSIS = "…"

# Equipment table column shares of the content width
EQUIPMENT_COLUMNS = (0.34, 0.52, 0.14)

TIMELINE_RADIUS = 16.0
HERO_HEIGHT = 300.0


# =============================================================================
# Text Measurement
# =============================================================================


def fit_text(text: str, font: str, size: float, width: float) -> str:
    """
    Truncate ``text`` with an ellipsis so it fits in ``width`` points.

    Returns "" when not even the ellipsis fits.
    """
    if stringWidth(text, font, size) <= width:
        return text
    if stringWidth(ELLIPSIS, font, size) > width:
        return ""
    while text and stringWidth(text + ELLIPSIS, font, size) > width:
        text = text[:-1]
    return text.rstrip() + ELLIPSIS


def wrap_text(text: str, font: str, size: float, width: float) -> list[str]:
    """Word-wrap ``text`` to ``width`` points."""
    return simpleSplit(text, font, size, width)


# =============================================================================
# Layout Engine
# =============================================================================


class ProposalLayout:
    """
    Fixed-layout renderer for the commercial proposal.

    Holds only immutable configuration; every call to render_document builds
    its own PaginationController.
    """

    def __init__(
        self,
        theme: Optional[LayoutTheme] = None,
        variant: Optional[ProposalVariant] = None,
    ):
        self.theme = theme or LayoutTheme()
        self.variant = variant or get_variant()
        self.palette = self.variant.palette

    # =========================================================================
    # Public API
    # =========================================================================

    def render_document(self, record: ProposalRecord) -> Document:
        """Lay out the three proposal pages and stamp their footers."""
        logger.debug("Rendering proposal %s", record.id)
        ctl = PaginationController(self.theme)

        self._cover_page(ctl, record)
        self._technical_page(ctl, record)
        self._investment_page(ctl, record)

        return ctl.finalize(
            self.footer_commands,
            title=f"Proposta Comercial - {record.client_name}",
            author=self.variant.company_name,
        )

    # =========================================================================
    # Primitives
    # =========================================================================

    def draw_panel(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        w: float,
        h: float,
        radius: float,
        fill: str,
        stroke: Optional[str] = None,
    ) -> Panel:
        """Opaque filled region for backgrounds and cards."""
        return ctl.add(Panel(x=x, y=y, width=w, height=h, fill=fill, radius=radius, stroke=stroke))

    def draw_text(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        text: str,
        font: str,
        size: float,
        color: str,
        width: Optional[float] = None,
        align: str = "left",
    ) -> Text:
        """Single-line text at baseline ``y``; truncated when ``width`` is given."""
        if width is not None:
            text = fit_text(text, font, size, width)
        return ctl.add(Text(x=x, y=y, text=text, font=font, size=size, color=color, align=align, width=width))

    def draw_paragraph(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        text: str,
        width: float,
        size: Optional[float] = None,
        leading: Optional[float] = None,
        color: Optional[str] = None,
        font: Optional[str] = None,
        align: str = "justify",
    ) -> float:
        """
        Wrapped paragraph whose first line box starts at ``y``.

        Returns:
            The y immediately below the last line
        """
        size = size or self.theme.body_size
        leading = leading or self.theme.body_leading
        color = color or self.palette.text
        font = font or self.theme.font_regular

        lines = wrap_text(text, font, size, width)
        for i, line in enumerate(lines):
            line_align = align
            if align == "justify" and i == len(lines) - 1:
                line_align = "left"
            ctl.add(Text(
                x=x,
                y=y + size + i * leading,
                text=line,
                font=font,
                size=size,
                color=color,
                align=line_align,
                width=width,
            ))
        return y + len(lines) * leading

    def draw_section_header(self, ctl: PaginationController, title: str, y: float) -> float:
        """
        Accent bar plus bold title at ``y``.

        Returns:
            y + the fixed section header advance
        """
        t = self.theme
        self.draw_panel(ctl, t.content_left, y, 4, 18, 2, self.palette.accent)
        self.draw_text(
            ctl,
            t.content_left + 12,
            y + 14,
            title,
            t.font_bold,
            t.header_size,
            self.palette.primary,
            width=t.content_width - 12,
        )
        ctl.add(Line(
            x1=t.content_left,
            y1=y + 25,
            x2=t.content_right,
            y2=y + 25,
            color=self.palette.border,
            width=0.5,
        ))
        return y + t.section_header_advance

    def draw_info_card(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        w: float,
        title: str,
        value: str,
        subtitle: Optional[str] = None,
    ) -> float:
        """
        Titled metric card.

        Returns:
            Card bottom plus the fixed card gap
        """
        t = self.theme
        h = t.info_card_height
        inner = w - 2 * t.card_padding

        self.draw_panel(ctl, x, y, w, h, t.card_radius, self.palette.surface, stroke=self.palette.border)
        self.draw_text(ctl, x + t.card_padding, y + 21, title, t.font_bold, t.label_size, self.palette.muted, width=inner)
        self.draw_text(ctl, x + t.card_padding, y + 47, value, t.font_bold, 18, self.palette.primary, width=inner)
        if subtitle:
            self.draw_text(ctl, x + t.card_padding, y + 64, subtitle, t.font_regular, t.small_size, self.palette.muted, width=inner)

        return y + h + t.card_gap

    def draw_table_row(
        self,
        ctl: PaginationController,
        y: float,
        cells: Sequence[str],
        widths: Sequence[float],
        header: bool = False,
        shaded: bool = False,
    ) -> float:
        """
        One equipment-table row spanning the content width.

        The last column is centred (quantities).

        Returns:
            y + row height
        """
        t = self.theme
        h = t.row_height

        if header:
            self.draw_panel(ctl, t.content_left, y, t.content_width, h, 4, self.palette.primary)
            font, size, color = t.font_bold, t.label_size, self.palette.white
        else:
            if shaded:
                self.draw_panel(ctl, t.content_left, y, t.content_width, h, 0, self.palette.surface)
            ctl.add(Line(
                x1=t.content_left,
                y1=y + h,
                x2=t.content_right,
                y2=y + h,
                color=self.palette.border,
                width=0.5,
            ))
            font, size, color = t.font_regular, t.body_size, self.palette.text

        baseline = y + h / 2 + size * 0.35
        x = t.content_left
        for i, (cell, width) in enumerate(zip(cells, widths)):
            align = "center" if i == len(cells) - 1 else "left"
            self.draw_text(ctl, x + 8, baseline, cell, font, size, color, width=width - 16, align=align)
            x += width

        return y + h

    def draw_timeline_step(
        self,
        ctl: PaginationController,
        cx: float,
        y: float,
        width: float,
        label: str,
        title: str,
        description: str,
        next_cx: Optional[float] = None,
    ) -> float:
        """
        Execution-schedule step: day label inside a circle, a connector to
        the next step, then a centred title and description.

        Returns:
            Bottom y of the step
        """
        t = self.theme
        r = TIMELINE_RADIUS
        cy = y + r

        if next_cx is not None:
            ctl.add(Line(x1=cx + r, y1=cy, x2=next_cx - r, y2=cy, color=self.palette.accent, width=2))

        ctl.add(Circle(cx=cx, cy=cy, r=r, fill=self.palette.primary, stroke=self.palette.accent, stroke_width=1.5))
        self.draw_text(
            ctl, cx - r, cy + 3, label, t.font_bold, t.small_size, self.palette.white,
            width=2 * r, align="center",
        )

        left = cx - width / 2
        self.draw_text(
            ctl, left, y + 2 * r + 16, title, t.font_bold, t.label_size, self.palette.primary,
            width=width, align="center",
        )
        return self.draw_paragraph(
            ctl, left, y + 2 * r + 22, description, width,
            size=t.small_size, leading=10, color=self.palette.muted, align="center",
        )

    def _draw_label_value(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        w: float,
        label: str,
        value: str,
    ) -> None:
        t = self.theme
        label_width = 120
        self.draw_text(ctl, x, y, label, t.font_bold, t.body_size, self.palette.muted, width=label_width)
        self.draw_text(ctl, x + label_width + 10, y, value, t.font_regular, t.body_size, self.palette.text,
                       width=w - label_width - 10)

    def _draw_list_card(
        self,
        ctl: PaginationController,
        x: float,
        y: float,
        w: float,
        h: float,
        title: str,
        lines: Sequence[str],
    ) -> None:
        t = self.theme
        inner = w - 2 * t.card_padding
        self.draw_panel(ctl, x, y, w, h, t.card_radius, self.palette.white, stroke=self.palette.border)
        self.draw_panel(ctl, x, y, 4, h, 0, self.palette.accent)
        self.draw_text(ctl, x + t.card_padding, y + 21, title, t.font_bold, t.label_size, self.palette.primary, width=inner)
        for i, line in enumerate(lines):
            self.draw_text(ctl, x + t.card_padding, y + 39 + i * 14, line, t.font_regular, t.label_size,
                           self.palette.text, width=inner)

    def _equal_columns(self, count: int, gap: float) -> tuple[float, list[float]]:
        """Width and x positions of ``count`` equal columns across the content width."""
        t = self.theme
        width = (t.content_width - gap * (count - 1)) / count
        return width, [t.content_left + i * (width + gap) for i in range(count)]

    # =========================================================================
    # Page 1: Cover
    # =========================================================================

    def _cover_page(self, ctl: PaginationController, record: ProposalRecord) -> None:
        t = self.theme
        p = self.palette
        v = self.variant
        ctl.start_page("cover")

        # Hero band
        self.draw_panel(ctl, 0, 0, t.page_width, HERO_HEIGHT, 0, p.primary)
        self.draw_panel(ctl, 0, HERO_HEIGHT, t.page_width, 6, 0, p.accent)

        text_width = t.content_width
        if v.logo_path:
            ctl.add(Image(x=t.content_right - 90, y=40, width=90, height=90, path=v.logo_path))
            text_width -= 100

        self.draw_text(ctl, t.content_left, 70, v.company_name.upper(), t.font_bold, 14, p.accent, width=text_width)
        self.draw_text(ctl, t.content_left, 170, v.document_title, t.font_bold, t.title_size, p.white, width=text_width)
        self.draw_text(ctl, t.content_left, 198, v.document_subtitle, t.font_regular, 13, p.primary_light,
                       width=t.content_width)
        self.draw_text(ctl, t.content_left, 250, "Preparada para", t.font_regular, t.label_size, p.primary_light)
        self.draw_text(ctl, t.content_left, 272, record.client_name, t.font_bold, 16, p.white, width=t.content_width)

        # Client card
        y = ctl.move_to(HERO_HEIGHT + 30)
        y = self.draw_section_header(ctl, "DADOS DO CLIENTE", y)

        rows = [("Cliente", record.client_name)]
        if record.city_state:
            rows.append(("Localização", record.city_state))
        rows.append(("Data da proposta", format_long_date(record.proposal_date)))
        rows.append(("Validade", pluralize(record.validity_days, "dia corrido", "dias corridos")))

        pad = t.card_padding
        card_h = 2 * pad + len(rows) * 22
        self.draw_panel(ctl, t.content_left, y, t.content_width, card_h, t.card_radius, p.surface, stroke=p.border)
        for i, (label, value) in enumerate(rows):
            self._draw_label_value(
                ctl, t.content_left + pad, y + pad + 15 + i * 22, t.content_width - 2 * pad, label, value,
            )
        y = ctl.move_to(y + card_h + t.section_gap)

        # Headline figures
        width, xs = self._equal_columns(2, t.card_gap)
        self.draw_info_card(
            ctl, xs[0], y, width,
            "POTÊNCIA DO SISTEMA",
            f"{format_number(record.power_kwp, 2)} kWp",
            pluralize(record.module_quantity, "módulo fotovoltaico", "módulos fotovoltaicos"),
        )
        y = ctl.move_to(self.draw_info_card(
            ctl, xs[1], y, width,
            "INVESTIMENTO",
            format_brl(record.total_price),
            "Pagamento à vista",
        ))

        # About us
        y = self.draw_section_header(ctl, v.about_title, y)
        for paragraph in v.about_text:
            y = self.draw_paragraph(ctl, t.content_left, y, paragraph, t.content_width) + 8
        ctl.move_to(y)

        ctl.finish_page()

    # =========================================================================
    # Page 2: Technical Dimensioning
    # =========================================================================

    def _technical_page(self, ctl: PaginationController, record: ProposalRecord) -> None:
        t = self.theme
        p = self.palette
        v = self.variant
        y = ctl.start_page("technical")

        # System sizing cards
        y = self.draw_section_header(ctl, "DIMENSIONAMENTO DO SISTEMA", y)
        width, xs = self._equal_columns(3, t.card_gap)
        self.draw_info_card(
            ctl, xs[0], y, width,
            "POTÊNCIA PROPOSTA",
            f"{format_number(record.power_kwp, 2)} kWp",
            "Potência de pico",
        )
        self.draw_info_card(
            ctl, xs[1], y, width,
            "GERAÇÃO ESTIMADA",
            f"{format_number(record.monthly_generation_kwh, 0)} kWh/mês",
            "Média mensal",
        )
        y = ctl.move_to(self.draw_info_card(
            ctl, xs[2], y, width,
            "ÁREA ÚTIL",
            format_optional(record.usable_area_m2, 0, "m²"),
            "Área necessária",
        ))

        # Equipment table
        y = self.draw_section_header(ctl, "EQUIPAMENTOS PRINCIPAIS", y)
        widths = [share * t.content_width for share in EQUIPMENT_COLUMNS]
        y = self.draw_table_row(ctl, y, ("ITEM", "MODELO", "QTD"), widths, header=True)
        y = self.draw_table_row(
            ctl, y, ("Módulos Fotovoltaicos", record.module_model, str(record.module_quantity)), widths,
        )
        y = self.draw_table_row(
            ctl, y, ("Inversor(es)", record.inverter_model, str(record.inverter_quantity)), widths, shaded=True,
        )
        if record.other_items:
            y = self.draw_table_row(ctl, y, ("Outros Itens", record.other_items, "-"), widths)
        y = ctl.move_to(y + t.section_gap)

        # Warranties
        y = self.draw_section_header(ctl, "GARANTIAS INCLUÍDAS", y)
        width, xs = self._equal_columns(3, t.card_gap)
        card_h = 70
        self._draw_list_card(ctl, xs[0], y, width, card_h, "NOSSOS SERVIÇOS", [record.warranty_services])
        self._draw_list_card(
            ctl, xs[1], y, width, card_h, "MÓDULOS FOTOVOLTAICOS",
            [record.warranty_module_equipment, record.warranty_module_performance],
        )
        self._draw_list_card(ctl, xs[2], y, width, card_h, "INVERSORES", [record.warranty_inverter])
        y += card_h + 16
        self.draw_text(
            ctl, t.content_left, y, v.warranty_note, t.font_oblique, t.small_size, p.muted,
            width=t.content_width, align="center",
        )
        y = ctl.move_to(y + t.section_gap)

        # Execution schedule
        y = self.draw_section_header(ctl, "CRONOGRAMA DE EXECUÇÃO", y)
        steps = v.timeline
        slot = t.content_width / len(steps)
        centres = [t.content_left + slot * (i + 0.5) for i in range(len(steps))]
        bottom = y
        for i, (label, title, description) in enumerate(steps):
            next_cx = centres[i + 1] if i + 1 < len(steps) else None
            step_bottom = self.draw_timeline_step(
                ctl, centres[i], y, slot - 8, label, title, description, next_cx=next_cx,
            )
            bottom = max(bottom, step_bottom)
        ctl.move_to(bottom)

        ctl.finish_page()

    # =========================================================================
    # Page 3: Investment & Acceptance
    # =========================================================================

    def _investment_page(self, ctl: PaginationController, record: ProposalRecord) -> None:
        t = self.theme
        p = self.palette
        v = self.variant
        y = ctl.start_page("investment")

        # Price panel
        y = self.draw_section_header(ctl, "INVESTIMENTO", y)
        panel_h = 110
        self.draw_panel(ctl, t.content_left, y, t.content_width, panel_h, 14, p.primary)
        inner_x = t.content_left + 20
        inner_w = t.content_width - 40
        self.draw_text(ctl, inner_x, y + 30, "VALOR TOTAL À VISTA", t.font_bold, t.body_size, p.accent, width=inner_w)
        self.draw_text(ctl, inner_x, y + 70, format_brl(record.total_price), t.font_bold, 30, p.white, width=inner_w)
        summary = (
            f"Sistema de {format_number(record.power_kwp, 2)} kWp · "
            f"{pluralize(record.module_quantity, 'módulo', 'módulos')} + "
            f"{pluralize(record.inverter_quantity, 'inversor', 'inversores')}"
        )
        self.draw_text(ctl, inner_x, y + 94, summary, t.font_regular, t.label_size, p.primary_light, width=inner_w)
        y = ctl.move_to(y + panel_h + t.section_gap)

        # Inclusions
        y = self.draw_section_header(ctl, "O QUE ESTÁ INCLUSO", y)
        items = list(v.inclusions)
        if record.other_items:
            items.append(f"Outros itens: {record.other_items}")
        for item in items:
            ctl.add(Circle(cx=t.content_left + 6, cy=y + 9, r=2.5, fill=p.accent))
            self.draw_text(ctl, t.content_left + 16, y + 12, item, t.font_regular, t.body_size, p.text,
                           width=t.content_width - 16)
            y += 18
        y = ctl.move_to(y + t.section_gap)

        # Financing
        y = self.draw_section_header(ctl, "FINANCIAMENTO", y)
        y = ctl.move_to(self.draw_paragraph(ctl, t.content_left, y, v.financing_text, t.content_width) + t.section_gap)

        # Validity
        y = self.draw_section_header(ctl, "VALIDADE DA PROPOSTA", y)
        validity = (
            f"Esta proposta é válida em todos os seus termos por "
            f"{pluralize(record.validity_days, 'dia corrido', 'dias corridos')} contados a partir de "
            f"{format_long_date(record.proposal_date)}, ou seja, até {format_long_date(record.expires_on)}."
        )
        pad = t.card_padding
        lines = wrap_text(validity, t.font_regular, t.body_size, t.content_width - 2 * pad)
        box_h = 2 * pad + len(lines) * t.body_leading
        self.draw_panel(ctl, t.content_left, y, t.content_width, box_h, t.card_radius, p.accent_light)
        self.draw_paragraph(ctl, t.content_left + pad, y + pad, validity, t.content_width - 2 * pad)
        y = ctl.move_to(y + box_h + t.section_gap)

        # Acceptance
        y = self.draw_section_header(ctl, "ACEITE DA PROPOSTA", y)
        y = self.draw_paragraph(
            ctl, t.content_left, y,
            "Declaro estar de acordo com as condições técnicas e comerciais descritas nesta proposta.",
            t.content_width,
        )
        self._signature_blocks(ctl, y + 50, record)
        ctl.move_to(y + 50 + 40)

        ctl.finish_page()

    def _signature_blocks(self, ctl: PaginationController, y: float, record: ProposalRecord) -> None:
        """Two signature lines side by side: client and company."""
        t = self.theme
        p = self.palette
        width, xs = self._equal_columns(2, 40)
        signatories = (
            (record.client_name, "Contratante"),
            (self.variant.company_name, "Contratada"),
        )
        for x, (name, role) in zip(xs, signatories):
            ctl.add(Line(x1=x, y1=y, x2=x + width, y2=y, color=p.text, width=0.75))
            self.draw_text(ctl, x, y + 14, name, t.font_bold, t.label_size, p.text, width=width, align="center")
            self.draw_text(ctl, x, y + 26, role, t.font_regular, t.small_size, p.muted, width=width, align="center")

    # =========================================================================
    # Footer (phase 2)
    # =========================================================================

    def footer_commands(self, page_number: int, total_pages: int) -> list[DrawCommand]:
        """Footer band for one page; only called once every page exists."""
        t = self.theme
        p = self.palette
        v = self.variant
        top = t.footer_top
        indicator_width = 60

        line1 = fit_text(f"{v.company_name} | {v.company_address}", t.font_bold, t.small_size,
                         t.content_width - indicator_width)
        line2 = fit_text(f"{v.company_phone} | {v.company_email}", t.font_regular, t.small_size,
                         t.content_width - indicator_width)

        return [
            Panel(x=0, y=top, width=t.page_width, height=t.footer_height, fill=p.surface),
            Line(x1=0, y1=top, x2=t.page_width, y2=top, color=p.accent, width=2),
            Text(x=t.content_left, y=top + 20, text=line1, font=t.font_bold, size=t.small_size,
                 color=p.primary, width=t.content_width - indicator_width),
            Text(x=t.content_left, y=top + 32, text=line2, font=t.font_regular, size=t.small_size,
                 color=p.muted, width=t.content_width - indicator_width),
            Text(x=t.content_right - indicator_width, y=top + 27, text=f"{page_number} / {total_pages}",
                 font=t.font_bold, size=t.label_size, color=p.primary, align="right", width=indicator_width),
        ]


def render_document(
    record: ProposalRecord,
    theme: Optional[LayoutTheme] = None,
    variant: Optional[ProposalVariant] = None,
) -> Document:
    """Render a proposal with the given (or default) theme and variant."""
    return ProposalLayout(theme=theme, variant=variant).render_document(record)
