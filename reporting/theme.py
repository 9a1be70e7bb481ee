"""
Proposal theme: page geometry, typography and variant copy/palette.

Everything here is immutable and injected into the layout engine at
construction. Colours are plain hex strings so the draw commands stay
independent of the rendering backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Final, Optional

from reportlab.lib.pagesizes import A4


# =============================================================================
# Geometry & Typography
# =============================================================================


@dataclass(frozen=True)
class LayoutTheme:
    """Fixed page geometry and font choices for the proposal template."""

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 50.0

    # Vertical rhythm
    row_height: float = 28.0
    section_header_advance: float = 34.0
    section_gap: float = 18.0
    card_gap: float = 14.0
    card_radius: float = 10.0
    card_padding: float = 12.0
    info_card_height: float = 74.0

    # Footer band
    footer_height: float = 48.0

    # Fonts
    font_regular: str = "Helvetica"
    font_bold: str = "Helvetica-Bold"
    font_oblique: str = "Helvetica-Oblique"
    body_size: float = 10.0
    body_leading: float = 14.0
    small_size: float = 8.0
    label_size: float = 9.0
    header_size: float = 13.0
    title_size: float = 28.0

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.page_width - self.margin

    @property
    def footer_top(self) -> float:
        """Top edge of the footer band (top-left origin)."""
        return self.page_height - self.footer_height


# =============================================================================
# Palette
# =============================================================================


@dataclass(frozen=True)
class Palette:
    """Print-friendly colour palette, hex strings."""

    primary: str = "#0F3D3E"
    primary_light: str = "#E6F0EF"
    accent: str = "#F2A007"
    accent_light: str = "#FFF4DC"
    text: str = "#1F2328"
    muted: str = "#5F6B73"
    border: str = "#D5DADD"
    surface: str = "#F5F7F8"
    white: str = "#FFFFFF"


# =============================================================================
# Variant Copy
# =============================================================================

DEFAULT_ABOUT_TEXT: Final[tuple[str, ...]] = (
    "Somos uma empresa especializada no desenvolvimento de soluções de energia "
    "fotovoltaica. Nosso compromisso é oferecer sistemas de alta qualidade, com "
    "equipamentos de primeira linha e instalação profissional, garantindo economia "
    "e sustentabilidade para nossos clientes.",
    "Contamos com parcerias com os principais bancos para análise de financiamento, "
    "facilitando o acesso à energia solar para residências e empresas.",
)

DEFAULT_TIMELINE: Final[tuple[tuple[str, str, str], ...]] = (
    ("A", "Aprovação", "Aprovação da proposta pelo cliente"),
    ("D", "Contrato", "Validação do projeto pelo setor técnico e assinatura de contrato"),
    ("D+30", "Encomenda", "Encomenda dos equipamentos e preparação da infraestrutura"),
    ("D+60", "Montagem", "Montagem do sistema"),
    ("D+90", "Homologação", "Testes e homologação na distribuidora"),
)

DEFAULT_INCLUSIONS: Final[tuple[str, ...]] = (
    "Projeto elétrico e homologação junto à distribuidora",
    "Módulos fotovoltaicos, inversor(es) e estrutura de fixação",
    "Cabos, conectores e proteções elétricas",
    "Mão de obra de instalação e comissionamento",
    "Monitoramento remoto da geração",
)

DEFAULT_FINANCING_TEXT: Final[str] = (
    "Trabalhamos com as principais instituições financeiras do mercado para "
    "análise de crédito. As condições de financiamento (entrada, número de "
    "parcelas e taxas) são definidas pela instituição escolhida após a análise "
    "do cadastro do cliente."
)


@dataclass(frozen=True)
class ProposalVariant:
    """
    Palette and copy strings for one flavour of the proposal template.

    The layout code is shared; only what is listed here differs.
    """

    key: str
    palette: Palette = field(default_factory=Palette)

    company_name: str = "SolarPro Energia"
    company_address: str = "Jaboatão dos Guararapes, PE"
    company_phone: str = "(81) 99999-9999"
    company_email: str = "contato@solarpro.com.br"

    document_title: str = "PROPOSTA COMERCIAL"
    document_subtitle: str = "Sistema de Energia Solar Fotovoltaica"
    about_title: str = "SOBRE NÓS"
    about_text: tuple[str, ...] = DEFAULT_ABOUT_TEXT
    timeline: tuple[tuple[str, str, str], ...] = DEFAULT_TIMELINE
    inclusions: tuple[str, ...] = DEFAULT_INCLUSIONS
    financing_text: str = DEFAULT_FINANCING_TEXT
    warranty_note: str = "A garantia dos equipamentos é de responsabilidade dos fabricantes."

    logo_path: Optional[str] = None


VARIANTS: Final[dict[str, ProposalVariant]] = {
    "solar": ProposalVariant(key="solar"),
    "corporate": ProposalVariant(
        key="corporate",
        palette=Palette(
            primary="#1B2A4A",
            primary_light="#E8ECF4",
            accent="#2F80ED",
            accent_light="#E6F0FD",
        ),
        document_subtitle="Geração Distribuída - Energia Solar",
    ),
}

DEFAULT_VARIANT: Final[str] = "solar"


def get_variant(key: Optional[str] = None, **overrides) -> ProposalVariant:
    """
    Look up a variant by key and apply field overrides.

    Raises:
        ValueError: If the key is unknown
    """
    key = key or DEFAULT_VARIANT
    if key not in VARIANTS:
        raise ValueError(f"Unknown proposal variant: {key}. Available: {sorted(VARIANTS)}")
    variant = VARIANTS[key]
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return replace(variant, **overrides) if overrides else variant
