"""
Formatting utilities.

Brazilian Portuguese conventions: dot thousands separator, comma decimal
separator, long dates with lowercase month names.
"""

import re
from datetime import date
from typing import Optional


MONTHS_PT_BR = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

PLACEHOLDER = "—"


def format_number(value: float, decimals: int = 2) -> str:
    """
    Format a number with pt-BR grouping.

    Args:
        value: The number to format.
        decimals: Number of decimal places.

    Returns:
        Formatted string, e.g. 11537.92 -> "11.537,92".
    """
    s = f"{value:,.{decimals}f}"
    return s.replace(",", "X").replace(".", ",").replace("X", ".")


def format_brl(amount: float) -> str:
    """
    Format an amount as Brazilian Real.

    Args:
        amount: The amount in reais.

    Returns:
        Formatted currency string, e.g. "R$ 11.537,92".
    """
    if amount < 0:
        return f"-R$ {format_number(-amount)}"
    return f"R$ {format_number(amount)}"


def format_long_date(value: date) -> str:
    """Long pt-BR date: 19 de outubro de 2026."""
    return f"{value.day} de {MONTHS_PT_BR[value.month - 1]} de {value.year}"


def format_optional(value: Optional[float], decimals: int, unit: str) -> str:
    """Format a measurement, or the placeholder dash when absent."""
    if value is None:
        return PLACEHOLDER
    return f"{format_number(value, decimals)} {unit}"


def pluralize(count: int, singular: str, plural: str) -> str:
    """Return "<count> <noun>" with the right grammatical number."""
    return f"{count} {singular if count == 1 else plural}"


def attachment_filename(client_name: str) -> str:
    """
    Suggested download name for a proposal PDF.

    Whitespace runs become underscores; quotes and path separators are dropped
    so the value is safe inside a Content-Disposition header.
    """
    name = re.sub(r"\s+", "_", client_name.strip())
    name = re.sub(r"[\"\\/]", "", name)
    return f"proposta_{name or 'cliente'}.pdf"
