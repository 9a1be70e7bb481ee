"""
Utility modules for the proposal engine.
"""

from .formatting import (
    PLACEHOLDER,
    attachment_filename,
    format_brl,
    format_long_date,
    format_number,
    format_optional,
    pluralize,
)
from .config import Config

__all__ = [
    "PLACEHOLDER",
    "attachment_filename",
    "format_brl",
    "format_long_date",
    "format_number",
    "format_optional",
    "pluralize",
    "Config",
]
