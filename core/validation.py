"""
Proposal Validation - Form Input Rules

Turns a raw form payload into a ProposalRecord. Every problem is collected
and reported together; no partial record is ever created.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Final, Optional

from core.models import (
    DEFAULT_VALIDITY_DAYS,
    DEFAULT_WARRANTY_INVERTER,
    DEFAULT_WARRANTY_MODULE_EQUIPMENT,
    DEFAULT_WARRANTY_MODULE_PERFORMANCE,
    DEFAULT_WARRANTY_SERVICES,
    ProposalRecord,
)


# =============================================================================
# Constants
# =============================================================================

REQUIRED_TEXT_FIELDS: Final[tuple[str, ...]] = (
    "client_name",
    "module_model",
    "inverter_model",
)

REQUIRED_POSITIVE_FLOATS: Final[tuple[str, ...]] = (
    "power_kwp",
    "monthly_generation_kwh",
    "total_price",
)

REQUIRED_POSITIVE_INTS: Final[tuple[str, ...]] = (
    "module_quantity",
    "inverter_quantity",
)

# "11.537" and "1.234.567": pt-BR thousands grouping without decimals
THOUSANDS_GROUPED: Final[re.Pattern] = re.compile(r"[-+]?\d{1,3}(?:\.\d{3})+")

WARRANTY_DEFAULTS: Final[dict[str, str]] = {
    "warranty_services": DEFAULT_WARRANTY_SERVICES,
    "warranty_module_equipment": DEFAULT_WARRANTY_MODULE_EQUIPMENT,
    "warranty_module_performance": DEFAULT_WARRANTY_MODULE_PERFORMANCE,
    "warranty_inverter": DEFAULT_WARRANTY_INVERTER,
}


# =============================================================================
# Errors
# =============================================================================


class InputValidationError(Exception):
    """Raised when a proposal payload fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Proposal validation failed: {'; '.join(errors)}")


class NonFiniteNumberError(ValueError):
    """Raised for NaN and infinite values, including overflowing literals."""


# =============================================================================
# Parsing Helpers
# =============================================================================


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_float(value: Any) -> float:
    """
    Accept numbers, "4.27", "4,27" and "11.537,92".

    Without a comma, dots that split the digits into groups of exactly three
    ("11.537", "1.234.567") are thousands separators, as written in pt-BR.
    Any other single dot is a decimal point.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, (int, float)):
        s = value
    else:
        s = str(value).strip().replace("R$", "").strip()
        if "," in s:
            s = s.replace(".", "").replace(",", ".")
        elif THOUSANDS_GROUPED.fullmatch(s):
            s = s.replace(".", "")
    try:
        number = float(s)
    except OverflowError:
        raise NonFiniteNumberError(f"not a finite number: {value}") from None
    if not math.isfinite(number):
        raise NonFiniteNumberError(f"not a finite number: {value}")
    return number


def _parse_int(value: Any) -> int:
    number = _parse_float(value)
    if not number.is_integer():
        raise ValueError("not a whole number")
    return int(number)


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if "/" in s:
        return datetime.strptime(s, "%d/%m/%Y").date()
    # ISO date, optionally with a time component from a JS Date
    return date.fromisoformat(s[:10])


def _optional_text(value: Any) -> Optional[str]:
    if _blank(value):
        return None
    return str(value).strip()


# =============================================================================
# Validation Functions
# =============================================================================


def validate_proposal_input(data: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """
    Validate and normalise a raw proposal payload.

    Args:
        data: Raw form data dictionary

    Returns:
        Tuple of (normalised values, errors). Values are only meaningful
        when the error list is empty.
    """
    errors: list[str] = []
    values: dict[str, Any] = {}

    for name in REQUIRED_TEXT_FIELDS:
        raw = data.get(name)
        if _blank(raw):
            errors.append(f"{name} is required and cannot be empty")
        else:
            values[name] = str(raw).strip()

    for name in REQUIRED_POSITIVE_FLOATS:
        raw = data.get(name)
        if _blank(raw):
            errors.append(f"{name} is required")
            continue
        try:
            number = _parse_float(raw)
        except NonFiniteNumberError:
            errors.append(f"{name} must be a finite number")
            continue
        except (ValueError, TypeError):
            errors.append(f"{name} must be a number: {raw}")
            continue
        if number <= 0:
            errors.append(f"{name} must be positive")
        else:
            values[name] = number

    for name in REQUIRED_POSITIVE_INTS:
        raw = data.get(name)
        if _blank(raw):
            errors.append(f"{name} is required")
            continue
        try:
            number = _parse_int(raw)
        except NonFiniteNumberError:
            errors.append(f"{name} must be a finite number")
            continue
        except (ValueError, TypeError):
            errors.append(f"{name} must be a whole number: {raw}")
            continue
        if number <= 0:
            errors.append(f"{name} must be positive")
        else:
            values[name] = number

    # proposal_date
    raw_date = data.get("proposal_date")
    if _blank(raw_date):
        errors.append("proposal_date is required")
    else:
        try:
            values["proposal_date"] = _parse_date(raw_date)
        except (ValueError, TypeError):
            errors.append(f"Invalid proposal_date: {raw_date}")

    # validity_days (defaults when unset)
    raw_validity = data.get("validity_days")
    if _blank(raw_validity):
        values["validity_days"] = DEFAULT_VALIDITY_DAYS
    else:
        try:
            validity = _parse_int(raw_validity)
            if validity <= 0:
                errors.append("validity_days must be positive")
            else:
                values["validity_days"] = validity
        except NonFiniteNumberError:
            errors.append("validity_days must be a finite number")
        except (ValueError, TypeError):
            errors.append(f"validity_days must be a whole number: {raw_validity}")

    # usable_area_m2 (optional)
    raw_area = data.get("usable_area_m2")
    if _blank(raw_area):
        values["usable_area_m2"] = None
    else:
        try:
            area = _parse_float(raw_area)
            if area <= 0:
                errors.append("usable_area_m2 must be positive when provided")
            else:
                values["usable_area_m2"] = area
        except NonFiniteNumberError:
            errors.append("usable_area_m2 must be a finite number")
        except (ValueError, TypeError):
            errors.append(f"usable_area_m2 must be a number: {raw_area}")

    values["city_state"] = _optional_text(data.get("city_state"))
    values["other_items"] = _optional_text(data.get("other_items"))

    for name, default in WARRANTY_DEFAULTS.items():
        values[name] = _optional_text(data.get(name)) or default

    return values, errors


def build_proposal(data: dict[str, Any]) -> ProposalRecord:
    """
    Create a ProposalRecord from raw form data.

    Raises:
        InputValidationError: If any field is missing or invalid
    """
    values, errors = validate_proposal_input(data)
    if errors:
        raise InputValidationError(errors)
    return ProposalRecord(**values)
