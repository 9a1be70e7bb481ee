"""
Tests for proposal input validation.

Tests covering:
1. A complete payload builds a record with defaults applied
2. pt-BR number and date formats are accepted
3. Missing or invalid fields are all reported together
"""

from datetime import date

import pytest

from core.models import (
    DEFAULT_VALIDITY_DAYS,
    DEFAULT_WARRANTY_INVERTER,
    DEFAULT_WARRANTY_SERVICES,
    ProposalRecord,
)
from core.validation import InputValidationError, build_proposal, validate_proposal_input


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def valid_payload():
    """A complete form payload as the UI sends it."""
    return {
        "client_name": "João Silva Santos",
        "city_state": "Recife, PE",
        "proposal_date": "2026-10-19",
        "power_kwp": 4.27,
        "monthly_generation_kwh": 532,
        "usable_area_m2": 22,
        "module_model": "Canadian Solar 550W",
        "module_quantity": 8,
        "inverter_model": "Growatt MIN 5000TL-X",
        "inverter_quantity": 1,
        "total_price": 11537.92,
    }


# =============================================================================
# Valid Input
# =============================================================================


class TestValidInput:
    def test_builds_record(self, valid_payload):
        record = build_proposal(valid_payload)

        assert isinstance(record, ProposalRecord)
        assert record.client_name == "João Silva Santos"
        assert record.proposal_date == date(2026, 10, 19)
        assert record.module_quantity == 8
        assert record.total_price == 11537.92

    def test_defaults_applied(self, valid_payload):
        record = build_proposal(valid_payload)

        assert record.validity_days == DEFAULT_VALIDITY_DAYS
        assert record.warranty_services == DEFAULT_WARRANTY_SERVICES
        assert record.warranty_inverter == DEFAULT_WARRANTY_INVERTER
        assert record.other_items is None

    def test_each_record_gets_an_id(self, valid_payload):
        assert build_proposal(valid_payload).id != build_proposal(valid_payload).id

    def test_brazilian_number_strings(self, valid_payload):
        valid_payload["power_kwp"] = "4,27"
        valid_payload["total_price"] = "R$ 11.537,92"

        record = build_proposal(valid_payload)

        assert record.power_kwp == pytest.approx(4.27)
        assert record.total_price == pytest.approx(11537.92)

    @pytest.mark.parametrize("raw,expected", [
        ("11.537", 11537.0),
        ("1.234.567", 1234567.0),
        ("R$ 25.000", 25000.0),
        ("4.27", 4.27),
    ])
    def test_dot_grouping_without_decimals(self, valid_payload, raw, expected):
        valid_payload["total_price"] = raw
        assert build_proposal(valid_payload).total_price == pytest.approx(expected)

    def test_brazilian_date(self, valid_payload):
        valid_payload["proposal_date"] = "19/10/2026"
        assert build_proposal(valid_payload).proposal_date == date(2026, 10, 19)

    def test_iso_datetime_string(self, valid_payload):
        valid_payload["proposal_date"] = "2026-10-19T13:45:00.000Z"
        assert build_proposal(valid_payload).proposal_date == date(2026, 10, 19)

    def test_blank_optional_fields_become_none(self, valid_payload):
        valid_payload["city_state"] = "   "
        valid_payload["usable_area_m2"] = ""

        record = build_proposal(valid_payload)

        assert record.city_state is None
        assert record.usable_area_m2 is None

    def test_custom_warranty_kept(self, valid_payload):
        valid_payload["warranty_services"] = "Instalação – 2 anos"
        assert build_proposal(valid_payload).warranty_services == "Instalação – 2 anos"


# =============================================================================
# Invalid Input
# =============================================================================


class TestInvalidInput:
    def test_empty_payload_reports_every_required_field(self):
        _, errors = validate_proposal_input({})

        for name in (
            "client_name",
            "module_model",
            "inverter_model",
            "power_kwp",
            "monthly_generation_kwh",
            "total_price",
            "module_quantity",
            "inverter_quantity",
            "proposal_date",
        ):
            assert any(name in e for e in errors), name

    def test_blank_client_name(self, valid_payload):
        valid_payload["client_name"] = "  "
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["client_name is required and cannot be empty"]

    def test_non_positive_power(self, valid_payload):
        valid_payload["power_kwp"] = 0
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["power_kwp must be positive"]

    def test_fractional_quantity(self, valid_payload):
        valid_payload["module_quantity"] = "2.5"
        _, errors = validate_proposal_input(valid_payload)
        assert any("module_quantity must be a whole number" in e for e in errors)

    def test_non_numeric_price(self, valid_payload):
        valid_payload["total_price"] = "abc"
        _, errors = validate_proposal_input(valid_payload)
        assert any("total_price must be a number" in e for e in errors)

    @pytest.mark.parametrize("raw", ["nan", "NaN", "inf", "-Infinity", "1e400", float("nan"), float("inf")])
    def test_non_finite_power(self, valid_payload, raw):
        valid_payload["power_kwp"] = raw
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["power_kwp must be a finite number"]

    def test_non_finite_quantity(self, valid_payload):
        valid_payload["module_quantity"] = "inf"
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["module_quantity must be a finite number"]

    def test_non_finite_optional_fields(self, valid_payload):
        valid_payload["usable_area_m2"] = "nan"
        valid_payload["validity_days"] = "1e400"

        _, errors = validate_proposal_input(valid_payload)

        assert errors == [
            "validity_days must be a finite number",
            "usable_area_m2 must be a finite number",
        ]

    def test_huge_integer_price(self, valid_payload):
        valid_payload["total_price"] = 10 ** 400
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["total_price must be a finite number"]

    def test_bad_date(self, valid_payload):
        valid_payload["proposal_date"] = "31/02/2026"
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["Invalid proposal_date: 31/02/2026"]

    def test_negative_area(self, valid_payload):
        valid_payload["usable_area_m2"] = -5
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["usable_area_m2 must be positive when provided"]

    def test_zero_validity(self, valid_payload):
        valid_payload["validity_days"] = 0
        _, errors = validate_proposal_input(valid_payload)
        assert errors == ["validity_days must be positive"]

    def test_build_raises_with_all_errors(self, valid_payload):
        valid_payload["client_name"] = ""
        valid_payload["inverter_quantity"] = -1

        with pytest.raises(InputValidationError) as exc_info:
            build_proposal(valid_payload)

        assert len(exc_info.value.errors) == 2
