"""
Data models for the proposal engine.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any, Final, Optional


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_VALIDITY_DAYS: Final[int] = 4

DEFAULT_WARRANTY_SERVICES: Final[str] = "Instalação – 1 ano"
DEFAULT_WARRANTY_MODULE_EQUIPMENT: Final[str] = "Equipamento – 15 anos"
DEFAULT_WARRANTY_MODULE_PERFORMANCE: Final[str] = "Performance – 25 anos"
DEFAULT_WARRANTY_INVERTER: Final[str] = "Inversor – 10 anos"


def new_proposal_id() -> str:
    """Generate an opaque proposal identifier."""
    return uuid.uuid4().hex


# =============================================================================
# Proposal Record
# =============================================================================


@dataclass(frozen=True)
class ProposalRecord:
    """
    A commercial proposal for a photovoltaic installation.

    Immutable once created. Numeric fields are validated upstream
    (see core.validation); the record itself performs no checks.
    """

    client_name: str
    proposal_date: date
    power_kwp: float
    monthly_generation_kwh: float
    module_model: str
    module_quantity: int
    inverter_model: str
    inverter_quantity: int
    total_price: float

    city_state: Optional[str] = None
    validity_days: int = DEFAULT_VALIDITY_DAYS
    usable_area_m2: Optional[float] = None
    other_items: Optional[str] = None

    warranty_services: str = DEFAULT_WARRANTY_SERVICES
    warranty_module_equipment: str = DEFAULT_WARRANTY_MODULE_EQUIPMENT
    warranty_module_performance: str = DEFAULT_WARRANTY_MODULE_PERFORMANCE
    warranty_inverter: str = DEFAULT_WARRANTY_INVERTER

    id: str = field(default_factory=new_proposal_id)

    @property
    def expires_on(self) -> date:
        """Last calendar day covered by the validity window."""
        return self.proposal_date + timedelta(days=self.validity_days)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        data = asdict(self)
        data["proposal_date"] = self.proposal_date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProposalRecord":
        """Deserialize from the output of to_dict()."""
        values = dict(data)
        proposal_date = values.get("proposal_date")
        if isinstance(proposal_date, str):
            values["proposal_date"] = date.fromisoformat(proposal_date)
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in values.items() if k in known})


# =============================================================================
# Sample Data
# =============================================================================


def create_sample_proposal() -> ProposalRecord:
    """
    Create a sample proposal for testing and the CLI.

    Returns:
        ProposalRecord for a small residential system
    """
    return ProposalRecord(
        client_name="João Silva Santos",
        city_state="Recife, PE",
        proposal_date=date(2026, 10, 19),
        validity_days=DEFAULT_VALIDITY_DAYS,
        power_kwp=4.27,
        monthly_generation_kwh=532,
        usable_area_m2=22,
        module_model="Canadian Solar 550W",
        module_quantity=8,
        inverter_model="Growatt MIN 5000TL-X",
        inverter_quantity=1,
        total_price=11537.92,
    )
