"""
Solar Proposal Engine - Core Domain

This module provides the proposal record and its lifecycle:
1. Validation (raw form payload -> ProposalRecord)
2. Storage (in-memory repository with optional JSON persistence)
"""

from .models import (
    DEFAULT_VALIDITY_DAYS,
    ProposalRecord,
    create_sample_proposal,
    new_proposal_id,
)
from .repository import (
    ProposalNotFoundError,
    ProposalRepository,
    get_proposal_repository,
    reset_proposal_repository,
)
from .validation import (
    InputValidationError,
    build_proposal,
    validate_proposal_input,
)

__all__ = [
    # Models
    "DEFAULT_VALIDITY_DAYS",
    "ProposalRecord",
    "create_sample_proposal",
    "new_proposal_id",
    # Repository
    "ProposalNotFoundError",
    "ProposalRepository",
    "get_proposal_repository",
    "reset_proposal_repository",
    # Validation
    "InputValidationError",
    "build_proposal",
    "validate_proposal_input",
]
