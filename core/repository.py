"""
Proposal Repository - In-Memory Storage for Proposals

Provides storage and retrieval for proposal records.
In-memory implementation with optional JSON file persistence.
Records are immutable: there is no update operation.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from core.models import ProposalRecord


logger = logging.getLogger(__name__)


class ProposalNotFoundError(LookupError):
    """Raised when a proposal id is not in the repository."""

    def __init__(self, proposal_id: str):
        self.proposal_id = proposal_id
        super().__init__(f"Proposal {proposal_id} not found")


# =============================================================================
# Repository
# =============================================================================


class ProposalRepository:
    """
    Repository for storing and retrieving proposal records.

    Uses in-memory storage with optional file persistence.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
        """
        self._proposals: dict[str, ProposalRecord] = {}
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "proposals": {
                pid: record.to_dict()
                for pid, record in self._proposals.items()
            },
            "saved_at": datetime.utcnow().isoformat(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def _load_from_file(self) -> None:
        """Load data from file."""
        if not self._persist_path or not self._persist_path.exists():
            return

        try:
            data = json.loads(self._persist_path.read_text(encoding="utf-8"))
            for pid, record_data in data.get("proposals", {}).items():
                self._proposals[pid] = ProposalRecord.from_dict(record_data)
        except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
            # Start fresh rather than refuse to boot
            logger.warning("Could not load proposal data from %s: %s", self._persist_path, e)

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    def create(self, record: ProposalRecord) -> ProposalRecord:
        """
        Store a new proposal.

        Raises:
            ValueError: If the id already exists
        """
        if record.id in self._proposals:
            raise ValueError(f"Proposal {record.id} already exists")

        self._proposals[record.id] = record
        self._save_to_file()
        logger.info("Stored proposal %s for %s", record.id, record.client_name)
        return record

    def get(self, proposal_id: str) -> Optional[ProposalRecord]:
        """Get a proposal by id, or None."""
        return self._proposals.get(proposal_id)

    def get_or_raise(self, proposal_id: str) -> ProposalRecord:
        """
        Get a proposal by id.

        Raises:
            ProposalNotFoundError: If the id is unknown
        """
        record = self._proposals.get(proposal_id)
        if record is None:
            raise ProposalNotFoundError(proposal_id)
        return record

    def list_all(self) -> list[ProposalRecord]:
        """All proposals, most recent proposal date first."""
        return sorted(
            self._proposals.values(),
            key=lambda r: r.proposal_date,
            reverse=True,
        )

    def delete(self, proposal_id: str) -> None:
        """
        Delete a proposal.

        Raises:
            ProposalNotFoundError: If the id is unknown
        """
        if proposal_id not in self._proposals:
            raise ProposalNotFoundError(proposal_id)
        del self._proposals[proposal_id]
        self._save_to_file()
        logger.info("Deleted proposal %s", proposal_id)

    def count(self) -> int:
        return len(self._proposals)

    def clear(self) -> None:
        """Remove every proposal (testing only)."""
        self._proposals.clear()
        self._save_to_file()


# =============================================================================
# Singleton Access
# =============================================================================

_repository_instance: Optional[ProposalRepository] = None


def get_proposal_repository(persist_path: Optional[str] = None) -> ProposalRepository:
    """
    Get the proposal repository singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)

    Returns:
        ProposalRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = ProposalRepository(persist_path)
    return _repository_instance


def reset_proposal_repository() -> None:
    """Drop the singleton (testing only)."""
    global _repository_instance
    _repository_instance = None
