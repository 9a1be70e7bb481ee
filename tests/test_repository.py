"""
Tests for the proposal model and repository.
"""

import json
import logging
from dataclasses import FrozenInstanceError, replace
from datetime import date

import pytest

from core.models import ProposalRecord, create_sample_proposal
from core.repository import (
    ProposalNotFoundError,
    ProposalRepository,
    get_proposal_repository,
    reset_proposal_repository,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_persist_path(tmp_path):
    return str(tmp_path / "proposals.json")


@pytest.fixture
def repository():
    return ProposalRepository()


@pytest.fixture
def sample_record():
    return create_sample_proposal()


# =============================================================================
# Model
# =============================================================================


class TestProposalRecord:
    def test_expires_on(self, sample_record):
        assert sample_record.expires_on == date(2026, 10, 23)

    def test_dict_round_trip(self, sample_record):
        data = sample_record.to_dict()

        assert data["proposal_date"] == "2026-10-19"
        assert ProposalRecord.from_dict(data) == sample_record

    def test_from_dict_ignores_unknown_keys(self, sample_record):
        data = sample_record.to_dict()
        data["legacy_field"] = "x"
        assert ProposalRecord.from_dict(data) == sample_record

    def test_record_is_immutable(self, sample_record):
        with pytest.raises(FrozenInstanceError):
            sample_record.client_name = "Outro"


# =============================================================================
# CRUD
# =============================================================================


class TestRepositoryCrud:
    def test_create_and_get(self, repository, sample_record):
        repository.create(sample_record)
        assert repository.get(sample_record.id) == sample_record

    def test_get_unknown_returns_none(self, repository):
        assert repository.get("missing") is None

    def test_get_or_raise_unknown(self, repository):
        with pytest.raises(ProposalNotFoundError) as exc_info:
            repository.get_or_raise("missing")
        assert exc_info.value.proposal_id == "missing"

    def test_duplicate_id_rejected(self, repository, sample_record):
        repository.create(sample_record)
        with pytest.raises(ValueError):
            repository.create(sample_record)

    def test_list_newest_first(self, repository, sample_record):
        older = replace(sample_record, id="older", proposal_date=date(2026, 1, 10))
        newer = replace(sample_record, id="newer", proposal_date=date(2026, 11, 2))
        repository.create(older)
        repository.create(newer)
        repository.create(sample_record)

        ids = [r.id for r in repository.list_all()]

        assert ids == ["newer", sample_record.id, "older"]

    def test_delete(self, repository, sample_record):
        repository.create(sample_record)
        repository.delete(sample_record.id)

        assert repository.get(sample_record.id) is None
        assert repository.count() == 0

    def test_delete_unknown(self, repository):
        with pytest.raises(ProposalNotFoundError):
            repository.delete("missing")


# =============================================================================
# Persistence
# =============================================================================


class TestRepositoryPersistence:
    def test_reload_from_file(self, temp_persist_path, sample_record):
        ProposalRepository(temp_persist_path).create(sample_record)

        reloaded = ProposalRepository(temp_persist_path)

        assert reloaded.get(sample_record.id) == sample_record

    def test_delete_persists(self, temp_persist_path, sample_record):
        repo = ProposalRepository(temp_persist_path)
        repo.create(sample_record)
        repo.delete(sample_record.id)

        assert ProposalRepository(temp_persist_path).count() == 0

    def test_file_is_readable_json(self, temp_persist_path, sample_record):
        ProposalRepository(temp_persist_path).create(sample_record)

        with open(temp_persist_path, encoding="utf-8") as f:
            data = json.load(f)

        assert data["proposals"][sample_record.id]["client_name"] == "João Silva Santos"

    def test_corrupt_file_starts_empty(self, temp_persist_path, caplog):
        with open(temp_persist_path, "w", encoding="utf-8") as f:
            f.write("{not json")

        with caplog.at_level(logging.WARNING, logger="core.repository"):
            repo = ProposalRepository(temp_persist_path)

        assert repo.count() == 0
        assert "Could not load proposal data" in caplog.text


class TestSingleton:
    def test_same_instance_until_reset(self):
        reset_proposal_repository()
        first = get_proposal_repository()

        assert get_proposal_repository() is first

        reset_proposal_repository()
        assert get_proposal_repository() is not first
        reset_proposal_repository()
