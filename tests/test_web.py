"""
Tests for the proposal HTTP API.

Tests covering:
1. Session login is required for every proposal route
2. Create / list / detail / delete lifecycle
3. PDF download headers and body
4. Error mapping (400 / 404 / 500)
"""

import pytest
from fastapi.testclient import TestClient

from core.repository import ProposalRepository
from reporting.layout import ProposalLayout
from reporting.pdf_generator import ProposalPDFGenerator
from reporting.theme import get_variant
from utils.config import Config
from web.app import create_app
from web.auth import SESSION_COOKIE_NAME, hash_password


PASSWORD = "sol-nascente-2026"


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def config():
    return Config(
        debug=True,
        admin_user="admin",
        admin_password_hash=hash_password(PASSWORD),
        session_secret="test-session-secret",
        persist_path=None,
        logo_path=None,
    )


@pytest.fixture
def repository():
    return ProposalRepository()


@pytest.fixture
def client(config, repository):
    return TestClient(create_app(config, repository=repository))


@pytest.fixture
def auth_client(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def payload():
    return {
        "client_name": "João Silva Santos",
        "city_state": "Recife, PE",
        "proposal_date": "2026-10-19",
        "power_kwp": "4,27",
        "monthly_generation_kwh": 532,
        "usable_area_m2": 22,
        "module_model": "Canadian Solar 550W",
        "module_quantity": 8,
        "inverter_model": "Growatt MIN 5000TL-X",
        "inverter_quantity": 1,
        "total_price": 11537.92,
    }


@pytest.fixture
def created(auth_client, payload):
    response = auth_client.post("/api/proposals", json=payload)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# Test: Session
# =============================================================================


class TestSession:
    def test_health_is_public(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_login_sets_cookie(self, client):
        response = client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})

        assert response.status_code == 200
        assert response.json()["authenticated"] is True
        assert SESSION_COOKIE_NAME in response.cookies

    def test_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"username": "admin", "password": "errada"})
        assert response.status_code == 401

    def test_wrong_user(self, client):
        response = client.post("/api/auth/login", json={"username": "root", "password": PASSWORD})
        assert response.status_code == 401

    def test_session_status(self, client):
        assert client.get("/api/auth/status").json() == {"authenticated": False}

        client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})

        assert client.get("/api/auth/status").json() == {"authenticated": True, "user": "admin"}

    def test_logout(self, auth_client):
        auth_client.post("/api/auth/logout")
        assert auth_client.get("/api/proposals").status_code == 401

    @pytest.mark.parametrize("method,path", [
        ("post", "/api/login"),
        ("post", "/api/logout"),
        ("get", "/api/session"),
    ])
    def test_auth_lives_under_auth_prefix(self, client, method, path):
        assert getattr(client, method)(path).status_code == 404

    def test_tampered_cookie_rejected(self, client):
        client.cookies.set(SESSION_COOKIE_NAME, "e30.deadbeef")
        assert client.get("/api/proposals").status_code == 401

    def test_unconfigured_password_rejects_login(self, repository):
        config = Config(debug=True, admin_password_hash=None, session_secret="s")
        client = TestClient(create_app(config, repository=repository))

        response = client.post("/api/auth/login", json={"username": "admin", "password": ""})

        assert response.status_code == 401

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/proposals"),
        ("post", "/api/proposals"),
        ("get", "/api/proposals/abc"),
        ("delete", "/api/proposals/abc"),
        ("get", "/api/proposals/abc/pdf"),
    ])
    def test_routes_require_session(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401


# =============================================================================
# Test: Proposal Lifecycle
# =============================================================================


class TestProposals:
    def test_create_returns_record(self, created):
        assert created["client_name"] == "João Silva Santos"
        assert created["power_kwp"] == pytest.approx(4.27)
        assert created["validity_days"] == 4
        assert created["proposal_date"] == "2026-10-19"
        assert created["id"]

    def test_create_stores_record(self, auth_client, created, repository):
        assert repository.get(created["id"]) is not None

    def test_invalid_payload_returns_errors(self, auth_client, payload):
        payload["client_name"] = ""
        payload["total_price"] = -1

        response = auth_client.post("/api/proposals", json=payload)

        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert "client_name is required and cannot be empty" in errors
        assert "total_price must be positive" in errors

    @pytest.mark.parametrize("raw", ["inf", "nan", "1e400"])
    def test_non_finite_number_is_rejected(self, auth_client, repository, payload, raw):
        payload["total_price"] = raw

        response = auth_client.post("/api/proposals", json=payload)

        assert response.status_code == 400
        assert response.json()["detail"]["errors"] == ["total_price must be a finite number"]
        assert repository.count() == 0

        listing = auth_client.get("/api/proposals")
        assert listing.status_code == 200
        assert listing.json() == []

    def test_wrong_json_type_is_400(self, auth_client, payload):
        payload["module_quantity"] = [8]

        response = auth_client.post("/api/proposals", json=payload)

        assert response.status_code == 400
        assert any("module_quantity" in e for e in response.json()["detail"]["errors"])

    def test_list_newest_first(self, auth_client, payload):
        payload["proposal_date"] = "2026-01-05"
        older = auth_client.post("/api/proposals", json=payload).json()
        payload["proposal_date"] = "2026-09-30"
        newer = auth_client.post("/api/proposals", json=payload).json()

        ids = [p["id"] for p in auth_client.get("/api/proposals").json()]

        assert ids == [newer["id"], older["id"]]

    def test_get_detail(self, auth_client, created):
        response = auth_client.get(f"/api/proposals/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown(self, auth_client):
        assert auth_client.get("/api/proposals/unknown").status_code == 404

    def test_delete(self, auth_client, created):
        assert auth_client.delete(f"/api/proposals/{created['id']}").status_code == 204
        assert auth_client.get(f"/api/proposals/{created['id']}").status_code == 404

    def test_delete_unknown(self, auth_client):
        assert auth_client.delete("/api/proposals/unknown").status_code == 404


# =============================================================================
# Test: PDF Download
# =============================================================================


class TestPDFDownload:
    def test_pdf_attachment(self, auth_client, created):
        response = auth_client.get(f"/api/proposals/{created['id']}/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")

    def test_attachment_filename(self, auth_client, created):
        response = auth_client.get(f"/api/proposals/{created['id']}/pdf")
        disposition = response.headers["content-disposition"]

        assert disposition.startswith("attachment;")
        assert 'filename="proposta_Joao_Silva_Santos.pdf"' in disposition
        assert "filename*=UTF-8''proposta_Jo%C3%A3o_Silva_Santos.pdf" in disposition

    def test_pdf_unknown_proposal(self, auth_client):
        assert auth_client.get("/api/proposals/unknown/pdf").status_code == 404

    def test_render_failure_is_500(self, config, repository, payload):
        layout = ProposalLayout(variant=get_variant("solar", logo_path="/nonexistent/logo.png"))
        app = create_app(config, repository=repository, generator=ProposalPDFGenerator(layout))
        client = TestClient(app)
        client.post("/api/auth/login", json={"username": "admin", "password": PASSWORD})
        proposal_id = client.post("/api/proposals", json=payload).json()["id"]

        response = client.get(f"/api/proposals/{proposal_id}/pdf")

        assert response.status_code == 500
