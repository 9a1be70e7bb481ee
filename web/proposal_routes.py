"""
Proposal Routes - JSON API for Proposal Records and PDF Download

All routes under /api/proposals* require a session.
Non-authenticated users receive 401 Unauthorized.

Routes:
- POST   /api/auth/login            - Start a session
- POST   /api/auth/logout           - End the session
- GET    /api/auth/status           - Session status
- GET    /api/proposals             - List proposals (newest first)
- POST   /api/proposals             - Create a proposal
- GET    /api/proposals/{id}        - Proposal detail
- DELETE /api/proposals/{id}        - Delete a proposal
- GET    /api/proposals/{id}/pdf    - Download the proposal PDF
"""

from __future__ import annotations

import logging
import unicodedata
from typing import Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from core.repository import ProposalNotFoundError, ProposalRepository
from core.validation import InputValidationError, build_proposal
from reporting.pdf_generator import ProposalPDFGenerator, RenderFailure
from utils.formatting import attachment_filename
from web.auth import SessionAuth, UserSession


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api", tags=["proposals"])


# =============================================================================
# Request Models
# =============================================================================


class LoginRequest(BaseModel):
    username: str
    password: str


class ProposalInput(BaseModel):
    """
    Raw proposal form payload.

    Numbers may arrive as JSON numbers or as pt-BR strings ("4,27");
    core.validation does the real checking.
    """

    client_name: Optional[str] = None
    city_state: Optional[str] = None
    proposal_date: Optional[str] = None
    validity_days: Optional[Union[int, str]] = None
    power_kwp: Optional[Union[float, str]] = None
    monthly_generation_kwh: Optional[Union[float, str]] = None
    usable_area_m2: Optional[Union[float, str]] = None
    module_model: Optional[str] = None
    module_quantity: Optional[Union[int, str]] = None
    inverter_model: Optional[str] = None
    inverter_quantity: Optional[Union[int, str]] = None
    other_items: Optional[str] = None
    warranty_services: Optional[str] = None
    warranty_module_equipment: Optional[str] = None
    warranty_module_performance: Optional[str] = None
    warranty_inverter: Optional[str] = None
    total_price: Optional[Union[float, str]] = None


# =============================================================================
# Dependencies
# =============================================================================


def get_auth(request: Request) -> SessionAuth:
    return request.app.state.auth


def get_repository(request: Request) -> ProposalRepository:
    return request.app.state.repository


def get_generator(request: Request) -> ProposalPDFGenerator:
    return request.app.state.generator


def require_session(request: Request, auth: SessionAuth = Depends(get_auth)) -> UserSession:
    """
    Dependency that requires a valid session.

    Raises HTTPException(401) if not authenticated.
    """
    return auth.require_session(request)


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 filename."""
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


# =============================================================================
# Session Routes
# =============================================================================


@router.post("/auth/login")
async def login(
    payload: LoginRequest,
    response: Response,
    auth: SessionAuth = Depends(get_auth),
):
    session = auth.authenticate(payload.username, payload.password)
    if not session:
        logger.warning("Failed login attempt for user %r", payload.username)
        raise HTTPException(status_code=401, detail="Invalid username or password")

    auth.set_cookie(response, session)
    logger.info("User %s logged in", session.username)
    return {"authenticated": True, "user": session.username}


@router.post("/auth/logout")
async def logout(response: Response, auth: SessionAuth = Depends(get_auth)):
    auth.clear_cookie(response)
    return {"authenticated": False}


@router.get("/auth/status")
async def session_status(request: Request, auth: SessionAuth = Depends(get_auth)):
    session = auth.current_session(request)
    if not session:
        return {"authenticated": False}
    return {"authenticated": True, "user": session.username}


# =============================================================================
# Proposal Routes
# =============================================================================


@router.get("/proposals")
async def list_proposals(
    _: UserSession = Depends(require_session),
    repository: ProposalRepository = Depends(get_repository),
):
    return [record.to_dict() for record in repository.list_all()]


@router.post("/proposals", status_code=201)
async def create_proposal(
    payload: ProposalInput,
    _: UserSession = Depends(require_session),
    repository: ProposalRepository = Depends(get_repository),
):
    try:
        record = build_proposal(payload.model_dump())
    except InputValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": e.errors})

    repository.create(record)
    return record.to_dict()


@router.get("/proposals/{proposal_id}")
async def get_proposal(
    proposal_id: str,
    _: UserSession = Depends(require_session),
    repository: ProposalRepository = Depends(get_repository),
):
    try:
        return repository.get_or_raise(proposal_id).to_dict()
    except ProposalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/proposals/{proposal_id}", status_code=204)
async def delete_proposal(
    proposal_id: str,
    _: UserSession = Depends(require_session),
    repository: ProposalRepository = Depends(get_repository),
):
    try:
        repository.delete(proposal_id)
    except ProposalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.get("/proposals/{proposal_id}/pdf")
def download_proposal_pdf(
    proposal_id: str,
    _: UserSession = Depends(require_session),
    repository: ProposalRepository = Depends(get_repository),
    generator: ProposalPDFGenerator = Depends(get_generator),
):
    """
    Stream the proposal PDF as an attachment.

    Sync handler: layout and drawing are CPU-bound and run in the
    threadpool. Drawing completes before the response starts, so a
    failure still produces a clean 500.
    """
    try:
        record = repository.get_or_raise(proposal_id)
    except ProposalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        chunks = generator.stream(record)
    except RenderFailure:
        logger.exception("PDF rendering failed for proposal %s", proposal_id)
        raise HTTPException(status_code=500, detail="Failed to generate PDF")

    filename = attachment_filename(record.client_name)
    return StreamingResponse(
        chunks,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(filename)},
    )
