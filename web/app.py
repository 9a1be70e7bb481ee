"""
FastAPI application for the solar proposal engine.

Production deployment configuration via environment variables
(see utils.config.Config).
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.repository import ProposalRepository, get_proposal_repository
from reporting.layout import ProposalLayout
from reporting.pdf_generator import ProposalPDFGenerator
from reporting.theme import get_variant
from utils.config import Config
from web.auth import SessionAuth
from web.proposal_routes import router as proposal_router


logger = logging.getLogger(__name__)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": {"errors": errors}})


def create_app(
    config: Optional[Config] = None,
    repository: Optional[ProposalRepository] = None,
    generator: Optional[ProposalPDFGenerator] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        config: Configuration (defaults to Config.load())
        repository: Proposal storage (defaults to the process singleton)
        generator: PDF output sink (defaults to the configured variant)
    """
    config = config or Config.load()

    if generator is None:
        variant = get_variant(
            config.proposal_variant,
            logo_path=config.logo_path,
            **config.company_overrides(),
        )
        generator = ProposalPDFGenerator(ProposalLayout(variant=variant))

    app = FastAPI(
        title="Proposta Comercial",
        description="Solar proposal records and PDF generation",
        version="1.0.0",
        docs_url="/docs" if config.debug else None,
        redoc_url=None,
    )

    app.state.config = config
    app.state.auth = SessionAuth(config)
    app.state.repository = repository or get_proposal_repository(config.persist_path)
    app.state.generator = generator

    if config.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["Content-Type"],
        )

    if not app.state.auth.is_configured:
        logger.warning("ADMIN_PASSWORD_HASH is not set; every login will be rejected")

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(proposal_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancers."""
        return {"status": "healthy"}

    return app


app = create_app()
