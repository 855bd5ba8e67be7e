"""LINE ingest gateway - FastAPI application entry point."""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from line_ingest import __version__
from line_ingest.auth.google import ServiceAccountAuth
from line_ingest.config import Settings, settings as default_settings
from line_ingest.dependencies import verify_api_key
from line_ingest.routers import health, sheets, webhooks
from line_ingest.services import IngestPipeline, LineProfileClient, ProfileEnricher, SeenMessages, SheetsWriter


def build_pipeline(settings: Settings) -> tuple[IngestPipeline, SheetsWriter]:
    """Wire the ingestion components from one immutable Settings instance."""
    auth = ServiceAccountAuth(
        email=settings.google_service_account_email,
        private_key=settings.google_private_key,
        timeout=settings.http_timeout,
    )
    sink = SheetsWriter(
        spreadsheet_id=settings.google_sheet_id,
        auth=auth,
        append_range=settings.sheet_append_range,
        header_range=settings.sheet_header_range,
        timeout=settings.http_timeout,
    )
    enricher = ProfileEnricher(
        LineProfileClient(
            access_token=settings.line_channel_access_token,
            api_base=settings.line_api_base,
            timeout=settings.http_timeout,
        )
    )
    seen = SeenMessages(settings.dedup_max_entries) if settings.dedup_enabled else None
    return IngestPipeline(enricher=enricher, sink=sink, seen=seen), sink


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=logging.DEBUG if settings.debug else settings.log_level.upper())

    app = FastAPI(
        title="LINE Ingest Gateway",
        description="Records LINE messages to Google Sheets",
        version=__version__,
    )

    app.state.settings = settings
    app.state.pipeline, app.state.sheets = build_pipeline(settings)

    # Rate limiting
    app.state.limiter = sheets.limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers (health and the LINE webhook are public; the webhook is signature-checked instead)
    app.include_router(health.router)
    app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
    app.include_router(
        sheets.router, prefix="/sheets", tags=["sheets"], dependencies=[Depends(verify_api_key)]
    )

    return app


app = create_app()
