"""FastAPI dependencies: admin API key check and access to app-scoped components."""

import hmac

from fastapi import Header, HTTPException, Request

from line_ingest.config import Settings
from line_ingest.services import IngestPipeline, SheetsWriter


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> IngestPipeline:
    return request.app.state.pipeline


def get_sheets_writer(request: Request) -> SheetsWriter:
    return request.app.state.sheets


async def verify_api_key(request: Request, x_api_key: str | None = Header(None)) -> None:
    """Require X-API-Key when API_KEY is configured; no-op otherwise."""
    expected = get_settings(request).api_key
    if not expected:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(401, "Invalid or missing API key")
