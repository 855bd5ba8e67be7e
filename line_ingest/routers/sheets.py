"""Sheets admin endpoint - one-time header setup for the ingest spreadsheet."""

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter
from slowapi.util import get_remote_address

from line_ingest.dependencies import get_sheets_writer
from line_ingest.errors import SinkFailure
from line_ingest.models import SHEET_COLUMNS
from line_ingest.services import SheetsWriter

router = APIRouter()

limiter = Limiter(key_func=get_remote_address)


class SetHeadersRequest(BaseModel):
    columns: list[str] = Field(default_factory=lambda: list(SHEET_COLUMNS), min_length=1)


class SetHeadersResponse(BaseModel):
    success: bool
    updated_range: str
    columns: list[str]


@router.post("/headers", response_model=SetHeadersResponse)
@limiter.limit("10/minute")
async def setup_headers(
    request: Request,
    body: SetHeadersRequest | None = None,
    sheets: SheetsWriter = Depends(get_sheets_writer),
):
    """Write the column labels to the header row (overwrites it; safe to repeat)."""
    if not sheets.configured:
        raise HTTPException(503, "Google Sheets not configured")

    columns = body.columns if body else list(SHEET_COLUMNS)
    try:
        updated_range = await sheets.set_headers(columns)
    except SinkFailure as e:
        raise HTTPException(502, str(e))

    return SetHeadersResponse(success=True, updated_range=updated_range, columns=columns)
