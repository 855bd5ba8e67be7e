"""LINE webhook endpoint - verifies, normalizes and records inbound message events."""

import logging

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from line_ingest.auth.signature import require_valid_signature
from line_ingest.config import Settings
from line_ingest.dependencies import get_pipeline, get_settings
from line_ingest.errors import AuthenticationFailure, MalformedInput, SinkFailure
from line_ingest.services import IngestPipeline

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/line", response_class=PlainTextResponse)
async def line_webhook(
    request: Request,
    x_line_signature: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    pipeline: IngestPipeline = Depends(get_pipeline),
):
    """Receive a LINE event batch. Responds 200 OK, 401 Unauthorized or 500."""
    # Signature covers the exact bytes LINE sent, so read them before any parsing
    body = await request.body()

    try:
        require_valid_signature(body, settings.line_channel_secret, x_line_signature)
    except AuthenticationFailure as e:
        logger.error(f"Rejected LINE webhook: {e}")
        return PlainTextResponse("Unauthorized", status_code=401)

    try:
        await pipeline.process_body(body)
    except MalformedInput as e:
        logger.error(f"Malformed LINE webhook: {e}")
        return PlainTextResponse("Internal Server Error", status_code=500)
    except SinkFailure as e:
        logger.error(f"Error appending to Google Sheet: {e}")
        return PlainTextResponse("Internal Server Error", status_code=500)
    except Exception:
        logger.exception("Error processing LINE webhook")
        return PlainTextResponse("Internal Server Error", status_code=500)

    return PlainTextResponse("OK")
