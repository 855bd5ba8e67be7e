"""Ingestion error taxonomy and shared error-parsing utilities."""

import json


class IngestError(Exception):
    """Base class for webhook ingestion failures."""


class AuthenticationFailure(IngestError):
    """Missing or invalid webhook signature. The request is rejected unprocessed."""


class MalformedInput(IngestError):
    """The request body is not a well-formed batch of LINE events."""


class EnrichmentFailure(IngestError):
    """Profile lookup failed. Recovered by the enricher, never propagated."""


class SinkFailure(IngestError):
    """Appending to (or authenticating against) the spreadsheet failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def parse_google_error(response_text: str) -> str:
    """Extract a readable message from a Google API error response.

    Google APIs return JSON like {"error": {"code": 400, "message": "...", "status": "..."}}.
    Returns "STATUS: message" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
        err = body.get("error", {})
        if isinstance(err, str):
            # OAuth token endpoint: {"error": "invalid_grant", "error_description": "..."}
            desc = body.get("error_description", "")
            return f"{err}: {desc}" if desc else err
        msg = err.get("message", "")
        status = err.get("status", "")
        if msg:
            return f"{status}: {msg}" if status else msg
    except (ValueError, AttributeError):
        pass
    return response_text
