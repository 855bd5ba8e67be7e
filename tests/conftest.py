"""Shared fixtures: settings, in-memory sink, fake LINE profile client, signed requests."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from line_ingest.auth.signature import compute_signature
from line_ingest.config import Settings
from line_ingest.errors import EnrichmentFailure, SinkFailure
from line_ingest.main import create_app
from line_ingest.routers import sheets as sheets_router
from line_ingest.services import IngestPipeline, ProfileEnricher
from line_ingest.services.profile import LineProfile

CHANNEL_SECRET = "line-test-secret"


class RecordingSink:
    """Stands in for SheetsWriter; keeps appended rows in memory."""

    def __init__(self, fail_on_call: int | None = None):
        self.fail_on_call = fail_on_call
        self.calls = 0
        self.rows: list[list[str]] = []

    async def append(self, rows):
        self.calls += 1
        if self.fail_on_call is not None and self.calls == self.fail_on_call:
            raise SinkFailure("Sheets API error: RESOURCE_EXHAUSTED: Quota exceeded", status_code=429)
        self.rows.extend(list(r) for r in rows)


class FakeProfileClient:
    """Stands in for LineProfileClient; unknown ids fail like a 404."""

    def __init__(self, names: dict[str, str] | None = None, fail: bool = False):
        self.names = names or {}
        self.fail = fail
        self.lookups: list[str] = []

    async def get_profile(self, user_id: str) -> LineProfile:
        self.lookups.append(user_id)
        if self.fail or user_id not in self.names:
            raise EnrichmentFailure(f"LINE profile API error 404: {user_id}")
        return LineProfile(user_id=user_id, display_name=self.names[user_id])


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        line_channel_secret=CHANNEL_SECRET,
        line_channel_access_token="line-access-token",
        google_sheet_id="sheet-123",
        google_service_account_email="ingest@project.iam.gserviceaccount.com",
        google_private_key="unused-in-these-tests",
    )


@pytest.fixture
def make_sink():
    return RecordingSink


@pytest.fixture
def make_profiles():
    return FakeProfileClient


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def profiles() -> FakeProfileClient:
    return FakeProfileClient({"U1": "Alice", "U2": "Bob"})


@pytest.fixture
def pipeline(profiles, sink) -> IngestPipeline:
    return IngestPipeline(enricher=ProfileEnricher(profiles), sink=sink)


@pytest.fixture
def make_event():
    """Factory for LINE message events."""

    def _make(
        message: dict,
        user_id: str = "U1",
        message_id: str = "M1",
        timestamp: int = 1700000000000,
    ) -> dict:
        return {
            "type": "message",
            "mode": "active",
            "timestamp": timestamp,
            "source": {"type": "user", "userId": user_id},
            "webhookEventId": f"evt-{message_id}",
            "replyToken": "reply-token",
            "message": {"id": message_id, **message},
        }

    return _make


@pytest.fixture
def signed():
    """Factory returning (body_bytes, headers) for a payload signed with CHANNEL_SECRET."""

    def _signed(payload: dict | bytes, secret: str = CHANNEL_SECRET) -> tuple[bytes, dict]:
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        headers = {
            "Content-Type": "application/json",
            "X-Line-Signature": compute_signature(body, secret),
        }
        return body, headers

    return _signed


@pytest.fixture
def app(settings, pipeline, sink):
    sheets_router.limiter.reset()
    application = create_app(settings)
    application.state.pipeline = pipeline
    return application


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
