from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from line_ingest import __version__
from line_ingest.config import Settings
from line_ingest.dependencies import get_settings


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    path: str
    description: str
    provider: str | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    endpoints: list[EndpointInfo]


class IntegrationStatus(BaseModel):
    connected: bool
    status: str
    last_check: str | None = None


class IntegrationsResponse(BaseModel):
    line_webhook: IntegrationStatus
    line_profile: IntegrationStatus
    google_sheets: IntegrationStatus


ENDPOINTS = [
    EndpointInfo(path="/health", description="Service status and API directory"),
    EndpointInfo(path="/health/integrations", description="Integration configuration status"),
    EndpointInfo(path="/webhooks/line", description="LINE message ingestion", provider="LINE Messaging API"),
    EndpointInfo(path="/sheets/headers", description="Ingest sheet header setup", provider="Google Sheets"),
]


def _ok() -> IntegrationStatus:
    return IntegrationStatus(
        connected=True,
        status="ok",
        last_check=datetime.now(timezone.utc).isoformat(),
    )


def _check_line_webhook(settings: Settings) -> IntegrationStatus:
    if not settings.line_channel_secret:
        return IntegrationStatus(connected=False, status="channel secret not configured")
    return _ok()


def _check_line_profile(settings: Settings) -> IntegrationStatus:
    if not settings.line_channel_access_token:
        return IntegrationStatus(
            connected=False, status="access token not configured (senders recorded as Unknown User)"
        )
    return _ok()


def _check_google_sheets(settings: Settings) -> IntegrationStatus:
    has_creds = bool(settings.google_service_account_email and settings.google_private_key)

    if not has_creds:
        return IntegrationStatus(connected=False, status="service account not configured")
    if not settings.google_sheet_id:
        return IntegrationStatus(connected=False, status="spreadsheet id not configured")
    return _ok()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    uptime = (datetime.now(timezone.utc) - _startup_time).total_seconds()

    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(uptime, 2),
        endpoints=ENDPOINTS,
    )


@router.get("/health/integrations", response_model=IntegrationsResponse)
async def get_integrations(settings: Settings = Depends(get_settings)):
    return IntegrationsResponse(
        line_webhook=_check_line_webhook(settings),
        line_profile=_check_line_profile(settings),
        google_sheets=_check_google_sheets(settings),
    )
