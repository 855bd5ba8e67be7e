"""LINE profile lookup and display-name enrichment."""

import logging
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from line_ingest.errors import EnrichmentFailure
from line_ingest.models import UNKNOWN_USER

logger = logging.getLogger(__name__)


class LineProfile(BaseModel):
    user_id: str
    display_name: str
    picture_url: str | None = None
    status_message: str | None = None


class EnrichmentResult(BaseModel):
    display_name: str
    resolved: bool
    error: str | None = None


class LineProfileClient:
    """Messaging API client for GET /v2/bot/profile/{userId}."""

    def __init__(
        self,
        access_token: str,
        api_base: str = "https://api.line.me",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.access_token = access_token
        self.api_base = api_base.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def get_profile(self, user_id: str) -> LineProfile:
        if not self.access_token:
            raise EnrichmentFailure("LINE channel access token not configured")

        url = f"{self.api_base}/v2/bot/profile/{quote(user_id, safe='')}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                r = await client.get(url, headers={"Authorization": f"Bearer {self.access_token}"})
        except httpx.TimeoutException as e:
            raise EnrichmentFailure(f"LINE profile lookup timed out for {user_id}") from e
        except httpx.HTTPError as e:
            raise EnrichmentFailure(f"LINE profile lookup failed for {user_id}: {e}") from e

        if r.status_code != 200:
            raise EnrichmentFailure(f"LINE profile API error {r.status_code}: {r.text}")

        try:
            data = r.json()
            return LineProfile(
                user_id=data.get("userId", user_id),
                display_name=data["displayName"],
                picture_url=data.get("pictureUrl"),
                status_message=data.get("statusMessage"),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise EnrichmentFailure(f"Unexpected LINE profile response for {user_id}") from e


class ProfileEnricher:
    """Resolves sender ids to display names, degrading to UNKNOWN_USER on any failure."""

    def __init__(self, client: LineProfileClient):
        self.client = client

    async def enrich(self, sender_id: str) -> EnrichmentResult:
        if not sender_id:
            # LINE omits userId for some group/room senders
            return EnrichmentResult(display_name=UNKNOWN_USER, resolved=False, error="no sender id")
        try:
            profile = await self.client.get_profile(sender_id)
        except EnrichmentFailure as e:
            logger.warning(f"Error getting user profile for {sender_id}: {e}")
            return EnrichmentResult(display_name=UNKNOWN_USER, resolved=False, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error resolving profile for {sender_id}: {e}", exc_info=True)
            return EnrichmentResult(display_name=UNKNOWN_USER, resolved=False, error=str(e))

        if not profile.display_name:
            return EnrichmentResult(display_name=UNKNOWN_USER, resolved=False, error="empty displayName")
        return EnrichmentResult(display_name=profile.display_name, resolved=True)

    async def resolve_display_name(self, sender_id: str) -> str:
        return (await self.enrich(sender_id)).display_name
