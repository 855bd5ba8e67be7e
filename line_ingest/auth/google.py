"""Google service-account (JWT bearer) authentication helpers."""

import logging
import time

import httpx
import jwt
from pydantic import BaseModel

from line_ingest.errors import SinkFailure, parse_google_error


logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"

SHEETS_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

_ASSERTION_LIFETIME = 3600


class TokenData(BaseModel):
    access_token: str
    expires_at: int
    token_type: str = "Bearer"


class ServiceAccountAuth:
    """Exchanges a signed service-account JWT for an access token, caching it until expiry."""

    def __init__(
        self,
        email: str,
        private_key: str,
        scopes: list[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.email = email
        self.private_key = private_key
        self.scopes = scopes or SHEETS_SCOPES
        self._transport = transport
        self._timeout = timeout
        self._cached_token: TokenData | None = None

    @property
    def configured(self) -> bool:
        return bool(self.email and self.private_key)

    def build_assertion(self, now: int | None = None) -> str:
        now = int(time.time()) if now is None else now
        claims = {
            "iss": self.email,
            "scope": " ".join(self.scopes),
            "aud": GOOGLE_TOKEN_URL,
            "iat": now,
            "exp": now + _ASSERTION_LIFETIME,
        }
        return jwt.encode(claims, self.private_key, algorithm="RS256")

    async def fetch_token(self) -> TokenData:
        if not self.configured:
            raise SinkFailure("Google service account not configured")

        try:
            assertion = self.build_assertion()
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise SinkFailure(f"Invalid service account private key: {e}") from e

        payload = {"grant_type": JWT_BEARER_GRANT, "assertion": assertion}
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(GOOGLE_TOKEN_URL, data=payload)
        except httpx.HTTPError as e:
            raise SinkFailure(f"Google token request failed: {e}") from e

        if response.status_code != 200:
            raise SinkFailure(
                f"Google token error: {parse_google_error(response.text)}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
            token = TokenData(
                access_token=data["access_token"],
                expires_at=int(time.time()) + int(data.get("expires_in", 3600)),
                token_type=data.get("token_type", "Bearer"),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise SinkFailure("Unexpected Google token response") from e

        logger.debug(f"Obtained Google access token for {self.email}")
        return token

    async def get_access_token(self) -> str:
        """Get a valid access token, fetching a new one if needed."""
        if self._cached_token is None or self.is_token_expired(self._cached_token):
            self._cached_token = await self.fetch_token()
        return self._cached_token.access_token

    def invalidate(self) -> None:
        self._cached_token = None

    def is_token_expired(self, token: TokenData, buffer_seconds: int = 60) -> bool:
        return time.time() >= (token.expires_at - buffer_seconds)
