"""Application configuration via pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # App
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:3000"]
    # API key (optional): if set, required on admin routes (not on the LINE webhook)
    api_key: str = ""

    # LINE Messaging API
    line_channel_secret: str = ""
    line_channel_access_token: str = ""
    line_api_base: str = "https://api.line.me"

    # Google Sheets (service account)
    google_sheet_id: str = ""
    google_service_account_email: str = ""
    google_private_key: str = ""
    sheet_append_range: str = "Sheet1!A:F"
    sheet_header_range: str = "Sheet1!A1:F1"

    http_timeout: float = 30.0

    # Dedup by LINE message id (off: replayed batches append duplicate rows)
    dedup_enabled: bool = False
    dedup_max_entries: int = 10000

    @field_validator("google_private_key")
    @classmethod
    def unescape_newlines(cls, v: str) -> str:
        # Keys pasted into env files usually carry literal "\n" sequences
        return v.replace("\\n", "\n")


settings = Settings()
