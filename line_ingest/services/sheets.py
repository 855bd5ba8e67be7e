"""Google Sheets sink: appends ingest rows and maintains the header row."""

import logging
from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel

from line_ingest.auth.google import ServiceAccountAuth
from line_ingest.errors import SinkFailure, parse_google_error
from line_ingest.models import SHEET_COLUMNS

logger = logging.getLogger(__name__)

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"


class AppendResult(BaseModel):
    updated_range: str | None = None
    updated_rows: int = 0
    updated_cells: int = 0


class SheetsWriter:
    """Writes rows to a single spreadsheet. Errors surface as SinkFailure; nothing is retried
    except one token refresh on 401."""

    def __init__(
        self,
        spreadsheet_id: str,
        auth: ServiceAccountAuth,
        append_range: str = "Sheet1!A:F",
        header_range: str = "Sheet1!A1:F1",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.auth = auth
        self.append_range = append_range
        self.header_range = header_range
        self._transport = transport
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id) and self.auth.configured

    async def _request(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        """Authenticated Sheets API write, auto-retries once on 401."""
        token = await self.auth.get_access_token()
        req = client.build_request(
            method,
            f"{SHEETS_API}/{self.spreadsheet_id}/{path}",
            json=json,
            params=params or {},
            headers={"Authorization": f"Bearer {token}"},
        )
        r = await client.send(req)
        if r.status_code == 401:
            self.auth.invalidate()
            token = await self.auth.get_access_token()
            req = client.build_request(
                method,
                f"{SHEETS_API}/{self.spreadsheet_id}/{path}",
                json=json,
                params=params or {},
                headers={"Authorization": f"Bearer {token}"},
            )
            r = await client.send(req)
        if not r.is_success:
            raise SinkFailure(
                f"Sheets API error: {parse_google_error(r.text)}", status_code=r.status_code
            )
        if r.status_code == 204 or not r.content:
            return {}
        try:
            data = r.json()
        except ValueError as e:
            raise SinkFailure(
                f"Sheets API returned a non-JSON response ({r.status_code})", status_code=r.status_code
            ) from e
        if not isinstance(data, dict):
            raise SinkFailure("Sheets API returned an unexpected response body", status_code=r.status_code)
        return data

    async def _call(self, method: str, path: str, json: dict, params: dict) -> dict:
        if not self.spreadsheet_id:
            raise SinkFailure("GOOGLE_SHEET_ID not configured")
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                return await self._request(client, method, path, json=json, params=params)
        except httpx.HTTPError as e:
            raise SinkFailure(f"Sheets API request failed: {e}") from e

    async def append(self, rows: Sequence[Sequence[Any]]) -> AppendResult:
        """Append rows after the last row of existing data in the append range."""
        if not rows:
            return AppendResult()

        data = await self._call(
            "POST",
            f"values/{self.append_range}:append",
            json={"values": [list(row) for row in rows], "majorDimension": "ROWS"},
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
        )
        updates = data.get("updates", {})
        result = AppendResult(
            updated_range=updates.get("updatedRange"),
            updated_rows=updates.get("updatedRows", len(rows)),
            updated_cells=updates.get("updatedCells", 0),
        )
        logger.info(f"Appended {result.updated_rows} row(s) to {result.updated_range or self.append_range}")
        return result

    async def set_headers(self, columns: Sequence[str] = SHEET_COLUMNS) -> str:
        """Overwrite the header range with column labels. Returns the updated range."""
        data = await self._call(
            "PUT",
            f"values/{self.header_range}",
            json={"range": self.header_range, "values": [list(columns)], "majorDimension": "ROWS"},
            params={"valueInputOption": "RAW"},
        )
        updated_range = data.get("updatedRange", self.header_range)
        logger.info(f"Sheet headers set at {updated_range}")
        return updated_range
