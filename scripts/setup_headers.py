#!/usr/bin/env python3
"""
Google Sheet Header Setup

Run this script once after creating the ingest spreadsheet to write the
column labels into the header row (Sheet1!A1:F1 by default).

Usage:
    python scripts/setup_headers.py

Requires in .env:
    GOOGLE_SHEET_ID
    GOOGLE_SERVICE_ACCOUNT_EMAIL
    GOOGLE_PRIVATE_KEY
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path so we can import from line_ingest
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from line_ingest.config import Settings  # noqa: E402
from line_ingest.errors import SinkFailure  # noqa: E402
from line_ingest.main import build_pipeline  # noqa: E402
from line_ingest.models import SHEET_COLUMNS  # noqa: E402


async def main():
    settings = Settings()
    _, sheets = build_pipeline(settings)

    print("=" * 60)
    print("Google Sheet Header Setup")
    print("=" * 60)
    print()
    print(f"Spreadsheet: {settings.google_sheet_id or '(not set)'}")
    print(f"Range:       {settings.sheet_header_range}")
    print(f"Columns:     {', '.join(SHEET_COLUMNS)}")
    print()

    if not sheets.configured:
        print("ERROR: GOOGLE_SHEET_ID, GOOGLE_SERVICE_ACCOUNT_EMAIL and GOOGLE_PRIVATE_KEY must be set.")
        sys.exit(1)

    try:
        updated_range = await sheets.set_headers(SHEET_COLUMNS)
    except SinkFailure as e:
        print("ERROR:", str(e))
        print()
        print("Make sure you:")
        print("  1. Shared the spreadsheet with the service account email (Editor)")
        print("  2. Enabled the Google Sheets API for the service account's project")
        sys.exit(1)

    print(f"Headers written to {updated_range}")


if __name__ == "__main__":
    asyncio.run(main())
