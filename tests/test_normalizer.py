"""Tests for message parsing, normalization and the canonical record."""

from __future__ import annotations

import pytest

from line_ingest.errors import MalformedInput
from line_ingest.models import (
    IngestRecord,
    LineEvent,
    MessageEvent,
    MessageKind,
    UnsupportedMessage,
    format_timestamp,
    parse_message,
)
from line_ingest.services.normalizer import describe, normalize


def _event(message: dict, **overrides) -> MessageEvent:
    raw = {
        "type": "message",
        "timestamp": 1700000000000,
        "source": {"type": "user", "userId": "U1"},
        "message": {"id": "M1", **message},
    }
    raw.update(overrides)
    return MessageEvent.from_line_event(LineEvent.model_validate(raw))


# ── Kind table ────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "message, kind, body",
    [
        ({"type": "text", "text": "hi"}, MessageKind.TEXT, "hi"),
        ({"type": "image", "contentProvider": {"type": "line"}}, MessageKind.IMAGE, "Image sent"),
        ({"type": "video", "duration": 1000}, MessageKind.VIDEO, "Video sent"),
        ({"type": "audio", "duration": 60000}, MessageKind.AUDIO, "Audio sent"),
        ({"type": "file", "fileName": "report.pdf", "fileSize": 2048}, MessageKind.FILE, "File sent: report.pdf"),
        ({"type": "file"}, MessageKind.FILE, "File sent: Unknown"),
        (
            {"type": "location", "address": "1-6-1 Yotsuya, Tokyo", "latitude": 35.68, "longitude": 139.72},
            MessageKind.LOCATION,
            "Location: 1-6-1 Yotsuya, Tokyo",
        ),
        ({"type": "sticker", "packageId": "1", "stickerId": "42"}, MessageKind.STICKER, "Sticker: 42"),
        ({"type": "sticker", "packageId": 1, "stickerId": 42}, MessageKind.STICKER, "Sticker: 42"),
    ],
)
def test_known_kinds(message, kind, body):
    record = normalize(_event(message))
    assert record.kind == kind
    assert record.body == body


@pytest.mark.parametrize("msg_type", ["beacon", "imagemap", "", "TEXT", None, 7])
def test_unknown_kinds_degrade_to_unsupported(msg_type):
    record = normalize(_event({"type": msg_type}))
    assert record.kind == MessageKind.UNSUPPORTED
    assert record.body == "Unsupported message type"


def test_missing_type_is_unsupported():
    record = normalize(_event({}))
    assert record.kind == MessageKind.UNSUPPORTED


def test_known_type_with_invalid_fields_degrades():
    message = parse_message({"type": "file", "fileName": ["not", "a", "string"]})
    assert isinstance(message, UnsupportedMessage)
    assert describe(message) == (MessageKind.UNSUPPORTED, "Unsupported message type")


def test_text_with_null_content_stays_text():
    record = normalize(_event({"type": "text", "text": None}))
    assert record.kind == MessageKind.TEXT
    assert record.body == ""


def test_location_without_address():
    assert normalize(_event({"type": "location"})).body == "Location: Unknown"


def test_normalize_carries_event_identity():
    record = normalize(_event({"type": "text", "text": "hi"}))
    assert record.timestamp == 1700000000000
    assert record.sender_id == "U1"
    assert record.message_id == "M1"
    assert record.display_name is None


# ── MessageEvent validation ───────────────────────────────────────────────


class TestMessageEvent:
    def test_group_source_without_user_id_keeps_event(self):
        event = _event({"type": "text", "text": "hi"}, source={"type": "group", "groupId": "G1"})
        assert event.sender_id == ""
        assert event.message_id == "M1"

    def test_missing_source_keeps_event(self):
        raw = {"type": "message", "timestamp": 1, "message": {"id": "M1", "type": "image"}}
        event = MessageEvent.from_line_event(LineEvent.model_validate(raw))
        assert event.sender_id == ""

    def test_missing_message_id(self):
        event = LineEvent.model_validate(
            {"type": "message", "timestamp": 1, "source": {"userId": "U1"}, "message": {"type": "text"}}
        )
        with pytest.raises(MalformedInput):
            MessageEvent.from_line_event(event)

    def test_missing_timestamp(self):
        event = LineEvent.model_validate(
            {"type": "message", "source": {"userId": "U1"}, "message": {"id": "M1", "type": "text"}}
        )
        with pytest.raises(MalformedInput):
            MessageEvent.from_line_event(event)


# ── IngestRecord ──────────────────────────────────────────────────────────


class TestIngestRecord:
    def _record(self, **kw) -> IngestRecord:
        base = dict(timestamp=1700000000000, sender_id="U1", message_id="M1", body="hi", kind=MessageKind.TEXT)
        base.update(kw)
        return IngestRecord(**base)

    def test_to_row(self):
        row = self._record(display_name="Alice").to_row()
        assert row == ["2023-11-14T22:13:20.000Z", "U1", "Alice", "M1", "hi", "text"]

    def test_with_display_name_returns_copy(self):
        record = self._record()
        enriched = record.with_display_name("Alice")
        assert record.display_name is None
        assert enriched.display_name == "Alice"

    def test_empty_display_name_falls_back(self):
        assert self._record().with_display_name("").display_name == "Unknown User"

    def test_unresolved_record_cannot_become_row(self):
        with pytest.raises(ValueError):
            self._record().to_row()

    def test_record_is_immutable(self):
        record = self._record(display_name="Alice")
        with pytest.raises(Exception):
            record.body = "changed"


@pytest.mark.parametrize(
    "ms, expected",
    [
        (1700000000000, "2023-11-14T22:13:20.000Z"),
        (1700000000123, "2023-11-14T22:13:20.123Z"),
        (0, "1970-01-01T00:00:00.000Z"),
        (1625665242211, "2021-07-07T13:40:42.211Z"),
    ],
)
def test_format_timestamp(ms, expected):
    assert format_timestamp(ms) == expected
