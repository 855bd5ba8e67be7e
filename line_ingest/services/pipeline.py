"""Per-request ingestion pipeline: parse batch -> normalize -> enrich -> append."""

import logging

from pydantic import BaseModel, ValidationError

from line_ingest.errors import MalformedInput
from line_ingest.models import IngestRecord, MessageEvent, WebhookEnvelope
from line_ingest.services.dedup import SeenMessages
from line_ingest.services.normalizer import normalize
from line_ingest.services.profile import ProfileEnricher
from line_ingest.services.sheets import SheetsWriter

logger = logging.getLogger(__name__)


class BatchSummary(BaseModel):
    events: int = 0
    appended: int = 0
    ignored: int = 0
    duplicates: int = 0
    unresolved_senders: int = 0


def parse_envelope(raw_body: bytes) -> WebhookEnvelope:
    """Parse the webhook body into its event batch. Raises MalformedInput."""
    try:
        return WebhookEnvelope.model_validate_json(raw_body)
    except ValidationError as e:
        raise MalformedInput(f"Invalid webhook envelope: {e.error_count()} validation error(s)") from e


class IngestPipeline:
    """Processes one batch sequentially. Any failure aborts the rest of the batch;
    rows already appended stay in the sheet."""

    def __init__(
        self,
        enricher: ProfileEnricher,
        sink: SheetsWriter,
        seen: SeenMessages | None = None,
    ):
        self.enricher = enricher
        self.sink = sink
        self.seen = seen

    async def build_record(self, event: MessageEvent) -> tuple[IngestRecord, bool]:
        """Normalize and enrich one event. Returns the record and whether the sender resolved."""
        record = normalize(event)
        result = await self.enricher.enrich(event.sender_id)
        return record.with_display_name(result.display_name), result.resolved

    async def process(self, envelope: WebhookEnvelope) -> BatchSummary:
        summary = BatchSummary(events=len(envelope.events))

        for line_event in envelope.events:
            if line_event.type != "message":
                summary.ignored += 1
                continue

            event = MessageEvent.from_line_event(line_event)
            if self.seen is not None and not self.seen.claim(event.message_id):
                summary.duplicates += 1
                continue

            try:
                record, resolved = await self.build_record(event)
                if not resolved:
                    summary.unresolved_senders += 1

                await self.sink.append([record.to_row()])
                logger.info(f"Data appended to Google Sheet: message {record.message_id} ({record.kind.value})")
                summary.appended += 1

                if self.seen is not None:
                    self.seen.mark_seen(record.message_id)
            finally:
                if self.seen is not None:
                    self.seen.release(event.message_id)

        logger.info(
            f"LINE batch processed: {summary.appended} appended, {summary.ignored} ignored, "
            f"{summary.duplicates} duplicate(s) of {summary.events} event(s)"
        )
        return summary

    async def process_body(self, raw_body: bytes) -> BatchSummary:
        return await self.process(parse_envelope(raw_body))
