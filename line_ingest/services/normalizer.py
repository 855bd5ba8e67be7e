"""Message normalizer: LINE message event -> canonical IngestRecord."""

from line_ingest.models import (
    AudioMessage,
    FileMessage,
    ImageMessage,
    IngestRecord,
    LocationMessage,
    Message,
    MessageEvent,
    MessageKind,
    StickerMessage,
    TextMessage,
    UnsupportedMessage,
    VideoMessage,
)


def describe(message: Message) -> tuple[MessageKind, str]:
    """Map a message variant to its (kind, body) pair."""
    match message:
        case TextMessage():
            return MessageKind.TEXT, message.text or ""
        case ImageMessage():
            return MessageKind.IMAGE, "Image sent"
        case VideoMessage():
            return MessageKind.VIDEO, "Video sent"
        case AudioMessage():
            return MessageKind.AUDIO, "Audio sent"
        case FileMessage():
            return MessageKind.FILE, f"File sent: {message.file_name or 'Unknown'}"
        case LocationMessage():
            return MessageKind.LOCATION, f"Location: {message.address or 'Unknown'}"
        case StickerMessage():
            return MessageKind.STICKER, f"Sticker: {message.sticker_id}"
        case UnsupportedMessage():
            return MessageKind.UNSUPPORTED, "Unsupported message type"
    return MessageKind.UNSUPPORTED, "Unsupported message type"


def normalize(event: MessageEvent) -> IngestRecord:
    """Build the record for an event. display_name is left for the enricher."""
    kind, body = describe(event.message)
    return IngestRecord(
        timestamp=event.timestamp,
        sender_id=event.sender_id,
        message_id=event.message_id,
        body=body,
        kind=kind,
    )
