"""In-process message-id dedup for replayed webhook deliveries.

Ids are marked only after a successful append, so a failed batch replayed by
LINE re-attempts everything not yet written. An id being processed is held as
in-flight so a concurrent redelivery of the same message is skipped rather
than appended twice. The set is per-process and bounded; it does not survive
restarts or span multiple instances.
"""

import logging
from collections import OrderedDict

logger = logging.getLogger(__name__)


class SeenMessages:
    def __init__(self, max_entries: int = 10000):
        self.max_entries = max_entries
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._in_flight: set[str] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._seen

    def is_duplicate(self, message_id: str) -> bool:
        if not message_id:
            return False  # No id = can't dedup, allow through
        if message_id in self._seen or message_id in self._in_flight:
            logger.info(f"Duplicate LINE message skipped: {message_id}")
            return True
        return False

    def claim(self, message_id: str) -> bool:
        """Check and reserve an id in one step. False if already seen or in flight.

        No await happens between the check and the reservation, so this is
        atomic with respect to other requests on the same event loop.
        """
        if self.is_duplicate(message_id):
            return False
        if message_id:
            self._in_flight.add(message_id)
        return True

    def release(self, message_id: str) -> None:
        """Drop an in-flight reservation (after success or failure)."""
        self._in_flight.discard(message_id)

    def mark_seen(self, message_id: str) -> None:
        if not message_id:
            return
        self._seen[message_id] = None
        self._seen.move_to_end(message_id)
        while len(self._seen) > self.max_entries:
            self._seen.popitem(last=False)
