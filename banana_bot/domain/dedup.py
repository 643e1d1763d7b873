"""Event de-duplication on top of a TTL key-value store.

Two key shapes are used:

* ``eid:<event_id>`` — checked as soon as an event arrives, guards against
  Slack redelivering the same event.
* ``cts:<channel>:<ts>`` — checked only once an event is known to be
  actionable, so a ``message`` and an ``app_mention`` for the same post
  publish once.

Store failures count as "not seen": a possible duplicate post is preferred
over dropping a legitimate request.
"""

import logging

from banana_bot.ports.outbound import DedupStorePort

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


def event_key(event_id: str) -> str:
    return f"eid:{event_id}"


def post_key(channel: str, ts: str) -> str:
    return f"cts:{channel}:{ts}"


class Deduplicator:
    """Check-then-mark helper over a DedupStorePort."""

    def __init__(self, store: DedupStorePort, ttl: int = DEFAULT_TTL_SECONDS):
        self._store = store
        self.ttl = ttl

    async def seen(self, key: str) -> bool:
        """Return True if ``key`` was marked within the TTL, else mark it."""
        try:
            if await self._store.get(key):
                return True
            await self._store.put(key, "1", self.ttl)
            return False
        except Exception:
            logger.warning("dedupe:store_error", extra={"data": {"key": key}}, exc_info=True)
            return False
