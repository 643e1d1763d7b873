"""Inbound port — platform-agnostic webhook event representation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EventKind(str, Enum):
    URL_VERIFICATION = "url_verification"
    MESSAGE = "message"
    APP_MENTION = "app_mention"
    OTHER = "other"


@dataclass
class Attachment:
    """A file attached to a post. ``url`` and ``mime`` may be empty."""

    url: str
    mime: str
    name: str = ""


@dataclass
class InboundEvent:
    """One delivered webhook event, already stripped of its wire shape."""

    kind: EventKind
    channel: Optional[str] = None
    ts: Optional[str] = None
    thread_ts: Optional[str] = None
    text: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    user: Optional[str] = None
    bot_id: Optional[str] = None
    channel_type: Optional[str] = None
    subtype: Optional[str] = None
    event_id: Optional[str] = None
    bot_user_id: Optional[str] = None
    challenge: Optional[str] = None

    @property
    def root_ts(self) -> Optional[str]:
        """Timestamp of the thread root (the post itself when not threaded)."""
        return self.thread_ts or self.ts

    @property
    def is_dm(self) -> bool:
        return self.channel_type == "im"

    @property
    def from_bot(self) -> bool:
        return bool(self.bot_id)


@dataclass
class ThreadMessage:
    """A message read back from a thread's history."""

    ts: Optional[str] = None
    text: str = ""
    user: Optional[str] = None
    bot_id: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)
