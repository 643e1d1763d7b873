"""Port interfaces (Hexagonal Architecture)."""

from banana_bot.ports.inbound import Attachment, EventKind, InboundEvent, ThreadMessage
from banana_bot.ports.outbound import DedupStorePort, ImageGeneratorPort, SlackPort

__all__ = [
    "Attachment",
    "EventKind",
    "InboundEvent",
    "ThreadMessage",
    "DedupStorePort",
    "ImageGeneratorPort",
    "SlackPort",
]
