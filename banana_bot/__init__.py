"""Nano Banana — Slack bot that edits posted images with Gemini."""

from banana_bot.config import CONFIG, AppConfig, __version__
from banana_bot.adapters.gemini.client import GeminiImageClient
from banana_bot.adapters.slack.client import SlackClient
from banana_bot.adapters.storage.memory_store import MemoryDedupStore
from banana_bot.domain.dedup import Deduplicator
from banana_bot.domain.pipeline import EventProcessor
from banana_bot.ports.inbound import EventKind, InboundEvent

__all__ = [
    "__version__",
    "CONFIG",
    "AppConfig",
    "GeminiImageClient",
    "SlackClient",
    "MemoryDedupStore",
    "Deduplicator",
    "EventProcessor",
    "EventKind",
    "InboundEvent",
]
