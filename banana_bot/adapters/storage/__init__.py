"""Dedup store adapters."""

from banana_bot.adapters.storage.memory_store import MemoryDedupStore

__all__ = ["MemoryDedupStore"]
