"""Gemini generative image adapter."""

from banana_bot.adapters.gemini.client import GeminiImageClient

__all__ = ["GeminiImageClient"]
