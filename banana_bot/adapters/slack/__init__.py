"""Slack adapters — Web API client and Events API envelope parsing."""

from banana_bot.adapters.slack.client import SlackClient
from banana_bot.adapters.slack.events import decode_body, extract_bot_user_id, parse_envelope

__all__ = ["SlackClient", "decode_body", "extract_bot_user_id", "parse_envelope"]
