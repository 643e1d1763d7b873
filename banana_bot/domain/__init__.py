"""Domain layer — pure Python, no framework dependencies."""

from banana_bot.domain.classifier import is_ignored_subtype, is_redundant_mention, should_process
from banana_bot.domain.collector import (
    collect_current_images,
    dedupe_by_url,
    find_previous_bot_image,
    merge_with_previous,
)
from banana_bot.domain.dedup import Deduplicator, event_key, post_key
from banana_bot.domain.errors import GenerationError, NoInputsError, PublishError, SlackApiError
from banana_bot.domain.models import GeneratedImage, ImageCandidate, InputImage
from banana_bot.domain.pipeline import EventProcessor
from banana_bot.domain.prompt import (
    IMAGE_ONLY_INSTRUCTION,
    enforce_image_only,
    prepare_prompt,
    sanitize_slack_text,
)
from banana_bot.domain.signature import sign_slack_request, verify_slack_signature

__all__ = [
    "is_ignored_subtype",
    "is_redundant_mention",
    "should_process",
    "collect_current_images",
    "dedupe_by_url",
    "find_previous_bot_image",
    "merge_with_previous",
    "Deduplicator",
    "event_key",
    "post_key",
    "GenerationError",
    "NoInputsError",
    "PublishError",
    "SlackApiError",
    "GeneratedImage",
    "ImageCandidate",
    "InputImage",
    "EventProcessor",
    "IMAGE_ONLY_INSTRUCTION",
    "enforce_image_only",
    "prepare_prompt",
    "sanitize_slack_text",
    "sign_slack_request",
    "verify_slack_signature",
]
