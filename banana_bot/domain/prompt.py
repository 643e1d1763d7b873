"""Prompt preparation — strip Slack markup and force image-only output.

Pure Python, no framework dependencies.
"""

import re
from typing import Optional, Tuple

# Appended to every prompt so the model answers with an image, not prose
IMAGE_ONLY_INSTRUCTION = "Respond with the edited image only, without any text."

# <https://example.com|label>, <mailto:a@b.c|label>
LINK_LABEL_RE = re.compile(r"<[a-zA-Z][a-zA-Z0-9+.\-]*:[^|<>]*\|([^<>]+)>")
# <@U123> or <@U123|name>
USER_MENTION_RE = re.compile(r"<@[A-Za-z0-9]+(?:\|[^<>]*)?>")
# <#C123> or <#C123|general>
CHANNEL_MENTION_RE = re.compile(r"<#[A-Za-z0-9]+(?:\|[^<>]*)?>")
# <!here>, <https://bare.link> and anything else left in angle brackets
BRACKET_TOKEN_RE = re.compile(r"<[^<>]*>")
WHITESPACE_RE = re.compile(r"\s+")

# English phrasings that already ask for image-only output
IMAGE_ONLY_RE = re.compile(
    r"\b(?:images?\s+only|only\s+(?:(?:an?|the)\s+)?(?:edited\s+)?images?)\b",
    re.IGNORECASE,
)


def sanitize_slack_text(text: str, bot_user_id: Optional[str] = None) -> str:
    """Remove Slack mention/link markup and normalise whitespace."""
    out = text or ""
    out = LINK_LABEL_RE.sub(r"\1", out)
    out = USER_MENTION_RE.sub("", out)
    out = CHANNEL_MENTION_RE.sub("", out)
    out = BRACKET_TOKEN_RE.sub("", out)
    if bot_user_id:
        out = out.replace(f"<@{bot_user_id}>", "")
    return WHITESPACE_RE.sub(" ", out).strip()


def declares_image_only(text: str) -> bool:
    return IMAGE_ONLY_INSTRUCTION in text or bool(IMAGE_ONLY_RE.search(text))


def enforce_image_only(text: str) -> str:
    """Append the image-only instruction unless the text already asks for it."""
    text = (text or "").strip()
    if not text:
        return IMAGE_ONLY_INSTRUCTION
    if declares_image_only(text):
        return text
    return f"{text} {IMAGE_ONLY_INSTRUCTION}"


def prepare_prompt(text: str, bot_user_id: Optional[str] = None) -> Tuple[str, str]:
    """Return ``(sanitized user text, model prompt)``.

    The sanitized text is empty when the user wrote nothing beyond markup;
    the prompt never is.
    """
    sanitized = sanitize_slack_text(text, bot_user_id)
    return sanitized, enforce_image_only(sanitized)
