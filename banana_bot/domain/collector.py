"""Image collection from the current post and the thread history."""

import time
from typing import Iterable, List, Optional, Sequence

from banana_bot.domain.models import ImageCandidate
from banana_bot.ports.inbound import Attachment, ThreadMessage

IMAGE_MIME_PREFIX = "image/"


def _is_image(att: Attachment) -> bool:
    return bool(att.url) and bool(att.mime) and att.mime.startswith(IMAGE_MIME_PREFIX)


def _default_name(suffix: str = "") -> str:
    return f"image-{int(time.time() * 1000)}{suffix}"


def dedupe_by_url(candidates: Iterable[ImageCandidate]) -> List[ImageCandidate]:
    """Drop repeated urls, keeping the first occurrence and the original order."""
    seen = set()
    out: List[ImageCandidate] = []
    for c in candidates:
        if c.url in seen:
            continue
        seen.add(c.url)
        out.append(c)
    return out


def collect_current_images(attachments: Sequence[Attachment]) -> List[ImageCandidate]:
    """Image attachments of the current post, de-duplicated by url."""
    return dedupe_by_url(
        ImageCandidate(url=att.url, name=att.name or _default_name(), mime=att.mime)
        for att in attachments
        if _is_image(att)
    )


def find_previous_bot_image(
    messages: Sequence[ThreadMessage],
    root_ts: Optional[str],
    bot_user_id: Optional[str] = None,
) -> Optional[ImageCandidate]:
    """Most recent image posted by the bot in a thread, or None.

    Messages are scanned newest first, skipping the root; each message's
    files are scanned newest first as well. Without a known bot user id any
    message carrying a ``bot_id`` counts as bot-authored.
    """
    for msg in reversed(messages):
        if msg.ts == root_ts:
            continue
        is_bot = msg.user == bot_user_id if bot_user_id else bool(msg.bot_id)
        if not is_bot:
            continue
        for att in reversed(msg.attachments):
            if _is_image(att):
                return ImageCandidate(
                    url=att.url, name=att.name or _default_name(".png"), mime=att.mime
                )
    return None


def merge_with_previous(
    previous: Optional[ImageCandidate], current: Sequence[ImageCandidate]
) -> List[ImageCandidate]:
    """Previous bot image first, then the current attachments, unique by url."""
    combined = ([previous] if previous else []) + list(current)
    return dedupe_by_url(combined)
