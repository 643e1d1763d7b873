"""Decide whether an inbound event should be acted upon.

Pure Python, no framework dependencies. Thread roots are fetched through an
injected coroutine so the rules stay testable without Slack.
"""

from typing import Awaitable, Callable, Optional

from banana_bot.ports.inbound import EventKind, InboundEvent, ThreadMessage

FetchThreadRoot = Callable[[str, str], Awaitable[Optional[ThreadMessage]]]

# Message subtypes that still carry a fresh user post
PROCESSED_SUBTYPES = frozenset({"file_share"})


def mention_token(bot_user_id: str) -> str:
    return f"<@{bot_user_id}>"


async def should_process(
    event: InboundEvent,
    bot_user_id: Optional[str],
    fetch_thread_root: FetchThreadRoot,
) -> bool:
    """Apply the admission rules in order; the first rule that decides wins."""
    if event.is_dm:
        return True
    if event.kind == EventKind.APP_MENTION:
        return True
    if not bot_user_id:
        return False
    # Never react to our own posts (prevents loops)
    if event.user and event.user == bot_user_id:
        return False
    if event.from_bot:
        return False
    token = mention_token(bot_user_id)
    if token in (event.text or ""):
        return True
    if event.thread_ts and event.channel:
        root = await fetch_thread_root(event.channel, event.thread_ts)
        if root is not None and token in (root.text or ""):
            return True
    return False


def is_redundant_mention(event: InboundEvent) -> bool:
    """An app_mention that carries files is handled by its sibling message event."""
    return event.kind == EventKind.APP_MENTION and len(event.attachments) > 0


def is_ignored_subtype(event: InboundEvent) -> bool:
    """Edits, joins and other non-post message subtypes are ignored."""
    return (
        event.kind == EventKind.MESSAGE
        and bool(event.subtype)
        and event.subtype not in PROCESSED_SUBTYPES
    )
