"""Slack Events API envelope → InboundEvent conversion."""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

from banana_bot.ports.inbound import Attachment, EventKind, InboundEvent, ThreadMessage

_KINDS = {
    "message": EventKind.MESSAGE,
    "app_mention": EventKind.APP_MENTION,
}


def decode_body(raw: bytes, content_type: str = "") -> Dict[str, Any]:
    """Decode a JSON or form-encoded request body.

    Form bodies carry their JSON in the ``payload`` field; a form without
    one is returned as a flat dict. Raises ValueError on malformed input.
    """
    text = raw.decode("utf-8")
    if "application/x-www-form-urlencoded" in (content_type or "").lower():
        form = {k: v[0] for k, v in parse_qs(text, keep_blank_values=True).items()}
        if "payload" in form:
            data = json.loads(form["payload"])
        else:
            data = form
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("event body is not an object")
    return data


def extract_bot_user_id(payload: Dict[str, Any]) -> Optional[str]:
    auths = payload.get("authorizations") or []
    if auths and isinstance(auths[0], dict) and auths[0].get("user_id"):
        return auths[0]["user_id"]
    authed = payload.get("authed_users") or []
    if authed:
        return authed[0]
    return None


def parse_files(files: Any) -> List[Attachment]:
    if not isinstance(files, list):
        return []
    out = []
    for f in files:
        if not isinstance(f, dict):
            continue
        out.append(Attachment(
            url=f.get("url_private_download") or f.get("url_private") or "",
            mime=f.get("mimetype") or "",
            name=f.get("name") or "",
        ))
    return out


def parse_message(msg: Dict[str, Any]) -> ThreadMessage:
    """Convert a ``conversations.replies`` message into a ThreadMessage."""
    return ThreadMessage(
        ts=msg.get("ts"),
        text=str(msg.get("text") or ""),
        user=msg.get("user"),
        bot_id=msg.get("bot_id"),
        attachments=parse_files(msg.get("files")),
    )


def parse_envelope(payload: Dict[str, Any]) -> Optional[InboundEvent]:
    """Map a decoded envelope to an InboundEvent.

    Returns None for envelope types other than ``url_verification`` and
    ``event_callback``.
    """
    envelope_type = payload.get("type")
    if envelope_type == "url_verification":
        return InboundEvent(
            kind=EventKind.URL_VERIFICATION,
            challenge=payload.get("challenge"),
        )
    if envelope_type != "event_callback":
        return None

    event = payload.get("event") or {}
    return InboundEvent(
        kind=_KINDS.get(event.get("type"), EventKind.OTHER),
        channel=event.get("channel"),
        ts=event.get("ts"),
        thread_ts=event.get("thread_ts"),
        text=str(event.get("text") or ""),
        attachments=parse_files(event.get("files")),
        user=event.get("user"),
        bot_id=event.get("bot_id"),
        channel_type=event.get("channel_type"),
        subtype=event.get("subtype"),
        event_id=payload.get("event_id"),
        bot_user_id=extract_bot_user_id(payload),
    )
