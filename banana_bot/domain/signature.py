"""Slack request signature verification.

Slack signs each request with ``v0=<hex HMAC-SHA256(secret, "v0:ts:body")>``
and sends the timestamp it signed alongside. Requests outside the replay
window are rejected even when the signature matches.
"""

import hashlib
import hmac
import time
from typing import Optional, Union

SIGNATURE_VERSION = "v0"
DEFAULT_MAX_AGE = 300


def _as_text(body: Union[str, bytes]) -> str:
    if isinstance(body, bytes):
        return body.decode("utf-8")
    return body


def sign_slack_request(secret: str, timestamp: str, body: Union[str, bytes]) -> str:
    """Return the ``X-Slack-Signature`` value for ``body`` at ``timestamp``."""
    base = f"{SIGNATURE_VERSION}:{timestamp}:{_as_text(body)}"
    digest = hmac.new(secret.encode(), base.encode(), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    secret: str,
    timestamp: Optional[str],
    signature: Optional[str],
    body: Union[str, bytes],
    now: Optional[float] = None,
    max_age: int = DEFAULT_MAX_AGE,
) -> bool:
    """Check authenticity and freshness of a webhook request. Never raises."""
    try:
        if not secret or not timestamp or not signature:
            return False
        try:
            ts = int(timestamp)
        except ValueError:
            return False
        current = time.time() if now is None else now
        if abs(current - ts) > max_age:
            return False
        expected = sign_slack_request(secret, timestamp, body).encode()
        supplied = signature.encode()
        if len(expected) != len(supplied):
            return False
        return hmac.compare_digest(expected, supplied)
    except Exception:
        return False
