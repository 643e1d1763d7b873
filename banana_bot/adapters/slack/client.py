"""Slack Web API client using aiohttp — implements SlackPort."""

import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from banana_bot.adapters.slack.events import parse_message
from banana_bot.domain.errors import PublishError, SlackApiError
from banana_bot.ports.inbound import ThreadMessage

logger = logging.getLogger(__name__)

SLACK_API_BASE = "https://slack.com/api"
REPLIES_LIMIT = 50


class SlackClient:
    """Async Slack Web API client (form-encoded POST with bearer token)."""

    def __init__(self, token: str, api_base: str = SLACK_API_BASE):
        self._token = token
        self._api_base = api_base

    @property
    def is_configured(self) -> bool:
        return bool(self._token)

    @property
    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def api(self, method: str, params: Dict[str, str]) -> Dict[str, Any]:
        """Call a Web API method. HTTP errors raise; ``ok: false`` is logged and returned."""
        url = f"{self._api_base}/{method}"
        async with aiohttp.ClientSession() as session:
            async with session.post(url, data=params, headers=self._auth_headers) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    logger.error(
                        "slackApi:http_error",
                        extra={"data": {"method": method, "status": resp.status, "text": body[:500]}},
                    )
                    raise SlackApiError(method, resp.status, body[:200])
                data = await resp.json(content_type=None)
        if isinstance(data, dict) and data.get("ok") is False:
            logger.error("slackApi:api_error", extra={"data": {"method": method, "json": data}})
        return data if isinstance(data, dict) else {}

    async def add_reaction(self, channel: str, name: str, timestamp: str) -> Dict[str, Any]:
        return await self.api("reactions.add", {"channel": channel, "name": name, "timestamp": timestamp})

    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {"channel": channel, "text": text}
        if thread_ts:
            params["thread_ts"] = thread_ts
        return await self.api("chat.postMessage", params)

    async def fetch_thread_root(self, channel: str, ts: str) -> Optional[ThreadMessage]:
        data = await self.api("conversations.replies", {"channel": channel, "ts": ts, "limit": "1"})
        messages = data.get("messages")
        if isinstance(messages, list) and messages:
            return parse_message(messages[0])
        return None

    async def list_replies(self, channel: str, ts: str) -> List[ThreadMessage]:
        data = await self.api(
            "conversations.replies",
            {"channel": channel, "ts": ts, "limit": str(REPLIES_LIMIT), "inclusive": "true"},
        )
        messages = data.get("messages") or []
        return [parse_message(m) for m in messages if isinstance(m, dict)]

    async def download(self, url: str) -> Optional[bytes]:
        """Fetch a private file. Returns None on a non-2xx response."""
        async with aiohttp.ClientSession() as session:
            async with session.get(url, headers=self._auth_headers) as resp:
                if resp.status >= 400:
                    logger.error("download:image:not_ok", extra={"data": {"status": resp.status}})
                    return None
                data = await resp.read()
        logger.debug("download:image", extra={"data": {"status": resp.status, "size": len(data)}})
        return data

    async def upload_file(
        self,
        channel: str,
        data: bytes,
        filename: str,
        mime: str,
        thread_ts: Optional[str] = None,
    ) -> str:
        """Upload bytes as a file shared to ``channel`` (3-step external upload).

        Returns the Slack file id. Raises PublishError if any step fails.
        """
        step = "files.getUploadURLExternal"
        try:
            meta = await self.api(step, {"filename": filename, "length": str(len(data))})
            if not meta.get("ok") or not meta.get("upload_url") or not meta.get("file_id"):
                raise PublishError(step, str(meta.get("error", "")))
            file_id = meta["file_id"]

            step = "upload"
            form = aiohttp.FormData()
            form.add_field(
                "filename", data, filename=filename, content_type=mime or "application/octet-stream"
            )
            async with aiohttp.ClientSession() as session:
                async with session.post(meta["upload_url"], data=form) as resp:
                    if resp.status >= 400:
                        raise PublishError(step, f"status={resp.status}")

            step = "files.completeUploadExternal"
            params = {
                "files": json.dumps([{"id": file_id, "title": filename}]),
                "channel_id": channel,
            }
            if thread_ts:
                params["thread_ts"] = thread_ts
            done = await self.api(step, params)
            if not done.get("ok"):
                raise PublishError(step, str(done.get("error", "")))
        except SlackApiError as e:
            raise PublishError(step, str(e)) from e
        except aiohttp.ClientError as e:
            raise PublishError(step, str(e)) from e
        logger.debug("slack:upload:ok", extra={"data": {"fileId": file_id, "channel": channel}})
        return file_id
