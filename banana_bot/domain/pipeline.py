"""EventProcessor — the background task run for each accepted webhook event.

Handles:
- event-id and channel/ts de-duplication
- admission rules (DM, mention, thread root mention)
- reaction markers on the post and its thread root
- image collection, including the bot's previous image in the thread
- generation and upload of a single output image
- in-thread error and guidance messages
"""

import json
import logging
import time
import uuid
from typing import List, Optional

from banana_bot.domain.classifier import (
    is_ignored_subtype,
    is_redundant_mention,
    should_process,
)
from banana_bot.domain.collector import (
    collect_current_images,
    find_previous_bot_image,
    merge_with_previous,
)
from banana_bot.domain.dedup import Deduplicator, event_key, post_key
from banana_bot.domain.errors import GenerationError, NoInputsError
from banana_bot.domain.models import GeneratedImage, ImageCandidate, InputImage
from banana_bot.domain.prompt import prepare_prompt
from banana_bot.ports.inbound import EventKind, InboundEvent
from banana_bot.ports.outbound import ImageGeneratorPort, SlackPort

logger = logging.getLogger(__name__)

GUIDANCE_MESSAGE = (
    "🍌 No image found. Reply with text to a bot image in this thread, or attach an image."
)
FAILURE_MESSAGE = "🍌 Failed to generate images: {reason} (ref: {ref})"


def _millis() -> int:
    return int(time.time() * 1000)


def new_trace_id() -> str:
    return f"gmi-{uuid.uuid4().hex[:8]}"


class EventProcessor:
    """Pure pipeline logic — testable with fake ports."""

    def __init__(
        self,
        slack: SlackPort,
        generator: ImageGeneratorPort,
        dedup: Deduplicator,
        reaction_name: str = "banana",
        debug_uploads: bool = False,
    ):
        self._slack = slack
        self._generator = generator
        self._dedup = dedup
        self.reaction_name = reaction_name or "banana"
        self.debug_uploads = debug_uploads

    async def process(self, event: InboundEvent) -> None:
        """Run the pipeline for one event. Never raises."""
        trace_id = new_trace_id()
        try:
            await self._process(event, trace_id)
        except Exception:
            logger.exception(
                "process:unhandled",
                extra={"data": {"traceId": trace_id, "channel": event.channel}},
            )

    async def _process(self, event: InboundEvent, trace_id: str) -> None:
        if not self._slack.is_configured:
            logger.error("missing:SLACK_BOT_TOKEN")
            return

        if event.event_id and await self._dedup.seen(event_key(event.event_id)):
            logger.debug("dedupe:skip", extra={"data": {"eid": event.event_id}})
            return

        bot_user_id = event.bot_user_id
        decision = await should_process(event, bot_user_id, self._slack.fetch_thread_root)
        logger.info(
            "event:decision",
            extra={"data": {"process": decision, "botUserId": bot_user_id}},
        )
        if not decision:
            return
        if event.kind not in (EventKind.MESSAGE, EventKind.APP_MENTION):
            return
        if is_redundant_mention(event):
            logger.debug("skip:app_mention_with_files")
            return
        if is_ignored_subtype(event):
            logger.debug("message:ignored_subtype", extra={"data": {"subtype": event.subtype}})
            return

        channel = event.channel
        root_ts = event.root_ts
        text, prompt = prepare_prompt(event.text, bot_user_id)

        if channel and event.ts and await self._dedup.seen(post_key(channel, event.ts)):
            logger.debug("dedupe:skip", extra={"data": {"key": post_key(channel, event.ts)}})
            return
        if not channel or not root_ts:
            return

        await self._mark(channel, event.ts, root_ts)

        current = collect_current_images(event.attachments)
        inputs = current
        previous = None
        if text:
            previous = await self._find_previous_image(channel, root_ts, bot_user_id)
            if previous:
                inputs = merge_with_previous(previous, current)
        logger.info(
            "images:collected",
            extra={
                "data": {
                    "current": len(current),
                    "prev": previous is not None,
                    "total": len(inputs),
                }
            },
        )

        if not inputs:
            await self._say(channel, root_ts, GUIDANCE_MESSAGE)
            logger.info("no_images_guided", extra={"data": {"channel": channel}})
            return

        try:
            await self._process_batch(inputs, channel, root_ts, prompt, trace_id)
        except Exception as e:
            logger.error(
                "processBatchImages:failed",
                extra={"data": {"traceId": trace_id, "channel": channel}},
                exc_info=True,
            )
            reason = str(e) or "unknown error"
            await self._say(channel, root_ts, FAILURE_MESSAGE.format(reason=reason, ref=trace_id))

    async def _mark(self, channel: str, current_ts: Optional[str], root_ts: str) -> None:
        """Add the reaction marker to the post and to its thread root."""
        targets = []
        if current_ts:
            targets.append(current_ts)
        if root_ts != current_ts:
            targets.append(root_ts)
        for ts in targets:
            try:
                await self._slack.add_reaction(channel, self.reaction_name, ts)
            except Exception:
                logger.warning("reactions.add:failed", extra={"data": {"ts": ts}}, exc_info=True)

    async def _find_previous_image(
        self, channel: str, root_ts: str, bot_user_id: Optional[str]
    ) -> Optional[ImageCandidate]:
        try:
            replies = await self._slack.list_replies(channel, root_ts)
        except Exception:
            logger.warning(
                "conversations.replies:failed",
                extra={"data": {"channel": channel}},
                exc_info=True,
            )
            return None
        return find_previous_bot_image(replies, root_ts, bot_user_id)

    async def _say(self, channel: str, thread_ts: str, text: str) -> None:
        try:
            await self._slack.post_message(channel, text, thread_ts=thread_ts)
        except Exception:
            logger.warning("chat.postMessage:failed", extra={"data": {"channel": channel}}, exc_info=True)

    async def _download(self, items: List[ImageCandidate], channel: str, prompt: str) -> List[InputImage]:
        """Fetch candidate images one at a time; failed downloads are skipped."""
        inputs: List[InputImage] = []
        for src in items:
            logger.info(
                "image:enqueue",
                extra={"data": {"name": src.name, "mime": src.mime, "channel": channel, "hasPrompt": bool(prompt)}},
            )
            data = await self._slack.download(src.url)
            if data is None:
                logger.error("download:image:not_ok", extra={"data": {"name": src.name}})
                continue
            inputs.append(InputImage(data=data, mime=src.mime, name=src.name))
        return inputs

    async def _generate(self, inputs: List[InputImage], prompt: str, trace_id: str) -> bytes:
        if not (self._generator.is_configured and prompt):
            # No API key: echo the first image back unchanged
            return inputs[0].data
        if len(inputs) > 1:
            return await self._generator.transform_images(inputs, prompt, trace_id=trace_id)
        return await self._generator.transform_image(inputs[0], prompt, trace_id=trace_id)

    async def _process_batch(
        self,
        items: List[ImageCandidate],
        channel: str,
        thread_ts: str,
        prompt: str,
        trace_id: str,
    ) -> None:
        inputs = await self._download(items, channel, prompt)
        if not inputs:
            raise NoInputsError()

        try:
            data = await self._generate(inputs, prompt, trace_id)
        except Exception as e:
            logger.error("gemini:failed", extra={"data": {"traceId": trace_id}}, exc_info=True)
            if self.debug_uploads:
                await self._upload_debug(items, prompt, e, channel, thread_ts, trace_id)
            raise

        if len(inputs) > 1:
            name = f"combined-{_millis()}.png"
        else:
            name = inputs[0].name or f"image-{_millis()}.png"
        output = GeneratedImage(data=data, mime=inputs[0].mime or "application/octet-stream", name=name)
        await self._slack.upload_file(
            channel, output.data, output.name, output.mime, thread_ts=thread_ts
        )
        logger.info(
            "slack:completeUploadExternal",
            extra={"data": {"channel": channel, "count": 1, "bytes": len(output.data)}},
        )

    async def _upload_debug(
        self,
        items: List[ImageCandidate],
        prompt: str,
        error: Exception,
        channel: str,
        thread_ts: str,
        trace_id: str,
    ) -> None:
        """Upload a small JSON blob describing a failed generation."""
        payload = {
            "names": [i.name for i in items],
            "prompt": prompt,
            "error": str(error),
            "traceId": trace_id,
        }
        if isinstance(error, GenerationError):
            payload["diagnostics"] = error.diagnostics()
        content = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
        try:
            await self._slack.upload_file(
                channel,
                content,
                f"gemini-debug-{_millis()}.json",
                "application/json",
                thread_ts=thread_ts,
            )
        except Exception:
            logger.warning("debug:upload_failed", extra={"data": {"traceId": trace_id}}, exc_info=True)
