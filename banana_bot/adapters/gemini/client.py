"""Gemini image model client using aiohttp — implements ImageGeneratorPort.

Inputs travel as inline base64 parts next to a text prompt. When a response
carries no image the request is repeated once with ``TEXT`` added to the
response modalities; a second miss is final.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp

from banana_bot.config import DEFAULT_GEMINI_MODEL
from banana_bot.domain.errors import GenerationError
from banana_bot.domain.models import InputImage

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
IMAGE_ONLY = ["IMAGE"]
TEXT_AND_IMAGE = ["TEXT", "IMAGE"]


def _first(d: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if d.get(key) is not None:
            return d[key]
    return None


def build_request(prompt: str, images: Sequence[InputImage], modalities: List[str]) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [{"text": prompt}]
    for img in images:
        parts.append({
            "inline_data": {
                "mime_type": img.mime,
                "data": base64.b64encode(img.data).decode("ascii"),
            }
        })
    return {
        "contents": [{"parts": parts}],
        "generationConfig": {"responseModalities": modalities},
    }


def parse_response(data: Dict[str, Any]) -> Tuple[Optional[bytes], Dict[str, Any]]:
    """Return (image bytes or None, diagnostics) from a generateContent reply."""
    candidates = data.get("candidates") or []
    candidate = candidates[0] if candidates and isinstance(candidates[0], dict) else {}
    parts = (candidate.get("content") or {}).get("parts") or []
    feedback = _first(data, "promptFeedback", "prompt_feedback") or {}

    image_b64 = None
    text_preview = ""
    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = _first(part, "inline_data", "inlineData") or {}
        if image_b64 is None and inline.get("data"):
            image_b64 = inline["data"]
        if not text_preview and isinstance(part.get("text"), str):
            text_preview = part["text"][:200]

    info = {
        "finishReason": _first(candidate, "finishReason", "finish_reason"),
        "blockReason": _first(feedback, "blockReason", "block_reason"),
        "model": _first(data, "modelVersion", "model_version"),
        "textPreview": text_preview,
    }
    if image_b64 is None:
        return None, info
    return base64.b64decode(image_b64), info


class GeminiImageClient:
    """Async client for Gemini's image generation/editing model."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        api_base: str = GEMINI_API_BASE,
        timeout: float = 120.0,
    ):
        self._api_key = api_key
        self.model = model
        self._api_base = api_base
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/models/{self.model}:generateContent"

    async def _post(self, body: Dict[str, Any]) -> Tuple[int, Dict[str, Any]]:
        headers = {"content-type": "application/json", "x-goog-api-key": self._api_key}
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.endpoint, json=body, headers=headers) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = {}
                return resp.status, data if isinstance(data, dict) else {}

    async def _generate(
        self,
        images: Sequence[InputImage],
        prompt: str,
        mode: str,
        trace_id: Optional[str],
        retry: bool = True,
    ) -> bytes:
        logger.info(
            "gemini:req",
            extra={
                "data": {
                    "gid": trace_id,
                    "mode": mode,
                    "images": len(images),
                    "promptLen": len(prompt),
                    "totalBytes": sum(len(i.data) for i in images),
                }
            },
        )
        logger.debug("gemini:req:detail", extra={"data": {"gid": trace_id, "promptSample": prompt[:80]}})

        status, data = await self._post(build_request(prompt, images, IMAGE_ONLY))
        image, info = parse_response(data)
        logger.info(
            "gemini:res",
            extra={"data": {"gid": trace_id, "status": status, "gotImage": image is not None, **info}},
        )
        if image is not None:
            return image
        if not retry:
            raise GenerationError(
                f"Gemini did not return an image ({mode}). http={status}",
                status=status,
                finish_reason=info["finishReason"],
                block_reason=info["blockReason"],
                text_preview=info["textPreview"],
                trace_id=trace_id,
            )

        logger.info("gemini:fallback", extra={"data": {"gid": trace_id, "mode": mode, "to": "TEXT,IMAGE"}})
        status, data = await self._post(build_request(prompt, images, TEXT_AND_IMAGE))
        image, info = parse_response(data)
        logger.info(
            "gemini:res",
            extra={"data": {"gid": trace_id, "status": status, "gotImage": image is not None, **info}},
        )
        if image is None:
            logger.error("gemini:no_inline_image", extra={"data": {"gid": trace_id, "httpStatus": status, **info}})
            raise GenerationError(
                f"Gemini did not return an image (fallback). http={status}",
                status=status,
                finish_reason=info["finishReason"],
                block_reason=info["blockReason"],
                text_preview=info["textPreview"],
                trace_id=trace_id,
            )
        return image

    async def transform_image(
        self, image: InputImage, prompt: str, trace_id: Optional[str] = None
    ) -> bytes:
        """Edit one image according to ``prompt``."""
        return await self._generate([image], prompt, "single", trace_id)

    async def transform_images(
        self, images: List[InputImage], prompt: str, trace_id: Optional[str] = None
    ) -> bytes:
        """Combine several images into one output image."""
        return await self._generate(images, prompt, "combined", trace_id)

    async def generate_image(self, prompt: str, trace_id: Optional[str] = None) -> bytes:
        """Generate an image from text alone (no retry)."""
        return await self._generate([], prompt, "text-only", trace_id, retry=False)
