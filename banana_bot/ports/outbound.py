"""Outbound ports — interfaces for external system adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

from banana_bot.ports.inbound import ThreadMessage

if TYPE_CHECKING:
    from banana_bot.domain.models import InputImage


@runtime_checkable
class DedupStorePort(Protocol):
    """Key-value store with per-key expiry."""

    async def get(self, key: str) -> Optional[str]: ...
    async def put(self, key: str, value: str, ttl: int) -> None: ...


@runtime_checkable
class ImageGeneratorPort(Protocol):
    """Interface for generative image backends."""

    @property
    def is_configured(self) -> bool: ...

    async def transform_image(
        self, image: InputImage, prompt: str, trace_id: Optional[str] = None
    ) -> bytes: ...

    async def transform_images(
        self, images: List[InputImage], prompt: str, trace_id: Optional[str] = None
    ) -> bytes: ...

    async def generate_image(self, prompt: str, trace_id: Optional[str] = None) -> bytes: ...


@runtime_checkable
class SlackPort(Protocol):
    """Interface for the messaging platform's Web API."""

    @property
    def is_configured(self) -> bool: ...

    async def add_reaction(self, channel: str, name: str, timestamp: str) -> Dict[str, Any]: ...
    async def post_message(
        self, channel: str, text: str, thread_ts: Optional[str] = None
    ) -> Dict[str, Any]: ...
    async def fetch_thread_root(self, channel: str, ts: str) -> Optional[ThreadMessage]: ...
    async def list_replies(self, channel: str, ts: str) -> List[ThreadMessage]: ...
    async def download(self, url: str) -> Optional[bytes]: ...
    async def upload_file(
        self,
        channel: str,
        data: bytes,
        filename: str,
        mime: str,
        thread_ts: Optional[str] = None,
    ) -> str: ...
