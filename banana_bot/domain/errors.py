"""Exceptions raised across the event pipeline."""

from typing import Any, Dict, Optional


class SlackApiError(Exception):
    """Raised when a Slack Web API call fails at the HTTP level."""

    def __init__(self, method: str, status: int, error: str = ""):
        self.method = method
        self.status = status
        self.error = error
        super().__init__(f"slackApi {method} http {status}")


class PublishError(Exception):
    """Raised when one of the three upload steps fails."""

    def __init__(self, step: str, detail: str = ""):
        self.step = step
        self.detail = detail
        message = f"{step} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NoInputsError(Exception):
    """Raised when none of the candidate images could be downloaded."""

    def __init__(self, message: str = "no inputs downloaded"):
        super().__init__(message)


class GenerationError(Exception):
    """Raised when the image model returns no image after its single retry."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        finish_reason: Optional[str] = None,
        block_reason: Optional[str] = None,
        text_preview: str = "",
        trace_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.status = status
        self.finish_reason = finish_reason
        self.block_reason = block_reason
        self.text_preview = text_preview
        self.trace_id = trace_id

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "error": str(self),
            "httpStatus": self.status,
            "finishReason": self.finish_reason or "n/a",
            "blockReason": self.block_reason or "n/a",
            "textPreview": self.text_preview,
            "traceId": self.trace_id,
        }
