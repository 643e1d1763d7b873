"""Slack Events API routes."""

import logging

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from banana_bot.adapters.slack.events import decode_body, parse_envelope
from banana_bot.config import AppConfig
from banana_bot.domain.pipeline import EventProcessor
from banana_bot.domain.signature import verify_slack_signature
from banana_bot.ports.inbound import EventKind

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    ok: bool
    env: str


def ok() -> Response:
    return PlainTextResponse("ok", status_code=200)


def unauthorized() -> Response:
    return PlainTextResponse("invalid signature", status_code=401)


def bad_request(msg: str = "bad request") -> Response:
    return PlainTextResponse(msg, status_code=400)


async def read_verified_body(request: Request, config: AppConfig):
    """Return the raw body, or None when the Slack signature does not check out."""
    body = await request.body()
    valid = verify_slack_signature(
        config.slack.signing_secret,
        request.headers.get("x-slack-request-timestamp"),
        request.headers.get("x-slack-signature"),
        body,
        max_age=config.slack.signature_max_age,
    )
    logger.debug("signature", extra={"data": {"valid": valid}})
    return body if valid else None


def build_slack_router(config: AppConfig, processor: EventProcessor) -> APIRouter:
    router = APIRouter(tags=["slack"])

    # POST is accepted too so health checks never reach the fallback route
    @router.api_route("/healthz", methods=["GET", "HEAD", "POST"], response_model=HealthResponse)
    async def healthz():
        """Liveness probe"""
        return HealthResponse(ok=True, env=config.env or "dev")

    @router.post("/slack/events")
    async def slack_events(request: Request, background_tasks: BackgroundTasks):
        """Acknowledge Slack immediately; processing continues in the background."""
        logger.info("fetch", extra={"data": {"path": request.url.path, "method": request.method}})
        try:
            body = await read_verified_body(request, config)
            if body is None:
                return unauthorized()
        except Exception:
            logger.exception("fetch:exception")
            return PlainTextResponse("internal error", status_code=500)

        try:
            payload = decode_body(body, request.headers.get("content-type", ""))
            event = parse_envelope(payload)
        except Exception:
            logger.exception("handleEvents:exception")
            return ok()

        logger.debug("event:received", extra={"data": {"type": payload.get("type")}})
        if event is None:
            return ok()
        if event.kind == EventKind.URL_VERIFICATION:
            return JSONResponse({"challenge": event.challenge})

        logger.info(
            "event:callback",
            extra={
                "data": {
                    "etype": event.kind.value,
                    "channel": event.channel,
                    "thread_ts": event.thread_ts,
                    "files": len(event.attachments),
                }
            },
        )
        background_tasks.add_task(processor.process, event)
        return ok()

    return router
