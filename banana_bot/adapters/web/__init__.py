"""HTTP adapters."""

from banana_bot.adapters.web.slack_routes import build_slack_router

__all__ = ["build_slack_router"]
