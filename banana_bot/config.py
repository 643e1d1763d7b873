"""Configuration and shared settings."""

__version__ = "0.1.0"

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-image-preview"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


CONFIG = {
    "port": int(os.getenv("PORT", "3000")),
    "env": os.getenv("ENV", "dev"),
    "log_level": os.getenv("LOG_LEVEL", "info").strip().lower(),
    # Slack
    "slack_signing_secret": os.getenv("SLACK_SIGNING_SECRET", ""),
    "slack_bot_token": os.getenv("SLACK_BOT_TOKEN", ""),
    "reaction_name": os.getenv("REACTION_NAME", "banana"),
    # Gemini
    "gemini_api_key": os.getenv("GEMINI_API_KEY", ""),
    "gemini_model": os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
    # Upload a JSON debug file into the thread when generation fails
    "gemini_debug": _env_flag("GEMINI_DEBUG"),
    # Dedup store; empty REDIS_URL keeps keys in process memory
    "redis_url": os.getenv("REDIS_URL", ""),
    "dedup_ttl_seconds": int(os.getenv("DEDUP_TTL_SECONDS", "300")),
    "signature_max_age": int(os.getenv("SIGNATURE_MAX_AGE", "300")),
}


# ── Typed config ──────────────────────────────────────


@dataclass
class SlackConfig:
    signing_secret: str = ""
    bot_token: str = ""
    reaction_name: str = "banana"
    signature_max_age: int = 300


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = DEFAULT_GEMINI_MODEL
    debug: bool = False


@dataclass
class DedupConfig:
    redis_url: str = ""
    ttl_seconds: int = 300


@dataclass
class AppConfig:
    """Typed configuration passed to the app factory and the pipeline."""

    port: int = 3000
    env: str = "dev"
    log_level: str = "info"
    slack: SlackConfig = field(default_factory=SlackConfig)
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=CONFIG["port"],
            env=CONFIG["env"],
            log_level=CONFIG["log_level"],
            slack=SlackConfig(
                signing_secret=CONFIG["slack_signing_secret"],
                bot_token=CONFIG["slack_bot_token"],
                reaction_name=CONFIG["reaction_name"] or "banana",
                signature_max_age=CONFIG["signature_max_age"],
            ),
            gemini=GeminiConfig(
                api_key=CONFIG["gemini_api_key"],
                model=CONFIG["gemini_model"] or DEFAULT_GEMINI_MODEL,
                debug=CONFIG["gemini_debug"],
            ),
            dedup=DedupConfig(
                redis_url=CONFIG["redis_url"],
                ttl_seconds=CONFIG["dedup_ttl_seconds"],
            ),
        )
