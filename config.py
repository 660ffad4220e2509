"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all Fitness Chat settings: OpenRouter API keys, the upstream
  endpoint and model, the server port, deployment mode, and the fitness coach
  system prompt.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Collects OpenRouter keys from OPENROUTER_API_KEY and the numbered slots
    OPENROUTER_API_KEY_1 .. OPENROUTER_API_KEY_5, dropping empty ones.
  - Builds a Settings object that the app factory receives, so tests can pass
    their own settings instead of touching the environment.
  - Holds the system prompt that keeps answers on fitness topics.

USAGE:
  from config import load_settings, FITNESS_SYSTEM_PROMPT
  settings = load_settings()
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Tuple
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
load_dotenv()


# -----------------------------------------------------------------------------
# BASE PATH
# -----------------------------------------------------------------------------
BASE_DIR = Path(__file__).parent

# ============================================================================
# OPENROUTER API CONFIGURATION
# ============================================================================
# Keys are read from fixed slots: OPENROUTER_API_KEY_1 .. OPENROUTER_API_KEY_5.
# A single OPENROUTER_API_KEY is also accepted and goes first in the pool.
# Request 1 uses the 1st key, request 2 the 2nd, and so on, wrapping around.
# If a key is rate limited (429 / 402), the same request moves on to the next key.

API_KEY_SLOTS = 5

DEFAULT_PORT = 5000
DEFAULT_APP_URL = "http://localhost:8080"
DEFAULT_MODEL = "anthropic/claude-3-haiku"
DEFAULT_UPSTREAM_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_REQUEST_TIMEOUT = 30.0

# Sent as X-Title so OpenRouter can attribute requests to this app.
CLIENT_TITLE = "Fitness Chat AI"


class Mode(str, Enum):
    """Deployment mode. Controls CORS origin and static serving."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Mode":
        if value and value.strip().lower() in {"production", "prod"}:
            return cls.PRODUCTION
        return cls.DEVELOPMENT


def _is_explicit_development(value: Optional[str]) -> bool:
    """Error details are echoed only when NODE_ENV / APP_ENV says development outright."""
    return bool(value) and value.strip().lower() in {"development", "dev"}


@dataclass(frozen=True)
class Settings:
    """
    Everything the server needs at startup, built once and passed to create_app().

    credentials may be empty: the server still starts and /api/chat answers
    every request with "No API keys configured".
    """

    credentials: Tuple[str, ...] = ()
    port: int = DEFAULT_PORT
    mode: Mode = Mode.DEVELOPMENT
    app_url: str = DEFAULT_APP_URL
    model: str = DEFAULT_MODEL
    upstream_url: str = DEFAULT_UPSTREAM_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    client_title: str = CLIENT_TITLE
    static_dir: Path = BASE_DIR / "dist"
    # Echo upstream error bodies to clients in 500 responses.
    show_error_details: bool = False

    @property
    def is_production(self) -> bool:
        return self.mode is Mode.PRODUCTION

    @property
    def cors_origin(self) -> str:
        """Production allows only APP_URL; development allows the local frontend."""
        return self.app_url if self.is_production else DEFAULT_APP_URL


def _load_api_key_candidates(env: Mapping[str, str]) -> list:
    """
    Return the raw key values in pool order: OPENROUTER_API_KEY first, then
    OPENROUTER_API_KEY_1 .. OPENROUTER_API_KEY_5. Missing slots come back as
    None; filtering is left to KeyPool.initialize().
    """
    candidates = [env.get("OPENROUTER_API_KEY")]
    for i in range(1, API_KEY_SLOTS + 1):
        candidates.append(env.get(f"OPENROUTER_API_KEY_{i}"))
    return candidates


def _parse_port(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer, got {raw!r}")
    if not 0 < port < 65536:
        raise ValueError(f"PORT out of range: {port}")
    return port


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"REQUEST_TIMEOUT must be a number, got {raw!r}")
    if timeout <= 0:
        raise ValueError(f"REQUEST_TIMEOUT must be positive, got {timeout}")
    return timeout


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from the environment (or from the given mapping, for tests).

    Bad PORT / REQUEST_TIMEOUT values raise ValueError so the server refuses to
    start. An empty key pool only logs a warning.
    """
    if env is None:
        env = os.environ

    # Imported here so config stays importable without the package on sys.path.
    from fitness_chat.services.key_pool import KeyPool

    pool = KeyPool.initialize(_load_api_key_candidates(env))
    if not pool:
        logger.warning("No OpenRouter API keys configured. /api/chat will return 500 until keys are set.")

    env_name = env.get("NODE_ENV") or env.get("APP_ENV")
    static_dir = env.get("STATIC_DIR")
    return Settings(
        credentials=pool.credentials,
        port=_parse_port(env.get("PORT")),
        mode=Mode.parse(env_name),
        app_url=(env.get("APP_URL") or "").strip() or DEFAULT_APP_URL,
        model=(env.get("OPENROUTER_MODEL") or "").strip() or DEFAULT_MODEL,
        upstream_url=(env.get("OPENROUTER_URL") or "").strip() or DEFAULT_UPSTREAM_URL,
        request_timeout=_parse_timeout(env.get("REQUEST_TIMEOUT")),
        static_dir=Path(static_dir) if static_dir else BASE_DIR / "dist",
        show_error_details=_is_explicit_development(env_name),
    )


# ============================================================================
# FITNESS COACH PERSONALITY
# ============================================================================
# Fixed system prompt sent with every request. Users cannot change it; they only
# supply the single user message.

FITNESS_SYSTEM_PROMPT = (
    "You are a knowledgeable and supportive fitness coach. Provide clear, accurate, and science-based advice "
    "about exercise, nutrition, and healthy living. "
    "Tailor each answer to the user's specific question and goals. Respond in a way that is informative but "
    "brief: avoid unnecessary details, but include the most important facts or tips. "
    "When appropriate, suggest consulting a healthcare or fitness professional. Never recommend unsafe or "
    "extreme practices. "
    "If a medical condition is mentioned, always emphasize the need for professional medical advice. "
    "AND DO NOT ANSWER non related fitness questions, instead say this Sorry, I can not answer any questions "
    "that are not related to fitness!"
)
