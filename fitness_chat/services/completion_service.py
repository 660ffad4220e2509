"""
COMPLETION SERVICE MODULE
=========================

Sends one user message to OpenRouter under the fitness coach system prompt and
returns the reply text. Used by POST /api/chat.

ROUND-ROBIN API KEYS:
  - Every attempt takes the next key from the shared KeyPool, so consecutive
    requests (and retries inside one request) spread over all keys.
  - By default a request gets as many attempts as there are keys, so in the worst
    case each key is tried once.
  - Keys are only ever logged masked.

FLOW:
  1. complete(message): fail fast with NoCredentialsConfigured if there is no key.
  2. _attempt(): take next key, POST to OpenRouter with a timeout.
  3. classify_response(): 2xx -> reply text; 429 / 402 / rate_limit_exceeded ->
     RateLimited (with_rotation tries the next key); anything else -> UpstreamError.
"""

import logging
from typing import Any, Optional

import httpx

from config import FITNESS_SYSTEM_PROMPT, Settings
from fitness_chat.errors import NoCredentialsConfigured, RateLimited, UpstreamError
from fitness_chat.services.key_pool import KeyPool
from fitness_chat.utils.masking import mask_key
from fitness_chat.utils.retry import with_rotation


logger = logging.getLogger("fitness_chat")

RATE_LIMIT_STATUS_CODES = frozenset({429, 402})
RATE_LIMIT_ERROR_CODES = frozenset({"rate_limit_exceeded", "429", 429})


def _json_or_text(response: httpx.Response) -> Any:
    """Parsed JSON body if there is one, else the raw text (or None if empty)."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _error_code(body: Any) -> Any:
    """Pull error.code out of an OpenAI-style error body, if present."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("code")
    return None


def _is_rate_limit_code(code: Any) -> bool:
    try:
        return code in RATE_LIMIT_ERROR_CODES
    except TypeError:
        # Unhashable code (list/dict) can't be a rate limit marker.
        return False


def classify_response(response: httpx.Response) -> str:
    """
    Turn an upstream HTTP response into reply text, or raise the classified error.

    This is the only place that decides between "retry with the next key"
    (RateLimited) and "give up now" (UpstreamError).
    """
    body = _json_or_text(response)

    if response.status_code in RATE_LIMIT_STATUS_CODES or _is_rate_limit_code(_error_code(body)):
        raise RateLimited(response.status_code, body)

    if not response.is_success:
        raise UpstreamError(
            f"Upstream returned HTTP {response.status_code}",
            status_code=response.status_code,
            body=body,
        )

    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise UpstreamError(
            "Malformed upstream response: missing choices[0].message.content",
            status_code=response.status_code,
            body=body,
        ) from e
    if not isinstance(content, str):
        raise UpstreamError(
            "Malformed upstream response: message content is not text",
            status_code=response.status_code,
            body=body,
        )
    return content


class CompletionService:
    """
    Performs one logical chat completion, rotating keys when OpenRouter rate limits us.

    The httpx client is owned by the caller (the FastAPI lifespan) so it can be
    shared across requests and swapped for a mock transport in tests.
    """

    def __init__(
        self,
        key_pool: KeyPool,
        http_client: httpx.AsyncClient,
        settings: Settings,
        system_prompt: str = FITNESS_SYSTEM_PROMPT,
    ):
        self.key_pool = key_pool
        self.http_client = http_client
        self.settings = settings
        self.system_prompt = system_prompt

    def build_payload(self, user_message: str) -> dict:
        return {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_message},
            ],
        }

    def build_headers(self, api_key: str) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.settings.app_url,
            "X-Title": self.settings.client_title,
        }

    async def complete(self, user_message: str, max_attempts: Optional[int] = None) -> str:
        """
        Return the assistant's reply for user_message.

        Raises NoCredentialsConfigured, UpstreamExhausted or UpstreamError. Never
        makes more than max_attempts (default: pool size) upstream calls.
        """
        attempts = self.key_pool.size if max_attempts is None else max_attempts
        if attempts <= 0 or not self.key_pool:
            raise NoCredentialsConfigured()

        reply = await with_rotation(
            lambda attempt: self._attempt(user_message, attempt, attempts),
            max_attempts=attempts,
            retry_on=(RateLimited,),
        )
        logger.info("Reply received (%s chars)", len(reply))
        return reply

    async def _attempt(self, user_message: str, attempt: int, max_attempts: int) -> str:
        api_key = self.key_pool.take_next()
        logger.info("Attempt %s/%s using key %s", attempt, max_attempts, mask_key(api_key))

        try:
            response = await self.http_client.post(
                self.settings.upstream_url,
                json=self.build_payload(user_message),
                headers=self.build_headers(api_key),
                timeout=self.settings.request_timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Upstream request timed out after {self.settings.request_timeout}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request failed: {e}") from e

        return classify_response(response)
