import asyncio
import sys
from pathlib import Path
from typing import Callable, Dict, List, Union

import httpx
import pytest

# Make config.py and the fitness_chat package importable when running from the repo root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Mode, Settings  # noqa: E402
from fitness_chat.services.completion_service import CompletionService  # noqa: E402
from fitness_chat.services.key_pool import KeyPool  # noqa: E402


Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


def ok(content: str) -> httpx.Response:
    """A successful OpenRouter completion body."""
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


class FakeUpstream:
    """
    Stands in for OpenRouter behind an httpx.MockTransport.

    replies maps an API key to what that key gets back: a response, an exception
    to raise, or a callable. Every request is recorded in calls.
    """

    def __init__(self, replies: Dict[str, Reply]):
        self.replies = replies
        self.calls: List[httpx.Request] = []

    @property
    def keys_used(self) -> List[str]:
        return [r.headers["Authorization"][len("Bearer "):] for r in self.calls]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = request.headers["Authorization"][len("Bearer "):]
        reply = self.replies[key]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def make_settings():
    def factory(*keys: str, **overrides) -> Settings:
        values = dict(
            credentials=tuple(keys),
            mode=Mode.DEVELOPMENT,
            app_url="http://localhost:8080",
            upstream_url="https://openrouter.test/api/v1/chat/completions",
            request_timeout=5.0,
            show_error_details=True,
        )
        values.update(overrides)
        return Settings(**values)

    return factory


@pytest.fixture
def run_completion():
    """Run CompletionService.complete() against a FakeUpstream on a fresh event loop."""

    def runner(pool: KeyPool, upstream: FakeUpstream, settings: Settings, message: str = "Tips?", **kwargs):
        async def go():
            async with httpx.AsyncClient(transport=upstream.transport()) as client:
                service = CompletionService(pool, client, settings)
                return await service.complete(message, **kwargs)

        return asyncio.run(go())

    return runner
