"""
RETRY UTILITY
=============

Calls an async attempt function and, if it reports a rate limit, calls it again
up to a fixed number of attempts. Used by CompletionService so that a key that
hit its rate limit is swapped for the next key in the pool.

There is no backoff delay: the next attempt uses a different key, so waiting
would not help. Any exception that is not a rate limit stops the loop at once.

States:
  ATTEMPTING   - about to call attempt_fn (or waiting on it).
  RATE_LIMITED - attempt_fn raised one of retry_on; go again if budget remains.
  SUCCEEDED    - attempt_fn returned; its value is the result.
  FAILED       - any other exception, or the budget ran out while rate limited.

Example:
  text = await with_rotation(lambda attempt: call_with_next_key(), max_attempts=3,
                             retry_on=(RateLimited,))
"""

import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple, Type, TypeVar

from fitness_chat.errors import NoCredentialsConfigured, RateLimited, UpstreamExhausted


logger = logging.getLogger("fitness_chat")

# Type variable: with_rotation returns whatever the attempt function returns.
T = TypeVar("T")


class AttemptState(str, Enum):
    ATTEMPTING = "attempting"
    RATE_LIMITED = "rate_limited"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


async def with_rotation(
    attempt_fn: Callable[[int], Awaitable[T]],
    max_attempts: int,
    retry_on: Tuple[Type[RateLimited], ...] = (RateLimited,),
    transitions: Optional[List[AttemptState]] = None,
) -> T:
    """
    Await attempt_fn(attempt) for attempt = 1 .. max_attempts.

    Returns the first successful result. A retry_on exception moves on to the next
    attempt, except on the last one, where UpstreamExhausted is raised carrying it.
    Any other exception propagates unchanged after the first occurrence.

    If transitions is given, every state entered is appended to it.
    """
    if max_attempts <= 0:
        raise NoCredentialsConfigured()

    def enter(state: AttemptState) -> None:
        if transitions is not None:
            transitions.append(state)

    last_rate_limit: Optional[RateLimited] = None

    for attempt in range(1, max_attempts + 1):
        enter(AttemptState.ATTEMPTING)
        try:
            result = await attempt_fn(attempt)
        except retry_on as e:
            enter(AttemptState.RATE_LIMITED)
            last_rate_limit = e
            logger.warning("Rate limit hit on attempt %s/%s, trying next key...", attempt, max_attempts)
            if attempt == max_attempts:
                enter(AttemptState.FAILED)
                raise UpstreamExhausted(e, attempts=attempt) from e
            continue
        except Exception:
            enter(AttemptState.FAILED)
            raise
        enter(AttemptState.SUCCEEDED)
        return result

    # Unreachable: the last attempt either returns or raises above.
    raise UpstreamExhausted(last_rate_limit, attempts=max_attempts)
