"""
Status Poller

Repeatedly calls a fetch function until the result is terminal, the fetch
raises, or the total timeout elapses. Waits grow exponentially between
attempts with a little random jitter so clients do not poll in lockstep.

Only one fetch is ever outstanding: each attempt starts after the previous
wait completes. There is no retry on error; the first exception ends the poll.
"""

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Upper bound (exclusive) of the random jitter added to each wait, in ms
JITTER_MS = 200.0


@dataclass
class PollOptions:
    """Polling schedule. All durations in milliseconds."""
    interval: float = 1500
    max_interval: float = 6000
    timeout: float = 90000
    backoff_multiplier: float = 1.5

    @classmethod
    def from_config(cls, config) -> "PollOptions":
        return cls(
            interval=config.poll.interval_ms,
            max_interval=config.poll.max_interval_ms,
            timeout=config.poll.timeout_ms,
            backoff_multiplier=config.poll.backoff_multiplier,
        )


@dataclass
class PollResult(Generic[T]):
    """Outcome of a poll: exactly one of data, error or timed_out is set."""
    data: Optional[T] = None
    error: Optional[BaseException] = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.timed_out


def backoff_schedule(options: PollOptions) -> Iterator[float]:
    """Yield the pre-jitter wait bound for each successive attempt."""
    current = options.interval
    while True:
        yield min(current, options.max_interval)
        current = min(current * options.backoff_multiplier, options.max_interval)


async def poll(
    fetch_once: Callable[[], Awaitable[Optional[T]]],
    should_continue: Callable[[T], bool],
    options: Optional[PollOptions] = None,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
) -> PollResult[T]:
    """
    Poll until fetch_once yields a value for which should_continue is false.

    Args:
        fetch_once: Coroutine function returning the latest value (or None)
        should_continue: True while the value is not yet terminal
        options: Polling schedule (defaults: 1.5s doubling by 1.5x up to 6s, 90s total)
        clock: Monotonic clock in seconds
        sleep: Coroutine sleeping for a number of seconds
        rand: Uniform random source in [0, 1)

    Returns:
        PollResult with data, error or timed_out set
    """
    options = options or PollOptions()

    start = clock()
    current_interval = options.interval
    attempts = 0

    while (clock() - start) * 1000 < options.timeout:
        attempts += 1

        try:
            result = await fetch_once()

            if result and not should_continue(result):
                return PollResult(data=result)

            jitter = rand() * JITTER_MS
            wait_ms = min(current_interval + jitter, options.max_interval)

            await sleep(wait_ms / 1000)

            current_interval = min(current_interval * options.backoff_multiplier, options.max_interval)
        except Exception as e:
            logger.error(f"Poll attempt {attempts} failed: {e}")
            return PollResult(error=e)

    logger.warning(f"Polling timed out after {attempts} attempts")
    return PollResult(timed_out=True)
