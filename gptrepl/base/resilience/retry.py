"""Retry policy for establishing a completion exchange.

The first retry waits ``initial_delay`` seconds; after every failed attempt
the next wait becomes ``wait * multiplier + uniform[0, jitter)``. Only
establishment is retried: the wrapped call either returns a stream or raises.
"""

from __future__ import annotations

import functools
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Protocol, Tuple, TypeVar

from ..errors import ErrorCode, ReplError

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: ReplError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 5
    initial_delay: float = 1.0
    multiplier: float = 2.0
    jitter: float = 1.0 / 3.0
    # None retries every error code
    retryable_codes: Optional[Tuple[ErrorCode, ...]] = None
    attempt_logger: AttemptLogger | None = None
    rng: Callable[[], float] = field(default=random.random, compare=False, repr=False)

    @property
    def max_attempts(self) -> int:
        return max(self.max_retries, 0) + 1

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry (``max_retries`` values)."""
        wait = self.initial_delay
        for _ in range(max(self.max_retries, 0)):
            yield wait
            wait = wait * self.multiplier + self.rng() * self.jitter

    def is_retryable(self, error: ReplError) -> bool:
        return self.retryable_codes is None or error.code in self.retryable_codes


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(config: RetryConfig = DEFAULT_RETRY_CONFIG):
    """Return a decorator applying the retry policy.

    - Retries on ``ReplError`` whose code passes ``config.is_retryable``
    - Sleeps with ``time.sleep`` between attempts
    - Re-raises the last error once the budget is spent
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:
            last_exc: ReplError | None = None
            for attempt, delay in enumerate(list(config.delays()) + [None]):
                try:
                    result = func(*args, **kwargs)
                except ReplError as e:
                    last_exc = e
                    if config.attempt_logger:
                        config.attempt_logger(
                            attempt=attempt,
                            max_attempts=config.max_attempts,
                            delay=delay,
                            error=e,
                        )
                    if delay is not None and config.is_retryable(e):
                        time.sleep(delay)
                        continue
                    raise
                if config.attempt_logger:
                    config.attempt_logger(
                        attempt=attempt,
                        max_attempts=config.max_attempts,
                        delay=None,
                        error=None,
                    )
                return result
            if last_exc is None:  # pragma: no cover
                raise RuntimeError("retry: reached terminal state without captured exception")
            raise last_exc

        return wrapper

    return decorator


__all__ = ["AttemptLogger", "RetryConfig", "DEFAULT_RETRY_CONFIG", "retry"]
