from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from botocore.exceptions import (
    ConnectionClosedError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from syncstore.core.errors import FetchError

T = TypeVar("T")

# Network-level faults only; provider answers (403, 404, ...) are not retried.
TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    FetchError,
    EndpointConnectionError,
    ConnectionClosedError,
    ReadTimeoutError,
)


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 30.0
    retryable_exceptions: tuple[type[Exception], ...] = TRANSIENT_ERRORS

    @classmethod
    def from_repeat_count(cls, repeat_count: int) -> "RetryConfig":
        """Build the policy a driver's ``request_repeat_count()`` hint asks for."""
        return cls(max_attempts=max(repeat_count, 0))


def calculate_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = base_delay * (2 ** attempt)
    jitter = random.uniform(0, base_delay * (2 ** max(attempt - 1, 0)))
    return min(delay + jitter, max_delay)


def should_retry(error: Exception, attempt: int, config: RetryConfig) -> bool:
    if attempt >= config.max_attempts:
        return False
    return isinstance(error, config.retryable_exceptions)


def retry_with_backoff(
    config: RetryConfig,
    logger: logging.Logger | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def wrapper(*args, **kwargs) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as error:  # noqa: BLE001 - explicit retry behavior
                    if not should_retry(error, attempt, config):
                        raise
                    delay = calculate_backoff(
                        attempt=attempt,
                        base_delay=config.base_delay_seconds,
                        max_delay=config.max_delay_seconds,
                    )
                    if logger is not None:
                        logger.warning(
                            f"Attempt {attempt + 1} failed ({error}); retrying in {delay:.1f}s"
                        )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def run_with_backoff(
    func: Callable[..., T],
    config: RetryConfig,
    *args,
    logger: logging.Logger | None = None,
    **kwargs,
) -> T:
    return retry_with_backoff(config, logger)(func)(*args, **kwargs)
