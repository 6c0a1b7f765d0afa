"""
Retry with exponential backoff for calls to the reasoning engine.

Only transient failures are retried: connection problems, timeouts, rate
limiting (HTTP 429) and server errors (HTTP 5xx). Everything else is raised
immediately. When the retries run out the last error is re-raised.
"""

import functools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import openai
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

import config

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryOptions:
    """Backoff schedule: delay_n = min(initial_delay * backoff_factor**n, max_delay)."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0

    @classmethod
    def from_config(cls) -> "RetryOptions":
        return cls(
            max_retries=config.RETRY_MAX_RETRIES,
            initial_delay=config.RETRY_INITIAL_DELAY,
            max_delay=config.RETRY_MAX_DELAY,
            backoff_factor=config.RETRY_BACKOFF_FACTOR,
        )

    def delay_for(self, retry_number: int) -> float:
        """Seconds to wait before retry number ``retry_number`` (1-based)."""
        return min(
            self.initial_delay * self.backoff_factor ** (retry_number - 1),
            self.max_delay,
        )


def _status_code(error: BaseException) -> Optional[int]:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def is_transient_error(error: BaseException) -> bool:
    """Decide whether a failed call is worth retrying."""
    if isinstance(error, (openai.APIConnectionError, openai.APITimeoutError)):
        return True
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True

    status = _status_code(error)
    if status is not None:
        return status == 429 or 500 <= status < 600

    return "network" in str(error).lower()


def _retrying(
    options: RetryOptions, sleep: Optional[Callable[[float], None]] = None
) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(options.max_retries + 1),
        wait=wait_exponential(
            multiplier=options.initial_delay,
            exp_base=options.backoff_factor,
            max=options.max_delay,
        ),
        retry=retry_if_exception(is_transient_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep or time.sleep,
        reraise=True,
    )


def retry_call(
    fn: Callable[..., T],
    *args: Any,
    options: Optional[RetryOptions] = None,
    sleep: Optional[Callable[[float], None]] = None,
    **kwargs: Any,
) -> T:
    """Call ``fn(*args, **kwargs)``, retrying transient failures."""
    return _retrying(options or RetryOptions(), sleep)(fn, *args, **kwargs)


def with_retry(
    options: Optional[RetryOptions] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of :func:`retry_call`."""

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return retry_call(fn, *args, options=options, sleep=sleep, **kwargs)

        return wrapper

    return decorator
