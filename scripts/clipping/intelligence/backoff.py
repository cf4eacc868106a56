"""
Retry wrapper with exponential backoff for rate-limited calls.

A rate-limit failure sleeps ``min(base * 2**attempt + jitter, cap)`` before
the next attempt; any other failure sleeps a linear ``step * (attempt + 1)``.
The last error is re-raised once attempts are exhausted. Sleeping happens in
the calling thread, so unrelated calls running on other threads are never
held up.
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_rate_limited(exc: BaseException) -> bool:
    """Whether an exception is an HTTP 429 response."""
    if isinstance(exc, requests.HTTPError):
        response = exc.response
        return response is not None and response.status_code == 429
    return False


class BackoffExecutor:
    """Runs a zero-argument operation with bounded retries."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        linear_delay: float = 2.0,
        classifier: Callable[[BaseException], bool] = is_rate_limited,
        sleep: Callable[[float], None] = time.sleep,
        jitter: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.linear_delay = linear_delay
        self.classifier = classifier
        self._sleep = sleep
        self._jitter = jitter

    @classmethod
    def from_config(cls, cfg, **overrides) -> "BackoffExecutor":
        """Build an executor from the ``backoff`` config block."""
        params = {
            "max_attempts": cfg.get("backoff.max_attempts", 3),
            "base_delay": cfg.get("backoff.base_delay", 1.0),
            "max_delay": cfg.get("backoff.max_delay", 10.0),
            "linear_delay": cfg.get("backoff.linear_delay", 2.0),
        }
        params.update(overrides)
        return cls(**params)

    def delay_for(self, attempt: int, exc: BaseException) -> float:
        """Seconds to wait after the given zero-based attempt failed with exc."""
        if self.classifier(exc):
            # Jitter is in seconds, up to one base unit
            jittered = self.base_delay * (2**attempt) + self._jitter() * self.base_delay
            return min(jittered, self.max_delay)
        return self.linear_delay * (attempt + 1)

    def run(self, operation: Callable[[], T], max_attempts: Optional[int] = None) -> T:
        """
        Invoke operation until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable to retry.
            max_attempts: Per-call override of the configured attempt count.

        Returns:
            The operation's return value.

        Raises:
            The exception from the final failed attempt.
            ValueError: If max_attempts is less than 1.
        """
        attempts = max_attempts if max_attempts is not None else self.max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        for attempt in range(attempts):
            try:
                return operation()
            except Exception as e:
                if attempt == attempts - 1:
                    logger.warning("Giving up after %d attempts: %s", attempts, e)
                    raise
                delay = self.delay_for(attempt, e)
                logger.info(
                    "Attempt %d/%d failed (%s), retrying in %.1fs",
                    attempt + 1,
                    attempts,
                    "rate limited" if self.classifier(e) else e,
                    delay,
                )
                self._sleep(delay)
        raise RuntimeError("unreachable")  # pragma: no cover
