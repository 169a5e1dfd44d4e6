"""
Retry timing for network operations.

Archive downloads are retried on transient failures (timeouts, refused
connections, rate limiting) with exponentially growing, jittered delays.
"""

import random


class ExponentialBackoff:
    """Exponential backoff with ±25% jitter, capped at max_delay."""

    def __init__(self, base_delay: float = 1.0, max_delay: float = 30.0, max_retries: int = 3):
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.max_retries = max_retries

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number `attempt + 1`."""
        delay = min(self.base_delay * (2**attempt), self.max_delay)
        return max(0.0, delay * random.uniform(0.75, 1.25))

    def should_retry(self, attempt: int) -> bool:
        """True while `attempt` (0-based count of failures so far) is under the limit."""
        return attempt < self.max_retries

    def retry_after(self, header: str | None) -> float:
        """Seconds to wait for a 429 response, honouring Retry-After but never above max_delay."""
        try:
            seconds = float(header) if header else self.max_delay
        except ValueError:
            seconds = self.max_delay
        return min(max(seconds, 0.0), self.max_delay)
