"""Retry policy for HTTP transport.

Only idempotent GET requests are retried; uploads are sent once.
"""

from dataclasses import dataclass


@dataclass
class RetryPolicy:
    """Configurable retry policy with exponential backoff."""
    max_retries: int = 2
    initial_delay: float = 0.5
    backoff_factor: float = 2.0
    max_delay: float = 5.0

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed).

        Args:
            attempt: Current attempt number (0 = first retry).

        Returns:
            Delay in seconds before next retry.
        """
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)


def default_retry_policy() -> RetryPolicy:
    """Create default retry policy.

    2 retries, 0.5s initial delay, 2x backoff, 5s max.
    """
    return RetryPolicy()
