"""When to re-request a bootstrap download, and how long to wait first.

Server errors, rate limiting and dropped connections are worth another
try. Any other answer from the server is final.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

import requests

RETRY_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass
class RetryPolicy:
    """Exponential backoff for bootstrap downloads.

    Attributes:
        max_retries: Requests made after the first one.
        initial_delay: Seconds before the first retry.
        backoff_factor: Delay multiplier per retry.
        max_delay: Upper bound for a single wait, Retry-After included.
        retry_statuses: HTTP status codes that are retried.
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 30.0
    retry_statuses: FrozenSet[int] = RETRY_STATUSES

    def should_retry_status(self, status_code: int) -> bool:
        return status_code in self.retry_statuses

    def should_retry_error(self, error: Exception) -> bool:
        """Connection failures and timeouts are retried; bad URLs are not."""
        return isinstance(error, (requests.ConnectionError, requests.Timeout))

    def get_delay(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        """Seconds to wait before retry ``attempt`` (0 = first retry).

        A Retry-After header given in seconds replaces the backoff.
        """
        retry_after = response.headers.get("Retry-After", "") if response is not None else ""
        if retry_after.strip().isdigit():
            return min(float(retry_after), self.max_delay)
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)


def default_retry_policy() -> RetryPolicy:
    """3 retries, 1s initial delay, 2x backoff, 30s max."""
    return RetryPolicy()
