"""HTTP client for fetching the pip bootstrap script.

Used when preferences name a ``bootstrap_url`` (for example
https://bootstrap.pypa.io/get-pip.py) instead of relying on ensurepip in
the target interpreter.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Union

import requests

from ..errors import BootstrapDownloadError
from .retry_policy import RetryPolicy, default_retry_policy

logger = logging.getLogger(__name__)


class BootstrapClient:
    """Downloads bootstrap scripts over HTTP(S)."""

    def __init__(
        self,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            retry_policy: Retry policy for failed requests.
            request_timeout: Per-request timeout in seconds.
            session: Session to use. A new one is created if omitted.
        """
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self._session = session or requests.Session()

    def download(self, url: str, dest: Union[str, Path]) -> Path:
        """Download ``url`` to ``dest``.

        Returns:
            The destination path.

        Raises:
            BootstrapDownloadError: After all retries are exhausted, or on
                an error the retry policy does not retry.
        """
        dest = Path(dest)
        response = self._request_with_retry(url)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response.content)
        logger.debug("Downloaded %s to %s (%d bytes)", url, dest, len(response.content))
        return dest

    def _request_with_retry(self, url: str) -> requests.Response:
        policy = self.retry_policy
        last_error: Optional[Exception] = None

        for attempt in range(policy.max_retries + 1):
            response = None
            try:
                response = self._session.get(url, timeout=self.request_timeout)

                if not policy.should_retry_status(response.status_code):
                    response.raise_for_status()
                    return response

                last_error = requests.HTTPError(
                    f"{response.status_code} Error for url: {url}",
                    response=response,
                )

            except requests.HTTPError as e:
                raise BootstrapDownloadError(f"Failed to download {url}: {e}") from e

            except requests.RequestException as e:
                if not policy.should_retry_error(e):
                    raise BootstrapDownloadError(f"Failed to download {url}: {e}") from e
                last_error = e

            if attempt < policy.max_retries:
                delay = policy.get_delay(attempt, response)
                logger.debug("Download of %s failed (%s), retrying in %.1fs",
                             url, last_error, delay)
                time.sleep(delay)

        raise BootstrapDownloadError(f"Failed to download {url}: {last_error}") from last_error

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
