"""Transport module - bootstrap script downloads."""

from .bootstrap_client import BootstrapClient
from .retry_policy import RetryPolicy, default_retry_policy

__all__ = [
    "BootstrapClient",
    "RetryPolicy",
    "default_retry_policy",
]
