"""
Retry with exponential backoff for OpenAI API calls.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, TypeVar

from errors import ProviderError, TransientProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryOptions:
    """Backoff policy for with_retry."""

    max_retries: int = 3
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0
    max_delay: float = 10.0
    retryable_status_codes: FrozenSet[int] = field(
        default_factory=lambda: DEFAULT_RETRYABLE_STATUS_CODES
    )

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt + 1``."""
        delay = self.initial_delay * (self.backoff_multiplier**attempt)
        return min(delay, self.max_delay)


def is_retryable(error: Exception, options: RetryOptions) -> bool:
    """
    Decide whether an error is worth retrying.

    Only provider errors are retried: those with a status code in the
    configured set, and transport failures that carry no status code.
    """
    if not isinstance(error, ProviderError):
        return False
    if error.status_code is None:
        return isinstance(error, TransientProviderError)
    return error.status_code in options.retryable_status_codes


def with_retry(
    operation: Callable[[], T],
    options: Optional[RetryOptions] = None,
    description: str = "operation",
) -> T:
    """
    Execute an operation, retrying transient provider failures.

    Args:
        operation: Zero-argument callable performing one API call
        options: Backoff policy (defaults to RetryOptions())
        description: Short label used in log messages

    Returns:
        Whatever the operation returns

    Raises:
        The operation's error if it is not retryable, or the last error
        once retries are exhausted
    """
    opts = options or RetryOptions()

    for attempt in range(opts.max_retries + 1):
        try:
            return operation()
        except Exception as e:
            if not is_retryable(e, opts) or attempt == opts.max_retries:
                raise

            delay = opts.delay_for(attempt)
            logger.warning(
                f"Retrying {description} ({e}), attempt {attempt + 1}/{opts.max_retries}, waiting {delay:.1f}s..."
            )
            time.sleep(delay)

    # max_retries < 0 leaves nothing to run
    raise ValueError(f"Invalid max_retries: {opts.max_retries}")
