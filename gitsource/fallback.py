"""Try an operation against each candidate URL until one succeeds."""

import logging
from typing import Callable, List, Sequence, Tuple, TypeVar

from gitsource.exceptions import FallbackExhaustedError, VcsRuntimeError
from gitsource.utils import sanitize_url

logger = logging.getLogger(__name__)

T = TypeVar("T")


def try_each(
    urls: Sequence[str], attempt: Callable[[str], T]
) -> Tuple[str, T]:
    """
    Call `attempt` with each URL in order and stop at the first success.

    Only VcsRuntimeError counts as a failed attempt; other exceptions
    propagate immediately. Nothing is remembered between calls, so a URL
    that failed once is tried again on the next call.

    Args:
        urls: Candidate URLs, preferred first
        attempt: Operation to run against one URL

    Returns:
        Tuple of (winning_url, attempt_result)

    Raises:
        FallbackExhaustedError: If every URL failed, listing each URL and its error
    """
    failures: List[Tuple[str, Exception]] = []
    for index, url in enumerate(urls):
        try:
            return url, attempt(url)
        except VcsRuntimeError as e:
            failures.append((sanitize_url(url), e))
            if index < len(urls) - 1:
                logger.warning(f"Failed with {sanitize_url(url)}, trying the next URL")
            logger.debug(f"Attempt with {sanitize_url(url)} failed: {e}")

    raise FallbackExhaustedError(failures)
