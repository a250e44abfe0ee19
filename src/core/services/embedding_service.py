"""Embedding acquisition with bounded retry and exponential backoff."""

import logging
import time
from collections.abc import Callable

from ..domain.exceptions import EmbeddingError
from ..ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds


def backoff_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Delay to wait after a failed attempt.

    Args:
        attempt: 0-based index of the attempt that just failed.
        base_delay: Delay after the first failure, in seconds.

    Returns:
        ``base_delay * 2 ** attempt`` seconds.
    """
    if attempt < 0:
        raise ValueError("attempt must be non-negative")
    return base_delay * (2**attempt)


class EmbeddingClient:
    """Wraps an embedding model with retries.

    Calls block for the whole backoff schedule, so callers should not hold
    locks or transactions across ``embed``.
    """

    def __init__(
        self,
        embedder: EmbeddingPort,
        retries: int = DEFAULT_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the client.

        Args:
            embedder: Embedding model adapter (one attempt per call).
            retries: Maximum number of attempts per text.
            base_delay: Backoff delay after the first failure, in seconds.
            sleep: Function used to wait between attempts.
        """
        if retries < 1:
            raise ValueError("retries must be at least 1")
        self.embedder = embedder
        self.retries = retries
        self.base_delay = base_delay
        self._sleep = sleep

    def embed(self, text: str) -> list[float]:
        """Embed ``text``, retrying failed attempts.

        Raises:
            EmbeddingError: After every attempt failed; ``cause`` is the last error.
        """
        last_error: Exception | None = None

        for attempt in range(self.retries):
            try:
                return self.embedder.embed(text)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Embedding attempt %d/%d failed: %s", attempt + 1, self.retries, e
                )
                if attempt < self.retries - 1:
                    delay = backoff_delay(attempt, self.base_delay)
                    logger.info("Retrying embedding in %.2fs...", delay)
                    self._sleep(delay)

        raise EmbeddingError(
            f"Failed to get embedding after {self.retries} attempts: {last_error}",
            cause=last_error,
            context={"attempts": self.retries, "text_length": len(text)},
        )
