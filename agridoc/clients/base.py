"""Core model client abstraction: request delivery with bounded retry and backoff.

Subclasses only implement a single HTTP exchange (``_post``); status
classification, attempt counting and exponential backoff live here so every
provider shares the same failure policy.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from agridoc.clients.payload import build_payload
from agridoc.utils.constants import DEFAULT_BACKOFF_BASE_S, DEFAULT_MAX_RETRIES
from agridoc.utils.data_types import AnalysisRequest, RawResponse
from agridoc.utils.errors import ClientRequestError, MaxRetriesExceeded, RetryableTransportError

SleepFn = Callable[[float], Awaitable[Any]]


def is_retryable_status(status: int) -> bool:
    """429 (rate limited) and 5xx (server side) are transient."""
    return status == 429 or status >= 500


def extract_error_message(body: Any) -> str | None:
    """Pull ``error.message`` out of an API error body, if present."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


class BaseModelClient(ABC):
    """Abstract base class for all model clients.

    Subclasses must implement ``_post``.
    """

    def __init__(
        self,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_base_s: float = DEFAULT_BACKOFF_BASE_S,
        sleep: SleepFn | None = None,
    ) -> None:
        """Initialize the base model client.

        Args:
            max_retries: Total number of attempts (the first try included).
            backoff_base_s: Wait after the first failed attempt; doubles after each further failure.
            sleep: Awaitable sleep used between attempts (``asyncio.sleep`` by default).
        """
        if int(max_retries) < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        self.max_retries = int(max_retries)
        self.backoff_base_s = float(backoff_base_s)
        self._sleep: SleepFn = sleep or asyncio.sleep

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based): 1s, 2s, 4s, ..."""
        return self.backoff_base_s * 2 ** (attempt - 1)

    async def send(self, request: AnalysisRequest) -> RawResponse:
        """Deliver a request and return the first 2xx response.

        Raises:
            ClientRequestError: On a non-retryable status, without further attempts.
            MaxRetriesExceeded: When every attempt hit a retryable failure.
        """
        payload = build_payload(request)
        for call_attempt in range(1, self.max_retries + 1):
            logger.info(f"Model request attempt {call_attempt}/{self.max_retries}")
            try:
                response = await self._post(payload)
                self._check_status(response)
            except RetryableTransportError as e:
                logger.warning(f"Attempt {call_attempt} failed: {e}")
                if call_attempt < self.max_retries:
                    delay = self.backoff_delay(call_attempt)
                    logger.warning(f"Retrying after {delay} seconds...")
                    await self._sleep(delay)
                continue
            logger.info(f"Model responded with status {response.status_code} ({len(response.text)} characters)")
            return response

        logger.error(f"Giving up after {self.max_retries} attempts")
        raise MaxRetriesExceeded(self.max_retries)

    @staticmethod
    def _check_status(response: RawResponse) -> None:
        status = response.status_code
        if 200 <= status < 300:
            return
        if is_retryable_status(status):
            raise RetryableTransportError(status=status)
        message = extract_error_message(response.body) or response.reason_phrase or None
        logger.error(f"API error {status}: {response.body if response.body is not None else response.text}")
        raise ClientRequestError(status, message)

    @abstractmethod
    async def _post(self, payload: dict[str, Any]) -> RawResponse:  # pragma: no cover - interface only
        """Perform one HTTP exchange.

        Must raise RetryableTransportError on network level failures
        (timeouts, DNS, connection resets, undecodable bodies) and return the response for any status.
        """
        raise NotImplementedError
