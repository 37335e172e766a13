import os
from typing import Any

import httpx
from loguru import logger

from agridoc.clients.base import BaseModelClient, SleepFn
from agridoc.utils import constants
from agridoc.utils.data_types import RawResponse
from agridoc.utils.errors import RetryableTransportError


class GeminiClient(BaseModelClient):
    """Gemini client calling the ``generateContent`` REST endpoint for image+text content."""

    def __init__(
        self,
        *,
        model_name: str = constants.DEFAULT_MODEL_NAME,
        api_key: str | None = None,
        base_url: str = constants.DEFAULT_BASE_URL,
        timeout_s: float = constants.DEFAULT_TIMEOUT_S,
        max_retries: int = constants.DEFAULT_MAX_RETRIES,
        backoff_base_s: float = constants.DEFAULT_BACKOFF_BASE_S,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFn | None = None,
    ):
        super().__init__(max_retries=max_retries, backoff_base_s=backoff_base_s, sleep=sleep)
        api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise OSError("GEMINI_API_KEY not set in environment")
        self._api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.timeout_s = float(timeout_s)
        self._transport = transport
        logger.info(f"Using Gemini model {self.model_name}")

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model_name}:generateContent"

    async def _post(self, payload: dict[str, Any]) -> RawResponse:
        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_s), transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"Content-Type": "application/json", "x-goog-api-key": self._api_key},
                )
        except httpx.RequestError as exc:
            raise RetryableTransportError(f"{type(exc).__name__}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            logger.debug(f"Response body is not JSON (status {response.status_code})")
            body = None
        return RawResponse(
            status_code=response.status_code,
            body=body,
            text=response.text,
            reason_phrase=response.reason_phrase,
        )
