"""Model clients package public API."""

from agridoc.clients.base import BaseModelClient
from agridoc.clients.gemini import GeminiClient

__all__ = [
    "BaseModelClient",
    "GeminiClient",
]
