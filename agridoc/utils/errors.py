"""Custom exception classes for the diagnosis pipeline."""

from typing import Optional


class ValidationError(Exception):
    """Raised when a user supplied image cannot be accepted."""


class UnsupportedImageType(ValidationError):
    def __init__(self, mime_type: str):
        super().__init__(f"Unsupported file type: {mime_type or '<unknown>'}")
        self.mime_type = mime_type


class ImageTooLarge(ValidationError):
    def __init__(self, size: int, limit: int):
        super().__init__(f"Image too large: {size} > {limit} bytes")
        self.size = size
        self.limit = limit


class ImageReadError(ValidationError):
    """Raised when an image file cannot be read from disk."""

    def __init__(self, path, reason: Optional[str] = None):
        message = f"Failed to read image file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class TransportError(Exception):
    """Base class for failures while talking to the model API."""


class RetryableTransportError(TransportError):
    """Rate limiting, server side errors or network failures. Worth another attempt."""

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None):
        if message is None:
            message = f"HTTP error! status: {status}" if status is not None else "Network error"
        super().__init__(message)
        self.status = status


class ClientRequestError(TransportError):
    """Raised on a non-retryable HTTP status (a 4xx other than 429)."""

    def __init__(self, status: int, message: Optional[str] = None):
        super().__init__(f"API request failed with status {status}: {message or 'no details'}")
        self.status = status
        self.message = message


class MaxRetriesExceeded(TransportError):
    """Raised when an operation fails after exhausting retry attempts."""

    def __init__(self, attempts: int):
        super().__init__(f"Max retries exceeded after {attempts} attempts")
        self.attempts = attempts


class InterpretationError(Exception):
    """Raised when the model reply cannot be turned into a diagnosis."""


class EmptyResponseError(InterpretationError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "Received an empty response from the AI.")


class NoJsonFoundError(InterpretationError):
    def __init__(self, raw_text: str):
        super().__init__("Could not find a valid JSON object in the AI response.")
        self.raw_text = raw_text


class MalformedJsonError(InterpretationError):
    def __init__(self, raw_text: str, reason: Optional[str] = None):
        super().__init__(f"Failed to parse AI response{': ' + reason if reason else ''}")
        self.raw_text = raw_text
