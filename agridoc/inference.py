"""Single-request diagnosis pipeline: request build, delivery, interpretation.

Every failure resolves to a ``PipelineOutcome`` value; validation and
transport errors are converted here, interpretation errors inside the mapper.
"""

import asyncio
from pathlib import Path

from loguru import logger

from agridoc.clients.base import BaseModelClient
from agridoc.clients.payload import build_request
from agridoc.mapper.base import BaseMapper
from agridoc.mapper.json_mapper import JsonMapper
from agridoc.results.outcome import Failure, FailureReason, PipelineOutcome
from agridoc.utils.data_types import SourceImage
from agridoc.utils.errors import (
    ClientRequestError,
    ImageReadError,
    ImageTooLarge,
    MaxRetriesExceeded,
    UnsupportedImageType,
    ValidationError,
)
from agridoc.utils.images import load_image_file

UNSUPPORTED_TYPE_MESSAGE = "Please upload an image file (JPEG, PNG)."
TOO_LARGE_MESSAGE = "File is too large. Please upload an image under 10 MB."
READ_ERROR_MESSAGE = "Failed to read the file."
MISSING_IMAGE_MESSAGE = "Please upload an image first."


def validation_failure(exc: ValidationError) -> Failure:
    """User-facing failure for a rejected image."""
    if isinstance(exc, UnsupportedImageType):
        message = UNSUPPORTED_TYPE_MESSAGE
    elif isinstance(exc, ImageTooLarge):
        message = TOO_LARGE_MESSAGE
    elif isinstance(exc, ImageReadError):
        message = READ_ERROR_MESSAGE
    else:
        message = str(exc)
    logger.warning(f"Image rejected: {exc}")
    return Failure(FailureReason.VALIDATION, message)


async def run_pipeline(
    image: SourceImage,
    note: str,
    client: BaseModelClient,
    mapper: BaseMapper | None = None,
) -> PipelineOutcome:
    """Diagnose one validated image.

    Args:
        image: Image accepted by ``ingest``.
        note: Optional free text from the user ("" for none).
        client: Model client used to deliver the request.
        mapper: Response interpreter, ``JsonMapper`` by default.
    Returns:
        The outcome for the presentation layer.
    """
    mapper = mapper or JsonMapper()
    logger.info(f"Running diagnosis for {image.name or '<unnamed>'} ({image.mime_type}, {image.size_bytes} bytes)")
    request = await asyncio.to_thread(build_request, image, note)
    logger.debug(f"Built request: {len(request.image_base64)} base64 chars, note={bool(request.user_note)}")

    try:
        raw = await client.send(request)
    except ClientRequestError as e:
        return Failure(FailureReason.HTTP_ERROR, e.message or f"HTTP {e.status}", status=e.status)
    except MaxRetriesExceeded as e:
        return Failure(FailureReason.EXHAUSTED, str(e))

    return mapper.interpret(raw)


async def diagnose_file(
    path: str | Path,
    note: str,
    client: BaseModelClient,
    mapper: BaseMapper | None = None,
) -> PipelineOutcome:
    """Load an image from disk and run the pipeline on it."""
    try:
        image = await asyncio.to_thread(load_image_file, path)
    except ValidationError as e:
        return validation_failure(e)
    return await run_pipeline(image, note, client, mapper)
