# Utils for image ingestion and encoding
from __future__ import annotations

import base64
import io
import mimetypes
from pathlib import Path

from loguru import logger
from PIL import Image, UnidentifiedImageError

from agridoc.utils.data_types import SourceImage
from agridoc.utils.errors import ImageReadError


def ingest(data: bytes, mime_type: str, *, name: str = "") -> SourceImage:
    """Validate a user supplied blob and wrap it as a SourceImage.

    Args:
        data: Raw file bytes.
        mime_type: MIME type reported for the file.
        name: Optional file name for logging.
    Returns:
        The validated image.
    Raises:
        UnsupportedImageType: If ``mime_type`` does not start with ``image/``.
        ImageTooLarge: If the blob exceeds 10 MiB.
    """
    image = SourceImage(data=data, mime_type=mime_type, size_bytes=len(data), name=name)
    logger.debug(f"Ingested image {name or '<unnamed>'} ({mime_type}, {image.size_bytes} bytes)")
    return image


def sniff_mime_type(data: bytes) -> str | None:
    """Detect the MIME type from image content with Pillow, None if not an image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return None
    return Image.MIME.get(fmt) if fmt else None


def load_image_file(path: str | Path) -> SourceImage:
    """Read an image from disk and ingest it.

    The MIME type comes from the file content when Pillow recognises it,
    otherwise from the extension (so non-images still fail validation
    with UnsupportedImageType rather than a read error).
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ImageReadError(path, str(exc)) from exc

    mime_type = sniff_mime_type(data)
    if mime_type is None:
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        logger.debug(f"Could not sniff {path.name}; guessed {mime_type} from extension")
    return ingest(data, mime_type, name=path.name)


def encode_image(image: SourceImage) -> str:
    """Encode image bytes to a base64 string (no data URL prefix)."""
    return base64.b64encode(image.data).decode("utf-8")
