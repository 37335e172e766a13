"""Request assembly: AnalysisRequest construction and the generateContent body."""

from typing import Any

from agridoc.utils import constants
from agridoc.utils.data_types import AnalysisRequest, SourceImage
from agridoc.utils.images import encode_image
from agridoc.utils.prompts import SYSTEM_PROMPT, get_user_prompt

GENERATION_CONFIG: dict[str, Any] = {
    "responseMimeType": constants.RESPONSE_MIME_TYPE,
    "temperature": constants.TEMPERATURE,
    "topK": constants.TOP_K,
    "topP": constants.TOP_P,
    "maxOutputTokens": constants.MAX_TOKENS_TO_GENERATE,
}


def build_request(image: SourceImage, note: str = "") -> AnalysisRequest:
    """Derive the request for a validated image and optional free-text note."""
    return AnalysisRequest(
        image_base64=encode_image(image),
        mime_type=image.mime_type,
        user_note=note or "",
    )


def build_payload(request: AnalysisRequest) -> dict[str, Any]:
    """JSON body for a ``generateContent`` call."""
    return {
        "contents": [
            {
                "parts": [
                    {"text": get_user_prompt(request.user_note)},
                    {"inlineData": {"mimeType": request.mime_type, "data": request.image_base64}},
                ]
            }
        ],
        "systemInstruction": {"parts": [{"text": SYSTEM_PROMPT}]},
        "generationConfig": dict(GENERATION_CONFIG),
    }
