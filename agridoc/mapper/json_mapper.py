"""Defensive extraction of the diagnosis JSON object from model text.

The model is asked for bare JSON but may still wrap it in prose or code
fences, so the reply is treated as untrusted text: the object is located by
its outermost braces before parsing.
"""

import json
from typing import Any

from loguru import logger

from agridoc.mapper.base import BaseMapper
from agridoc.results.outcome import (
    Failure,
    FailureReason,
    Incomplete,
    NoCropDetected,
    PipelineOutcome,
    Success,
)
from agridoc.utils.constants import N_DEBUG_RESPONSE_CHARS, NO_CROP_MARKER
from agridoc.utils.data_types import DiagnosisResult, RawResponse
from agridoc.utils.errors import EmptyResponseError, MalformedJsonError, NoJsonFoundError

UNEXPECTED_RESPONSE_MESSAGE = "Received an unexpected response from the AI."


def extract_candidate_text(body: Any) -> str:
    """Return the text of the first part of the first candidate.

    Raises EmptyResponseError when the body has no candidate content or the text is empty.
    """
    if not isinstance(body, dict):
        raise EmptyResponseError(UNEXPECTED_RESPONSE_MESSAGE)
    candidates = body.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise EmptyResponseError(UNEXPECTED_RESPONSE_MESSAGE)

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        raise EmptyResponseError()
    text = parts[0].get("text")
    if not isinstance(text, str) or not text:
        raise EmptyResponseError()
    return text


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the substring from the first ``{`` to the last ``}``.

    Raises:
        NoJsonFoundError: If either brace is missing or they are out of order.
        MalformedJsonError: If the substring is not valid JSON (carries the substring).
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise NoJsonFoundError(text)

    snippet = text[start : end + 1]
    try:
        parsed = json.loads(snippet)
    except json.JSONDecodeError as exc:
        raise MalformedJsonError(snippet, str(exc)) from exc
    except RecursionError as exc:
        raise MalformedJsonError(snippet, "nesting too deep") from exc
    if not isinstance(parsed, dict):  # pragma: no cover - braces guarantee an object
        raise MalformedJsonError(snippet, "not a JSON object")
    return parsed


def classify(payload: dict[str, Any], raw_text: str) -> PipelineOutcome:
    disease_name = payload.get("diseaseName")
    if isinstance(disease_name, str) and NO_CROP_MARKER in disease_name:
        return NoCropDetected(raw_text)
    if disease_name and payload.get("treatmentSteps"):
        return Success(DiagnosisResult.from_json(payload))
    return Incomplete(raw_text)


class JsonMapper(BaseMapper):
    """Maps a ``generateContent`` response body onto a pipeline outcome."""

    def interpret(self, raw: RawResponse) -> PipelineOutcome:
        try:
            text = extract_candidate_text(raw.body)
            logger.debug(f"Candidate text (truncated {N_DEBUG_RESPONSE_CHARS} chars): {text[:N_DEBUG_RESPONSE_CHARS]}")
            payload = extract_json_object(text)
        except EmptyResponseError as e:
            logger.error(f"Invalid response structure: {raw.text[:N_DEBUG_RESPONSE_CHARS]}")
            return Failure(FailureReason.EMPTY_RESPONSE, str(e))
        except NoJsonFoundError as e:
            logger.error(f"No JSON object in model response: {e.raw_text[:N_DEBUG_RESPONSE_CHARS]}")
            return Failure(FailureReason.NO_JSON_FOUND, str(e), raw_text=e.raw_text)
        except MalformedJsonError as e:
            logger.error(f"JSON parse error: {e}")
            return Failure(FailureReason.MALFORMED_JSON, str(e), raw_text=e.raw_text)

        outcome = classify(payload, text)
        if isinstance(outcome, Success):
            logger.success(f"Diagnosis parsed: {outcome.result.disease_name}")
        else:
            logger.info(f"Model reply classified as {type(outcome).__name__}")
        return outcome
