"""Pipeline outcome types: the only values handed from the pipeline to presentation."""

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from agridoc.utils.data_types import DiagnosisResult


class FailureReason(str, Enum):
    VALIDATION = "validation"
    MISSING_IMAGE = "missing_image"
    HTTP_ERROR = "http_error"
    EXHAUSTED = "exhausted"
    EMPTY_RESPONSE = "empty_response"
    NO_JSON_FOUND = "no_json_found"
    MALFORMED_JSON = "malformed_json"


@dataclass(frozen=True)
class Success:
    result: DiagnosisResult


@dataclass(frozen=True)
class NoCropDetected:
    raw_text: str = ""


@dataclass(frozen=True)
class Incomplete:
    """JSON parsed but ``diseaseName``/``treatmentSteps`` missing or empty."""

    raw_text: str


@dataclass(frozen=True)
class Failure:
    reason: FailureReason
    message: str
    raw_text: str | None = None  # offending model text, for parse failures
    status: int | None = None  # HTTP status, for non-retryable request errors


PipelineOutcome: TypeAlias = Success | NoCropDetected | Incomplete | Failure
