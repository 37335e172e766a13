from dataclasses import dataclass, field

from agridoc.utils.constants import DEFAULT_MEDICINES, MAX_IMAGE_BYTES
from agridoc.utils.errors import ImageTooLarge, UnsupportedImageType


@dataclass(frozen=True)
class SourceImage:
    """
    An image selected by the user, validated and ready to be sent.

    Attributes
    - data: Raw image bytes.
    - mime_type: MIME type as reported by the picker or sniffed from disk.
    - size_bytes: Length of ``data``.
    - name: Optional display name (file name), used for logs only.

    Invariants
    - mime_type starts with ``image/``
    - size_bytes <= MAX_IMAGE_BYTES
    """

    data: bytes = field(repr=False)
    mime_type: str
    size_bytes: int
    name: str = ""

    def __post_init__(self):
        if not (self.mime_type or "").startswith("image/"):
            raise UnsupportedImageType(self.mime_type)
        if self.size_bytes > MAX_IMAGE_BYTES:
            raise ImageTooLarge(self.size_bytes, MAX_IMAGE_BYTES)


@dataclass(frozen=True)
class AnalysisRequest:
    """One request per generate action: the encoded image plus the user's note."""

    image_base64: str = field(repr=False)
    mime_type: str
    user_note: str = ""


@dataclass(frozen=True)
class RawResponse:
    """One HTTP exchange with the model API (``send`` only returns 2xx ones)."""

    status_code: int
    body: object  # decoded JSON, or None when the body was not JSON
    text: str = field(default="", repr=False)
    reason_phrase: str = ""


@dataclass(frozen=True)
class DiagnosisResult:
    disease_name: str
    treatment_steps: str
    future_prevention_tips: str = ""
    suggested_medicines: str = DEFAULT_MEDICINES

    @classmethod
    def from_json(cls, payload: dict) -> "DiagnosisResult":
        """Build from the model's camelCase JSON object, applying the medicines fallback."""
        medicines = payload.get("suggestedMedicines")
        return cls(
            disease_name=str(payload["diseaseName"]),
            treatment_steps=str(payload["treatmentSteps"]),
            future_prevention_tips=str(payload.get("futurePreventionTips") or ""),
            suggested_medicines=str(medicines) if medicines else DEFAULT_MEDICINES,
        )
