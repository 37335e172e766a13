"""Pure mapping from pipeline outcomes to renderable views (HTML and plain text)."""

import html
import re
from dataclasses import dataclass
from enum import Enum

from agridoc.results.outcome import (
    Failure,
    FailureReason,
    Incomplete,
    NoCropDetected,
    PipelineOutcome,
    Success,
)

NUMBER_MARKER_RE = re.compile(r"(\d+\.)")

EXHAUSTED_MESSAGE = "Failed to get a response from the AI after several attempts. Please try again later."
NO_CROP_MESSAGE = (
    "The AI reported it could not find a crop in the image. Please try a clearer picture of a plant."
)
INCOMPLETE_MESSAGE = (
    "Could not determine the disease from the image. The AI's response was incomplete. "
    "Please try a clearer picture."
)


class Tone(str, Enum):
    SUCCESS = "success"
    NOTICE = "notice"
    ERROR = "error"


@dataclass(frozen=True)
class Section:
    icon: str
    label: str
    body_html: str
    body_text: str


@dataclass(frozen=True)
class RenderedView:
    """View model handed to the UI: either four labelled sections or a single notice."""

    tone: Tone
    sections: tuple[Section, ...] = ()
    title: str = ""
    message: str = ""
    raw_text: str | None = None

    def to_html(self) -> str:
        if self.sections:
            return "\n".join(
                f"<h3>{s.icon} {html.escape(s.label)}</h3>\n<p>{s.body_html}</p>" for s in self.sections
            )
        prefix = f"<strong>{html.escape(self.title)}:</strong> " if self.title else ""
        out = f'<p class="{self.tone.value}">{prefix}{html.escape(self.message)}</p>'
        if self.raw_text is not None:
            out += f"\n<pre>{html.escape(self.raw_text)}</pre>"
        return out

    def to_text(self) -> str:
        if self.sections:
            return "\n\n".join(f"{s.icon} {s.label}\n{s.body_text}" for s in self.sections)
        prefix = f"{self.title}: " if self.title else ""
        out = f"{prefix}{self.message}"
        if self.raw_text is not None:
            out += f"\n\n{self.raw_text}"
        return out


def format_numbered_list(text: str) -> str:
    """HTML: break before every ``<digits>.`` marker and bold it, no leading break.

    >>> format_numbered_list("1. First. 2. Second.")
    '<strong>1.</strong> First. <br><strong>2.</strong> Second.'
    """
    if not text:
        return "N/A"
    formatted = NUMBER_MARKER_RE.sub(r"<br><strong>\1</strong>", html.escape(text))
    return re.sub(r"^\s*<br>", "", formatted)


def format_numbered_list_text(text: str) -> str:
    """Plain text counterpart of ``format_numbered_list``: one item per line."""
    if not text:
        return "N/A"
    formatted = NUMBER_MARKER_RE.sub(r"\n\1", text)
    return re.sub(r"^\s*\n", "", formatted)


def _present_success(outcome: Success) -> RenderedView:
    d = outcome.result
    sections = (
        Section("🌿", "Disease Identified", f"<strong>{html.escape(d.disease_name)}</strong>", d.disease_name),
        Section(
            "💊",
            "Recommended Treatment",
            format_numbered_list(d.treatment_steps),
            format_numbered_list_text(d.treatment_steps),
        ),
        Section("🧪", "Suggested Medicines", html.escape(d.suggested_medicines), d.suggested_medicines),
        Section(
            "🛡️",
            "Future Prevention Tips",
            format_numbered_list(d.future_prevention_tips),
            format_numbered_list_text(d.future_prevention_tips),
        ),
    )
    return RenderedView(tone=Tone.SUCCESS, sections=sections)


def _present_failure(outcome: Failure) -> RenderedView:
    reason = outcome.reason
    if reason is FailureReason.EXHAUSTED:
        message = EXHAUSTED_MESSAGE
    elif reason is FailureReason.HTTP_ERROR:
        message = f"API request failed: {outcome.message}"
    elif reason in (FailureReason.MALFORMED_JSON, FailureReason.NO_JSON_FOUND):
        message = "Failed to parse AI response. Raw text:"
    else:
        message = outcome.message
    raw = outcome.raw_text if reason in (FailureReason.MALFORMED_JSON, FailureReason.NO_JSON_FOUND) else None
    return RenderedView(tone=Tone.ERROR, title="Error", message=message, raw_text=raw)


def present(outcome: PipelineOutcome) -> RenderedView:
    """Map an outcome onto its view. No I/O."""
    if isinstance(outcome, Success):
        return _present_success(outcome)
    if isinstance(outcome, NoCropDetected):
        return RenderedView(tone=Tone.NOTICE, title="No Crop Found", message=NO_CROP_MESSAGE)
    if isinstance(outcome, Incomplete):
        return RenderedView(tone=Tone.NOTICE, message=INCOMPLETE_MESSAGE)
    if isinstance(outcome, Failure):
        return _present_failure(outcome)
    raise TypeError(f"Unknown pipeline outcome: {type(outcome)!r}")
