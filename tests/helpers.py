import json

from agridoc.clients.base import BaseModelClient
from agridoc.utils.data_types import RawResponse


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedClient(BaseModelClient):
    """Client whose HTTP exchanges are replayed from a script of responses/exceptions."""

    def __init__(self, script, **kwargs):
        kwargs.setdefault("sleep", RecordingSleep())
        super().__init__(**kwargs)
        self.script = list(script)
        self.payloads: list[dict] = []

    @property
    def attempts(self) -> int:
        return len(self.payloads)

    async def _post(self, payload):
        self.payloads.append(payload)
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step


def make_response(status: int = 200, body=None, reason: str = "") -> RawResponse:
    text = json.dumps(body) if body is not None else ""
    return RawResponse(status_code=status, body=body, text=text, reason_phrase=reason)


def candidate_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


DIAGNOSIS = {
    "diseaseName": "Powdery Mildew",
    "treatmentSteps": "1. Prune affected areas. 2. Apply a fungicide.",
    "suggestedMedicines": "Neem oil, Sulfur fungicide",
    "futurePreventionTips": "1. Ensure proper plant spacing. 2. Water at the base of the plant.",
}

