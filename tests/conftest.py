import json

import pytest

from helpers import DIAGNOSIS, candidate_body, make_response

from agridoc.utils.data_types import RawResponse


@pytest.fixture
def success_response() -> RawResponse:
    return make_response(200, candidate_body(json.dumps(DIAGNOSIS)))


@pytest.fixture(autouse=True)
def _no_api_key_from_env(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
