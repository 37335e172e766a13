import asyncio
import json

import httpx
import pytest

from helpers import RecordingSleep, ScriptedClient, candidate_body, make_response

from agridoc.clients.base import extract_error_message, is_retryable_status
from agridoc.clients.gemini import GeminiClient
from agridoc.clients.payload import build_request
from agridoc.utils.errors import ClientRequestError, MaxRetriesExceeded, RetryableTransportError
from agridoc.utils.images import ingest


@pytest.fixture
def request_():
    return build_request(ingest(b"leaf", "image/jpeg"), "")


class TestStatusClassification:
    """Test suite for retryable status detection."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_retryable(self, status):
        assert is_retryable_status(status)

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_not_retryable(self, status):
        assert not is_retryable_status(status)

    def test_extract_error_message(self):
        assert extract_error_message({"error": {"message": "quota"}}) == "quota"
        assert extract_error_message({"error": "flat"}) is None
        assert extract_error_message(None) is None


class TestRetryLoop:
    """Test suite for the bounded retry/backoff state machine."""

    def test_backoff_schedule(self):
        """Test that waits double from one second."""
        client = ScriptedClient([make_response(200)])
        assert [client.backoff_delay(n) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_rate_limited_twice_then_success(self, request_, success_response):
        """Test that two 429s are retried with 1s then 2s waits before success."""
        client = ScriptedClient([make_response(429), make_response(429), success_response])
        response = asyncio.run(client.send(request_))

        assert response is success_response
        assert client.attempts == 3
        assert client._sleep.delays == [1.0, 2.0]

    def test_client_error_is_not_retried(self, request_):
        """Test that a 404 fails after exactly one attempt."""
        client = ScriptedClient([make_response(404, {"error": {"message": "model not found"}}, "Not Found")])
        with pytest.raises(ClientRequestError) as exc_info:
            asyncio.run(client.send(request_))

        assert client.attempts == 1
        assert client._sleep.delays == []
        assert exc_info.value.status == 404
        assert exc_info.value.message == "model not found"

    def test_client_error_falls_back_to_status_text(self, request_):
        """Test that the reason phrase is used when the body has no error message."""
        client = ScriptedClient([make_response(403, None, "Forbidden")])
        with pytest.raises(ClientRequestError) as exc_info:
            asyncio.run(client.send(request_))
        assert exc_info.value.message == "Forbidden"

    def test_server_errors_exhaust_retries(self, request_):
        """Test that persistent 5xx responses end in MaxRetriesExceeded."""
        client = ScriptedClient([make_response(503)])
        with pytest.raises(MaxRetriesExceeded) as exc_info:
            asyncio.run(client.send(request_))

        assert client.attempts == 3
        assert exc_info.value.attempts == 3
        # No wait after the final attempt
        assert client._sleep.delays == [1.0, 2.0]

    def test_network_errors_are_retried(self, request_, success_response):
        """Test that network failures follow the same backoff schedule."""
        client = ScriptedClient([RetryableTransportError("ReadTimeout: timed out"), success_response])
        assert asyncio.run(client.send(request_)) is success_response
        assert client.attempts == 2
        assert client._sleep.delays == [1.0]

    def test_custom_attempt_bound(self, request_):
        """Test that max_retries bounds the total attempt count."""
        client = ScriptedClient([make_response(500)], max_retries=5, backoff_base_s=0.5)
        with pytest.raises(MaxRetriesExceeded):
            asyncio.run(client.send(request_))
        assert client.attempts == 5
        assert client._sleep.delays == [0.5, 1.0, 2.0, 4.0]

    def test_invalid_max_retries(self):
        with pytest.raises(ValueError):
            ScriptedClient([make_response(200)], max_retries=0)


class TestGeminiClient:
    """Test suite for the HTTP layer of the Gemini client."""

    def test_missing_api_key(self):
        """Test that a missing key fails at construction."""
        with pytest.raises(OSError):
            GeminiClient()

    def test_api_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")
        client = GeminiClient(model_name="gemini-test")
        assert client.url.endswith("/models/gemini-test:generateContent")

    def test_posts_payload_with_key_header(self, request_):
        """Test method, URL, headers and body of the outgoing request."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=candidate_body("{}"))

        client = GeminiClient(
            api_key="test-key",
            model_name="gemini-test",
            base_url="https://example.test/v1beta/",
            transport=httpx.MockTransport(handler),
            sleep=RecordingSleep(),
        )
        response = asyncio.run(client.send(request_))

        assert response.status_code == 200
        assert response.body == candidate_body("{}")
        (sent,) = seen
        assert sent.method == "POST"
        assert str(sent.url) == "https://example.test/v1beta/models/gemini-test:generateContent"
        assert sent.headers["x-goog-api-key"] == "test-key"
        body = json.loads(sent.content)
        assert body["contents"][0]["parts"][1]["inlineData"]["mimeType"] == "image/jpeg"

    def test_connection_errors_become_retryable(self, request_):
        """Test that httpx transport errors are retried then exhausted."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        sleep = RecordingSleep()
        client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler), sleep=sleep)
        with pytest.raises(MaxRetriesExceeded):
            asyncio.run(client.send(request_))
        assert len(calls) == 3
        assert sleep.delays == [1.0, 2.0]

    def test_undecodable_body_is_retried(self, request_):
        """Test that a corrupt gzip body counts as a retryable failure."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, stream=httpx.ByteStream(b"not gzip"))

        sleep = RecordingSleep()
        client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler), sleep=sleep)
        with pytest.raises(MaxRetriesExceeded):
            asyncio.run(client.send(request_))
        assert len(calls) == 3
        assert sleep.delays == [1.0, 2.0]

    def test_non_json_error_body(self, request_):
        """Test that a non-JSON error page still yields the status text."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="<html>bad request</html>")

        client = GeminiClient(api_key="k", transport=httpx.MockTransport(handler), sleep=RecordingSleep())
        with pytest.raises(ClientRequestError) as exc_info:
            asyncio.run(client.send(request_))
        assert exc_info.value.message == "Bad Request"
