from types import SimpleNamespace

import pytest
import requests

from rehearse.infrastructure.llm import VertexRestClient
from rehearse.interview import TextGenerationUnavailable


def _response(status_code=200, payload=None, text=""):
    def json():
        if payload is None:
            raise ValueError("no json")
        return payload
    return SimpleNamespace(status_code=status_code, json=json, text=text)


@pytest.fixture
def client():
    client = VertexRestClient(project="proj", location="us-central1", model="gemini-test", timeout=15)
    client._token = "token"
    return client


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(response=None, error=None):
        def fake_post(url, headers=None, json=None, timeout=None):
            recorded.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
            if error:
                raise error
            return response
        monkeypatch.setattr("rehearse.infrastructure.llm.client.requests.post", fake_post)
        return recorded

    return install


def test_generate_sends_system_and_user_prompt(client, calls):
    recorded = calls(_response(payload={"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "there"}]}}]}))
    text = client.generate("You are Marcus.", "Say hi.", max_tokens=128, temperature=0.5)

    assert text == "Hello there"
    request = recorded[0]
    assert request["url"].endswith("projects/proj/locations/us-central1/publishers/google/models/gemini-test:generateContent")
    assert request["headers"]["Authorization"] == "Bearer token"
    assert request["json"]["systemInstruction"] == {"parts": [{"text": "You are Marcus."}]}
    assert request["json"]["contents"][0]["parts"][0]["text"] == "Say hi."
    assert request["json"]["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 128}
    assert request["timeout"] == 15


def test_timeout_is_unavailable(client, calls):
    calls(error=requests.Timeout("slow"))
    with pytest.raises(TextGenerationUnavailable):
        client.generate("s", "u")


def test_connection_error_is_unavailable(client, calls):
    calls(error=requests.ConnectionError("refused"))
    with pytest.raises(TextGenerationUnavailable):
        client.generate("s", "u")


def test_http_error_is_unavailable(client, calls):
    calls(_response(status_code=500, payload={}, text="internal"))
    with pytest.raises(TextGenerationUnavailable, match="500"):
        client.generate("s", "u")


def test_unauthorized_clears_the_token(client, calls):
    calls(_response(status_code=401, payload={}, text="expired"))
    with pytest.raises(TextGenerationUnavailable):
        client.generate("s", "u")
    assert client._token is None


def test_non_json_body_is_unavailable(client, calls):
    calls(_response(payload=None))
    with pytest.raises(TextGenerationUnavailable):
        client.generate("s", "u")


def test_empty_candidates_are_unavailable(client, calls):
    calls(_response(payload={"candidates": [{"content": {"parts": [{"text": "  "}]}}]}))
    with pytest.raises(TextGenerationUnavailable):
        client.generate("s", "u")


def test_parse_response_text_alternatives(client):
    assert client._parse_response_text({"candidates": [{"content": {"text": "direct"}}]}) == "direct"
    assert client._parse_response_text({"text": "top level"}) == "top level"
    assert client._parse_response_text({}) is None
