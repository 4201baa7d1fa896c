import json

import httpx
import pytest

from sky_chat.llm import OpenAIChat, UpstreamGenerationError

MESSAGES = [{"role": "system", "content": "be nice"}, {"role": "user", "content": "hi"}]


def chat_with(handler):
    return OpenAIChat(api_key="test-key", model="gpt-4o-mini", transport=httpx.MockTransport(handler))


def test_returns_reply_content():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "Hi! What's your name?"}}]})

    assert chat_with(handler)(MESSAGES) == "Hi! What's your name?"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["messages"] == MESSAGES
    assert seen["body"]["max_tokens"] == 200


def test_error_status():
    llm = chat_with(lambda request: httpx.Response(500, text="overloaded"))
    with pytest.raises(UpstreamGenerationError, match="500"):
        llm.generate(MESSAGES)


@pytest.mark.parametrize(
    "payload",
    [{"choices": []}, {"error": "nope"}, {"choices": [{"message": {"content": None}}]}, {"choices": [{"message": {"content": "  "}}]}],
)
def test_malformed_payload(payload):
    llm = chat_with(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(UpstreamGenerationError):
        llm.generate(MESSAGES)


def test_not_json():
    llm = chat_with(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(UpstreamGenerationError):
        llm.generate(MESSAGES)


def test_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamGenerationError):
        chat_with(handler).generate(MESSAGES)
