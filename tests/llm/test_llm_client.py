"""
Unit tests for the chat completions client. requests.post is patched.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from ragdesk.llm import ChatCompletionClient, LLMConfig, create_client


def _ok(content="Hello!", finish_reason="stop"):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = {
        "choices": [{"message": {"content": f"  {content}  "}, "finish_reason": finish_reason}],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }
    return resp


@pytest.fixture
def client():
    return ChatCompletionClient(LLMConfig(api_base="http://llm.local/v1/", model="test-model", timeout=7), api_key="k")


class TestChatCompletionClient:

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.delenv("HF_TOKEN", raising=False)

        with pytest.raises(ValueError):
            ChatCompletionClient()

    def test_reads_key_from_env(self, monkeypatch):
        monkeypatch.setenv("HF_TOKEN", "hf-secret")

        assert create_client({"llm": {"model": "m"}}).headers["Authorization"] == "Bearer hf-secret"

    def test_builds_messages(self, client):
        history = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}]
        with patch("ragdesk.llm.client.requests.post", return_value=_ok()) as post:
            response = client.chat("You are helpful.", " What now? ", conversation_history=history, max_tokens=10)

        args, kwargs = post.call_args
        assert args[0] == "http://llm.local/v1/chat/completions"
        assert kwargs["timeout"] == 7
        payload = kwargs["json"]
        assert payload["model"] == "test-model"
        assert payload["max_tokens"] == 10
        assert payload["messages"] == [
            {"role": "system", "content": "You are helpful."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "user", "content": "What now?"},
        ]
        assert response.ok
        assert response.content == "Hello!"
        assert response.usage["total_tokens"] == 15

    def test_blank_system_prompt_omitted(self, client):
        with patch("ragdesk.llm.client.requests.post", return_value=_ok()) as post:
            client.chat("", "Classify this")

        assert [m["role"] for m in post.call_args.kwargs["json"]["messages"]] == ["user"]

    def test_http_error_is_returned_not_raised(self, client):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("503 Service Unavailable")
        with patch("ragdesk.llm.client.requests.post", return_value=resp):
            response = client.chat("s", "u")

        assert response.finish_reason == "error"
        assert "503" in response.error
        assert not response.ok

    def test_unexpected_payload(self, client):
        resp = MagicMock()
        resp.raise_for_status.return_value = None
        resp.json.return_value = {"detail": "nope"}
        with patch("ragdesk.llm.client.requests.post", return_value=resp):
            response = client.chat("s", "u")

        assert response.error is not None

    def test_timeout(self, client):
        with patch("ragdesk.llm.client.requests.post", side_effect=requests.Timeout("read timed out")):
            response = client.chat("s", "u")

        assert response.finish_reason == "error"
