# tests/test_llm_client.py
from types import SimpleNamespace

import pytest

from invoice_review import config
from invoice_review.ai.llm_client import LLMClient, get_llm_client
from invoice_review.ai.openai_client import OpenAIClient
from invoice_review.utils.errors import ErrorCode, ExtractionError


def test_llm_noop_returns_empty_object():
    c = LLMClient(provider="noop")
    assert c.complete_json([{"role": "user", "content": "hello world"}]) == "{}"


def test_noop_provider_needs_no_key(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "noop")
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    assert get_llm_client().provider == "noop"


def test_openai_provider_without_key_is_no_api_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    with pytest.raises(ExtractionError) as exc:
        get_llm_client()
    assert exc.value.code == ErrorCode.NO_API_KEY
    assert exc.value.status_code == 500


def test_openai_provider_uses_configured_model(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_MODEL", "gpt-4o-mini")
    c = get_llm_client()
    assert isinstance(c, OpenAIClient)
    assert c.model == "gpt-4o-mini"


def test_unknown_provider(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "carrier-pigeon")
    with pytest.raises(NotImplementedError):
        get_llm_client()


def _reply(content):
    choices = [SimpleNamespace(message=SimpleNamespace(content=content))] if content is not None else []
    return SimpleNamespace(choices=choices, usage=None)


def _stub_create(monkeypatch, client, resp):
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return resp

    monkeypatch.setattr(client._client.chat.completions, "create", create)
    return calls


def test_openai_request_is_deterministic_json(monkeypatch):
    c = OpenAIClient(api_key="sk-test", model="gpt-4o", timeout=12.0)
    calls = _stub_create(monkeypatch, c, _reply('{"invoice_no": "CI-1"}'))
    messages = [{"role": "user", "content": "extract"}]

    assert c.complete_json(messages) == '{"invoice_no": "CI-1"}'
    assert calls == [{
        "model": "gpt-4o",
        "temperature": 0.0,
        "messages": messages,
        "response_format": {"type": "json_object"},
    }]


def test_openai_client_makes_a_single_attempt():
    c = OpenAIClient(api_key="sk-test", timeout=12.0)
    assert c._client.max_retries == 0
    assert c._client.timeout == 12.0


def test_openai_empty_reply_is_empty_object(monkeypatch):
    c = OpenAIClient(api_key="sk-test")
    _stub_create(monkeypatch, c, _reply(None))
    assert c.complete_json([{"role": "user", "content": "extract"}]) == "{}"

    _stub_create(monkeypatch, c, _reply(""))
    assert c.complete_json([{"role": "user", "content": "extract"}]) == "{}"
