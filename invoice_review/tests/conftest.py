# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from invoice_review import config
from invoice_review.ai.llm_client import LLMClient
from invoice_review.storage.session_store import reset_session


class FakeLLM(LLMClient):
    """Records the messages it is sent and replies with a canned string (or raises)."""

    def __init__(self, reply="{}", exc=None):
        super().__init__(provider="fake", model="fake-model")
        self.reply = reply
        self.exc = exc
        self.calls = []

    def complete_json(self, messages, *, temperature=0.0):
        self.calls.append({"messages": messages, "temperature": temperature})
        if self.exc is not None:
            raise self.exc
        return self.reply


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    monkeypatch.setattr(config, "LLM_PROVIDER", "openai")
    monkeypatch.setattr(config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(config, "UI_LOCALE", "en")
    reset_session()
    yield
    reset_session()


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def client():
    from invoice_review.main import app
    return TestClient(app)
