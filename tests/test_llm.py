import asyncio
from types import SimpleNamespace

import pytest
from tenacity import wait_none

import core.llm as llm_module
from core.errors import ProviderNotConfigured, ServiceError, ServiceUnavailable
from core.llm import LLMGenerationService, classify_provider_error, get_llm, is_rate_limited


class FakeLLM:
    """Stands in for a chat model; replies are returned (or raised) in order."""

    def __init__(self, *replies, delay=0):
        self.replies = list(replies)
        self.delay = delay
        self.messages = []

    async def ainvoke(self, messages):
        self.messages.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(content=reply)


class StatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def fake_llm(monkeypatch):
    def _install(*replies, delay=0):
        llm = FakeLLM(*replies, delay=delay)
        calls = []

        def _get_llm(temperature=0.7, model_provider=None, json_mode=False):
            calls.append({"provider": model_provider, "json_mode": json_mode})
            return llm
        monkeypatch.setattr("core.llm.get_llm", _get_llm)
        monkeypatch.setattr("core.llm.wait_exponential", lambda **kwargs: wait_none())
        llm.get_llm_calls = calls
        return llm
    return _install


def test_generate_returns_model_text(fake_llm):
    llm = fake_llm('{"ok": true}')
    service = LLMGenerationService(model_provider="openai")

    text = asyncio.run(service.generate("Write JSON", {"type": "OBJECT"}))

    assert text == '{"ok": true}'
    assert llm.messages[0][0].content == "Write JSON"
    assert llm.get_llm_calls == [{"provider": "openai", "json_mode": True}]


def test_generate_without_schema_uses_plain_mode(fake_llm):
    llm = fake_llm("plain")
    asyncio.run(LLMGenerationService().generate("hello"))
    assert llm.get_llm_calls[0]["json_mode"] is False


def test_list_content_is_joined(fake_llm):
    fake_llm([{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}])
    assert asyncio.run(LLMGenerationService().generate("p")) == '{"a": 1}'


def test_rate_limit_is_retried(fake_llm):
    llm = fake_llm(StatusError("Too Many Requests", 429), StatusError("quota exceeded", 429), "done")
    text = asyncio.run(LLMGenerationService(max_retries=3).generate("p"))
    assert text == "done"
    assert len(llm.messages) == 3


def test_rate_limit_gives_up_after_max_retries(fake_llm):
    fake_llm(*[StatusError("rate limit", 429) for _ in range(2)])
    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(LLMGenerationService(max_retries=2).generate("p"))
    assert excinfo.value.status == 429


def test_other_errors_are_not_retried(fake_llm):
    llm = fake_llm(StatusError("bad request", 400), "never")
    with pytest.raises(ServiceError) as excinfo:
        asyncio.run(LLMGenerationService().generate("p"))
    assert excinfo.value.status == 400
    assert len(llm.messages) == 1


def test_timeout_is_service_unavailable(fake_llm):
    fake_llm("late", delay=1)
    with pytest.raises(ServiceUnavailable):
        asyncio.run(LLMGenerationService(timeout=0.01).generate("p"))


def test_empty_response_is_a_service_error(fake_llm):
    fake_llm("")
    with pytest.raises(ServiceError):
        asyncio.run(LLMGenerationService().generate("p"))


def test_missing_openai_key(monkeypatch):
    monkeypatch.setattr("core.llm.OPENAI_API_KEY", None)
    with pytest.raises(ProviderNotConfigured) as excinfo:
        get_llm(model_provider="openai")
    assert excinfo.value.detail == "OpenAI API key not configured."


def test_missing_google_key(monkeypatch):
    monkeypatch.setattr("core.llm.GOOGLE_API_KEY", None)
    with pytest.raises(ProviderNotConfigured):
        asyncio.run(LLMGenerationService(model_provider="gemini").generate("p"))


def test_openai_model_is_configured_from_env(monkeypatch):
    monkeypatch.setattr("core.llm.OPENAI_API_KEY", "sk-test")
    llm = get_llm(temperature=0.2, model_provider="openai")
    assert llm.model_name == llm_module.OPENAI_MODEL
    assert llm.temperature == 0.2


@pytest.mark.parametrize("error,expected,status", [
    (StatusError("Unauthorized", 401), ServiceUnavailable, None),
    (Exception("Invalid API key provided"), ServiceUnavailable, None),
    (ConnectionError("Connection refused"), ServiceUnavailable, None),
    (StatusError("Internal error", 503), ServiceError, 503),
    (ValueError("something odd"), ServiceError, 500),
])
def test_classify_provider_error(error, expected, status):
    classified = classify_provider_error(error)
    assert type(classified) is expected
    assert classified.status == status


def test_is_rate_limited():
    assert is_rate_limited(StatusError("slow down", 429))
    assert is_rate_limited(Exception("ResourceExhausted: quota"))
    assert not is_rate_limited(Exception("boom"))
