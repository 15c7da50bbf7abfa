from decimal import Decimal

import pytest
import requests

from conftest import FakeResponse
from golddeck.services import insight
from golddeck.services.insight import GeminiInsightProvider, InsightError, QuotaExhaustedError


def _provider():
    return GeminiInsightProvider(
        api_key="test-key",
        model="test-model",
        base_url="https://llm.test/v1beta/",
        temperature=0.4,
        top_p=0.9,
        timeout=2,
    )


def _patch_post(monkeypatch, response=None, exc=None):
    calls = []

    def fake_post(url, params=None, json=None, timeout=None):
        calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        if exc is not None:
            raise exc
        return response

    monkeypatch.setattr(insight.requests, "post", fake_post)
    return calls


def _ok(text):
    return FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_generate_returns_text_and_sends_sampling_parameters(monkeypatch):
    calls = _patch_post(monkeypatch, _ok("  Gold is a hedge.  "))

    text = _provider().generate(Decimal("75.5542"))

    assert text == "Gold is a hedge."
    call = calls[0]
    assert call["url"] == "https://llm.test/v1beta/models/test-model:generateContent"
    assert call["params"] == {"key": "test-key"}
    assert call["json"]["generationConfig"] == {"temperature": 0.4, "topP": 0.9}
    assert "$75.55 per gram" in call["json"]["contents"][0]["parts"][0]["text"]


def test_http_429_is_quota_exhaustion(monkeypatch):
    _patch_post(monkeypatch, FakeResponse(429, {"error": {"code": 429}}))
    with pytest.raises(QuotaExhaustedError):
        _provider().generate(Decimal("75"))


def test_resource_exhausted_status_is_quota_exhaustion(monkeypatch):
    _patch_post(monkeypatch, FakeResponse(400, {"error": {"status": "RESOURCE_EXHAUSTED"}}))
    with pytest.raises(QuotaExhaustedError):
        _provider().generate(Decimal("75"))


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(500, {"error": {"status": "INTERNAL"}}),
        FakeResponse(403, None, raise_on_json=True),
        FakeResponse(200, {"candidates": []}),
        _ok("   "),
    ],
)
def test_other_failures_are_generic(monkeypatch, response):
    _patch_post(monkeypatch, response)
    with pytest.raises(InsightError) as info:
        _provider().generate(Decimal("75"))
    assert not isinstance(info.value, QuotaExhaustedError)


def test_network_error_is_generic(monkeypatch):
    _patch_post(monkeypatch, exc=requests.ConnectionError("offline"))
    with pytest.raises(InsightError):
        _provider().generate(Decimal("75"))


def test_missing_key_never_calls_the_service(monkeypatch):
    calls = _patch_post(monkeypatch, _ok("unused"))
    with pytest.raises(InsightError):
        GeminiInsightProvider(api_key="").generate(Decimal("75"))
    assert calls == []
