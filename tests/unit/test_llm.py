"""Unit tests for the LLM provider, retry loop and response helpers."""

import threading

import pytest

from redraft.utils.llm import (
    GeminiProvider,
    LLMResponse,
    MalformedUpstreamResponse,
    RetriesExhausted,
    RetryInterrupted,
    UpstreamError,
    UpstreamRateLimited,
    UpstreamUnavailable,
    _retry_with_backoff,
    build_request_body,
    extract_content,
    extract_json_block,
    get_provider,
)
from tests.fakes import (
    FakeResponse,
    FakeSession,
    RecordingEvent,
    connection_error,
    gemini_envelope,
    rate_limited,
)


def _provider(session: FakeSession) -> GeminiProvider:
    return GeminiProvider(
        model="gemini-test",
        api_key="test-key",
        api_url="https://example.invalid/v1beta/models/gemini-test:generateContent",
        session=session,
    )


# --- Request / retry policy ---


@pytest.mark.unit
def test_request_success_on_first_attempt():
    envelope = gemini_envelope('{"ok": true}')
    session = FakeSession(FakeResponse(200, envelope))
    event = RecordingEvent()

    assert _provider(session).request("hello", cancel_event=event) == envelope
    assert len(session.calls) == 1
    assert event.waits == []


@pytest.mark.unit
def test_request_body_and_auth_header():
    session = FakeSession(FakeResponse(200, gemini_envelope("x")))
    _provider(session).request("Analyze this")

    call = session.calls[0]
    assert call["json"] == {"contents": [{"parts": [{"text": "Analyze this"}]}]}
    assert call["headers"] == {"x-goog-api-key": "test-key"}
    assert "test-key" not in call["url"]


@pytest.mark.unit
def test_build_request_body():
    assert build_request_body("p") == {"contents": [{"parts": [{"text": "p"}]}]}


@pytest.mark.unit
def test_persistent_rate_limiting_exhausts_three_attempts():
    session = FakeSession(rate_limited(), rate_limited(), rate_limited())
    event = RecordingEvent()

    with pytest.raises(RetriesExhausted) as exc_info:
        _provider(session).request("hello", cancel_event=event)

    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, UpstreamRateLimited)
    assert len(session.calls) == 3
    # Linear backoff: 2s after attempt 1, 4s after attempt 2, no wait after the last
    assert event.waits == [2.0, 4.0]


@pytest.mark.unit
def test_rate_limit_then_success():
    envelope = gemini_envelope("{}")
    session = FakeSession(rate_limited(), FakeResponse(200, envelope))
    event = RecordingEvent()

    assert _provider(session).request("hello", cancel_event=event) == envelope
    assert len(session.calls) == 2
    assert event.waits == [2.0]


@pytest.mark.unit
@pytest.mark.parametrize("status", [400, 401, 403, 404, 500, 503])
def test_other_http_errors_are_not_retried(status):
    session = FakeSession(FakeResponse(status, text="boom"))
    event = RecordingEvent()

    with pytest.raises(UpstreamUnavailable) as exc_info:
        _provider(session).request("hello", cancel_event=event)

    assert exc_info.value.status_code == status
    assert exc_info.value.body == "boom"
    assert len(session.calls) == 1
    assert event.waits == []


@pytest.mark.unit
def test_transport_errors_are_not_retried():
    session = FakeSession(connection_error())

    with pytest.raises(UpstreamUnavailable, match="connection refused"):
        _provider(session).request("hello", cancel_event=RecordingEvent())
    assert len(session.calls) == 1


@pytest.mark.unit
def test_non_json_body_is_malformed_and_not_retried():
    session = FakeSession(FakeResponse(200, payload=None, text="<html>oops</html>"))

    with pytest.raises(MalformedUpstreamResponse) as exc_info:
        _provider(session).request("hello", cancel_event=RecordingEvent())

    assert "<html>" in exc_info.value.raw
    assert len(session.calls) == 1


@pytest.mark.unit
def test_cancel_during_backoff_interrupts():
    session = FakeSession(rate_limited(), rate_limited(), rate_limited())
    event = RecordingEvent(set_after_waits=1)

    with pytest.raises(RetryInterrupted) as exc_info:
        _provider(session).request("hello", cancel_event=event)

    assert exc_info.value.attempts == 1
    assert isinstance(exc_info.value.last_error, UpstreamRateLimited)
    assert len(session.calls) == 1


@pytest.mark.unit
def test_cancelled_before_first_attempt_makes_no_call():
    session = FakeSession()
    event = threading.Event()
    event.set()

    with pytest.raises(RetryInterrupted) as exc_info:
        _provider(session).request("hello", cancel_event=event)

    assert exc_info.value.attempts == 0
    assert session.calls == []


@pytest.mark.unit
def test_retry_errors_share_base_class():
    for error_type in (
        UpstreamRateLimited,
        UpstreamUnavailable,
        MalformedUpstreamResponse,
        RetriesExhausted,
        RetryInterrupted,
    ):
        assert issubclass(error_type, UpstreamError)


@pytest.mark.unit
def test_retry_with_backoff_custom_schedule():
    attempts = []

    def operation():
        attempts.append(len(attempts) + 1)
        if len(attempts) < 4:
            raise UpstreamRateLimited("slow down")
        return "done"

    event = RecordingEvent()
    result = _retry_with_backoff(
        operation,
        UpstreamRateLimited,
        "Rate limit hit",
        max_attempts=5,
        base_delay=0.5,
        cancel_event=event,
    )

    assert result == "done"
    assert attempts == [1, 2, 3, 4]
    assert event.waits == [0.5, 1.0, 1.5]


@pytest.mark.unit
def test_retry_with_backoff_propagates_other_exceptions():
    def operation():
        raise KeyError("unexpected")

    with pytest.raises(KeyError):
        _retry_with_backoff(operation, UpstreamRateLimited, "Rate limit hit", cancel_event=RecordingEvent())


# --- Provider construction ---


@pytest.mark.unit
def test_generate_returns_llm_response():
    session = FakeSession(FakeResponse(200, gemini_envelope("Hi there")))
    response = _provider(session).generate("hello")

    assert isinstance(response, LLMResponse)
    assert response.content == "Hi there"
    assert response.model == "gemini-test"
    assert response.input_tokens == 120
    assert response.output_tokens == 80


@pytest.mark.unit
def test_provider_name():
    provider = _provider(FakeSession())
    assert provider.name == "gemini/gemini-test"


@pytest.mark.unit
def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        GeminiProvider()


@pytest.mark.unit
def test_get_provider_unknown():
    with pytest.raises(ValueError, match="Unknown provider"):
        get_provider("clippy")


@pytest.mark.unit
def test_get_provider_gemini(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "env-key")
    provider = get_provider("gemini", model="gemini-x")

    assert isinstance(provider, GeminiProvider)
    assert provider.api_key == "env-key"
    assert provider.model == "gemini-x"


# --- Envelope navigation ---


@pytest.mark.unit
def test_extract_content():
    assert extract_content(gemini_envelope("payload")) == "payload"


@pytest.mark.unit
@pytest.mark.parametrize(
    "envelope",
    [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{}]}}]},
        {"candidates": [{"content": {"parts": [{"text": None}]}}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        {"candidates": "nope"},
        None,
        "not an envelope",
    ],
)
def test_extract_content_malformed(envelope):
    with pytest.raises(MalformedUpstreamResponse):
        extract_content(envelope)


# --- JSON block extraction ---


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, expected",
    [
        ('{"a": 1}', '{"a": 1}'),
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}\n```', '{"a": 1}'),
        ('Here you go:\n{"a": {"b": 2}}\nHope that helps!', '{"a": {"b": 2}}'),
        ('  \n```JSON {"a": 1}```  ', '{"a": 1}'),
    ],
)
def test_extract_json_block(text, expected):
    assert extract_json_block(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "no json here", "} backwards {", "```json\n```"])
def test_extract_json_block_without_object(text):
    with pytest.raises(MalformedUpstreamResponse):
        extract_json_block(text)
