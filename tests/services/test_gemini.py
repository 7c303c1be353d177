"""Pruebas del clasificador basado en Gemini."""

import json

import httpx
import pytest

from spamguard.core.config import Settings
from spamguard.services import gemini


@pytest.mark.parametrize(
    ("outcome", "verdict"),
    [
        ("SPAM", gemini.Verdict.SPAM),
        ("This looks like SPAM to me", gemini.Verdict.SPAM),
        ("SCAM", gemini.Verdict.SCAM),
        ("SPAM SCAM", gemini.Verdict.SPAM),
        ("LEGITIMATE", gemini.Verdict.LEGITIMATE),
        ("This is NOT SPAM", gemini.Verdict.SPAM),
        ("legitimate", gemini.Verdict.UNKNOWN),
        ("I cannot tell", gemini.Verdict.UNKNOWN),
    ],
)
def test_classify_outcome_uses_substrings(outcome: str, verdict: gemini.Verdict) -> None:
    result = gemini.classify_outcome(outcome)
    assert result.verdict is verdict
    assert result.outcome == outcome


def test_warning_flag_covers_spam_and_scam() -> None:
    assert gemini.classify_outcome("SCAM").is_warning
    assert gemini.classify_outcome("SPAM").is_warning
    assert not gemini.classify_outcome("LEGITIMATE").is_warning


def test_request_body_escapes_message() -> None:
    body = gemini.build_request_body('quote " and \\ backslash\nnewline')
    encoded = json.dumps(body)
    assert json.loads(encoded) == body
    assert body["contents"][0]["parts"][0]["text"].endswith(
        'Message: "quote " and \\ backslash\nnewline"'
    )


def test_extract_outcome_trims_text() -> None:
    data = {"candidates": [{"content": {"parts": [{"text": "  SCAM\n"}]}}]}
    assert gemini.extract_outcome(data) == "SCAM"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": [{}]}}]},
        {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
        ["not", "a", "dict"],
    ],
)
def test_extract_outcome_rejects_unexpected_shapes(data) -> None:
    with pytest.raises(gemini.ClassifierResponseError):
        gemini.extract_outcome(data)


async def test_analyze_message_posts_prompt(upstream, settings: Settings) -> None:
    upstream.gemini_text = " LEGITIMATE \n"

    outcome = await gemini.analyze_message("See you at 5", settings)

    assert outcome == "LEGITIMATE"
    [request] = upstream.gemini_requests
    assert request.method == "POST"
    assert request.url.path == (
        "/v1beta/models/gemini-2.5-flash-preview-05-20:generateContent"
    )
    assert request.url.params["key"] == "gem-key"
    assert json.loads(request.content) == gemini.build_request_body("See you at 5")


async def test_analyze_message_without_key_returns_static_text(
    upstream, settings: Settings
) -> None:
    outcome = await gemini.analyze_message(
        "anything", settings.model_copy(update={"gemini_api_key": None})
    )

    assert outcome == gemini.NOT_CONFIGURED_MESSAGE
    assert upstream.requests == []


async def test_analyze_message_network_error(upstream, settings: Settings) -> None:
    upstream.gemini_unreachable = True

    with pytest.raises(gemini.ClassifierUnavailableError):
        await gemini.analyze_message("anything", settings)


async def test_analyze_message_error_status(upstream, settings: Settings) -> None:
    upstream.gemini_status = 400

    with pytest.raises(gemini.ClassifierResponseError):
        await gemini.analyze_message("anything", settings)


async def test_analyze_message_non_json_body(
    monkeypatch: pytest.MonkeyPatch, settings: Settings
) -> None:
    real_client = httpx.AsyncClient

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(
            lambda request: httpx.Response(200, text="<html>oops</html>")
        )
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)

    with pytest.raises(gemini.ClassifierResponseError):
        await gemini.analyze_message("anything", settings)


async def test_classify_message_is_not_cached(upstream, settings: Settings) -> None:
    upstream.gemini_text = "SPAM"
    first = await gemini.classify_message("same text", settings)
    upstream.gemini_text = "LEGITIMATE"
    second = await gemini.classify_message("same text", settings)

    assert first.verdict is gemini.Verdict.SPAM
    assert second.verdict is gemini.Verdict.LEGITIMATE
    assert len(upstream.gemini_requests) == 2
