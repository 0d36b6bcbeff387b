"""Tests for the resilient news fetcher."""

import asyncio
import random

import pytest

from market_pulse.news.fetcher import (
    FetchErrorKind,
    InvalidFormatError,
    ResilientFetcher,
    classify_error,
    extract_json_text,
    extract_sources,
    parse_result,
)
from market_pulse.news.schemas import Citation, Failure, Success
from tests.fakes import FakeGenerator, RecordingSleep, StatusError, raw

INSTRUCTION = "You are a test analyst."
GOOD_JSON = '{"summary": "Nifty closes higher", "sentiment": "Positive", "ticker": "TCS.NS"}'


def _fetcher(generator, sleep, rng, **kwargs) -> ResilientFetcher:
    return ResilientFetcher(generator, INSTRUCTION, rng=rng, sleep=sleep, **kwargs)


# --- parsing -----------------------------------------------------------------


def test_extract_json_text_uses_fenced_block():
    text = 'Here you go:\n```json\n{"summary": "x"}\n```\nThanks'
    assert extract_json_text(text) == '{"summary": "x"}'


def test_extract_json_text_returns_unfenced_text_as_is():
    text = '  {"summary": "x"}  '
    assert extract_json_text(text) == text


def test_extract_json_text_ignores_unlabelled_fence():
    text = '```\n{"summary": "x"}\n```'
    assert extract_json_text(text) == text


def test_parse_result_reads_all_fields():
    result = parse_result(GOOD_JSON)
    assert result.summary == "Nifty closes higher"
    assert result.sentiment == "Positive"
    assert result.ticker == "TCS.NS"


def test_parse_result_leaves_optional_fields_absent():
    result = parse_result('{"summary": "RBI holds repo rate"}')
    assert result.sentiment is None
    assert result.ticker is None
    assert result.model_dump(exclude_none=True) == {"summary": "RBI holds repo rate"}


def test_parse_result_passes_unknown_sentiment_through():
    result = parse_result('{"summary": "s", "sentiment": "Bullish"}')
    assert result.sentiment == "Bullish"


@pytest.mark.parametrize(
    "payload",
    ["not json at all", "[1, 2, 3]", '{"sentiment": "Neutral"}', '{"summary": 42}'],
)
def test_parse_result_rejects_unusable_payloads(payload):
    with pytest.raises(InvalidFormatError):
        parse_result(payload)


def test_extract_sources_keeps_first_occurrence():
    citations = [
        Citation(uri="a", title="A"),
        Citation(uri="a", title="A2"),
        Citation(uri="b", title="B"),
    ]
    sources = extract_sources(citations)
    assert [(s.uri, s.title) for s in sources] == [("a", "A"), ("b", "B")]


def test_extract_sources_drops_incomplete_entries():
    citations = [
        Citation(uri="", title="No uri"),
        Citation(uri="https://x.example", title=""),
        Citation(uri=None, title="Missing"),
        Citation(uri="https://ok.example", title="OK"),
    ]
    sources = extract_sources(citations)
    assert [s.uri for s in sources] == ["https://ok.example"]


# --- error classification ----------------------------------------------------


class _ResponseError(Exception):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP {status_code}")
        self.response = type("Resp", (), {"status_code": status_code})()


class _CodeError(Exception):
    def __init__(self, code: int, status: str) -> None:
        super().__init__(f"{code} {status}")
        self.code = code
        self.status = status


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (StatusError(429, "Too Many Requests"), FetchErrorKind.RATE_LIMITED),
        (StatusError(500, "Internal"), FetchErrorKind.SERVER_ERROR),
        (StatusError(503, "Unavailable"), FetchErrorKind.SERVER_ERROR),
        (StatusError(401, "Unauthorized"), FetchErrorKind.OTHER),
        (StatusError(400, "Bad Request"), FetchErrorKind.OTHER),
        (_CodeError(429, "RESOURCE_EXHAUSTED"), FetchErrorKind.RATE_LIMITED),
        (_ResponseError(502), FetchErrorKind.SERVER_ERROR),
        (InvalidFormatError("bad"), FetchErrorKind.INVALID_FORMAT),
        (ConnectionError("network unreachable"), FetchErrorKind.OTHER),
        (RuntimeError("got a 429 somewhere"), FetchErrorKind.OTHER),
    ],
)
def test_classify_error(exc, kind):
    assert classify_error(exc) is kind


def test_only_other_is_not_retryable():
    assert not FetchErrorKind.OTHER.retryable
    assert FetchErrorKind.RATE_LIMITED.retryable
    assert FetchErrorKind.SERVER_ERROR.retryable
    assert FetchErrorKind.INVALID_FORMAT.retryable


# --- backoff -----------------------------------------------------------------


def test_backoff_delay_doubles_with_bounded_jitter(rng):
    fetcher = _fetcher(FakeGenerator(), RecordingSleep(), rng)
    for attempt, base in enumerate([2.0, 4.0, 8.0]):
        delay = fetcher.backoff_delay(attempt)
        assert base <= delay <= base + 1.0


def test_backoff_delay_is_reproducible_with_seeded_rng():
    first = _fetcher(FakeGenerator(), RecordingSleep(), random.Random(7))
    second = _fetcher(FakeGenerator(), RecordingSleep(), random.Random(7))
    assert [first.backoff_delay(i) for i in range(3)] == [
        second.backoff_delay(i) for i in range(3)
    ]


# --- fetch -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_success_with_fenced_json_and_citations(sleep, rng):
    generator = FakeGenerator(
        [
            raw(
                f"```json\n{GOOD_JSON}\n```",
                [
                    ("https://a.example", "A"),
                    ("https://a.example", "A2"),
                    ("https://b.example", "B"),
                ],
            )
        ]
    )
    outcome = await _fetcher(generator, sleep, rng).fetch("prompt")

    assert isinstance(outcome, Success)
    assert outcome.result.summary == "Nifty closes higher"
    assert [s.title for s in outcome.sources] == ["A", "B"]
    assert generator.calls == [("prompt", INSTRUCTION, True)]
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_fetch_passes_grounding_flag(sleep, rng):
    generator = FakeGenerator([raw(GOOD_JSON)])
    await _fetcher(generator, sleep, rng, use_search_grounding=False).fetch("p")
    assert generator.calls[0][2] is False


@pytest.mark.asyncio
async def test_invalid_json_retries_once_then_succeeds(sleep, rng):
    generator = FakeGenerator([raw("{broken"), raw(GOOD_JSON)])
    outcome = await _fetcher(generator, sleep, rng).fetch("p", max_attempts=2)

    assert isinstance(outcome, Success)
    assert len(generator.calls) == 2
    assert len(sleep.delays) == 1
    assert 2.0 <= sleep.delays[0] <= 3.0


@pytest.mark.asyncio
async def test_invalid_json_with_single_attempt_fails_without_waiting(sleep, rng):
    generator = FakeGenerator([raw("{broken")])
    outcome = await _fetcher(generator, sleep, rng).fetch("p", max_attempts=1)

    assert isinstance(outcome, Failure)
    assert "Invalid JSON" in outcome.message
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_rate_limit_then_success_waits_two_to_three_seconds(sleep, rng):
    generator = FakeGenerator([StatusError(429, "Too Many Requests"), raw(GOOD_JSON)])
    outcome = await _fetcher(generator, sleep, rng).fetch("p")

    assert isinstance(outcome, Success)
    assert 2.0 <= sum(sleep.delays) <= 3.0


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts", [1, 3, 10])
async def test_auth_error_fails_immediately(sleep, rng, max_attempts):
    generator = FakeGenerator([StatusError(401, "API key not valid"), raw(GOOD_JSON)])
    outcome = await _fetcher(generator, sleep, rng).fetch("p", max_attempts=max_attempts)

    assert outcome == Failure(message="API key not valid")
    assert len(generator.calls) == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_persistent_server_errors_report_last_message(sleep, rng):
    generator = FakeGenerator(
        [
            StatusError(500, "first failure"),
            StatusError(502, "second failure"),
            StatusError(503, "third failure"),
        ]
    )
    outcome = await _fetcher(generator, sleep, rng).fetch("p")

    assert isinstance(outcome, Failure)
    assert outcome.message == "third failure"
    assert len(generator.calls) == 3
    # No wait after the final attempt
    assert len(sleep.delays) == 2
    assert 2.0 <= sleep.delays[0] <= 3.0
    assert 4.0 <= sleep.delays[1] <= 5.0


@pytest.mark.asyncio
async def test_retryable_then_fatal_stops_at_fatal(sleep, rng):
    generator = FakeGenerator([StatusError(503, "busy"), StatusError(403, "forbidden")])
    outcome = await _fetcher(generator, sleep, rng).fetch("p", max_attempts=5)

    assert outcome == Failure(message="forbidden")
    assert len(generator.calls) == 2
    assert len(sleep.delays) == 1


@pytest.mark.asyncio
async def test_empty_response_is_not_retried(sleep, rng):
    generator = FakeGenerator([raw(""), raw(GOOD_JSON)])
    outcome = await _fetcher(generator, sleep, rng).fetch("p")

    assert outcome == Failure(message="Empty response from API.")
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_fetch_rejects_zero_attempts(sleep, rng):
    with pytest.raises(ValueError):
        await _fetcher(FakeGenerator(), sleep, rng).fetch("p", max_attempts=0)


@pytest.mark.asyncio
async def test_waiting_fetch_can_be_cancelled(rng):
    generator = FakeGenerator([StatusError(429, "slow down"), raw(GOOD_JSON)])
    fetcher = ResilientFetcher(generator, INSTRUCTION, rng=rng, base_delay_ms=60_000)

    task = asyncio.create_task(fetcher.fetch("p"))
    for _ in range(5):
        await asyncio.sleep(0)
    assert len(generator.calls) == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(generator.calls) == 1
