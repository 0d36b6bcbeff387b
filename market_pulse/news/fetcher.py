"""Resilient wrapper around a single generation call.

One ``fetch`` is a linear sequence of attempt -> wait -> attempt. Rate limits,
5xx errors and payloads that do not decode as JSON are retried with
exponential backoff plus jitter; anything else fails on the first attempt.
"""

import asyncio
import json
import random
import re
from collections.abc import Awaitable, Callable, Iterable
from enum import StrEnum

import structlog

from market_pulse.news.providers.base import TextGenerator
from market_pulse.news.schemas import (
    Citation,
    Failure,
    Outcome,
    ParsedResult,
    Sentiment,
    Source,
    Success,
)

logger = structlog.get_logger()

_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_KNOWN_SENTIMENTS = frozenset(s.value for s in Sentiment)


class FetchErrorKind(StrEnum):
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    INVALID_FORMAT = "invalid_format"
    OTHER = "other"

    @property
    def retryable(self) -> bool:
        return self is not FetchErrorKind.OTHER


class InvalidFormatError(Exception):
    """The generator answered, but not with a usable JSON object."""


class EmptyResponseError(Exception):
    pass


def extract_json_text(text: str) -> str:
    """Return the body of a ```json fence if there is one, else the text unchanged."""
    match = _JSON_FENCE_RE.search(text)
    return match.group(1) if match else text


def parse_result(text: str) -> ParsedResult:
    payload = extract_json_text(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise InvalidFormatError(f"Invalid JSON format in API response: {exc}") from exc

    if not isinstance(data, dict):
        raise InvalidFormatError("Invalid JSON format in API response: expected an object")
    summary = data.get("summary")
    if not isinstance(summary, str):
        raise InvalidFormatError("Invalid JSON format in API response: missing 'summary'")

    result: dict = {"summary": summary}
    if data.get("sentiment") is not None:
        sentiment = str(data["sentiment"])
        if sentiment not in _KNOWN_SENTIMENTS:
            logger.debug("news_sentiment_unrecognized", sentiment=sentiment)
        result["sentiment"] = sentiment
    if data.get("ticker"):
        result["ticker"] = str(data["ticker"])
    return ParsedResult(**result)


def extract_sources(citations: Iterable[Citation]) -> list[Source]:
    """Keep citations with both uri and title, first occurrence of each uri wins."""
    seen: set[str] = set()
    sources: list[Source] = []
    for citation in citations:
        if not citation.uri or not citation.title:
            continue
        if citation.uri in seen:
            continue
        seen.add(citation.uri)
        sources.append(Source(uri=citation.uri, title=citation.title))
    return sources


def _status_code(exc: BaseException) -> int | None:
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def classify_error(exc: BaseException) -> FetchErrorKind:
    if isinstance(exc, InvalidFormatError):
        return FetchErrorKind.INVALID_FORMAT
    status = _status_code(exc)
    if status == 429:
        return FetchErrorKind.RATE_LIMITED
    if status is not None and status >= 500:
        return FetchErrorKind.SERVER_ERROR
    return FetchErrorKind.OTHER


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class ResilientFetcher:
    def __init__(
        self,
        generator: TextGenerator,
        instruction: str,
        *,
        use_search_grounding: bool = True,
        base_delay_ms: int = 2000,
        jitter_ms: int = 1000,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._generator = generator
        self._instruction = instruction
        self._use_search_grounding = use_search_grounding
        self._base_delay_ms = base_delay_ms
        self._jitter_ms = jitter_ms
        self._rng = rng or random.Random()
        self._sleep = sleep

    def backoff_delay(self, attempt_index: int) -> float:
        """Seconds to wait after the failed attempt ``attempt_index`` (0-based)."""
        delay_ms = (2**attempt_index) * self._base_delay_ms
        delay_ms += self._rng.uniform(0, self._jitter_ms)
        return delay_ms / 1000

    async def fetch(self, prompt: str, max_attempts: int = 3) -> Outcome:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        last_error: BaseException | None = None
        for attempt in range(max_attempts):
            try:
                return await self._attempt(prompt)
            except Exception as exc:
                last_error = exc
                kind = classify_error(exc)
                if not kind.retryable or attempt == max_attempts - 1:
                    logger.error(
                        "news_fetch_failed",
                        attempt=attempt + 1,
                        max_attempts=max_attempts,
                        kind=kind.value,
                        error=_error_message(exc),
                    )
                    break

                delay = self.backoff_delay(attempt)
                logger.warning(
                    "news_fetch_retry",
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    kind=kind.value,
                    delay_ms=round(delay * 1000),
                    error=_error_message(exc),
                )
                await self._sleep(delay)

        return Failure(message=_error_message(last_error))

    async def _attempt(self, prompt: str) -> Success:
        response = await self._generator.generate(
            prompt, self._instruction, self._use_search_grounding
        )
        if not response.text:
            raise EmptyResponseError("Empty response from API.")

        result = parse_result(response.text)
        sources = extract_sources(response.citations)
        return Success(result=result, sources=sources)
