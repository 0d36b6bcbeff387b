from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from market_pulse.market.schemas import ChartPoint


class NewsCategory(StrEnum):
    MARKET_MOVERS = "MarketMovers"
    GLOBAL_MACRO = "GlobalMacro"
    INTRADAY_PULSE = "IntradayPulse"


class Sentiment(StrEnum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class Citation(BaseModel):
    """Candidate citation as reported by the generator; either field may be blank."""

    uri: str | None = None
    title: str | None = None


class RawResponse(BaseModel):
    text: str | None = None
    citations: list[Citation] = Field(default_factory=list)


class Source(BaseModel):
    uri: str
    title: str


class ParsedResult(BaseModel):
    summary: str
    # Kept as plain str: values outside Sentiment are passed through as given
    sentiment: str | None = None
    ticker: str | None = None


class Success(BaseModel):
    ok: Literal[True] = True
    result: ParsedResult
    sources: list[Source] = Field(default_factory=list)


class Failure(BaseModel):
    ok: Literal[False] = False
    message: str


Outcome = Success | Failure


class NewsData(BaseModel):
    content: str = ""
    sources: list[Source] = Field(default_factory=list)
    sentiment: str | None = None
    stock_ticker: str | None = None
    chart_data: list[ChartPoint] | None = None
    error: str | None = None


class DashboardSnapshot(BaseModel):
    refreshed_at: str
    categories: dict[NewsCategory, NewsData]
