import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

import structlog

from market_pulse.exceptions import AppError, UpstreamError, ValidationError
from market_pulse.market.schemas import ChartPoint
from market_pulse.market.service import MarketService
from market_pulse.news.fetcher import ResilientFetcher
from market_pulse.news.prompts import CATEGORY_PROMPTS, build_search_prompt
from market_pulse.news.schemas import (
    DashboardSnapshot,
    Failure,
    NewsCategory,
    NewsData,
    Success,
)

logger = structlog.get_logger()

_MAX_QUERY_LENGTH = 200


class NewsService:
    def __init__(
        self,
        fetcher: ResilientFetcher,
        market_service: MarketService,
        *,
        max_attempts: int = 3,
        stagger_seconds: float = 1.5,
        chart_days: int = 7,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._market = market_service
        self._max_attempts = max_attempts
        self._stagger_seconds = stagger_seconds
        self._chart_days = chart_days
        self._sleep = sleep

    async def get_category(self, category: NewsCategory) -> NewsData:
        logger.info("news_get_category", category=category.value)
        outcome = await self._fetcher.fetch(CATEGORY_PROMPTS[category], self._max_attempts)
        if isinstance(outcome, Failure):
            subject = (
                "market mover data" if category is NewsCategory.MARKET_MOVERS else "news summary"
            )
            raise UpstreamError(f"Failed to fetch {subject}. Reason: {outcome.message}")

        # Only the movers card carries a chart
        with_chart = category is NewsCategory.MARKET_MOVERS
        return await self._build_news_data(outcome, with_chart=with_chart)

    async def search(self, query: str) -> NewsData:
        query = query.strip()
        if not query:
            raise ValidationError("Search query must not be empty")
        if len(query) > _MAX_QUERY_LENGTH:
            raise ValidationError(f"Search query exceeds {_MAX_QUERY_LENGTH} characters")

        logger.info("news_search", query=query)
        outcome = await self._fetcher.fetch(build_search_prompt(query), self._max_attempts)
        if isinstance(outcome, Failure):
            raise UpstreamError(f"Search failed. Reason: {outcome.message}")
        return await self._build_news_data(outcome, with_chart=True)

    async def get_dashboard(self) -> DashboardSnapshot:
        """Fetch every category concurrently, starting each one a fixed offset after the last."""
        categories = list(NewsCategory)
        tasks = [
            self._get_category_staggered(category, index * self._stagger_seconds)
            for index, category in enumerate(categories)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        data: dict[NewsCategory, NewsData] = {}
        for category, result in zip(categories, results, strict=True):
            if isinstance(result, AppError):
                logger.warning(
                    "news_category_failed", category=category.value, error=result.message
                )
                data[category] = NewsData(error=result.message)
            elif isinstance(result, BaseException):
                raise result
            else:
                data[category] = result

        return DashboardSnapshot(refreshed_at=datetime.now(UTC).isoformat(), categories=data)

    async def _get_category_staggered(self, category: NewsCategory, delay: float) -> NewsData:
        if delay > 0:
            await self._sleep(delay)
        return await self.get_category(category)

    async def _build_news_data(self, outcome: Success, *, with_chart: bool) -> NewsData:
        result = outcome.result
        news = NewsData(
            content=result.summary,
            sources=outcome.sources,
            sentiment=result.sentiment,
            stock_ticker=result.ticker,
        )
        if with_chart and result.ticker:
            news.chart_data = await self._chart_for(result.ticker)
        return news

    async def _chart_for(self, ticker: str) -> list[ChartPoint] | None:
        try:
            points = await self._market.get_history(ticker, self._chart_days)
        except AppError as exc:
            logger.warning("news_chart_unavailable", ticker=ticker, error=exc.message)
            return None
        return points or None
