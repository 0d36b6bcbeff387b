from typing import Annotated

from fastapi import Depends

from market_pulse.alerts.service import AlertRegistry, AlertService
from market_pulse.config import settings
from market_pulse.market.providers.yahoo_finance import YahooFinanceProvider
from market_pulse.market.service import MarketService
from market_pulse.news.fetcher import ResilientFetcher
from market_pulse.news.poller import NewsPoller
from market_pulse.news.prompts import SYSTEM_INSTRUCTION
from market_pulse.news.service import NewsService

_alert_registry = AlertRegistry()
_news_poller: NewsPoller | None = None


def get_market_service() -> MarketService:
    return MarketService(YahooFinanceProvider())


def get_fetcher() -> ResilientFetcher:
    from market_pulse.llm.factory import LLMFactory

    return ResilientFetcher(
        LLMFactory.create_generator(),
        SYSTEM_INSTRUCTION,
        use_search_grounding=settings.use_search_grounding,
        base_delay_ms=settings.retry_base_delay_ms,
        jitter_ms=settings.retry_jitter_ms,
    )


def get_news_service() -> NewsService:
    return NewsService(
        get_fetcher(),
        get_market_service(),
        max_attempts=settings.fetch_max_attempts,
        stagger_seconds=settings.category_stagger_seconds,
        chart_days=settings.chart_history_days,
    )


def get_news_poller() -> NewsPoller:
    global _news_poller
    if _news_poller is None:
        _news_poller = NewsPoller(get_news_service(), settings.news_poll_interval_seconds)
    return _news_poller


def get_alert_service() -> AlertService:
    return AlertService(_alert_registry, get_market_service())


async def shutdown_news_poller() -> None:
    global _news_poller
    if _news_poller is not None:
        await _news_poller.stop()
        _news_poller = None


MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
NewsServiceDep = Annotated[NewsService, Depends(get_news_service)]
NewsPollerDep = Annotated[NewsPoller, Depends(get_news_poller)]
AlertServiceDep = Annotated[AlertService, Depends(get_alert_service)]
