import structlog

from market_pulse.exceptions import ValidationError
from market_pulse.market.providers.base import MarketDataProvider
from market_pulse.market.schemas import ChartPoint, StockQuote

logger = structlog.get_logger()


def normalize_ticker(ticker: str) -> str:
    ticker = ticker.upper().strip()
    if not ticker:
        raise ValidationError("Ticker must not be empty")
    return ticker


class MarketService:
    def __init__(self, provider: MarketDataProvider) -> None:
        self._provider = provider

    async def get_quote(self, ticker: str) -> StockQuote:
        ticker = normalize_ticker(ticker)
        logger.info("market_get_quote", ticker=ticker)
        return await self._provider.get_quote(ticker)

    async def get_history(self, ticker: str, days: int) -> list[ChartPoint]:
        ticker = normalize_ticker(ticker)
        logger.info("market_get_history", ticker=ticker, days=days)
        return await self._provider.get_history(ticker, days)
