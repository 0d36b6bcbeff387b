from abc import ABC, abstractmethod

from market_pulse.market.schemas import ChartPoint, StockQuote


class MarketDataProvider(ABC):
    @abstractmethod
    async def get_quote(self, ticker: str) -> StockQuote: ...

    @abstractmethod
    async def get_history(self, ticker: str, days: int) -> list[ChartPoint]:
        """Closing prices for the last ``days`` trading sessions, oldest first."""
        ...
