import asyncio
from datetime import UTC, date, datetime, timedelta

import structlog
import yfinance as yf

from market_pulse.exceptions import NotFoundError, UpstreamError
from market_pulse.market.providers.base import MarketDataProvider
from market_pulse.market.schemas import ChartPoint, StockQuote

logger = structlog.get_logger()


def _fetch_ticker_info(ticker: str) -> dict:
    """Fetch ticker info synchronously (to be run in a thread)."""
    info = yf.Ticker(ticker).info
    has_no_data = not info or (
        info.get("regularMarketPrice") is None
        and info.get("currentPrice") is None
        and not info.get("shortName")
    )
    if has_no_data:
        raise NotFoundError("Ticker", ticker)
    return info


def _fetch_closes(ticker: str, days: int) -> list[tuple[date, float]]:
    """Fetch daily closes synchronously (to be run in a thread)."""
    # Calendar window wide enough to cover weekends and exchange holidays
    start = date.today() - timedelta(days=days * 2 + 7)
    hist = yf.Ticker(ticker).history(start=start.isoformat())
    if hist.empty:
        raise NotFoundError("Ticker", ticker)
    tail = hist.tail(days)
    return [(ts.date(), float(close)) for ts, close in zip(tail.index, tail["Close"], strict=True)]


def format_chart_date(day: date) -> str:
    return f"{day:%b} {day.day}"


class YahooFinanceProvider(MarketDataProvider):
    async def get_quote(self, ticker: str) -> StockQuote:
        try:
            info = await asyncio.to_thread(_fetch_ticker_info, ticker)
        except NotFoundError:
            raise
        except Exception as exc:
            logger.error("yfinance_quote_error", ticker=ticker, error=str(exc))
            raise UpstreamError(f"Failed to fetch quote for {ticker}: {exc}") from exc

        price = info.get("regularMarketPrice") or info.get("currentPrice") or 0.0
        prev_close = info.get("regularMarketPreviousClose") or info.get("previousClose") or 0.0
        change = round(price - prev_close, 4) if price and prev_close else 0.0
        change_pct = round((change / prev_close) * 100, 4) if prev_close else 0.0

        return StockQuote(
            ticker=ticker,
            price=price,
            change=change,
            change_percent=change_pct,
            currency=info.get("currency"),
            timestamp=datetime.now(UTC).isoformat(),
        )

    async def get_history(self, ticker: str, days: int) -> list[ChartPoint]:
        try:
            closes = await asyncio.to_thread(_fetch_closes, ticker, days)
        except NotFoundError:
            raise
        except Exception as exc:
            logger.error("yfinance_history_error", ticker=ticker, error=str(exc))
            raise UpstreamError(f"Failed to fetch price history for {ticker}: {exc}") from exc

        return [
            ChartPoint(date=format_chart_date(day), price=round(close, 2))
            for day, close in closes
        ]
