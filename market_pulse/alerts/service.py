import asyncio

import structlog

from market_pulse.alerts.schemas import Alert, AlertCondition, AlertCreate, AlertTrigger
from market_pulse.exceptions import AppError, NotFoundError
from market_pulse.market.service import MarketService, normalize_ticker

logger = structlog.get_logger()


def is_crossed(alert: Alert, price: float) -> bool:
    if alert.condition is AlertCondition.ABOVE:
        return price > alert.target_price
    return price < alert.target_price


class AlertRegistry:
    """In-process alert store, one alert per (ticker, condition)."""

    def __init__(self) -> None:
        self._alerts: dict[tuple[str, AlertCondition], Alert] = {}
        # Ids already reported for their current crossing
        self._notified: set[str] = set()

    def upsert(self, alert: Alert) -> None:
        previous = self._alerts.get((alert.ticker, alert.condition))
        if previous is not None:
            self._notified.discard(previous.alert_id)
        self._alerts[(alert.ticker, alert.condition)] = alert

    def remove(self, ticker: str, condition: AlertCondition) -> bool:
        removed = self._alerts.pop((ticker, condition), None)
        if removed is None:
            return False
        self._notified.discard(removed.alert_id)
        return True

    def list_all(self) -> list[Alert]:
        return list(self._alerts.values())

    def should_notify(self, alert: Alert) -> bool:
        """False while ``alert`` has already been reported for the current crossing."""
        if alert.alert_id in self._notified:
            return False
        self._notified.add(alert.alert_id)
        return True

    def rearm(self, alert: Alert) -> None:
        self._notified.discard(alert.alert_id)


class AlertService:
    def __init__(self, registry: AlertRegistry, market_service: MarketService) -> None:
        self._registry = registry
        self._market = market_service

    def set_alert(self, data: AlertCreate) -> Alert:
        alert = Alert(
            ticker=normalize_ticker(data.ticker),
            target_price=data.target_price,
            condition=data.condition,
        )
        self._registry.upsert(alert)
        logger.info(
            "alert_set",
            ticker=alert.ticker,
            condition=alert.condition.value,
            target_price=alert.target_price,
        )
        return alert

    def remove_alert(self, ticker: str, condition: AlertCondition) -> None:
        ticker = normalize_ticker(ticker)
        if not self._registry.remove(ticker, condition):
            raise NotFoundError("Alert", f"{ticker}/{condition.value}")
        logger.info("alert_removed", ticker=ticker, condition=condition.value)

    def list_alerts(self) -> list[Alert]:
        return self._registry.list_all()

    def evaluate(self, prices: dict[str, float]) -> list[AlertTrigger]:
        """Match alerts against current prices.

        An alert is reported once per crossing. It is reported again only after a
        price on the other side of its target has been seen.
        """
        triggers: list[AlertTrigger] = []
        for alert in self._registry.list_all():
            price = prices.get(alert.ticker)
            if price is None:
                continue
            if not is_crossed(alert, price):
                self._registry.rearm(alert)
                continue
            if not self._registry.should_notify(alert):
                continue

            logger.info(
                "alert_triggered",
                ticker=alert.ticker,
                condition=alert.condition.value,
                target_price=alert.target_price,
                price=price,
            )
            triggers.append(
                AlertTrigger(
                    ticker=alert.ticker,
                    condition=alert.condition,
                    target_price=alert.target_price,
                    current_price=price,
                    message=(
                        f"Alert for {alert.ticker}: Price crossed ₹{alert.target_price} "
                        f"and is now ₹{price}"
                    ),
                )
            )
        return triggers

    async def check(self) -> list[AlertTrigger]:
        """Quote every ticker with an alert and evaluate."""
        tickers = sorted({alert.ticker for alert in self._registry.list_all()})
        if not tickers:
            return []

        quotes = await asyncio.gather(
            *(self._market.get_quote(ticker) for ticker in tickers),
            return_exceptions=True,
        )

        prices: dict[str, float] = {}
        for ticker, quote in zip(tickers, quotes, strict=True):
            if isinstance(quote, AppError):
                logger.warning("alert_quote_failed", ticker=ticker, error=quote.message)
                continue
            if isinstance(quote, BaseException):
                raise quote
            prices[ticker] = quote.price

        return self.evaluate(prices)
