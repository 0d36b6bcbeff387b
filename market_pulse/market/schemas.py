from pydantic import BaseModel


class StockQuote(BaseModel):
    ticker: str
    price: float
    change: float
    change_percent: float
    currency: str | None = None
    timestamp: str


class ChartPoint(BaseModel):
    date: str  # "Oct 18"
    price: float
