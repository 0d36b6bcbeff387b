from typing import Annotated

from fastapi import APIRouter, Query

from market_pulse.dependencies import MarketServiceDep
from market_pulse.market.schemas import ChartPoint, StockQuote

router = APIRouter()


@router.get("/quote/{ticker}", response_model=StockQuote)
async def get_quote(ticker: str, service: MarketServiceDep) -> StockQuote:
    return await service.get_quote(ticker)


@router.get("/history/{ticker}", response_model=list[ChartPoint])
async def get_history(
    ticker: str,
    service: MarketServiceDep,
    days: Annotated[int, Query(ge=1, le=365)] = 7,
) -> list[ChartPoint]:
    return await service.get_history(ticker, days)
