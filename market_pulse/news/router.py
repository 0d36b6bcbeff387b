from fastapi import APIRouter

from market_pulse.dependencies import NewsPollerDep, NewsServiceDep
from market_pulse.news.schemas import DashboardSnapshot, NewsCategory, NewsData

router = APIRouter()


@router.get("/", response_model=DashboardSnapshot, response_model_exclude_none=True)
async def get_dashboard(poller: NewsPollerDep, refresh: bool = False) -> DashboardSnapshot:
    if refresh or poller.snapshot is None:
        return await poller.refresh()
    return poller.snapshot


@router.get("/search", response_model=NewsData, response_model_exclude_none=True)
async def search_news(q: str, service: NewsServiceDep) -> NewsData:
    # Length and blank checks live in NewsService.search
    return await service.search(q)


@router.get("/{category}", response_model=NewsData, response_model_exclude_none=True)
async def get_category(category: NewsCategory, service: NewsServiceDep) -> NewsData:
    return await service.get_category(category)
