from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from market_pulse.alerts.router import router as alerts_router
from market_pulse.config import settings
from market_pulse.dependencies import get_news_poller, shutdown_news_poller
from market_pulse.exception_handlers import register_exception_handlers
from market_pulse.exceptions import AppError
from market_pulse.logging_config import setup_logging
from market_pulse.market.router import router as market_router
from market_pulse.news.router import router as news_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.news_poll_interval_seconds > 0:
        try:
            get_news_poller().start()
        except AppError as exc:
            logger.warning("news_poller_disabled", reason=exc.message)
    yield
    await shutdown_news_poller()


app = FastAPI(
    title="Market Pulse",
    description="AI-generated Indian market news with price alerts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(news_router, prefix="/api/v1/news", tags=["news"])
app.include_router(market_router, prefix="/api/v1/market", tags=["market"])
app.include_router(alerts_router, prefix="/api/v1/alerts", tags=["alerts"])


@app.get("/api/v1/health")
async def health():
    return {"status": "healthy"}
