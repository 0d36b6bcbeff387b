import asyncio

import structlog

from market_pulse.news.schemas import DashboardSnapshot, NewsCategory
from market_pulse.news.service import NewsService

logger = structlog.get_logger()


class NewsPoller:
    """Keeps the latest dashboard snapshot fresh on a fixed interval."""

    def __init__(self, service: NewsService, interval_seconds: float) -> None:
        self._service = service
        self._interval = interval_seconds
        self._snapshot: DashboardSnapshot | None = None
        self._task: asyncio.Task | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def snapshot(self) -> DashboardSnapshot | None:
        return self._snapshot

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self, *, announce: bool = False) -> DashboardSnapshot:
        """Rebuild the snapshot. With ``announce``, log a changed intraday pulse."""
        async with self._refresh_lock:
            previous = self._snapshot
            snapshot = await self._service.get_dashboard()
            if announce:
                self._log_new_pulse(previous, snapshot)
            self._snapshot = snapshot
            return snapshot

    def start(self) -> None:
        if self._interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._run(), name="news-poller")
        logger.info("news_poller_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("news_poller_stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh(announce=True)
            except Exception as exc:
                logger.error("news_poll_failed", error=str(exc))
            await asyncio.sleep(self._interval)

    @staticmethod
    def _log_new_pulse(previous: DashboardSnapshot | None, current: DashboardSnapshot) -> None:
        pulse = current.categories.get(NewsCategory.INTRADAY_PULSE)
        if pulse is None or not pulse.content or previous is None:
            return
        before = previous.categories.get(NewsCategory.INTRADAY_PULSE)
        if before is None or before.content != pulse.content:
            logger.info("news_pulse_updated", content=pulse.content)
