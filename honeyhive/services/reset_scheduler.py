import asyncio
import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from honeyhive.db.repo import Repo
from honeyhive.domain.clock import civil_date_in, next_midnight, utc_now

logger = logging.getLogger(__name__)


class DailyResetScheduler:
    """Zeroes every user's daily honey at each local midnight of ``tz``.

    A single background task loops: compute the next boundary, wait for it
    (or for ``stop()``), run the reset pass, repeat. The delay is recomputed
    from the clock on every turn, never taken as a fixed 24h. Only one
    scheduler may run against a given database.
    """

    def __init__(self, repo: Repo, tz: ZoneInfo, clock=utc_now):
        self.repo = repo
        self.tz = tz
        self.clock = clock
        self._stop = asyncio.Event()
        self._task = None

    def delay_until_next(self, now: datetime, after: datetime | None = None) -> tuple[datetime, float]:
        # a boundary already handled is never armed again, even if the clock lags behind it
        target = next_midnight(self.tz, max(now, after) if after else now)
        return target, max(0.0, (target - now).total_seconds())

    async def run(self):
        last_target = None
        while not self._stop.is_set():
            target, delay = self.delay_until_next(self.clock(), last_target)
            logger.info("daily reset armed for %s (in %.0fs)", target.isoformat(), delay)

            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass

            # the sleep may end a hair early; never date the pass before the boundary
            today = civil_date_in(self.tz, max(self.clock(), target)).isoformat()
            await self.fire(today)
            last_target = target

    async def fire(self, today: str) -> int:
        try:
            count = await asyncio.to_thread(self.repo.reset_all_daily, today)
        except Exception:
            logger.exception("daily reset for %s failed; rearming", today)
            return 0
        logger.info("daily reset for %s: %d users zeroed", today, count)
        return count

    def start(self):
        if self._task is None:
            self._stop.clear()
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None
