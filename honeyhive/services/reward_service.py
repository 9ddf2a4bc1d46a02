import logging
import random
from zoneinfo import ZoneInfo

from honeyhive.db.repo import Repo
from honeyhive.domain.clock import today_str, utc_now
from honeyhive.domain.rewards import compute_reward, lazy_reset

logger = logging.getLogger(__name__)


class RewardService:
    def __init__(self, repo: Repo, tz: ZoneInfo, rng=random, clock=utc_now):
        self.repo = repo
        self.tz = tz
        self.rng = rng
        self.clock = clock

    def today(self) -> str:
        return today_str(self.tz, self.clock())

    def refresh(self, user_id: str) -> bool:
        """Zero a stale daily total before the profile is read."""
        corrected = self.repo.correct_stale_daily(user_id, self.today())
        if corrected:
            logger.info("lazy daily reset for user %s", user_id)
        return corrected

    def grant(self, user_id: str, conn=None) -> dict:
        """Read, reward and write back one user's honey as a single transaction."""
        if conn is None:
            with self.repo.transaction() as c:
                return self.grant(user_id, conn=c)

        today = self.today()
        state = lazy_reset(self.repo.get_daily_state(user_id, conn=conn), today)

        reward = compute_reward(state["daily_currency"], self.rng)
        new_daily = state["daily_currency"] + reward
        new_cumulative = state["cumulative_currency"] + reward

        honey = self.repo.apply_reward(user_id, reward, new_daily, new_cumulative, today, conn=conn)

        return {
            "reward": reward,
            "daily_currency": new_daily,
            "cumulative_currency": new_cumulative,
            "honey": honey,
        }
