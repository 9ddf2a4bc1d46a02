import logging
import random
import re
import sqlite3
from datetime import datetime, timezone

from honeyhive.config import USERNAME_MAX, USERNAME_MIN
from honeyhive.db.repo import Repo
from honeyhive.domain.questions import make_question
from honeyhive.services.reward_service import RewardService

logger = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"^[a-zA-Z]+$")


def next_user_id(existing: list[str], rng=random) -> str:
    """Numeric ids that grow by a random step, wider as the ids get longer."""
    ids = [int(i) for i in existing if str(i).isdigit()]
    if not ids:
        return "1"

    last = max(ids)
    max_increment = round((len(str(last)) * 5) ** 1.25)
    return str(last + rng.randint(1, max_increment))


def valid_username(username: str) -> bool:
    return USERNAME_MIN <= len(username) <= USERNAME_MAX and bool(USERNAME_RE.match(username))


class AccountService:
    def __init__(self, repo: Repo, rewards: RewardService, rng=random):
        self.repo = repo
        self.rewards = rewards
        self.rng = rng

    def signup(self, username: str) -> tuple[bool, str, int]:
        username = (username or "").strip()
        if not valid_username(username):
            return False, "Only letters are allowed (2-20 characters).", 400

        if self.repo.find_user_id(username.lower()):
            return False, "This username already exists", 409

        user_id = next_user_id(self.repo.user_ids(), self.rng)
        created_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
        try:
            self.repo.insert_user(user_id, username, created_at, self.rewards.today(), make_question(self.rng))
        except sqlite3.IntegrityError:
            # lost a race on the same name or id
            return False, "This username already exists", 409

        logger.info("signup user=%s id=%s", username, user_id)
        return True, "", 201

    def login(self, username: str):
        user_id = self.repo.find_user_id((username or "").strip().lower())
        if user_id:
            logger.info("login id=%s", user_id)
        return user_id

    def profile(self, user_id: str) -> dict:
        self.rewards.refresh(user_id)
        u = self.repo.get_user(user_id)
        return {
            "username": u["username"],
            "accountCreatedAt": u["created_at"],
            "collection": u["collection"],
            "honey": u["honey"],
            "todayHoney": u["today_honey"],
            "lastDailyReset": u["last_reset_date"],
            "favCharacImage": u["fav_image"],
            "stats": {
                "played": u["played"],
                "correct": u["correct"],
                "totalHoney": u["total_honey"],
            },
            "actualQuestion": {"type": u["q_type"], "n1": u["q_n1"], "n2": u["q_n2"]},
        }
