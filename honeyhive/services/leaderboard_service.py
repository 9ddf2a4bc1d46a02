from honeyhive.config import DEFAULT_AVATAR, LEADERBOARD_METRICS, LEADERBOARD_SIZE
from honeyhive.db.repo import Repo
from honeyhive.domain.rewards import max_reward

class LeaderboardService:
    def __init__(self, repo: Repo):
        self.repo = repo

    @staticmethod
    def metric_value(row: dict, metric: str) -> int:
        coll = row.get("collection") or {}
        if metric == "honey":
            return int(row.get("honey", 0) or 0)
        if metric == "totalhoney":
            return int(row.get("total_honey", 0) or 0)
        if metric == "uniquehivees":
            return sum(1 for v in coll.values() if int(v or 0) > 0)
        return sum(int(v or 0) for v in coll.values())

    def top(self, metric: str):
        metric = (metric or "").strip().lower()
        if metric not in LEADERBOARD_METRICS:
            return None

        items = [
            {
                "username": r["username"],
                "avatar": r.get("fav_image") or DEFAULT_AVATAR,
                "value": self.metric_value(r, metric),
            }
            for r in self.repo.select_leaderboard_rows()
        ]
        items.sort(key=lambda x: x["value"], reverse=True)
        return items[:LEADERBOARD_SIZE]

    @staticmethod
    def user_stats(profile: dict) -> dict:
        played = int(profile["stats"].get("played", 0) or 0)
        correct = int(profile["stats"].get("correct", 0) or 0)
        today = int(profile.get("todayHoney", 0) or 0)
        return {
            "played": played,
            "correct": correct,
            "accuracy_pct": round((correct / played) * 100) if played > 0 else 0,
            "todayHoney": today,
            "totalHoney": int(profile["stats"].get("totalHoney", 0) or 0),
            "honey": int(profile.get("honey", 0) or 0),
            "nextRewardCeiling": max_reward(today),
        }
