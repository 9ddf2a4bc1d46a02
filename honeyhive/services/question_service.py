import random
from honeyhive.db.repo import Repo
from honeyhive.domain.questions import make_question, prompt, solve
from honeyhive.services.reward_service import RewardService

class QuestionService:
    def __init__(self, repo: Repo, rewards: RewardService, rng=random):
        self.repo = repo
        self.rewards = rewards
        self.rng = rng

    @staticmethod
    def payload(question: dict) -> dict:
        return {**question, "prompt": prompt(question)}

    def current(self, user_id: str) -> dict:
        q = self.repo.get_question(user_id)
        if not q.get("type"):
            q = self.change(user_id)
        return self.payload(q)

    def change(self, user_id: str, conn=None) -> dict:
        q = make_question(self.rng)
        self.repo.set_question(user_id, q, conn=conn)
        return q

    @staticmethod
    def parse_answer(ans_str) -> int | None:
        try:
            return int(str(ans_str).strip()) if str(ans_str).strip() != "" else None
        except ValueError:
            return None

    def answer(self, user_id: str, ans_str) -> dict:
        """Check the answer to the current question; a correct one earns honey."""
        user_val = self.parse_answer(ans_str)

        with self.repo.transaction() as conn:
            q = self.repo.get_question(user_id, conn=conn)
            correct_val = solve(q)
            correct = user_val is not None and user_val == correct_val

            self.repo.inc_played(user_id, correct, conn=conn)
            out = {"ok": True, "correct": correct, "correct_answer": correct_val}
            if not correct:
                return out

            granted = self.rewards.grant(user_id, conn=conn)
            new_q = self.change(user_id, conn=conn)

        out.update(
            {
                "reward": granted["reward"],
                "dailyCurrency": granted["daily_currency"],
                "cumulativeCurrency": granted["cumulative_currency"],
                "honey": granted["honey"],
                "question": self.payload(new_q),
            }
        )
        return out
