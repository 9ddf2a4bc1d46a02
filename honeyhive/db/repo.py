import json
from contextlib import nullcontext

from honeyhive.config import DB_PATH, DEFAULT_AVATAR
from honeyhive.db.sqlite import db_conn, write_txn


class NotFound(Exception):
    """The user row does not exist (or vanished between read and write)."""

    def __init__(self, user_id: str):
        super().__init__(f"user {user_id!r} not found")
        self.user_id = user_id


class Repo:
    def __init__(self, db_path: str = DB_PATH):
        self.db_path = db_path

    def init_db(self):
        conn = db_conn(self.db_path)
        cur = conn.cursor()

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
              user_id TEXT PRIMARY KEY,
              username TEXT NOT NULL,
              username_lower TEXT NOT NULL UNIQUE,
              created_at TEXT NOT NULL,
              honey INTEGER NOT NULL DEFAULT 0,
              total_honey INTEGER NOT NULL DEFAULT 0,
              today_honey INTEGER NOT NULL DEFAULT 0,
              last_reset_date TEXT NOT NULL,
              played INTEGER NOT NULL DEFAULT 0,
              correct INTEGER NOT NULL DEFAULT 0,
              fav_image TEXT,
              collection TEXT NOT NULL DEFAULT '{}',
              q_type TEXT,
              q_n1 INTEGER,
              q_n2 INTEGER
            )
            """
        )

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS sessions (
              session_id TEXT PRIMARY KEY,
              user_id TEXT,
              created_at TEXT NOT NULL
            )
            """
        )

        conn.commit()
        conn.close()

    def transaction(self):
        return write_txn(self.db_path)

    def _txn(self, conn):
        if conn is not None:
            return nullcontext(conn)
        return write_txn(self.db_path)

    # Daily honey state
    def get_daily_state(self, user_id: str, conn=None) -> dict:
        with self._txn(conn) as c:
            row = c.execute(
                "SELECT today_honey, total_honey, last_reset_date FROM users WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if not row:
            raise NotFound(user_id)
        return {
            "daily_currency": int(row["today_honey"]),
            "cumulative_currency": int(row["total_honey"]),
            "last_reset_date": row["last_reset_date"],
        }

    def apply_reward(
        self,
        user_id: str,
        reward: int,
        new_daily_currency: int,
        new_cumulative_currency: int,
        today: str,
        conn=None,
    ):
        with self._txn(conn) as c:
            cur = c.execute(
                """
                UPDATE users
                SET honey = honey + ?,
                    today_honey = ?,
                    total_honey = ?,
                    last_reset_date = ?
                WHERE user_id = ?
                """,
                (reward, new_daily_currency, new_cumulative_currency, today, user_id),
            )
            if cur.rowcount == 0:
                raise NotFound(user_id)
            row = c.execute("SELECT honey FROM users WHERE user_id = ?", (user_id,)).fetchone()
        return int(row["honey"])

    def correct_stale_daily(self, user_id: str, today: str, conn=None) -> bool:
        with self._txn(conn) as c:
            cur = c.execute(
                """
                UPDATE users
                SET today_honey = 0, last_reset_date = ?
                WHERE user_id = ? AND last_reset_date != ?
                """,
                (today, user_id, today),
            )
            return cur.rowcount > 0

    def reset_all_daily(self, today: str) -> int:
        with write_txn(self.db_path) as conn:
            cur = conn.execute("UPDATE users SET today_honey = 0, last_reset_date = ?", (today,))
            return cur.rowcount

    # Users
    def user_ids(self) -> list[str]:
        conn = db_conn(self.db_path)
        rows = conn.execute("SELECT user_id FROM users").fetchall()
        conn.close()
        return [r["user_id"] for r in rows]

    def insert_user(self, user_id: str, username: str, created_at: str, today: str, question: dict):
        with write_txn(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO users(user_id, username, username_lower, created_at, honey, total_honey,
                                  today_honey, last_reset_date, played, correct, fav_image, collection,
                                  q_type, q_n1, q_n2)
                VALUES (?, ?, ?, ?, 0, 0, 0, ?, 0, 0, ?, '{}', ?, ?, ?)
                """,
                (
                    user_id,
                    username,
                    username.lower(),
                    created_at,
                    today,
                    DEFAULT_AVATAR,
                    question["type"],
                    question["n1"],
                    question["n2"],
                ),
            )

    def find_user_id(self, username_lower: str):
        conn = db_conn(self.db_path)
        row = conn.execute("SELECT user_id FROM users WHERE username_lower = ?", (username_lower,)).fetchone()
        conn.close()
        return row["user_id"] if row else None

    def get_user(self, user_id: str) -> dict:
        conn = db_conn(self.db_path)
        row = conn.execute("SELECT * FROM users WHERE user_id = ?", (user_id,)).fetchone()
        conn.close()
        if not row:
            raise NotFound(user_id)
        out = dict(row)
        out["collection"] = json.loads(out.get("collection") or "{}")
        return out

    def get_question(self, user_id: str, conn=None) -> dict:
        with self._txn(conn) as c:
            row = c.execute("SELECT q_type, q_n1, q_n2 FROM users WHERE user_id = ?", (user_id,)).fetchone()
        if not row:
            raise NotFound(user_id)
        return {"type": row["q_type"], "n1": row["q_n1"], "n2": row["q_n2"]}

    def set_question(self, user_id: str, question: dict, conn=None):
        with self._txn(conn) as c:
            cur = c.execute(
                "UPDATE users SET q_type = ?, q_n1 = ?, q_n2 = ? WHERE user_id = ?",
                (question["type"], question["n1"], question["n2"], user_id),
            )
            if cur.rowcount == 0:
                raise NotFound(user_id)

    def inc_played(self, user_id: str, correct: bool, conn=None):
        with self._txn(conn) as c:
            cur = c.execute(
                """
                UPDATE users
                SET played = played + 1,
                    correct = correct + ?
                WHERE user_id = ?
                """,
                (1 if correct else 0, user_id),
            )
            if cur.rowcount == 0:
                raise NotFound(user_id)

    def select_leaderboard_rows(self):
        conn = db_conn(self.db_path)
        rows = conn.execute(
            "SELECT user_id, username, fav_image, honey, total_honey, collection FROM users"
        ).fetchall()
        conn.close()
        out = []
        for r in rows:
            d = dict(r)
            d["collection"] = json.loads(d.get("collection") or "{}")
            out.append(d)
        return out

    # Sessions
    def get_session(self, session_id: str):
        conn = db_conn(self.db_path)
        row = conn.execute("SELECT * FROM sessions WHERE session_id = ?", (session_id,)).fetchone()
        conn.close()
        return dict(row) if row else None

    def insert_session(self, session_id: str, created_at: str):
        with write_txn(self.db_path) as conn:
            conn.execute(
                "INSERT INTO sessions(session_id, user_id, created_at) VALUES (?, NULL, ?)",
                (session_id, created_at),
            )

    def bind_session(self, session_id: str, user_id: str):
        with write_txn(self.db_path) as conn:
            conn.execute(
                "UPDATE sessions SET user_id = NULL WHERE user_id = ? AND session_id != ?",
                (user_id, session_id),
            )
            conn.execute("UPDATE sessions SET user_id = ? WHERE session_id = ?", (user_id, session_id))

    def logout_session(self, session_id: str):
        with write_txn(self.db_path) as conn:
            conn.execute("UPDATE sessions SET user_id = NULL WHERE session_id = ?", (session_id,))
