import json
import random
import time
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from honeyhive.db.repo import Repo
from honeyhive.domain.questions import solve
from honeyhive.main import create_app

NOW = datetime(2025, 5, 1, 10, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "hive.sqlite3")


@pytest.fixture
def client(db_path):
    app = create_app(db_path=db_path, rng=random.Random(5), clock=lambda: NOW)
    return TestClient(app)


def signup_and_login(client, username="Maya"):
    assert client.post("/api/signup", json={"username": username}).status_code == 201
    res = client.post("/api/login", json={"username": username})
    assert res.status_code == 200
    return res.json()


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_unknown_path_is_json_404(client):
    res = client.get("/nope")
    assert res.status_code == 404
    assert res.json() == {"ok": False, "message": "Not found"}


@pytest.mark.parametrize("username", ["a", "has space", "x1", "a" * 21, ""])
def test_signup_rejects_bad_usernames(client, username):
    res = client.post("/api/signup", json={"username": username})
    assert res.status_code == 400
    assert res.json()["ok"] is False


def test_signup_username_is_unique_case_insensitive(client):
    assert client.post("/api/signup", json={"username": "Maya"}).status_code == 201
    res = client.post("/api/signup", json={"username": "maya"})
    assert res.status_code == 409


def test_login_unknown_user(client):
    res = client.post("/api/login", json={"username": "Ghost"})
    assert res.status_code == 401


def test_endpoints_require_login(client):
    for path in ("/api/me", "/api/question", "/api/stats", "/api/leaderboard?metric=honey"):
        res = client.get(path)
        assert res.status_code == 401
        assert res.json() == {"ok": False, "message": "Not logged in"}
    assert client.post("/api/answer", json={"answer": "1"}).status_code == 401


def test_new_profile_has_fresh_daily_state(client):
    body = signup_and_login(client)
    profile = body["profile"]
    assert profile["username"] == "Maya"
    assert profile["todayHoney"] == 0
    assert profile["lastDailyReset"] == "2025-05-01"
    assert profile["honey"] == 0
    assert profile["actualQuestion"]["type"] in {"sum", "subtraction", "multiplication", "division"}


def test_correct_answer_earns_honey(client):
    signup_and_login(client)
    q = client.get("/api/question").json()["question"]

    res = client.post("/api/answer", json={"answer": str(solve(q))})
    body = res.json()
    assert res.status_code == 200
    assert body["correct"] is True
    assert body["reward"] in {25, 50, 100, 200, 500, 1000}
    assert body["dailyCurrency"] == body["reward"]
    assert body["cumulativeCurrency"] == body["reward"]
    assert body["honey"] == body["reward"]

    me = client.get("/api/me").json()["profile"]
    assert me["todayHoney"] == body["reward"]
    assert me["stats"] == {"played": 1, "correct": 1, "totalHoney": body["reward"]}


def test_wrong_answer_earns_nothing(client):
    signup_and_login(client)
    q = client.get("/api/question").json()["question"]

    body = client.post("/api/answer", json={"answer": str(solve(q) + 1)}).json()
    assert body == {"ok": True, "correct": False, "correct_answer": solve(q)}

    stats = client.get("/api/stats").json()
    assert stats["played"] == 1
    assert stats["correct"] == 0
    assert stats["todayHoney"] == 0
    assert stats["nextRewardCeiling"] == 1000


def test_missing_answer(client):
    signup_and_login(client)
    assert client.post("/api/answer", json={}).status_code == 400


def test_change_question(client):
    signup_and_login(client)
    res = client.post("/api/change-question").json()
    assert res["ok"] is True
    assert client.get("/api/question").json()["question"] == res["question"]


def test_stale_daily_total_corrected_on_read(client, db_path):
    signup_and_login(client)
    repo = Repo(db_path)
    user_id = client.get("/api/me").json()["userId"]
    repo.apply_reward(user_id, 800, 800, 800, "2025-04-30")

    me = client.get("/api/me").json()["profile"]
    assert me["todayHoney"] == 0
    assert me["lastDailyReset"] == "2025-05-01"
    assert me["stats"]["totalHoney"] == 800


def test_vanished_user_is_404(client, db_path):
    signup_and_login(client)
    user_id = client.get("/api/me").json()["userId"]

    with Repo(db_path).transaction() as conn:
        conn.execute("DELETE FROM users WHERE user_id = ?", (user_id,))

    res = client.get("/api/me")
    assert res.status_code == 404
    assert res.json() == {"ok": False, "message": "User not found"}


def test_logout(client):
    signup_and_login(client)
    assert client.post("/api/logout").json() == {"ok": True}
    assert client.get("/api/me").status_code == 401


def test_login_elsewhere_drops_old_session(db_path):
    app = create_app(db_path=db_path, clock=lambda: NOW)
    first = TestClient(app)
    second = TestClient(app)

    signup_and_login(first)
    second.post("/api/login", json={"username": "maya"})

    assert second.get("/api/me").status_code == 200
    assert first.get("/api/me").status_code == 401


def test_leaderboard(client, db_path):
    signup_and_login(client, "Maya")
    client.post("/api/signup", json={"username": "Leo"})
    repo = Repo(db_path)
    leo = repo.find_user_id("leo")
    maya = repo.find_user_id("maya")
    repo.apply_reward(leo, 300, 300, 300, "2025-05-01")
    repo.apply_reward(maya, 100, 100, 100, "2025-05-01")
    with repo.transaction() as conn:
        conn.execute(
            "UPDATE users SET collection = ? WHERE user_id = ?",
            (json.dumps({"queen": 2, "drone": 1, "worker": 0}), maya),
        )

    honey = client.get("/api/leaderboard", params={"metric": "Honey"}).json()
    assert honey["metric"] == "honey"
    assert [i["value"] for i in honey["items"]] == [300, 100]
    assert honey["items"][0]["username"] == "Leo"

    unique = client.get("/api/leaderboard", params={"metric": "uniquehivees"}).json()
    assert unique["items"][0] == {"username": "Maya", "avatar": "./assets/HiveFest.png", "value": 2}

    total = client.get("/api/leaderboard", params={"metric": "totalhivees"}).json()
    assert total["items"][0]["value"] == 3

    assert client.get("/api/leaderboard", params={"metric": "bees"}).status_code == 400


def test_session_timestamps_are_utc(client, db_path):
    signup_and_login(client)
    sess = client.cookies.get("hive_sess")
    row = Repo(db_path).get_session(sess)
    assert row["created_at"].endswith("+00:00")
    assert Repo(db_path).get_user(row["user_id"])["created_at"].endswith("+00:00")


def test_lifespan_runs_daily_reset_scheduler(db_path):
    readings = []

    def clock():
        readings.append(NOW)
        return NOW

    app = create_app(db_path=db_path, clock=clock)
    with TestClient(app) as c:
        assert c.get("/health").json() == {"ok": True}
        for _ in range(100):
            if readings:
                break
            time.sleep(0.01)
        # the scheduler armed itself from the injected clock
        assert readings
