import secrets
from datetime import datetime, timezone
from fastapi import Request, Response
from honeyhive.config import COOKIE_NAME
from honeyhive.db.repo import Repo

class SessionService:
    def __init__(self, repo: Repo):
        self.repo = repo

    @staticmethod
    def now_str():
        return datetime.now(timezone.utc).isoformat(timespec="seconds")

    @staticmethod
    def new_session_id():
        return secrets.token_urlsafe(24)

    def get_or_create(self, request: Request, response: Response) -> str:
        sess = request.cookies.get(COOKIE_NAME)

        if not sess or not self.repo.get_session(sess):
            sess = self.new_session_id()
            self.repo.insert_session(sess, self.now_str())
            response.set_cookie(COOKIE_NAME, sess, httponly=True, samesite="strict")

        return sess

    def current_user(self, request: Request):
        sess = request.cookies.get(COOKIE_NAME)
        if not sess:
            return None
        row = self.repo.get_session(sess)
        return row and row.get("user_id")

    def login(self, session_id: str, user_id: str):
        # one live session per user; older ones are unbound
        self.repo.bind_session(session_id, user_id)

    def logout(self, request: Request, response: Response):
        sess = request.cookies.get(COOKIE_NAME)
        if sess:
            self.repo.logout_session(sess)
        response.delete_cookie(COOKIE_NAME)
