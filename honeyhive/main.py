import logging
import random
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from honeyhive.config import APP_TITLE, DB_PATH, LOG_LEVEL, RESET_TIMEZONE
from honeyhive.db.repo import NotFound, Repo
from honeyhive.domain.clock import load_timezone, utc_now
from honeyhive.services.session_service import SessionService
from honeyhive.services.reward_service import RewardService
from honeyhive.services.account_service import AccountService
from honeyhive.services.question_service import QuestionService
from honeyhive.services.leaderboard_service import LeaderboardService
from honeyhive.services.reset_scheduler import DailyResetScheduler
from honeyhive.api.routes import build_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(db_path: str = DB_PATH, tz_name: str = RESET_TIMEZONE, rng=random, clock=utc_now) -> FastAPI:
    tz = load_timezone(tz_name)

    repo = Repo(db_path)
    repo.init_db()
    scheduler = DailyResetScheduler(repo, tz, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler.start()
        logger.info("daily reset scheduler started (%s)", tz_name)
        yield
        await scheduler.stop()

    app = FastAPI(title=APP_TITLE, lifespan=lifespan)

    def _handle_404(request: Request):
        return JSONResponse({"ok": False, "message": "Not found"}, status_code=404)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _handle_404(request)
        return JSONResponse({"ok": False, "message": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def fastapi_http_exception_handler(request: Request, exc: HTTPException):
        if exc.status_code == 404:
            return _handle_404(request)
        return JSONResponse({"ok": False, "message": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(NotFound)
    async def user_not_found_handler(request: Request, exc: NotFound):
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"ok": False, "message": "User not found"}, status_code=404)

    reward_svc = RewardService(repo, tz, rng=rng, clock=clock)
    session_svc = SessionService(repo)
    account_svc = AccountService(repo, reward_svc, rng=rng)
    q_svc = QuestionService(repo, reward_svc, rng=rng)
    board_svc = LeaderboardService(repo)

    app.include_router(build_router(session_svc, account_svc, q_svc, board_svc))
    return app


app = create_app()
