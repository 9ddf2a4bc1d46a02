from fastapi import APIRouter, Request, Response

from honeyhive.services.session_service import SessionService
from honeyhive.services.account_service import AccountService
from honeyhive.services.question_service import QuestionService
from honeyhive.services.leaderboard_service import LeaderboardService


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def build_router(
    session_svc: SessionService,
    account_svc: AccountService,
    q_svc: QuestionService,
    board_svc: LeaderboardService,
):
    r = APIRouter()

    def not_logged_in(response: Response):
        response.status_code = 401
        return {"ok": False, "message": "Not logged in"}

    @r.get("/favicon.ico")
    def favicon():
        return Response(status_code=204)

    @r.post("/api/signup")
    async def api_signup(request: Request, response: Response):
        body = await _json_body(request)
        ok, msg, code = account_svc.signup(body.get("username") or "")
        response.status_code = code
        if not ok:
            return {"ok": False, "message": msg}
        return {"ok": True}

    @r.post("/api/login")
    async def api_login(request: Request, response: Response):
        body = await _json_body(request)
        user_id = account_svc.login(body.get("username") or "")
        if not user_id:
            response.status_code = 401
            return {"ok": False, "message": "Invalid credentials."}

        sess = session_svc.get_or_create(request, response)
        session_svc.login(sess, user_id)
        return {"ok": True, "profile": account_svc.profile(user_id)}

    @r.get("/api/me")
    def api_me(request: Request, response: Response):
        user_id = session_svc.current_user(request)
        if not user_id:
            return not_logged_in(response)
        return {"ok": True, "userId": user_id, "profile": account_svc.profile(user_id)}

    @r.post("/api/logout")
    def api_logout(request: Request, response: Response):
        session_svc.logout(request, response)
        return {"ok": True}

    @r.get("/api/question")
    def api_question(request: Request, response: Response):
        user_id = session_svc.current_user(request)
        if not user_id:
            return not_logged_in(response)
        return {"ok": True, "question": q_svc.current(user_id)}

    @r.post("/api/change-question")
    def api_change_question(request: Request, response: Response):
        user_id = session_svc.current_user(request)
        if not user_id:
            return not_logged_in(response)
        return {"ok": True, "question": q_svc.payload(q_svc.change(user_id))}

    @r.post("/api/answer")
    async def api_answer(request: Request, response: Response):
        user_id = session_svc.current_user(request)
        if not user_id:
            return not_logged_in(response)

        body = await _json_body(request)
        if "answer" not in body:
            response.status_code = 400
            return {"ok": False, "message": "Missing answer."}

        return q_svc.answer(user_id, body["answer"])

    @r.get("/api/stats")
    def api_stats(request: Request, response: Response):
        user_id = session_svc.current_user(request)
        if not user_id:
            return not_logged_in(response)
        profile = account_svc.profile(user_id)
        return {"ok": True, "username": profile["username"], **board_svc.user_stats(profile)}

    @r.get("/api/leaderboard")
    def api_leaderboard(request: Request, response: Response, metric: str = ""):
        if not session_svc.current_user(request):
            return not_logged_in(response)

        items = board_svc.top(metric)
        if items is None:
            response.status_code = 400
            return {"ok": False, "message": "Unknown metric"}
        return {"ok": True, "metric": metric.strip().lower(), "items": items}

    @r.get("/health")
    def health():
        return {"ok": True}

    return r
