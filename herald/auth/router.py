from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse

from herald.shared.config import Settings
from herald.shared.deps import get_settings
from herald.shared.logging import get_logger
from .provider import AuthError
from .schemas import SignOutOutput
from .session import SessionService, bearer_token, get_session_service

logger = get_logger("auth.router")


router = APIRouter()
api_router = APIRouter()


@router.get("/callback")
def auth_callback(
    code: Optional[str] = Query(default=None),
    code_verifier: Optional[str] = Query(default=None),
    sessions: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    origin = settings.public_site_url.rstrip("/")
    if code:
        try:
            session = sessions.sign_in_with_code(code, code_verifier)
        except AuthError as e:
            logger.warning(f"auth callback failed: {e}")
        else:
            resp = RedirectResponse(url=origin or "/", status_code=303)
            resp.set_cookie(
                "access_token",
                session.access_token,
                httponly=True,
                samesite="lax",
                secure=origin.startswith("https://"),
            )
            return resp
    return RedirectResponse(url=f"{origin}/auth/auth-code-error", status_code=303)


@api_router.post("/signout", response_model=SignOutOutput)
def sign_out(request: Request, response: Response, sessions: SessionService = Depends(get_session_service)):
    sessions.sign_out(bearer_token(request))
    response.delete_cookie("access_token", httponly=True, samesite="lax")
    return SignOutOutput()
