# backend/app/api/auth.py
import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.exc import SQLAlchemyError

from backend.app.api.deps import current_session, get_auth
from backend.app.auth import AuthError, AuthService, EmailTaken, SessionInfo
from backend.app.errors import InternalError, Unauthenticated, ValidationFailed
from backend.app.models.session_model import AuthSession
from backend.app.schemas import SessionOut, SignInIn, SignUpIn, UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


def set_session_cookie(request: Request, response: Response, record: AuthSession) -> None:
    settings = request.app.state.settings
    response.set_cookie(
        settings.session_cookie_name,
        record.token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(request: Request, response: Response) -> None:
    response.delete_cookie(request.app.state.settings.session_cookie_name)


def _session_out(record: AuthSession) -> SessionOut:
    return SessionOut(token=record.token, user=UserOut.model_validate(record.user))


@router.post("/sign-up/email", response_model=SessionOut, status_code=201)
def sign_up(payload: SignUpIn, request: Request, response: Response, auth: AuthService = Depends(get_auth)):
    try:
        record = auth.sign_up(payload.name, str(payload.email), payload.password)
    except EmailTaken as exc:
        raise ValidationFailed(str(exc))
    except SQLAlchemyError:
        auth.db.rollback()
        logger.exception("Sign-up failed for %s", payload.email)
        raise InternalError()
    set_session_cookie(request, response, record)
    return _session_out(record)


@router.post("/sign-in/email", response_model=SessionOut)
def sign_in(payload: SignInIn, request: Request, response: Response, auth: AuthService = Depends(get_auth)):
    try:
        record = auth.sign_in(str(payload.email), payload.password)
    except AuthError as exc:
        raise Unauthenticated(str(exc))
    except SQLAlchemyError:
        auth.db.rollback()
        logger.exception("Sign-in failed for %s", payload.email)
        raise InternalError()
    set_session_cookie(request, response, record)
    return _session_out(record)


@router.post("/sign-out")
def sign_out(
    request: Request,
    response: Response,
    session: SessionInfo = Depends(current_session),
    auth: AuthService = Depends(get_auth),
):
    auth.sign_out(session.token)
    clear_session_cookie(request, response)
    return {"success": True}


@router.get("/session", response_model=SessionOut)
def read_session(session: SessionInfo = Depends(current_session)):
    user = UserOut(id=session.user_id, name=session.name, email=session.email, role=session.role)
    return SessionOut(token=session.token, user=user)
