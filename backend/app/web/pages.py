# backend/app/web/pages.py
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.app import policy, reports
from backend.app.api.auth import clear_session_cookie, set_session_cookie
from backend.app.api.deps import get_auth, get_store
from backend.app.auth import AuthError, AuthService, EmailTaken, SessionInfo
from backend.app.errors import InternalError, validation_message
from backend.app.schemas import ProfileUpdate, SignInIn, SignUpIn, TransactionIn, UserUpdate
from backend.app.store import Store
from backend.client.forms import FormMachine, FormState

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@dataclass(frozen=True)
class Tile:
    title: str
    description: str
    href: str
    resource: str
    action: str


TILES = (
    Tile("Ingresos y Egresos", "Gestiona tus transacciones financieras", "/transactions", "transactions", "list"),
    Tile("Usuarios", "Administra los usuarios de la aplicación", "/users", "users", "list"),
    Tile("Reportes", "Genera y descarga informes financieros", "/reports", "reports", "read"),
)


class PageError(Exception):
    pass


def visible_tiles(session: SessionInfo) -> List[Tile]:
    return [t for t in TILES if policy.is_allowed(session.role, t.resource, t.action)]


def _filled(**fields):
    """Form fields left blank count as missing."""
    return {key: value for key, value in fields.items() if value.strip()}


def _safe_next(target: Optional[str]) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return "/"


def page_session(request: Request, auth: AuthService = Depends(get_auth)) -> Optional[SessionInfo]:
    return auth.get_session(request.headers)


def _to_login():
    return RedirectResponse("/login", status_code=303)


def _render(request: Request, name: str, session: Optional[SessionInfo], status_code: int = 200, **context):
    context.update(session=session, tiles=visible_tiles(session) if session else [])
    return templates.TemplateResponse(request, name, context, status_code=status_code)


def _denied(request: Request, session: SessionInfo):
    return _render(request, "denied.html", session, status_code=403)


def _unavailable(request: Request, session: SessionInfo):
    return _render(request, "unavailable.html", session, status_code=500)


def _submit(form: FormMachine, action: Callable):
    """Run ``action`` through the form machine, turning failures into a message on the form."""

    def guarded():
        try:
            return action()
        except ValidationError as exc:
            raise PageError(validation_message(exc.errors()))
        except SQLAlchemyError:
            logger.exception("Store failure while submitting a form")
            raise PageError(InternalError.message)

    return form.run(guarded, error_types=(PageError,))


# ---------- AUTH ----------
@router.get("/login")
def login_page(request: Request, session: Optional[SessionInfo] = Depends(page_session)):
    if session is not None:
        return RedirectResponse("/", status_code=303)
    return _render(request, "login.html", None, error=None, email="")


@router.post("/login")
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    auth: AuthService = Depends(get_auth),
):
    try:
        credentials = SignInIn(email=email, password=password)
        record = auth.sign_in(str(credentials.email), credentials.password)
    except ValidationError as exc:
        return _render(request, "login.html", None, status_code=400,
                       error=validation_message(exc.errors()), email=email)
    except AuthError:
        return _render(request, "login.html", None, status_code=401,
                       error="Credenciales inválidas", email=email)
    response = RedirectResponse(_safe_next(request.query_params.get("next")), status_code=303)
    set_session_cookie(request, response, record)
    return response


@router.get("/signup")
def signup_page(request: Request):
    return _render(request, "signup.html", None, error=None, values={})


@router.post("/signup")
def signup_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    confirm_password: str = Form("", alias="confirmPassword"),
    auth: AuthService = Depends(get_auth),
):
    values = {"name": name, "email": email}
    try:
        data = SignUpIn.model_validate(
            {"name": name, "email": email, "password": password, "confirmPassword": confirm_password}
        )
        record = auth.sign_up(data.name, str(data.email), data.password)
    except ValidationError as exc:
        return _render(request, "signup.html", None, status_code=400,
                       error=validation_message(exc.errors()), values=values)
    except EmailTaken as exc:
        return _render(request, "signup.html", None, status_code=400, error=str(exc), values=values)
    response = RedirectResponse("/", status_code=303)
    set_session_cookie(request, response, record)
    return response


@router.get("/logout")
def logout(
    request: Request,
    session: Optional[SessionInfo] = Depends(page_session),
    auth: AuthService = Depends(get_auth),
):
    if session is not None:
        auth.sign_out(session.token)
    response = _to_login()
    clear_session_cookie(request, response)
    return response


# ---------- DASHBOARD ----------
@router.get("/")
def dashboard(request: Request, session: Optional[SessionInfo] = Depends(page_session)):
    if session is None:
        return _to_login()
    return _render(request, "dashboard.html", session)


# ---------- TRANSACTIONS ----------
def _transactions_page(request, session, store: Store, form: FormMachine, values=None, status_code=200):
    try:
        transactions = store.list_transactions()
    except SQLAlchemyError:
        logger.exception("Could not list transactions")
        transactions = []
        form.error = form.error or InternalError.message
    total = sum(t.monto for t in transactions)
    return _render(
        request, "transactions.html", session, status_code=status_code,
        transactions=transactions, total=total, form=form,
        can_create=policy.is_allowed(session.role, "transactions", "create"),
        values=values or {"concepto": "", "monto": "", "fecha": date.today().isoformat()},
    )


@router.get("/transactions")
def transactions_page(
    request: Request,
    nuevo: bool = False,
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    form = FormMachine()
    if nuevo and policy.is_allowed(session.role, "transactions", "create"):
        form.open()
    return _transactions_page(request, session, store, form)


@router.post("/transactions")
def transactions_submit(
    request: Request,
    concepto: str = Form(""),
    monto: str = Form(""),
    fecha: str = Form(""),
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    if not policy.is_allowed(session.role, "transactions", "create"):
        return _denied(request, session)

    form = FormMachine(FormState.OPEN)
    _submit(form, lambda: store.create_transaction(
        TransactionIn.model_validate(_filled(concepto=concepto, monto=monto, fecha=fecha)),
        owner_id=session.user_id,
    ))
    if form.state is FormState.CLOSED:
        return RedirectResponse("/transactions", status_code=303)
    values = {"concepto": concepto, "monto": monto, "fecha": fecha}
    return _transactions_page(request, session, store, form, values=values, status_code=400)


# ---------- USERS ----------
def _users_page(request, session, store: Store, form: FormMachine, editing=None, status_code=200):
    try:
        users = store.list_users()
    except SQLAlchemyError:
        logger.exception("Could not list users")
        users = []
        form.error = form.error or InternalError.message
    return _render(request, "users.html", session, status_code=status_code,
                   users=users, form=form, editing=editing)


@router.get("/users")
def users_page(
    request: Request,
    editar: Optional[str] = None,
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    if not policy.is_allowed(session.role, "users", "list"):
        return _denied(request, session)
    form = FormMachine()
    try:
        editing = store.get_user(editar) if editar else None
    except SQLAlchemyError:
        logger.exception("Could not load user %s", editar)
        return _unavailable(request, session)
    if editing is not None:
        form.open()
    return _users_page(request, session, store, form, editing=editing)


@router.post("/users")
def users_submit(
    request: Request,
    user_id: str = Form("", alias="id"),
    name: str = Form(""),
    role: str = Form(""),
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    if not policy.is_allowed(session.role, "users", "update"):
        return _denied(request, session)

    def update():
        updated = store.update_user(UserUpdate.model_validate(_filled(id=user_id, name=name, role=role)))
        if updated is None:
            raise PageError("User not found")
        return updated

    form = FormMachine(FormState.OPEN)
    _submit(form, update)
    if form.state is FormState.CLOSED:
        return RedirectResponse("/users", status_code=303)
    editing = {"id": user_id, "name": name, "role": role}
    return _users_page(request, session, store, form, editing=editing, status_code=400)


# ---------- PROFILE ----------
@router.get("/profile")
def profile_page(
    request: Request,
    editar: bool = False,
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    try:
        profile = store.get_profile(session.user_id)
    except SQLAlchemyError:
        logger.exception("Profile lookup failed for %s", session.user_id)
        return _unavailable(request, session)
    if profile is None:
        return _to_login()
    form = FormMachine()
    if editar:
        form.open()
    values = {"name": profile.name, "email": profile.email}
    return _render(request, "profile.html", session, profile=profile, form=form, values=values)


@router.post("/profile")
def profile_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    form = FormMachine(FormState.OPEN)
    _submit(form, lambda: store.update_profile(session.user_id, ProfileUpdate.model_validate(_filled(name=name, email=email))))
    if form.state is FormState.CLOSED:
        return RedirectResponse("/profile", status_code=303)
    try:
        profile = store.get_profile(session.user_id)
    except SQLAlchemyError:
        logger.exception("Profile lookup failed for %s", session.user_id)
        return _unavailable(request, session)
    return _render(request, "profile.html", session, status_code=400, profile=profile, form=form,
                   values={"name": name, "email": email})


# ---------- REPORTS ----------
@router.get("/reports")
def reports_page(
    request: Request,
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    session: Optional[SessionInfo] = Depends(page_session),
    store: Store = Depends(get_store),
):
    if session is None:
        return _to_login()
    if not policy.is_allowed(session.role, "reports", "read"):
        return _denied(request, session)

    default_desde, default_hasta = reports.default_range()
    desde = desde or default_desde
    hasta = hasta or default_hasta
    error = None
    if hasta < desde:
        error = "La fecha de inicio debe ser anterior a la fecha fin"
        hasta = desde
    try:
        transactions = store.list_transactions()
    except SQLAlchemyError:
        logger.exception("Could not load transactions for report")
        return _unavailable(request, session)
    report = reports.build_report(transactions, desde, hasta)
    peak = max((abs(d.total) for d in report.daily), default=0) or 1
    return _render(request, "reports.html", session, report=report, peak=peak, error=error)
