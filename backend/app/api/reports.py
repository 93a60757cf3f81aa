# backend/app/api/reports.py
import logging
from datetime import date
from io import StringIO
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.app import reports
from backend.app.api.deps import get_store, require
from backend.app.auth import SessionInfo
from backend.app.errors import InternalError, ValidationFailed
from backend.app.schemas import ReportOut
from backend.app.store import Store

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_report(store: Store, desde: Optional[date], hasta: Optional[date]) -> ReportOut:
    default_desde, default_hasta = reports.default_range()
    desde = desde or default_desde
    hasta = hasta or default_hasta
    if hasta < desde:
        raise ValidationFailed("La fecha de inicio debe ser anterior a la fecha fin")
    try:
        transactions = store.list_transactions()
    except SQLAlchemyError:
        logger.exception("Could not load transactions for report")
        raise InternalError()
    return reports.build_report(transactions, desde, hasta)


def _csv_download(content: str, filename: str) -> StreamingResponse:
    return StreamingResponse(
        StringIO(content),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("", response_model=ReportOut)
def get_report(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    session: SessionInfo = Depends(require("reports", "read")),
    store: Store = Depends(get_store),
):
    """
    Balance, daily net movement and income/expense split for the range
    (defaults to the last 365 days).
    """
    return _load_report(store, desde, hasta)


@router.get("/daily.csv")
def download_daily(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    session: SessionInfo = Depends(require("reports", "read")),
    store: Store = Depends(get_store),
):
    report = _load_report(store, desde, hasta)
    return _csv_download(reports.daily_csv(report), "movimientos-diarios.csv")


@router.get("/split.csv")
def download_split(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    session: SessionInfo = Depends(require("reports", "read")),
    store: Store = Depends(get_store),
):
    report = _load_report(store, desde, hasta)
    return _csv_download(reports.split_csv(report), "ingresos-egresos.csv")
