# backend/app/reports.py
"""
Aggregations behind the admin reports page and its CSV downloads.

- balance: sum of every transaction, regardless of the selected range
- daily: net movement per day inside [desde, hasta], oldest day first
- split: income (positive montos) vs. expenses (absolute value of negative montos)
"""
from datetime import date, timedelta
from io import StringIO
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from backend.app.schemas import DailyMovement, IncomeExpenseSplit, ReportOut, TransactionOut

DEFAULT_RANGE_DAYS = 365


def default_range(today: Optional[date] = None) -> Tuple[date, date]:
    hasta = today or date.today()
    return hasta - timedelta(days=DEFAULT_RANGE_DAYS), hasta


def transactions_frame(transactions: Iterable[TransactionOut]) -> pd.DataFrame:
    rows = [{"fecha": t.fecha, "monto": float(t.monto)} for t in transactions]
    df = pd.DataFrame(rows, columns=["fecha", "monto"])
    df["fecha"] = pd.to_datetime(df["fecha"])
    df["monto"] = df["monto"].astype(float)
    return df


def in_range(df: pd.DataFrame, desde: date, hasta: date) -> pd.DataFrame:
    mask = (df["fecha"] >= pd.Timestamp(desde)) & (df["fecha"] <= pd.Timestamp(hasta))
    return df[mask]


def daily_movements(df: pd.DataFrame) -> List[DailyMovement]:
    if df.empty:
        return []
    totals = df.groupby(df["fecha"].dt.date)["monto"].sum().sort_index()
    return [DailyMovement(date=day, total=round(float(total), 2)) for day, total in totals.items()]


def income_expense_split(df: pd.DataFrame) -> IncomeExpenseSplit:
    income = df.loc[df["monto"] > 0, "monto"].sum()
    expenses = abs(df.loc[df["monto"] < 0, "monto"].sum())
    return IncomeExpenseSplit(income=round(float(income), 2), expenses=round(float(expenses), 2))


def build_report(transactions: Iterable[TransactionOut], desde: date, hasta: date) -> ReportOut:
    df = transactions_frame(transactions)
    filtered = in_range(df, desde, hasta)
    return ReportOut(
        desde=desde,
        hasta=hasta,
        balance=round(float(df["monto"].sum()), 2),
        daily=daily_movements(filtered),
        split=income_expense_split(filtered),
    )


def daily_csv(report: ReportOut) -> str:
    out = pd.DataFrame(
        [{"fecha": d.date.strftime("%d/%m/%Y"), "total": d.total} for d in report.daily],
        columns=["fecha", "total"],
    )
    buffer = StringIO()
    out.to_csv(buffer, index=False)
    return buffer.getvalue()


def split_csv(report: ReportOut) -> str:
    out = pd.DataFrame(
        [
            {"Categoria": "Ingresos", "Monto": report.split.income},
            {"Categoria": "Egresos", "Monto": -report.split.expenses},
        ],
        columns=["Categoria", "Monto"],
    )
    buffer = StringIO()
    out.to_csv(buffer, index=False)
    return buffer.getvalue()
