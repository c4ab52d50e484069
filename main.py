import logging
from datetime import date, datetime
from typing import Literal, Optional
from zoneinfo import ZoneInfo

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import Identity, current_identity
from config import get_settings
from dashboard import RECENT_DEFAULT_LIMIT, DashboardService
from database import get_db
from ledger import RECENT_HARD_LIMIT
from periods import PeriodKind, today
from schemas import (
    DashboardSummaryOut,
    IncomeVsExpensesOut,
    RecentTransactionsOut,
    ReportSummaryOut,
)
from tax import build_tax_estimator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Finance Dashboard")

tax_estimator = build_tax_estimator(get_settings())

ReportPeriodName = Literal["this-month", "last-month", "this-quarter", "this-year"]


def get_dashboard(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService.for_session(db, tax_estimator)


def _field_name(loc: tuple) -> str:
    parts = [str(p) for p in loc if p not in ("query", "body", "header", "path")]
    return ".".join(parts) or "request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"field": _field_name(tuple(err.get("loc", ()))), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400, content={"detail": "Validation failed", "errors": errors}
    )


def parse_iso_date(value: Optional[str], field: str) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(
            status_code=400, detail=f"{field} must be an ISO-8601 date"
        ) from exc
    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(ZoneInfo(get_settings().timezone))
        except OverflowError as exc:
            raise HTTPException(
                status_code=400, detail=f"{field} must be an ISO-8601 date"
            ) from exc
    return parsed.date()


@app.get("/health", response_class=PlainTextResponse)
def health():
    return "ok"


@app.get("/api/v1/dashboard", response_model=DashboardSummaryOut)
def dashboard_summary(
    identity: Identity = Depends(current_identity),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    dashboard: DashboardService = Depends(get_dashboard),
):
    now = today()
    month = month or now.month
    year = year or now.year
    logger.info(
        f"dashboard_summary: owner={identity.owner_id} period={year:04d}-{month:02d}"
    )
    try:
        return dashboard.summary(identity, year, month)
    except SQLAlchemyError as exc:
        logger.exception("dashboard_summary: store failure")
        raise HTTPException(
            status_code=500, detail="Failed to fetch dashboard data"
        ) from exc


@app.get("/api/v1/dashboard/income-vs-expenses", response_model=IncomeVsExpensesOut)
def dashboard_income_vs_expenses(
    identity: Identity = Depends(current_identity),
    period: Optional[PeriodKind] = Query(None),
    legacy_range: Optional[PeriodKind] = Query(None, alias="range"),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    dashboard: DashboardService = Depends(get_dashboard),
):
    kind = period or legacy_range or PeriodKind.month
    now = today()
    month = month or now.month
    year = year or now.year
    logger.info(
        f"dashboard_series: owner={identity.owner_id} kind={kind.value} "
        f"anchor={year:04d}-{month:02d}"
    )
    try:
        return dashboard.income_vs_expenses(identity, kind, year, month)
    except SQLAlchemyError as exc:
        logger.exception("dashboard_series: store failure")
        raise HTTPException(
            status_code=500, detail="Failed to fetch income vs expenses data"
        ) from exc


@app.get("/api/v1/dashboard/recent", response_model=RecentTransactionsOut)
def dashboard_recent(
    identity: Identity = Depends(current_identity),
    limit: int = Query(RECENT_DEFAULT_LIMIT, ge=1, le=RECENT_HARD_LIMIT),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    start = parse_iso_date(start_date, "startDate")
    end = parse_iso_date(end_date, "endDate")
    logger.info(f"dashboard_recent: owner={identity.owner_id} limit={limit}")
    try:
        return dashboard.recent(identity, limit, start, end)
    except SQLAlchemyError as exc:
        logger.exception("dashboard_recent: store failure")
        raise HTTPException(
            status_code=500, detail="Failed to fetch recent transactions"
        ) from exc


@app.get("/api/v1/reports/summary", response_model=ReportSummaryOut)
def report_summary(
    identity: Identity = Depends(current_identity),
    period: ReportPeriodName = Query("this-month"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    logger.info(f"report_summary: owner={identity.owner_id} period={period}")
    try:
        return dashboard.report_summary(identity, period)
    except SQLAlchemyError as exc:
        logger.exception("report_summary: store failure")
        raise HTTPException(
            status_code=500, detail="Failed to build report summary"
        ) from exc


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
