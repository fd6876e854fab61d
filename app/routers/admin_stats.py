# app/routers/admin_stats.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import AdminDashboardStats, DailySummaryResult
from app.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)
from app.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

repo = StatsRepository()
service = StatsService(repo)


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    top: int = Query(5, ge=1, le=50),
    latest: int = Query(5, ge=1, le=50),
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Query params (optional):
      - top: number of best-selling products, default 5
      - latest: number of most recent orders, default 5
    """
    return service.get_admin_dashboard_stats(
        session=session,
        top_n_products=top,
        latest_n_orders=latest,
    )


@router.post(
    "/daily-summary",
    response_model=DailySummaryResult,
    dependencies=[Depends(require_admin)],
)
def send_daily_summary(
    top: int = Query(5, ge=1, le=50),
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Build today's report and post it to the admin Telegram chat.

    `sent` is False when Telegram is not configured or the send failed.
    """
    summary = service.get_daily_summary(session, top_n_products=top)
    sent = dispatcher.send_daily_summary(summary)
    return DailySummaryResult(sent=sent, summary=summary)
