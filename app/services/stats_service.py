# app/services/stats_service.py
from datetime import datetime, timedelta

from sqlmodel import Session

from app.core.clock import utcnow
from app.repositories.stats_repo import StatsRepository
from app.schemas.stats import (
    AdminDashboardStats,
    DailyContactCounts,
    DailyOrderCounts,
    DailyRevenue,
    DailySummary,
    DailyTopSeller,
    LatestOrderSummary,
    OrderStatusStats,
    TopProduct,
)


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_admin_dashboard_stats(
        self,
        session: Session,
        top_n_products: int = 5,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        orders_by_status = [
            OrderStatusStats(
                status=status,
                order_count=int(order_count or 0),
                total_amount=float(total_amount or 0.0),
            )
            for status, order_count, total_amount in self.repo.order_stats_by_status(
                session
            )
        ]

        top_products = [
            TopProduct(
                product_id=p.id,
                name=p.name,
                total_sold=p.total_sold,
                week_sales=p.week_sales,
                month_sales=p.month_sales,
            )
            for p in self.repo.top_products(session, limit=top_n_products)
        ]

        latest_orders = [
            LatestOrderSummary(
                id=o.id,
                order_number=o.order_number,
                created_at=o.created_at,
                customer_name=o.customer_name,
                total_price=o.total_price,
                status=o.status,
            )
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return AdminDashboardStats(
            total_orders=self.repo.count_orders(session),
            total_revenue=self.repo.total_revenue(session),
            unread_contacts=self.repo.count_contacts(session, "new"),
            orders_by_status=orders_by_status,
            top_products=top_products,
            latest_orders=latest_orders,
        )

    def get_daily_summary(
        self,
        session: Session,
        now: datetime | None = None,
        top_n_products: int = 5,
    ) -> DailySummary:
        """
        Figures for the daily admin report.

        "Today" starts at UTC midnight; the week is today plus the six
        days before it. Top sellers are ranked by lifetime units sold.
        """
        now = now or utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week = today - timedelta(days=6)

        orders = DailyOrderCounts(
            new=self.repo.count_orders_since(session, today),
            confirmed=self.repo.count_orders_since(session, today, "confirmed_at"),
            delivered=self.repo.count_orders_since(session, today, "delivered_at"),
            cancelled=self.repo.count_orders_since(session, today, "cancelled_at"),
        )
        revenue = DailyRevenue(
            today=self.repo.revenue_since(session, today),
            week=self.repo.revenue_since(session, week),
        )
        contacts = DailyContactCounts(
            new=self.repo.count_contacts_since(session, today),
            replied=self.repo.count_contacts_since(session, today, "replied_at"),
        )
        top_products = [
            DailyTopSeller(name=p.name, sold=p.total_sold)
            for p in self.repo.top_products(session, limit=top_n_products)
        ]

        return DailySummary(
            date=now,
            orders=orders,
            revenue=revenue,
            contacts=contacts,
            top_products=top_products,
        )
