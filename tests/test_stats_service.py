"""Tests for the admin dashboard and the daily report figures."""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.contact import Contact
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.stats_repo import StatsRepository
from app.schemas.order import OrderCreate
from app.services.order_service import OrderService
from app.services.stats_service import StatsService

NOW = datetime(2024, 5, 10, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def stats():
    return StatsService(StatsRepository())


@pytest.fixture
def place_at(session, order_payload):
    """Place an order, then move its timestamps to the given moment."""
    service = OrderService(OrderRepository(), ProductRepository())

    def _place(created_at, **stamps):
        order = service.create_order(
            session, OrderCreate.model_validate(order_payload())
        )
        order.created_at = created_at
        for field, value in stamps.items():
            setattr(order, field, value)
        session.add(order)
        session.commit()
        return order

    return _place


def add_contact(session, created_at, replied_at=None):
    contact = Contact(
        name="Dilnoza",
        phone="+998907654321",
        message="Salom",
        created_at=created_at,
        replied_at=replied_at,
        status="replied" if replied_at else "new",
    )
    session.add(contact)
    session.commit()


class TestDailySummary:
    def test_empty_shop(self, stats, session):
        summary = stats.get_daily_summary(session, now=NOW)
        assert summary.orders.new == 0
        assert summary.revenue.today == 0
        assert summary.revenue.week == 0
        assert summary.contacts.new == 0
        assert summary.top_products == []
        assert summary.date == NOW

    def test_order_counts_and_revenue(self, stats, session, place_at):
        this_morning = NOW.replace(hour=9)
        place_at(this_morning)
        place_at(
            this_morning,
            status="confirmed",
            confirmed_at=this_morning + timedelta(hours=1),
        )
        place_at(
            this_morning,
            status="cancelled",
            cancelled_at=this_morning + timedelta(hours=2),
        )
        # Earlier this week, confirmed and delivered today.
        place_at(
            NOW - timedelta(days=3),
            status="delivered",
            confirmed_at=NOW - timedelta(days=3),
            delivered_at=this_morning,
        )
        # Outside the week.
        place_at(NOW - timedelta(days=9))

        summary = stats.get_daily_summary(session, now=NOW)
        assert summary.orders.new == 3
        assert summary.orders.confirmed == 1
        assert summary.orders.delivered == 1
        assert summary.orders.cancelled == 1
        # Cancelled orders never count as revenue; each order totals 51800.
        assert summary.revenue.today == 2 * 51800
        assert summary.revenue.week == 3 * 51800

    def test_yesterday_is_not_today(self, stats, session, place_at):
        midnight = NOW.replace(hour=0, minute=0)
        place_at(midnight - timedelta(minutes=1))
        place_at(midnight)

        summary = stats.get_daily_summary(session, now=NOW)
        assert summary.orders.new == 1
        assert summary.revenue.today == 51800
        assert summary.revenue.week == 2 * 51800

    def test_contacts(self, stats, session):
        add_contact(session, NOW.replace(hour=8))
        add_contact(session, NOW.replace(hour=9), replied_at=NOW.replace(hour=10))
        add_contact(session, NOW - timedelta(days=2), replied_at=NOW.replace(hour=11))
        add_contact(session, NOW - timedelta(days=2))

        summary = stats.get_daily_summary(session, now=NOW)
        assert summary.contacts.new == 2
        assert summary.contacts.replied == 2

    def test_top_sellers(self, stats, session, make_product):
        make_product(name="Rulon Katta", total_sold=7)
        make_product(name="Selofan Kichik", total_sold=40)
        make_product(name="Never Sold")

        summary = stats.get_daily_summary(session, now=NOW, top_n_products=5)
        assert [(p.name, p.sold) for p in summary.top_products] == [
            ("Selofan Kichik", 40),
            ("Rulon Katta", 7),
        ]


class TestDashboard:
    def test_totals(self, stats, session, place_at):
        place_at(NOW)
        place_at(NOW, status="cancelled")

        dashboard = stats.get_admin_dashboard_stats(session)
        assert dashboard.total_orders == 2
        assert dashboard.total_revenue == 51800
        assert {s.status for s in dashboard.orders_by_status} == {
            "pending",
            "cancelled",
        }
