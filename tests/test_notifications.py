"""Tests for Telegram / Sheets notifications."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from app.core.config import get_settings
from app.core.errors import NotificationError
from app.core.sheets_client import (
    CONTACT_COLUMNS,
    CONTACTS,
    ORDER_COLUMNS,
    ORDERS,
    SheetsClient,
    sheet_range,
)
from app.core.telegram_client import TelegramClient
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.contact import ContactRead
from app.schemas.order import OrderCreate
from app.schemas.stats import (
    DailyContactCounts,
    DailyOrderCounts,
    DailyRevenue,
    DailySummary,
    DailyTopSeller,
)
from app.services.notification_service import (
    NotificationDispatcher,
    contact_sheet_row,
    order_sheet_row,
    render_contact_message,
    render_daily_summary_message,
    render_order_message,
)
from app.services.order_service import OrderService


def telegram_with(handler) -> TelegramClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return TelegramClient("123:abc", "-100", http=http)


class FakeSheetsService:
    """Mimics the googleapiclient call chain for spreadsheets() / values()."""

    def __init__(self, existing: tuple[str, ...] = ()):
        self.existing = list(existing)
        self.appended: list[dict] = []
        self.added: list[str] = []
        self.headers: list[dict] = []
        self._result: dict = {}

    def spreadsheets(self):
        return self

    def values(self):
        return self

    def get(self, spreadsheetId):
        self._result = {
            "sheets": [{"properties": {"title": title}} for title in self.existing]
        }
        return self

    def batchUpdate(self, spreadsheetId, body):
        for request in body["requests"]:
            title = request["addSheet"]["properties"]["title"]
            self.added.append(title)
            self.existing.append(title)
        self._result = {}
        return self

    def update(self, **kwargs):
        self.headers.append(kwargs)
        self._result = {}
        return self

    def append(self, **kwargs):
        self.appended.append(kwargs)
        self._result = {}
        return self

    def execute(self):
        return self._result


@pytest.fixture
def order_view(session, order_payload):
    service = OrderService(OrderRepository(), ProductRepository())
    payload = order_payload(
        customer={"name": "<Aziz>", "phone": "+998901234567"},
        pricing={"discount": 800},
    )
    order = service.create_order(session, OrderCreate.model_validate(payload))
    return service.get_order(session, order.id)


@pytest.fixture
def contact_view():
    now = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    return ContactRead(
        id="00000000-0000-0000-0000-0000000000aa",
        name="Dilnoza",
        phone="+998907654321",
        email=None,
        subject=None,
        message="Salom",
        type="complaint",
        status="new",
        priority="high",
        admin_notes=None,
        replied_at=None,
        replied_by=None,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def daily_summary():
    return DailySummary(
        date=datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc),
        orders=DailyOrderCounts(new=4, confirmed=2, delivered=1, cancelled=1),
        revenue=DailyRevenue(today=120000, week=845500),
        contacts=DailyContactCounts(new=3, replied=2),
        top_products=[
            DailyTopSeller(name="Selofan <A>", sold=40),
            DailyTopSeller(name="Rulon B", sold=12),
        ],
    )


class TestRendering:
    def test_order_message_escapes_user_text(self, order_view):
        text = render_order_message(order_view, "https://admin.test")
        assert "&lt;Aziz&gt;" in text
        assert order_view.order_number in text
        assert "-800 so'm" in text
        assert f"https://admin.test/orders/{order_view.id}" in text

    def test_contact_message_defaults(self, contact_view):
        text = render_contact_message(contact_view, "Admin panel")
        assert "No subject" in text
        assert "Complaint" in text
        assert "Email" not in text

    def test_daily_summary(self, daily_summary):
        text = render_daily_summary_message(daily_summary)
        assert "01.05.2024" in text
        assert "New orders: 4" in text
        assert "Cancelled: 1" in text
        assert "Today: 120,000 so'm" in text
        assert "This week: 845,500 so'm" in text
        assert "Replied: 2" in text
        assert "1. Selofan &lt;A&gt; - 40 pcs" in text
        assert "2. Rulon B - 12 pcs" in text

    def test_daily_summary_without_sales(self, daily_summary):
        daily_summary.top_products = []
        assert "No sales yet" in render_daily_summary_message(daily_summary)


class TestSheetRows:
    def test_order_row_matches_layout(self, order_view):
        row = order_sheet_row(order_view)
        assert len(row) == len(ORDER_COLUMNS) == 23
        assert row[0] == order_view.order_number
        assert row[12] == order_view.pricing.total_price

    def test_contact_row_matches_layout(self, contact_view):
        row = contact_sheet_row(contact_view)
        assert len(row) == len(CONTACT_COLUMNS) == 13
        assert row[1] == "01.05.2024 09:30"

    def test_ranges(self):
        assert sheet_range("Buyurtmalar", ORDER_COLUMNS) == "Buyurtmalar!A:W"
        assert sheet_range("Murojaatlar", CONTACT_COLUMNS) == "Murojaatlar!A:M"

    def test_uzbek_headers(self):
        assert ORDER_COLUMNS[0] == "Buyurtma Raqami"
        assert ORDER_COLUMNS[-1] == "Yetkazilgan"
        assert CONTACT_COLUMNS[-1] == "Javob Beruvchi"


class TestTelegramClient:
    def test_sends_html_message(self):
        sent = []

        def handler(request):
            sent.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"ok": True, "result": {}})

        assert telegram_with(handler).send_message("<b>hi</b>") is True
        path, body = sent[0]
        assert path == "/bot123:abc/sendMessage"
        assert body["chat_id"] == "-100"
        assert body["parse_mode"] == "HTML"

    def test_rejected_message_raises(self):
        client = telegram_with(
            lambda request: httpx.Response(200, json={"ok": False, "description": "nope"})
        )
        with pytest.raises(NotificationError):
            client.send_message("hi")

    def test_http_error_raises(self):
        client = telegram_with(lambda request: httpx.Response(500))
        with pytest.raises(NotificationError):
            client.send_message("hi")

    def test_unconfigured_skips(self):
        assert TelegramClient(None, None).send_message("hi") is False


class TestSheetsClient:
    def test_appends_row(self):
        service = FakeSheetsService()
        client = SheetsClient("sheet-1", service)
        row = ["x"] * len(ORDER_COLUMNS)

        assert client.append_row(ORDERS, row) is True
        call = service.appended[0]
        assert call["range"] == "Buyurtmalar!A:W"
        assert call["body"] == {"values": [row]}

    def test_width_mismatch(self):
        client = SheetsClient("sheet-1", FakeSheetsService())
        with pytest.raises(NotificationError):
            client.append_row(ORDERS, ["too", "short"])

    def test_unconfigured_skips(self):
        assert SheetsClient(None).append_row(ORDERS, []) is False

    def test_custom_titles(self):
        service = FakeSheetsService()
        client = SheetsClient("sheet-1", service, titles={CONTACTS: "Inbox"})

        assert client.titles[ORDERS] == "Buyurtmalar"
        assert client.append_row(CONTACTS, ["x"] * len(CONTACT_COLUMNS)) is True
        assert service.appended[0]["range"] == "Inbox!A:M"

    def test_titles_from_settings(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_ORDERS_SHEET", "Zakazlar")
        get_settings.cache_clear()
        try:
            client = SheetsClient.from_settings()
        finally:
            get_settings.cache_clear()

        assert client.titles == {ORDERS: "Zakazlar", CONTACTS: "Murojaatlar"}
        assert client.configured is False


class TestEnsureSheets:
    def test_creates_both_worksheets(self):
        service = FakeSheetsService()
        assert SheetsClient("sheet-1", service).ensure_sheets() is True

        assert service.added == ["Buyurtmalar", "Murojaatlar"]
        orders_header, contacts_header = service.headers
        assert orders_header["range"] == "Buyurtmalar!A1:W1"
        assert orders_header["body"]["values"][0] == list(ORDER_COLUMNS)
        assert len(orders_header["body"]["values"][0]) == 23
        assert contacts_header["range"] == "Murojaatlar!A1:M1"
        assert len(contacts_header["body"]["values"][0]) == 13

    def test_creates_only_missing(self):
        service = FakeSheetsService(existing=("Buyurtmalar",))
        assert SheetsClient("sheet-1", service).ensure_sheets() is True

        assert service.added == ["Murojaatlar"]
        assert len(service.headers) == 1
        assert service.headers[0]["body"]["values"][0] == list(CONTACT_COLUMNS)

    def test_nothing_to_do(self):
        service = FakeSheetsService(existing=("Buyurtmalar", "Murojaatlar", "Sheet1"))
        assert SheetsClient("sheet-1", service).ensure_sheets() is True
        assert service.added == []
        assert service.headers == []

    def test_google_error_is_reported(self):
        class BrokenService(FakeSheetsService):
            def get(self, spreadsheetId):
                raise OSError("network down")

        assert SheetsClient("sheet-1", BrokenService()).ensure_sheets() is False

    def test_unconfigured(self):
        assert SheetsClient(None).ensure_sheets() is False


class TestDispatcher:
    def test_failures_become_false(self, order_view):
        dispatcher = NotificationDispatcher(
            telegram=telegram_with(lambda request: httpx.Response(502)),
            sheets=SheetsClient("sheet-1", FakeSheetsService()),
            admin_url="Admin panel",
        )
        assert dispatcher.send_order_notification(order_view) is False
        assert dispatcher.log_order(order_view) is True

    def test_unconfigured_integrations(self, order_view, contact_view):
        dispatcher = NotificationDispatcher(
            TelegramClient(None, None), SheetsClient(None), "Admin panel"
        )
        assert dispatcher.send_order_notification(order_view) is False
        assert dispatcher.log_order(order_view) is False
        assert dispatcher.send_contact_notification(contact_view) is False
        assert dispatcher.log_contact(contact_view) is False

    def test_daily_summary_goes_to_telegram(self, daily_summary):
        sent = []

        def handler(request):
            sent.append(json.loads(request.content)["text"])
            return httpx.Response(200, json={"ok": True, "result": {}})

        dispatcher = NotificationDispatcher(
            telegram_with(handler), SheetsClient(None), "Admin panel"
        )
        assert dispatcher.send_daily_summary(daily_summary) is True
        assert "DAILY REPORT" in sent[0]

    def test_daily_summary_failure_is_false(self, daily_summary):
        dispatcher = NotificationDispatcher(
            telegram_with(lambda request: httpx.Response(500)),
            SheetsClient(None),
            "Admin panel",
        )
        assert dispatcher.send_daily_summary(daily_summary) is False
