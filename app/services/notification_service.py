# app/services/notification_service.py
import logging
from datetime import datetime
from functools import lru_cache
from html import escape

from app.core.clock import utcnow
from app.core.config import get_settings
from app.core.errors import NotificationError
from app.core.sheets_client import CONTACTS, ORDERS, SheetsClient
from app.core.telegram_client import TelegramClient
from app.schemas.contact import ContactRead
from app.schemas.order import OrderRead
from app.schemas.product import ProductRead
from app.schemas.stats import DailySummary

logger = logging.getLogger(__name__)

PAYMENT_METHOD_LABELS = {
    "cash": "💵 Cash",
    "payme": "💳 Payme",
    "click": "💳 Click",
    "card": "💳 Card",
}

ORDER_STATUS_LABELS = {
    "pending": "⏳ Pending",
    "confirmed": "✅ Confirmed",
    "processing": "🔄 Processing",
    "shipped": "🚚 Shipped",
    "delivered": "📦 Delivered",
    "cancelled": "❌ Cancelled",
}

CONTACT_TYPE_LABELS = {
    "inquiry": "❓ Inquiry",
    "complaint": "😞 Complaint",
    "suggestion": "💡 Suggestion",
    "support": "🆘 Support",
    "other": "📝 Other",
}

PRIORITY_LABELS = {
    "low": "🟢 Low",
    "medium": "🟡 Medium",
    "high": "🟠 High",
    "urgent": "🔴 Urgent",
}


def _money(value: float) -> str:
    return f"{value:,.0f} so'm"


def _when(value: datetime | None) -> str:
    return value.strftime("%d.%m.%Y %H:%M") if value else ""


def _lines(*parts: str | None) -> str:
    """Join message lines, dropping the optional ones that are empty."""
    return "\n".join(part for part in parts if part is not None)


# -------- Telegram message rendering --------


def render_order_message(order: OrderRead, admin_url: str) -> str:
    products = "\n".join(
        f"• <b>{escape(item.name)}</b> ({escape(item.size)}) - "
        f"{item.quantity} × {_money(item.price)}"
        for item in order.items
    )
    customer, delivery, pricing = order.customer, order.delivery, order.pricing
    return _lines(
        "🛍 <b>NEW ORDER!</b>",
        "",
        f"📝 <b>Order number:</b> #{order.order_number}",
        f"📅 <b>Date:</b> {_when(order.timestamps.order_date)}",
        "",
        "👤 <b>CUSTOMER:</b>",
        f"• <b>Name:</b> {escape(customer.name)}",
        f"• <b>Phone:</b> {escape(customer.phone)}",
        f"• <b>Email:</b> {escape(customer.email)}" if customer.email else None,
        "",
        "📦 <b>PRODUCTS:</b>",
        products,
        "",
        "🏠 <b>DELIVERY:</b>",
        f"• <b>Address:</b> {escape(delivery.address)}",
        f"• <b>City:</b> {escape(delivery.city)}",
        f"• <b>Notes:</b> {escape(delivery.delivery_notes)}"
        if delivery.delivery_notes
        else None,
        "",
        "💰 <b>PRICING:</b>",
        f"• <b>Products:</b> {_money(pricing.subtotal)}",
        f"• <b>Delivery:</b> {_money(pricing.delivery_cost)}",
        f"• <b>Discount:</b> -{_money(pricing.discount)}" if pricing.discount > 0 else None,
        f"• <b>TOTAL:</b> {_money(pricing.total_price)}",
        "",
        f"💳 <b>Payment:</b> "
        f"{PAYMENT_METHOD_LABELS.get(order.payment.method, order.payment.method)}",
        f"📊 <b>Status:</b> {ORDER_STATUS_LABELS.get(order.status, order.status)}",
        f"📝 <b>Customer notes:</b> {escape(order.notes.customer_notes)}"
        if order.notes.customer_notes
        else None,
        "",
        "---",
        f"🔗 View order: {admin_url}/orders/{order.id}",
    )


def render_contact_message(contact: ContactRead, admin_url: str) -> str:
    return _lines(
        "📧 <b>NEW INQUIRY!</b>",
        "",
        "👤 <b>CUSTOMER:</b>",
        f"• <b>Name:</b> {escape(contact.name)}",
        f"• <b>Phone:</b> {escape(contact.phone)}",
        f"• <b>Email:</b> {escape(contact.email)}" if contact.email else None,
        "",
        f"📝 <b>SUBJECT:</b> {escape(contact.subject or 'No subject')}",
        "",
        "💬 <b>MESSAGE:</b>",
        escape(contact.message),
        "",
        f"📊 <b>Type:</b> {CONTACT_TYPE_LABELS.get(contact.type, contact.type)}",
        f"⚡ <b>Priority:</b> {PRIORITY_LABELS.get(contact.priority, contact.priority)}",
        f"📅 <b>Date:</b> {_when(contact.created_at)}",
        "",
        "---",
        f"🔗 Reply: {admin_url}/contacts/{contact.id}",
    )


def render_status_update_message(
    order: OrderRead, old_status: str, new_status: str
) -> str:
    return _lines(
        "📋 <b>ORDER STATUS CHANGED</b>",
        "",
        f"📝 <b>Order:</b> #{order.order_number}",
        f"👤 <b>Customer:</b> {escape(order.customer.name)} "
        f"({escape(order.customer.phone)})",
        "",
        "📊 <b>Status:</b>",
        f"{ORDER_STATUS_LABELS.get(old_status, old_status)} ➡️ "
        f"{ORDER_STATUS_LABELS.get(new_status, new_status)}",
        "",
        f"💰 <b>Amount:</b> {_money(order.pricing.total_price)}",
        f"📅 <b>Date:</b> {_when(utcnow())}",
        f"🚚 <b>Tracking:</b> {escape(order.tracking.tracking_number)}"
        if order.tracking.tracking_number
        else None,
    )


def render_low_stock_message(product: ProductRead) -> str:
    return _lines(
        "⚠️ <b>LOW STOCK ALERT!</b>",
        "",
        f"📦 <b>Product:</b> {escape(product.name)}",
        f"📏 <b>Size:</b> {escape(product.size)}",
        f"📊 <b>Remaining:</b> {product.quantity}",
        f"🔻 <b>Threshold:</b> {product.low_stock_threshold}",
        "",
        "💡 Restock soon!",
        "",
        f"📅 <b>Date:</b> {_when(utcnow())}",
    )


def render_daily_summary_message(summary: DailySummary) -> str:
    orders, revenue, contacts = summary.orders, summary.revenue, summary.contacts
    top = "\n".join(
        f"{position}. {escape(item.name)} - {item.sold} pcs"
        for position, item in enumerate(summary.top_products, start=1)
    )
    return _lines(
        "📊 <b>DAILY REPORT</b>",
        f"📅 <b>Date:</b> {summary.date.strftime('%d.%m.%Y')}",
        "",
        "📦 <b>ORDERS:</b>",
        f"• New orders: {orders.new}",
        f"• Confirmed: {orders.confirmed}",
        f"• Delivered: {orders.delivered}",
        f"• Cancelled: {orders.cancelled}",
        "",
        "💰 <b>REVENUE:</b>",
        f"• Today: {_money(revenue.today)}",
        f"• This week: {_money(revenue.week)}",
        "",
        "📧 <b>INQUIRIES:</b>",
        f"• New: {contacts.new}",
        f"• Replied: {contacts.replied}",
        "",
        "🔝 <b>BEST SELLERS:</b>",
        top or "No sales yet",
    )


# -------- Sheet rows (layouts in app.core.sheets_client) --------


def order_sheet_row(order: OrderRead) -> list:
    return [
        order.order_number,
        _when(order.timestamps.order_date),
        order.customer.name,
        order.customer.phone,
        order.customer.email or "",
        order.delivery.address,
        order.delivery.city,
        ", ".join(f"{item.name} ({item.size})" for item in order.items),
        ", ".join(str(item.quantity) for item in order.items),
        order.pricing.subtotal,
        order.pricing.delivery_cost,
        order.pricing.discount,
        order.pricing.total_price,
        order.payment.method,
        order.payment.status,
        order.status,
        order.notes.customer_notes or "",
        order.notes.admin_notes or "",
        order.tracking.tracking_number or "",
        order.tracking.courier_name or "",
        _when(order.timestamps.confirmed_at),
        _when(order.timestamps.shipped_at),
        _when(order.timestamps.delivered_at),
    ]


def contact_sheet_row(contact: ContactRead) -> list:
    return [
        str(contact.id),
        _when(contact.created_at),
        contact.name,
        contact.phone,
        contact.email or "",
        contact.subject or "",
        contact.message,
        contact.type,
        contact.status,
        contact.priority,
        contact.admin_notes or "",
        _when(contact.replied_at),
        contact.replied_by or "",
    ]


class NotificationDispatcher:
    """
    Best-effort delivery of human-readable summaries.

    Every public method returns True/False and never raises: transport
    failures are logged and reported as False.
    """

    def __init__(self, telegram: TelegramClient, sheets: SheetsClient, admin_url: str):
        self.telegram = telegram
        self.sheets = sheets
        self.admin_url = admin_url

    def _send(self, what: str, text: str) -> bool:
        try:
            return self.telegram.send_message(text)
        except NotificationError as exc:
            logger.error("Telegram %s failed: %s", what, exc)
            return False

    def _append(self, kind: str, row: list) -> bool:
        try:
            return self.sheets.append_row(kind, row)
        except NotificationError as exc:
            logger.error("Sheets %s append failed: %s", kind, exc)
            return False

    def send_order_notification(self, order: OrderRead) -> bool:
        return self._send(
            f"order {order.order_number}",
            render_order_message(order, self.admin_url),
        )

    def send_contact_notification(self, contact: ContactRead) -> bool:
        return self._send(
            f"contact {contact.id}",
            render_contact_message(contact, self.admin_url),
        )

    def send_order_status_update(
        self, order: OrderRead, old_status: str, new_status: str
    ) -> bool:
        return self._send(
            f"status update {order.order_number}",
            render_status_update_message(order, old_status, new_status),
        )

    def send_low_stock_alert(self, product: ProductRead) -> bool:
        return self._send(
            f"low stock {product.id}",
            render_low_stock_message(product),
        )

    def send_daily_summary(self, summary: DailySummary) -> bool:
        return self._send("daily summary", render_daily_summary_message(summary))

    def log_order(self, order: OrderRead) -> bool:
        return self._append(ORDERS, order_sheet_row(order))

    def log_contact(self, contact: ContactRead) -> bool:
        return self._append(CONTACTS, contact_sheet_row(contact))

    def ensure_sheets(self) -> bool:
        return self.sheets.ensure_sheets()


@lru_cache
def get_notification_dispatcher() -> NotificationDispatcher:
    """
    Process-wide dispatcher, built once from settings.

    Used as a FastAPI dependency; tests override it with a fake.
    """
    settings = get_settings()
    return NotificationDispatcher(
        telegram=TelegramClient.from_settings(),
        sheets=SheetsClient.from_settings(),
        admin_url=settings.ADMIN_URL,
    )
