# app/core/telegram_client.py
"""
Telegram Bot API client.

Responsibilities:
  - Hold bot token / chat id (from settings).
  - Provide a single send_message(...) call for the notification layer.

Typical .env configuration:

    TELEGRAM_BOT_TOKEN=123456:ABC-DEF...
    TELEGRAM_CHAT_ID=-1001234567890

Messages are sent with parse_mode=HTML, so callers must escape any
user-provided text.
"""
import logging

import httpx

from app.core.config import get_settings
from app.core.errors import NotificationError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class TelegramClient:
    def __init__(
        self,
        bot_token: str | None,
        chat_id: str | None,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self._http = http or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "TelegramClient":
        settings = get_settings()
        return cls(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID)

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def base_url(self) -> str:
        return f"{TELEGRAM_API_URL}/bot{self.bot_token}"

    def send_message(self, text: str) -> bool:
        """
        Send an HTML message to the configured chat.

        Returns:
            False if the bot is not configured (nothing is sent),
            True once Telegram accepted the message.

        Raises:
            NotificationError: if the HTTP call fails or Telegram answers
            with ok=false.
        """
        if not self.configured:
            logger.warning("Telegram bot not configured - skipping message")
            return False

        try:
            response = self._http.post(
                f"{self.base_url}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": text,
                    "parse_mode": "HTML",
                    "disable_web_page_preview": True,
                },
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NotificationError(f"Telegram send failed: {exc}") from exc

        if not payload.get("ok"):
            raise NotificationError(
                f"Telegram rejected message: {payload.get('description')}"
            )
        return True

    def test_connection(self) -> bool:
        """Call getMe; used on startup to log whether the bot token works."""
        if not self.configured:
            return False
        try:
            response = self._http.get(f"{self.base_url}/getMe")
            response.raise_for_status()
            username = response.json()["result"]["username"]
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("Telegram bot connection failed: %s", exc)
            return False
        logger.info("Telegram bot connected: %s", username)
        return True
