# app/core/payment_providers.py
"""
Redirect-URL builders for the supported online payment providers.

  - Click: server-side invoice creation, returns the hosted invoice URL.
  - Payme: checkout URL carrying base64-encoded JSON params; amounts are
    sent in tiyin (1 so'm = 100 tiyin).
"""
import base64
import json
import uuid

import httpx

from app.core.config import get_settings
from app.core.errors import PaymentProviderError, UnsupportedMethodError


class ClickClient:
    def __init__(
        self,
        service_id: str | None,
        auth_token: str | None,
        api_url: str,
        return_url: str,
        http: httpx.Client | None = None,
        timeout: float = 15.0,
    ):
        self.service_id = service_id
        self.auth_token = auth_token
        self.api_url = api_url
        self.return_url = return_url
        self._http = http or httpx.Client(timeout=timeout)

    def create_invoice(self, order_id: uuid.UUID, amount: float) -> str:
        """
        Create a Click invoice and return its URL.

        Raises:
            PaymentProviderError: if Click is not configured, the call
            fails, or the response carries no invoice_url.
        """
        if not (self.service_id and self.auth_token):
            raise PaymentProviderError("Click is not configured")

        try:
            response = self._http.post(
                self.api_url,
                json={
                    "service_id": self.service_id,
                    "amount": amount,
                    "order_id": str(order_id),
                    "return_url": self.return_url,
                    "description": f"Paket UZB - Order #{order_id}",
                },
                headers={"Auth": self.auth_token},
            )
            response.raise_for_status()
            invoice_url = response.json().get("invoice_url")
        except (httpx.HTTPError, ValueError) as exc:
            raise PaymentProviderError(f"Click invoice request failed: {exc}") from exc

        if not invoice_url:
            raise PaymentProviderError("Click response did not include invoice_url")
        return invoice_url


def build_payme_url(
    checkout_url: str,
    merchant_id: str | None,
    order_id: uuid.UUID,
    amount: float,
) -> str:
    if not merchant_id:
        raise PaymentProviderError("Payme is not configured")

    params = {
        "m": merchant_id,
        "ac": {"order_id": str(order_id)},
        "a": round(amount * 100),
        "l": "uz",
    }
    encoded = base64.b64encode(json.dumps(params).encode()).decode()
    return f"{checkout_url.rstrip('/')}/{encoded}"


class PaymentGateway:
    """
    Maps a payment method to a redirect URL.

    cash / card are settled on delivery and have no redirect URL.
    """

    OFFLINE_METHODS = frozenset({"cash", "card"})

    def __init__(
        self,
        click: ClickClient,
        payme_merchant_id: str | None,
        payme_checkout_url: str,
    ):
        self.click = click
        self.payme_merchant_id = payme_merchant_id
        self.payme_checkout_url = payme_checkout_url

    @classmethod
    def from_settings(cls) -> "PaymentGateway":
        settings = get_settings()
        click = ClickClient(
            service_id=settings.CLICK_SERVICE_ID,
            auth_token=settings.CLICK_AUTH_TOKEN,
            api_url=settings.CLICK_API_URL,
            return_url=f"{settings.FRONTEND_URL}/payment-success",
        )
        return cls(click, settings.PAYME_MERCHANT_ID, settings.PAYME_CHECKOUT_URL)

    def redirect_url(self, method: str, order_id: uuid.UUID, amount: float) -> str | None:
        if method in self.OFFLINE_METHODS:
            return None
        if method == "click":
            return self.click.create_invoice(order_id, amount)
        if method == "payme":
            return build_payme_url(
                self.payme_checkout_url, self.payme_merchant_id, order_id, amount
            )
        raise UnsupportedMethodError(method)
