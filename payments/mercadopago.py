"""Mercado Pago Checkout Pro adapter."""

import hashlib
import hmac
import logging
from typing import Mapping, Optional

from common.choices import PaymentProvider as Provider
from common.choices import SettlementStatus
from django.conf import settings

from .base import PaymentProvider, PaymentProviderError, PaymentSession, ProviderSettlement, parse_order_reference

logger = logging.getLogger("slabshop.payments")

REJECTED_STATUSES = {"rejected", "cancelled", "refunded", "charged_back"}
SHIPPING_ITEM_ID = "shipping_box"
DEFAULT_LOCALE = "en"


def map_payment_status(status: str) -> str:
    status = (status or "").lower()
    if status == "approved":
        return SettlementStatus.APPROVED
    if status in REJECTED_STATUSES:
        return SettlementStatus.REJECTED
    return SettlementStatus.PENDING


class MercadoPagoClient(PaymentProvider):
    name = Provider.MERCADOPAGO

    def __init__(self, *args, access_token: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.access_token = access_token if access_token is not None else settings.MERCADOPAGO_ACCESS_TOKEN

    @property
    def base_url(self) -> str:
        return settings.MERCADOPAGO_BASE_URL

    def _api(self, method: str, path: str, **kwargs):
        if not self.access_token:
            raise PaymentProviderError(self.name, "missing MERCADOPAGO_ACCESS_TOKEN")
        headers = {"Authorization": f"Bearer {self.access_token}", "Content-Type": "application/json"}
        return self._request(method, path, headers=headers, **kwargs)

    def unit_price(self, cents: int, store_currency: str):
        """Convert store cents to a Mercado Pago unit price."""
        if settings.MERCADOPAGO_CURRENCY == store_currency:
            return round(int(cents) / 100, 2)
        rate = float(settings.MERCADOPAGO_USD_RATE or 0)
        if rate <= 0:
            raise PaymentProviderError(self.name, "MERCADOPAGO_USD_RATE must be set to a positive rate")
        return round(int(cents) / 100 * rate)

    def build_preference(self, order, *, locale: str = DEFAULT_LOCALE) -> dict:
        currency = settings.MERCADOPAGO_CURRENCY
        items = [
            {
                "id": str(item.product_id),
                "title": item.title,
                "quantity": int(item.quantity),
                "unit_price": self.unit_price(item.unit_price_cents, order.currency),
                "currency_id": currency,
            }
            for item in order.items.all()
        ]
        items_subtotal = sum(int(item.unit_price_cents) * int(item.quantity) for item in order.items.all())
        items.append(
            {
                "id": SHIPPING_ITEM_ID,
                "title": "Shipping (box)",
                "quantity": 1,
                "unit_price": self.unit_price(max(0, int(order.total_cents) - items_subtotal), order.currency),
                "currency_id": currency,
            }
        )
        frontend = settings.FRONTEND_URL.rstrip("/")
        locale = (locale or DEFAULT_LOCALE).strip() or DEFAULT_LOCALE
        back_urls = {
            outcome: f"{frontend}/{locale}/orders?status={outcome}&orderId={order.id}"
            for outcome in ("success", "pending", "failure")
        }
        return {
            "items": items,
            "external_reference": str(order.id),
            "notification_url": f"{settings.SITE_URL.rstrip('/')}/api/v1/payments/mercadopago/webhook/",
            "back_urls": back_urls,
        }

    def create_session(self, order, *, locale: str = DEFAULT_LOCALE, **kwargs) -> PaymentSession:
        payload = self.build_preference(order, locale=locale)
        data = self._json(self._api("POST", "/checkout/preferences", json=payload))
        preference_id = data.get("id")
        if not preference_id:
            raise PaymentProviderError(self.name, "preference response without id")
        logger.info(
            "payments.session_created",
            extra={
                "event": "payments.session_created",
                "provider": self.name,
                "order_id": order.id,
                "reference": preference_id,
            },
        )
        return PaymentSession(
            provider=self.name,
            reference=str(preference_id),
            redirect_url=str(data.get("init_point") or ""),
            extra={"sandbox_init_point": data.get("sandbox_init_point") or ""},
        )

    def fetch_payment(self, payment_id: str) -> ProviderSettlement:
        data = self._json(self._api("GET", f"/v1/payments/{payment_id}"))
        references = {"mp_payment_id": str(data.get("id") or payment_id)}
        merchant_order = (data.get("order") or {}).get("id")
        if merchant_order:
            references["mp_merchant_order_id"] = str(merchant_order)
        provider_status = str(data.get("status") or "")
        return ProviderSettlement(
            provider=self.name,
            status=map_payment_status(provider_status),
            order_id=parse_order_reference(data.get("external_reference")),
            references=references,
            provider_status=provider_status,
        )

    def fetch_merchant_order(self, merchant_order_id: str) -> ProviderSettlement:
        data = self._json(self._api("GET", f"/merchant_orders/{merchant_order_id}"))
        payments = [p for p in data.get("payments") or [] if isinstance(p, dict)]
        approved = next((p for p in payments if str(p.get("status")) == "approved"), None)
        rejected = next((p for p in payments if str(p.get("status")) in REJECTED_STATUSES), None)
        chosen = approved or rejected
        references = {"mp_merchant_order_id": str(data.get("id") or merchant_order_id)}
        if chosen and chosen.get("id"):
            references["mp_payment_id"] = str(chosen["id"])
        provider_status = str(chosen.get("status")) if chosen else str(data.get("order_status") or "")
        if approved:
            status = SettlementStatus.APPROVED
        elif rejected:
            status = SettlementStatus.REJECTED
        else:
            status = SettlementStatus.PENDING
        return ProviderSettlement(
            provider=self.name,
            status=status,
            order_id=parse_order_reference(data.get("external_reference")),
            references=references,
            provider_status=provider_status,
        )

    def confirm(self, order, token: str) -> ProviderSettlement:
        return self.fetch_payment(token)

    def verify_signature(self, headers: Mapping, data_id: str, secret: Optional[str] = None) -> bool:
        """Check the ``x-signature`` header against the webhook secret.

        The signed manifest is ``id:<data id>;request-id:<x-request-id>;ts:<ts>;``.
        Returns True when no secret is configured.
        """

        secret = secret if secret is not None else settings.MERCADOPAGO_WEBHOOK_SECRET
        if not secret:
            return True
        parts = {}
        for chunk in str(headers.get("x-signature") or "").split(","):
            key, sep, value = chunk.strip().partition("=")
            if sep:
                parts[key.strip()] = value.strip()
        ts, signature = parts.get("ts"), parts.get("v1")
        if not ts or not signature:
            return False
        manifest = f"id:{str(data_id).lower()};request-id:{headers.get('x-request-id') or ''};ts:{ts};"
        expected = hmac.new(secret.encode("utf-8"), manifest.encode("utf-8"), hashlib.sha256).hexdigest()
        return hmac.compare_digest(expected, signature)
