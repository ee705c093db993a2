"""PayPal Orders v2 adapter."""

import logging
from typing import Optional

from common.choices import PaymentProvider as Provider
from common.choices import SettlementStatus
from django.conf import settings

from .base import (
    PaymentProvider,
    PaymentProviderError,
    PaymentSession,
    ProviderSettlement,
    cents_to_amount,
    parse_order_reference,
)

logger = logging.getLogger("slabshop.payments")

ALREADY_CAPTURED = "ORDER_ALREADY_CAPTURED"
REJECTED_CAPTURE_STATUSES = {"DECLINED", "FAILED"}


class PayPalClient(PaymentProvider):
    name = Provider.PAYPAL

    def __init__(self, *args, client_id: Optional[str] = None, client_secret: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.client_id = client_id if client_id is not None else settings.PAYPAL_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.PAYPAL_CLIENT_SECRET
        self._token: Optional[str] = None

    @property
    def base_url(self) -> str:
        return settings.PAYPAL_BASE_URL

    def access_token(self) -> str:
        if self._token:
            return self._token
        if not self.client_id or not self.client_secret:
            raise PaymentProviderError(self.name, "missing PAYPAL_CLIENT_ID/PAYPAL_CLIENT_SECRET")
        response = self._request(
            "POST",
            "/v1/oauth2/token",
            auth=(self.client_id, self.client_secret),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
            expected=(200,),
        )
        token = self._json(response).get("access_token")
        if not token:
            raise PaymentProviderError(self.name, "token response without access_token")
        self._token = str(token)
        return self._token

    def _api(self, method: str, path: str, **kwargs):
        headers = {"Authorization": f"Bearer {self.access_token()}", "Content-Type": "application/json"}
        headers.update(kwargs.pop("headers", {}))
        return self._request(method, path, headers=headers, **kwargs)

    def create_session(self, order, **kwargs) -> PaymentSession:
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": str(order.id),
                    "custom_id": str(order.id),
                    "amount": {"currency_code": order.currency, "value": cents_to_amount(order.total_cents)},
                }
            ],
        }
        data = self._json(self._api("POST", "/v2/checkout/orders", json=payload))
        paypal_order_id = data.get("id")
        if not paypal_order_id:
            raise PaymentProviderError(self.name, "create order response without id")
        approve = next((link.get("href", "") for link in data.get("links") or [] if link.get("rel") == "approve"), "")
        logger.info(
            "payments.session_created",
            extra={
                "event": "payments.session_created",
                "provider": self.name,
                "order_id": order.id,
                "reference": paypal_order_id,
            },
        )
        return PaymentSession(provider=self.name, reference=str(paypal_order_id), redirect_url=approve)

    def fetch_order(self, paypal_order_id: str) -> dict:
        return self._json(self._api("GET", f"/v2/checkout/orders/{paypal_order_id}"))

    def confirm(self, order, token: str) -> ProviderSettlement:
        """Capture ``token`` (a PayPal order id) and normalize the result.

        A capture PayPal already performed is re-read instead of failing.
        """

        response = self._api("POST", f"/v2/checkout/orders/{token}/capture", json={}, expected=(200, 201, 422))
        data = self._json(response)
        if response.status_code == 422:
            issues = {str(d.get("issue", "")) for d in data.get("details") or []}
            if ALREADY_CAPTURED in issues:
                data = self.fetch_order(token)
            else:
                issue = sorted(issues)[0] if issues else "UNPROCESSABLE"
                return ProviderSettlement(
                    provider=self.name,
                    status=SettlementStatus.PENDING,
                    order_id=order.id if order is not None else None,
                    references={"paypal_order_id": token},
                    provider_status=issue,
                )
        return self.to_settlement(data, paypal_order_id=token)

    def to_settlement(self, data: dict, *, paypal_order_id: str) -> ProviderSettlement:
        units = data.get("purchase_units") or [{}]
        unit = units[0] or {}
        captures = (unit.get("payments") or {}).get("captures") or []
        capture = captures[0] if captures else {}
        order_status = str(data.get("status", ""))
        capture_status = str(capture.get("status", ""))

        if order_status == "COMPLETED" and capture_status == "COMPLETED":
            status = SettlementStatus.APPROVED
        elif order_status == "VOIDED" or capture_status in REJECTED_CAPTURE_STATUSES:
            status = SettlementStatus.REJECTED
        else:
            status = SettlementStatus.PENDING

        references = {"paypal_order_id": paypal_order_id}
        if capture.get("id"):
            references["paypal_capture_id"] = str(capture["id"])
        payer_email = (data.get("payer") or {}).get("email_address")
        if payer_email:
            references["paypal_payer_email"] = str(payer_email)

        return ProviderSettlement(
            provider=self.name,
            status=status,
            order_id=parse_order_reference(unit.get("custom_id") or unit.get("reference_id")),
            references=references,
            provider_status=capture_status or order_status,
        )
