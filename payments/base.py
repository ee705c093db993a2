"""Provider-neutral payment contract.

Adapters talk HTTP to a payment provider and translate its answers into
``ProviderSettlement`` values; they never touch orders or stock. The
settlement handlers in ``orders.settlement`` apply those values.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import requests
from django.conf import settings

logger = logging.getLogger("slabshop.payments")


class PaymentProviderError(Exception):
    """Network, authentication or HTTP failure talking to a provider."""

    def __init__(self, provider: str, detail: str, *, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
        self.detail = detail
        self.status_code = status_code


@dataclass
class PaymentSession:
    provider: str
    reference: str
    redirect_url: str = ""
    extra: dict = field(default_factory=dict)


@dataclass
class ProviderSettlement:
    """Normalized outcome of a provider lookup.

    ``order_id`` is the correlation token the provider echoed back, so
    callers can check it against the order they expected.
    """

    provider: str
    status: str
    order_id: Optional[int]
    references: dict = field(default_factory=dict)
    provider_status: str = ""


def parse_order_reference(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def cents_to_amount(cents: int) -> str:
    return f"{int(cents) / 100:.2f}"


class PaymentProvider:
    """Base adapter holding a ``requests.Session`` and error translation."""

    name = ""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.PAYMENT_HTTP_TIMEOUT

    def create_session(self, order, **kwargs) -> PaymentSession:
        raise NotImplementedError

    def confirm(self, order, token: str) -> ProviderSettlement:
        raise NotImplementedError

    def _request(self, method: str, path: str, *, expected=(200, 201), **kwargs) -> requests.Response:
        url = f"{self.base_url.rstrip('/')}{path}"
        kwargs.setdefault("timeout", self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error(
                "payments.http_error",
                extra={"event": "payments.http_error", "provider": self.name, "path": path, "error": str(exc)},
            )
            raise PaymentProviderError(self.name, f"request to {path} failed: {exc}") from exc
        if response.status_code not in expected:
            logger.error(
                "payments.http_status",
                extra={
                    "event": "payments.http_status",
                    "provider": self.name,
                    "path": path,
                    "status_code": response.status_code,
                },
            )
            raise PaymentProviderError(
                self.name, f"{method} {path} returned {response.status_code}", status_code=response.status_code
            )
        return response

    @property
    def base_url(self) -> str:
        raise NotImplementedError

    @staticmethod
    def _json(response: requests.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
