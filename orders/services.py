import hashlib
import json
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Mapping, Optional, Tuple

from cart.selectors import list_cart_lines
from catalog.selectors import get_products_by_ids
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from .emails import send_order_shipped_email
from .models import IdempotencyKey, Order, OrderItem

logger = logging.getLogger("slabshop.orders")

# Required shipping fields in validation order; address2 is optional
REQUIRED_SHIPPING_FIELDS = ("name", "phone", "address1", "city", "state", "postal_code")


class CheckoutError(Exception):
    """Checkout rejected before any order was written.

    ``code`` is one of EMPTY_CART, PRODUCT_NOT_FOUND, INSUFFICIENT_STOCK or
    INVALID_SHIPPING; ``product_id`` names the offending line when relevant.
    """

    EMPTY_CART = "EMPTY_CART"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_SHIPPING = "INVALID_SHIPPING"

    def __init__(self, code: str, detail: str, *, product_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(detail)
        self.code = code
        self.detail = detail
        self.product_id = product_id
        self.field = field

    def as_dict(self) -> dict:
        body = {"code": self.code, "detail": self.detail}
        if self.product_id is not None:
            body["product_id"] = self.product_id
        if self.field is not None:
            body["field"] = self.field
        return body


class OrderTransitionError(Exception):
    """Raised when an admin action is not allowed from the order's status."""


def log_status_change(order: Order, prev: str, **extra) -> None:
    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "user_id": order.user_id,
            "status_from": prev,
            "status_to": order.status,
            **extra,
        },
    )


def shipping_fee_cents(country: str) -> int:
    fees = settings.SHIPPING_FEES_CENTS
    if country not in fees:
        raise CheckoutError(
            CheckoutError.INVALID_SHIPPING,
            f"We only ship to: {', '.join(fees)}.",
            field="country",
        )
    return int(fees[country])


def normalize_shipping(shipping: Optional[Mapping]) -> dict:
    """Trim and validate a shipping address, defaulting the country.

    Raises ``CheckoutError(INVALID_SHIPPING)`` naming the first bad field.
    """
    shipping = shipping or {}
    data = {name: str(shipping.get(name) or "").strip() for name in (*REQUIRED_SHIPPING_FIELDS, "address2")}
    country = str(shipping.get("country") or "").strip().upper() or settings.DEFAULT_SHIPPING_COUNTRY
    shipping_fee_cents(country)
    for name in REQUIRED_SHIPPING_FIELDS:
        if not data[name]:
            raise CheckoutError(CheckoutError.INVALID_SHIPPING, f"Missing shipping field: {name}", field=name)
    data["country"] = country
    return data


def create_order_from_cart(*, user, shipping: Optional[Mapping]) -> Order:
    """Create a PENDING order from the user's current cart.

    Prices and titles are snapshotted from the catalog. Stock is validated
    but not reserved, and the cart is left untouched: both happen at
    payment settlement.
    """

    address = normalize_shipping(shipping)
    lines = list_cart_lines(user=user)
    if not lines:
        raise CheckoutError(CheckoutError.EMPTY_CART, "Cart is empty")

    products, missing = get_products_by_ids([line.product_id for line in lines], active_only=True)
    if missing:
        raise CheckoutError(
            CheckoutError.PRODUCT_NOT_FOUND, f"Product {missing[0]} does not exist", product_id=missing[0]
        )
    for line in lines:
        product = products[line.product_id]
        if int(product.stock) < int(line.quantity):
            raise CheckoutError(
                CheckoutError.INSUFFICIENT_STOCK,
                f'Not enough stock for "{product.title}" (stock {product.stock}, requested {line.quantity})',
                product_id=product.id,
            )

    subtotal = sum(int(products[line.product_id].price_cents) * int(line.quantity) for line in lines)
    shipping_cents = shipping_fee_cents(address["country"])

    with transaction.atomic():
        order = Order.objects.create(
            user=user,
            email=getattr(user, "email", "") or "",
            currency=settings.STORE_CURRENCY,
            subtotal_cents=subtotal,
            shipping_cents=shipping_cents,
            total_cents=subtotal + shipping_cents,
            ship_name=address["name"],
            ship_phone=address["phone"],
            ship_address1=address["address1"],
            ship_address2=address["address2"],
            ship_city=address["city"],
            ship_state=address["state"],
            ship_postal_code=address["postal_code"],
            ship_country=address["country"],
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=products[line.product_id],
                    title=products[line.product_id].title,
                    unit_price_cents=products[line.product_id].price_cents,
                    quantity=line.quantity,
                )
                for line in lines
            ]
        )
        # Generate user-friendly order number (unique)
        order.number = f"ORD-{int(order.id):06d}"
        order.save(update_fields=["number"])

    logger.info(
        "order.created",
        extra={
            "event": "order.created",
            "order_id": order.id,
            "user_id": order.user_id,
            "total_cents": order.total_cents,
            "lines": len(lines),
        },
    )
    return order


@transaction.atomic
def mark_shipped(*, order_id: int, tracking_code: str, carrier: str = "", tracking_url: str = "") -> Order:
    """Record tracking info and move a PAID order to SHIPPED.

    Re-shipping a SHIPPED order replaces its tracking info.
    """

    tracking_code = (tracking_code or "").strip()
    if not tracking_code:
        raise OrderTransitionError("Tracking code is required")
    order = Order.objects.select_for_update().get(pk=order_id)
    if order.status not in (Order.STATUS_PAID, Order.STATUS_SHIPPED):
        raise OrderTransitionError(f"Cannot ship an order in status {order.status}")

    prev = order.status
    order.tracking_code = tracking_code
    order.tracking_carrier = (carrier or "").strip()
    order.tracking_url = (tracking_url or "").strip()
    order.shipped_at = timezone.now()
    order.status = Order.STATUS_SHIPPED
    order.save(
        update_fields=["tracking_code", "tracking_carrier", "tracking_url", "shipped_at", "status", "updated_at"]
    )
    if prev != order.status:
        log_status_change(order, prev)
        transaction.on_commit(lambda: send_order_shipped_email(order))
    return order


@transaction.atomic
def mark_delivered(*, order_id: int) -> Order:
    """Move a PAID or SHIPPED order to DELIVERED; DELIVERED is a no-op."""

    order = Order.objects.select_for_update().get(pk=order_id)
    if order.status == Order.STATUS_DELIVERED:
        return order
    if order.status not in (Order.STATUS_PAID, Order.STATUS_SHIPPED):
        raise OrderTransitionError(f"Cannot deliver an order in status {order.status}")
    prev = order.status
    order.status = Order.STATUS_DELIVERED
    order.delivered_at = timezone.now()
    order.save(update_fields=["status", "delivered_at", "updated_at"])
    log_status_change(order, prev)
    return order


@transaction.atomic
def cancel_stale_pending_orders(*, older_than_hours: int) -> int:
    """Cancel PENDING orders created before the cutoff. Returns the count.

    No stock is involved: pending orders never hold reservations.
    """

    cutoff = timezone.now() - timedelta(hours=older_than_hours)
    cancelled = 0
    for order in Order.objects.select_for_update().filter(status=Order.STATUS_PENDING, created_at__lt=cutoff):
        order.status = Order.STATUS_CANCELLED
        order.cancelled_at = timezone.now()
        order.cancel_reason = "expired"
        order.save(update_fields=["status", "cancelled_at", "cancel_reason", "updated_at"])
        log_status_change(order, Order.STATUS_PENDING, reason="expired")
        cancelled += 1
    return cancelled


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope is derived from the caller: for authenticated users, "user:<id>"; otherwise "anon".
    - If a record exists and the stored `request_hash` differs from the provided one, returns 409.
    - If a record exists but response is not yet stored, returns 409 to indicate in-progress.
    - Server errors (5xx) are not stored, so the client may retry with the same key.
    """

    scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + timedelta(hours=settings.IDEMPOTENCY_TTL_HOURS),
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        # Guard against key reuse with different fingerprints
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"detail": "Idempotency key reused with different request payload"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            return idem.response_json, int(idem.response_code)
        return {"detail": "Request in progress"}, 409

    try:
        body, code = handler()
    except Exception:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        raise

    if int(code) >= 500:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        return body, code

    def _json_safe(value):
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, dict):
            return {k: _json_safe(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_json_safe(v) for v in value]
        return value

    IdempotencyKey.objects.filter(id=idem.id).update(response_json=_json_safe(body), response_code=code)
    return body, code


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Compute a canonical SHA256 hash of the request body.

    Uses sorted keys JSON representation to stabilize the hash across equivalent payloads.
    Returns None when data is falsy.
    """
    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
