"""Payment settlement: the only path out of PENDING.

Each handler locks the order row, re-reads its status and returns without
side effects unless the order is still PENDING. Duplicate, retried or
out-of-order provider notifications therefore collapse into no-ops, and a
CANCELLED order can never become PAID.

Approval reserves stock for every line inside the same transaction that
writes PAID and clears the cart. If any line cannot be reserved, the lines
already reserved in this attempt are released and the order is CANCELLED
with ``cancel_reason="insufficient_stock"``; the provider references stay
on the order so the payment can be refunded.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from cart.services import clear_cart
from common.choices import PaymentProvider, SettlementStatus
from django.db import transaction
from django.utils import timezone
from inventory.services import release, reserve

from .emails import send_order_paid_email
from .models import Order
from .services import log_status_change

logger = logging.getLogger("slabshop.orders")

REFERENCE_FIELDS = {
    PaymentProvider.PAYPAL: ("paypal_order_id", "paypal_capture_id", "paypal_payer_email"),
    PaymentProvider.MERCADOPAGO: ("mp_preference_id", "mp_payment_id", "mp_merchant_order_id"),
}

CANCEL_INSUFFICIENT_STOCK = "insufficient_stock"
CANCEL_PAYMENT_REJECTED = "payment_rejected"


@dataclass
class SettlementOutcome:
    order: Order
    applied: bool
    status: str


def _apply_references(order: Order, provider: str, references: Optional[Mapping]) -> list[str]:
    allowed = REFERENCE_FIELDS.get(provider, ())
    changed = []
    for field, value in (references or {}).items():
        if field in allowed and value:
            setattr(order, field, str(value))
            changed.append(field)
    if provider and order.payment_provider != provider:
        order.payment_provider = provider
        changed.append("payment_provider")
    return changed


def _skip(order: Order, provider: str, outcome: str) -> SettlementOutcome:
    log = logger.warning if order.status == Order.STATUS_PAID and outcome != "approved" else logger.info
    log(
        "settlement.skipped",
        extra={
            "event": "settlement.skipped",
            "order_id": order.id,
            "provider": provider,
            "outcome": outcome,
            "status": order.status,
        },
    )
    return SettlementOutcome(order=order, applied=False, status=order.status)


def _cancel(order: Order, *, reason: str, changed: list[str]) -> None:
    order.status = Order.STATUS_CANCELLED
    order.cancelled_at = timezone.now()
    order.cancel_reason = reason
    order.save(update_fields=[*changed, "status", "cancelled_at", "cancel_reason", "updated_at"])
    log_status_change(order, Order.STATUS_PENDING, reason=reason)


def settle_payment_approved(*, order_id: int, provider: str, references: Optional[Mapping] = None) -> SettlementOutcome:
    """Settle a verified successful payment for ``order_id``."""

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        if order.status != Order.STATUS_PENDING:
            return _skip(order, provider, "approved")

        changed = _apply_references(order, provider, references)
        reference = f"order:{order.id}"
        reserved = []
        # Lock products in a stable order across concurrent settlements
        for item in sorted(order.items.all(), key=lambda i: (i.product_id, i.id)):
            if reserve(product_id=item.product_id, quantity=item.quantity, reference=reference):
                reserved.append(item)
                continue
            for done in reversed(reserved):
                release(product_id=done.product_id, quantity=done.quantity, reference=reference)
            logger.warning(
                "settlement.stock_conflict",
                extra={
                    "event": "settlement.stock_conflict",
                    "order_id": order.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "provider": provider,
                },
            )
            _cancel(order, reason=CANCEL_INSUFFICIENT_STOCK, changed=changed)
            return SettlementOutcome(order=order, applied=True, status=order.status)

        order.status = Order.STATUS_PAID
        order.paid_at = timezone.now()
        order.save(update_fields=[*changed, "status", "paid_at", "updated_at"])
        clear_cart(user=order.user)
        log_status_change(order, Order.STATUS_PENDING, provider=provider)
        transaction.on_commit(lambda: send_order_paid_email(order))
        return SettlementOutcome(order=order, applied=True, status=order.status)


def settle_payment_failed(
    *,
    order_id: int,
    provider: str,
    references: Optional[Mapping] = None,
    reason: str = CANCEL_PAYMENT_REJECTED,
) -> SettlementOutcome:
    """Settle a rejected, cancelled or refunded payment for ``order_id``.

    Only a PENDING order is cancelled. No inventory is touched because
    pending orders never hold reservations.
    """

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        if order.status != Order.STATUS_PENDING:
            return _skip(order, provider, "rejected")
        changed = _apply_references(order, provider, references)
        _cancel(order, reason=reason, changed=changed)
        return SettlementOutcome(order=order, applied=True, status=order.status)


def apply_settlement(settlement) -> SettlementOutcome:
    """Dispatch a provider adapter's normalized result.

    ``settlement`` carries ``order_id``, ``provider``, ``status`` (approved,
    rejected or pending), ``references`` and ``provider_status``.
    """

    if settlement.status == SettlementStatus.APPROVED:
        return settle_payment_approved(
            order_id=settlement.order_id, provider=settlement.provider, references=settlement.references
        )
    if settlement.status == SettlementStatus.REJECTED:
        reason = f"payment_{settlement.provider_status}".lower() if settlement.provider_status else None
        return settle_payment_failed(
            order_id=settlement.order_id,
            provider=settlement.provider,
            references=settlement.references,
            reason=(reason or CANCEL_PAYMENT_REJECTED)[:64],
        )
    order = Order.objects.get(pk=settlement.order_id)
    logger.info(
        "settlement.pending",
        extra={
            "event": "settlement.pending",
            "order_id": order.id,
            "provider": settlement.provider,
            "provider_status": settlement.provider_status,
        },
    )
    return SettlementOutcome(order=order, applied=False, status=order.status)
