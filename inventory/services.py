"""Inventory services: the stock ledger.

``reserve`` is the only path that decrements stock for a sale. It is a
single conditional UPDATE, so two concurrent reservations of the last unit
cannot both succeed regardless of isolation level.
"""

import logging

from catalog.models import Product
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import StockMovement

logger = logging.getLogger("slabshop.inventory")


class MovementError(Exception):
    pass


@transaction.atomic
def reserve(*, product_id: str, quantity: int, reference: str = "") -> bool:
    """Decrement stock by ``quantity`` iff at least that much is on hand.

    Returns True when exactly one row was updated, False when stock was
    insufficient or the product does not exist. Never raises for those
    cases and never retries.
    """
    if quantity <= 0:
        raise MovementError("Reservation quantity must be positive")
    updated = Product.objects.filter(pk=product_id, stock__gte=quantity).update(
        stock=F("stock") - quantity,
        updated_at=timezone.now(),
    )
    if updated != 1:
        logger.info(
            "inventory.reserve_rejected",
            extra={
                "event": "inventory.reserve_rejected",
                "product_id": product_id,
                "quantity": quantity,
                "reference": reference,
            },
        )
        return False
    StockMovement.objects.create(
        product_id=product_id,
        movement_type=StockMovement.TYPE_OUTBOUND,
        quantity=-int(quantity),
        reason="reservation",
        reference=reference,
    )
    return True


@transaction.atomic
def release(*, product_id: str, quantity: int, reference: str = "") -> None:
    """Return ``quantity`` units previously taken by ``reserve``."""
    if quantity <= 0:
        raise MovementError("Release quantity must be positive")
    updated = Product.objects.filter(pk=product_id).update(
        stock=F("stock") + quantity,
        updated_at=timezone.now(),
    )
    if updated != 1:
        raise MovementError("Product not found")
    StockMovement.objects.create(
        product_id=product_id,
        movement_type=StockMovement.TYPE_INBOUND,
        quantity=int(quantity),
        reason="release",
        reference=reference,
    )


@transaction.atomic
def adjust_stock(*, product_id: str, quantity: int, reason: str = "", reference: str = ""):
    """Apply a signed operator correction to a product's stock.

    Refuses corrections that would take stock below zero.
    """
    if quantity == 0:
        return None
    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except Product.DoesNotExist:
        raise MovementError("Product not found")
    if int(product.stock) + int(quantity) < 0:
        raise MovementError("Insufficient stock for adjustment")
    Product.objects.filter(pk=product_id).update(stock=F("stock") + quantity, updated_at=timezone.now())
    movement = StockMovement.objects.create(
        product_id=product_id,
        movement_type=StockMovement.TYPE_ADJUST,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
    logger.info(
        "inventory.adjusted",
        extra={"event": "inventory.adjusted", "product_id": product_id, "quantity": quantity, "reason": reason},
    )
    return movement


# EOF
