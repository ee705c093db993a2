"""Cart services: per-user product quantities clamped to stock on write."""

import logging

from catalog.models import Product
from django.db import transaction

from .models import CartItem


class CartError(Exception):
    """Raised for cart mutation failures."""


logger = logging.getLogger("slabshop.cart")


@transaction.atomic
def set_item_quantity(*, user, product_id: str, quantity: int) -> CartItem:
    """Set the quantity of a product in the user's cart.

    Creates the line if missing. The stored quantity is clamped to the
    product's current stock; stock is not reserved here.
    """

    if quantity <= 0:
        raise CartError("Quantity must be positive")
    try:
        product = Product.objects.get(pk=product_id, is_active=True)
    except Product.DoesNotExist:
        raise CartError("Product not found")
    if int(product.stock) <= 0:
        raise CartError("Product is out of stock")

    clamped = min(int(quantity), int(product.stock))
    item, created = CartItem.objects.select_for_update().get_or_create(
        user=user, product=product, defaults={"quantity": clamped}
    )
    if not created:
        item.quantity = clamped
        item.save(update_fields=["quantity", "updated_at"])
    logger.info(
        "cart.item_added" if created else "cart.item_updated",
        extra={
            "event": "cart.item_added" if created else "cart.item_updated",
            "user_id": getattr(user, "id", None),
            "product_id": product.id,
            "quantity": clamped,
            "requested": int(quantity),
        },
    )
    return item


@transaction.atomic
def remove_item(*, user, product_id: str) -> bool:
    """Remove a product line from the cart. Returns False if absent."""

    deleted, _ = CartItem.objects.filter(user=user, product_id=product_id).delete()
    if deleted:
        logger.info(
            "cart.item_removed",
            extra={"event": "cart.item_removed", "user_id": getattr(user, "id", None), "product_id": product_id},
        )
    return bool(deleted)


@transaction.atomic
def clear_cart(*, user) -> int:
    """Delete every line in the user's cart and return how many were removed."""

    deleted, _ = CartItem.objects.filter(user=user).delete()
    logger.info(
        "cart.cleared",
        extra={"event": "cart.cleared", "user_id": getattr(user, "id", None), "lines": deleted},
    )
    return deleted
