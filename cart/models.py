"""Cart app models.

A user's cart is simply the set of their ``CartItem`` rows: one line per
product, quantity at least one.
"""

from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class CartItem(TimeStampedModel):
    """Desired quantity of a product in a user's cart."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="cart_items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="cart_items", on_delete=models.CASCADE)
    quantity = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["-updated_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="unique_product_per_cart"),
            models.CheckConstraint(
                name="quantity_positive",
                condition=models.Q(quantity__gte=1),
            ),
        ]
        indexes = [
            models.Index(fields=["user", "updated_at"], name="cart_cartit_user_id_5a8e21_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} user={self.user_id} product={self.product_id} qty={self.quantity}"

    @property
    def line_total_cents(self) -> int:
        return int(self.product.price_cents) * int(self.quantity)
