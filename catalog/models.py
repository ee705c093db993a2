"""Catalog app models.

A ``Product`` is a single sports card listing. Its ``id`` is the canonical
product identifier (see ``common.ids``) and is used as the primary key so
carts, favorites and order lines reference the same key everywhere.
"""

from common.choices import Sport
from common.models import TimeStampedModel
from django.db import models


class Product(TimeStampedModel):
    """Sellable card with price in minor units and on-hand stock."""

    SPORT_CHOICES = Sport.choices

    id = models.CharField(primary_key=True, max_length=64)
    sport = models.CharField(max_length=16, choices=SPORT_CHOICES, default=Sport.BASKETBALL, db_index=True)
    title = models.CharField(max_length=200)
    player = models.CharField(max_length=120, default="Unknown")
    price_cents = models.PositiveIntegerField(default=0)
    # Mutated only through inventory.services
    stock = models.IntegerField(default=0)
    image = models.CharField(max_length=500, blank=True)
    image2 = models.CharField(max_length=500, blank=True)
    great_deal = models.BooleanField(default=False, db_index=True)
    autograph = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "id"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price_cents__gte=0)),
        ]
        indexes = [
            models.Index(fields=["sport", "is_active"], name="catalog_pro_sport_8d1c2e_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.title} [{self.id}]"

    @property
    def in_stock(self) -> bool:
        return int(self.stock) > 0
