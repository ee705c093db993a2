"""Catalog write services: bulk card import."""

import logging
import math
import unicodedata
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Mapping

from common.choices import Sport
from common.ids import parse_product_id
from django.db import transaction
from inventory.services import adjust_stock

from .models import Product

logger = logging.getLogger("slabshop.inventory")

YES_VALUES = {"si", "yes", "true", "1", "y"}


@dataclass
class ImportResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0


def _normalize_flag(value) -> bool:
    text = unicodedata.normalize("NFD", str(value if value is not None else "").strip().lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return text in YES_VALUES


def _to_sport(value) -> str:
    text = str(value or "").strip().lower()
    return text if text in Sport.values else Sport.BASKETBALL


def _to_cents(value) -> int:
    try:
        amount = Decimal(str(value if value not in (None, "") else "0").strip())
    except InvalidOperation:
        return 0
    if not amount.is_finite():
        return 0
    try:
        cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return 0
    return max(0, int(cents))


def _to_stock(value) -> int:
    try:
        number = float(str(value if value not in (None, "") else "0").strip())
    except ValueError:
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, math.floor(number))


def normalize_row(row: Mapping) -> dict | None:
    """Map a spreadsheet row to Product fields; None when the id is unusable."""
    try:
        pid = parse_product_id(row.get("id"))
    except ValueError:
        return None
    title = str(row.get("title") or "").strip() or pid
    return {
        "id": pid,
        "sport": _to_sport(row.get("sport")),
        "title": title,
        "player": str(row.get("player") or "").strip() or "Unknown",
        "price_cents": _to_cents(row.get("price")),
        "image": str(row.get("image") or "").strip(),
        "image2": str(row.get("image2") or "").strip(),
        "great_deal": _normalize_flag(row.get("greatDeal", row.get("great_deal"))),
        "autograph": _normalize_flag(row.get("auto")),
        "stock": _to_stock(row.get("stock")),
    }


@transaction.atomic
def upsert_products(rows: Iterable[Mapping], *, keep_stock: bool = False) -> ImportResult:
    """Create or update cards from import rows.

    New cards take the row's stock as-is. For existing cards the row's stock
    is applied as an inventory adjustment so the change is audited, unless
    ``keep_stock`` is set.
    """

    result = ImportResult()
    for row in rows:
        data = normalize_row(row)
        if data is None:
            result.skipped += 1
            continue
        stock = data.pop("stock")
        product = Product.objects.select_for_update().filter(id=data["id"]).first()
        if product is None:
            Product.objects.create(stock=stock, **data)
            result.created += 1
            continue
        fields = [name for name in data if name != "id"]
        for field in fields:
            setattr(product, field, data[field])
        product.save(update_fields=[*fields, "updated_at"])
        if not keep_stock and stock != product.stock:
            adjust_stock(
                product_id=product.id,
                quantity=stock - int(product.stock),
                reason="catalog import",
                reference="import",
            )
        result.updated += 1

    logger.info(
        "catalog.imported",
        extra={
            "event": "catalog.imported",
            "created": result.created,
            "updated": result.updated,
            "skipped": result.skipped,
        },
    )
    return result
