"""Selectors for the inventory domain."""

from catalog.models import Product

from .models import StockMovement


def stock_for_product(product_id: str) -> int:
    stock = Product.objects.filter(pk=product_id).values_list("stock", flat=True).first()
    return int(stock or 0)


def list_movements_for_reference(reference: str):
    return list(
        StockMovement.objects.filter(reference=reference)
        .order_by("id")
        .values("product_id", "movement_type", "quantity", "reason")
    )


# EOF
