"""Selectors for read-only cart queries."""

from .models import CartItem


def list_cart_lines(*, user):
    """Return the user's cart lines with products, most recently touched first."""

    return list(CartItem.objects.filter(user=user).select_related("product").order_by("-updated_at", "id"))


def cart_totals(*, lines):
    """Compute the current subtotal at live prices.

    Lines whose stored quantity now exceeds stock are flagged, not rewritten;
    checkout is where stock is enforced.
    """

    subtotal = sum(line.line_total_cents for line in lines)
    return {
        "subtotal_cents": subtotal,
        "item_count": sum(int(line.quantity) for line in lines),
        "has_stock_issues": any(int(line.quantity) > int(line.product.stock) for line in lines),
    }
