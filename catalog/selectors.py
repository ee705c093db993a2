"""Selectors for the catalog domain.

Expose read-only query helpers to keep views thin and allow reuse across
APIs and services. Selectors return querysets or lightweight data
structures and avoid side effects.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from django.db.models import Q, QuerySet

from .models import Product


def list_products(
    *,
    sport: Optional[str] = None,
    search: Optional[str] = None,
    in_stock: Optional[bool] = None,
    ordering: Optional[Iterable[str]] = None,
) -> QuerySet[Product]:
    """Return active products with the common storefront filters applied."""

    qs = Product.objects.filter(is_active=True)
    if sport:
        qs = qs.filter(sport=sport)
    if in_stock is True:
        qs = qs.filter(stock__gt=0)
    elif in_stock is False:
        qs = qs.filter(stock=0)
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(player__icontains=search))
    ordering = list(ordering or ("-created_at", "id"))
    return qs.order_by(*ordering)


def get_products_by_ids(ids: Iterable[str], *, active_only: bool = False) -> Tuple[Dict[str, Product], List[str]]:
    """Batch-load products by canonical id.

    Returns ``(found, missing)``: a mapping of id to product and the ids,
    in request order, that do not exist (or are inactive when
    ``active_only``). Missing ids are never dropped silently so callers can
    report them.
    """

    wanted = list(dict.fromkeys(ids))
    qs = Product.objects.filter(id__in=wanted)
    if active_only:
        qs = qs.filter(is_active=True)
    found = {p.id: p for p in qs}
    missing = [pid for pid in wanted if pid not in found]
    return found, missing
