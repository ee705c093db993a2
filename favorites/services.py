"""Favorites services.

``set_favorite`` is the idempotent primitive; ``toggle_favorite`` flips the
current state for clients that only know "clicked".
"""

from catalog.models import Product
from django.db import IntegrityError, transaction

from .models import Favorite


class FavoriteError(Exception):
    pass


def set_favorite(*, user, product_id: str, favorited: bool) -> bool:
    """Make the favorite state equal ``favorited``. Returns the final state."""

    if not favorited:
        Favorite.objects.filter(user=user, product_id=product_id).delete()
        return False
    if not Product.objects.filter(pk=product_id).exists():
        raise FavoriteError("Product not found")
    try:
        with transaction.atomic():
            Favorite.objects.get_or_create(user=user, product_id=product_id)
    except IntegrityError:
        # Concurrent insert of the same pair; the row exists either way
        pass
    return True


def toggle_favorite(*, user, product_id: str) -> bool:
    """Flip the favorite state and return the new one."""

    deleted, _ = Favorite.objects.filter(user=user, product_id=product_id).delete()
    if deleted:
        return False
    return set_favorite(user=user, product_id=product_id, favorited=True)


def list_favorite_ids(*, user) -> list[str]:
    return list(Favorite.objects.filter(user=user).order_by("-created_at", "-id").values_list("product_id", flat=True))
