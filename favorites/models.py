from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class Favorite(TimeStampedModel):
    """A card a user has marked as favorite."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="favorites", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="favorited_by", on_delete=models.CASCADE)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="unique_favorite_per_user"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Favorite user={self.user_id} product={self.product_id}"
