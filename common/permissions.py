"""Operator access for admin fulfillment endpoints."""

import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission


class IsOperator(BasePermission):
    """Allow staff users or callers presenting the operator secret.

    The secret is sent as the ``X-Admin-Secret`` header and compared in
    constant time. An empty ``ADMIN_SECRET`` disables header access.
    """

    message = "Operator credentials required."

    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated and user.is_staff:
            return True
        expected = getattr(settings, "ADMIN_SECRET", "") or ""
        provided = request.headers.get("X-Admin-Secret") or ""
        if not expected or not provided:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
