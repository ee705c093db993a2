"""Canonical product identifiers.

Product ids arrive from several places (catalog imports, cart payloads,
favorites, provider callbacks) in slightly different shapes such as
``"Card-011"``, ``"011"`` or ``11``. They are parsed exactly once at the API
boundary into a single canonical string so services and queries never
re-normalize.
"""

import re

from rest_framework import serializers

_DIGITS = re.compile(r"\d+")


def parse_product_id(value) -> str:
    """Return the canonical id for ``value``.

    The first run of digits wins, with leading zeros dropped
    (``"Card-011"`` -> ``"11"``). Values without digits are kept as their
    stripped text. Raises ``ValueError`` for empty input.
    """
    if value is None:
        raise ValueError("Product id is required")
    raw = str(value).strip()
    if not raw:
        raise ValueError("Product id is required")
    match = _DIGITS.search(raw)
    if match:
        return str(int(match.group(0)))
    return raw


class ProductIdField(serializers.CharField):
    """Serializer field that yields a canonical product id."""

    default_error_messages = {"invalid_id": "Invalid product id."}

    def __init__(self, **kwargs):
        kwargs.setdefault("max_length", 64)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return parse_product_id(value)
        except ValueError:
            self.fail("invalid_id")
