import pytest
from common.ids import ProductIdField, parse_product_id
from rest_framework import serializers


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Card-011", "11"),
        ("011", "11"),
        (11, "11"),
        ("  42  ", "42"),
        ("0", "0"),
        ("lot 7 of 12", "7"),
        ("promo", "promo"),
        ("  promo ", "promo"),
    ],
)
def test_parse_product_id_canonical_forms(raw, expected):
    assert parse_product_id(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_product_id_rejects_empty(raw):
    with pytest.raises(ValueError):
        parse_product_id(raw)


def test_parse_product_id_is_idempotent():
    once = parse_product_id("Card-0099")
    assert parse_product_id(once) == once


class _Payload(serializers.Serializer):
    product_id = ProductIdField()


def test_product_id_field_normalizes():
    s = _Payload(data={"product_id": "Card-011"})
    assert s.is_valid(), s.errors
    assert s.validated_data["product_id"] == "11"


def test_product_id_field_rejects_blank():
    s = _Payload(data={"product_id": "   "})
    assert not s.is_valid()
    assert "product_id" in s.errors
