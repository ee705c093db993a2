"""Cart serializers for read and write operations."""

from common.ids import ProductIdField
from rest_framework import serializers

from .models import CartItem
from .selectors import cart_totals, list_cart_lines
from .services import set_item_quantity


class CartItemReadSerializer(serializers.ModelSerializer):
    """Read serializer for a cart line at live catalog values."""

    product_id = serializers.CharField(source="product.id")
    title = serializers.CharField(source="product.title")
    image = serializers.CharField(source="product.image")
    unit_price_cents = serializers.IntegerField(source="product.price_cents")
    available = serializers.IntegerField(source="product.stock")
    line_total_cents = serializers.IntegerField(read_only=True)
    exceeds_stock = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = [
            "product_id",
            "title",
            "image",
            "quantity",
            "unit_price_cents",
            "line_total_cents",
            "available",
            "exceeds_stock",
        ]

    def get_exceeds_stock(self, obj: CartItem) -> bool:
        return int(obj.quantity) > int(obj.product.stock)


class CartReadSerializer(serializers.Serializer):
    """Read serializer for the cart summary and items."""

    items = CartItemReadSerializer(many=True)
    currency = serializers.CharField()
    subtotal_cents = serializers.IntegerField()
    item_count = serializers.IntegerField()
    has_stock_issues = serializers.BooleanField()

    @classmethod
    def for_user(cls, *, user, currency: str):
        lines = list_cart_lines(user=user)
        totals = cart_totals(lines=lines)
        return cls({"items": lines, "currency": currency, **totals})


class SetItemSerializer(serializers.Serializer):
    """Write serializer for setting a product's quantity in the cart."""

    product_id = ProductIdField()
    quantity = serializers.IntegerField(min_value=1)

    def create(self, validated_data):  # type: ignore[override]
        user = self.context["request"].user
        return set_item_quantity(user=user, **validated_data)
