"""DRF serializers for Orders."""

from rest_framework import serializers

from .models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Snapshot line item; prices are the ones frozen at checkout."""

    product_id = serializers.CharField(read_only=True)
    line_total_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "title", "unit_price_cents", "quantity", "line_total_cents"]
        read_only_fields = fields


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(source="ship_name")
    phone = serializers.CharField(source="ship_phone")
    address1 = serializers.CharField(source="ship_address1")
    address2 = serializers.CharField(source="ship_address2")
    city = serializers.CharField(source="ship_city")
    state = serializers.CharField(source="ship_state")
    postal_code = serializers.CharField(source="ship_postal_code")
    country = serializers.CharField(source="ship_country")


class TrackingSerializer(serializers.Serializer):
    carrier = serializers.CharField(source="tracking_carrier")
    code = serializers.CharField(source="tracking_code")
    url = serializers.CharField(source="tracking_url")
    shipped_at = serializers.DateTimeField()
    delivered_at = serializers.DateTimeField()


class OrderSerializer(serializers.ModelSerializer):
    """API representation for an order owned by the caller."""

    items = OrderItemSerializer(many=True, read_only=True)
    shipping_address = ShippingAddressSerializer(source="*", read_only=True)
    tracking = TrackingSerializer(source="*", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "email",
            "currency",
            "subtotal_cents",
            "shipping_cents",
            "total_cents",
            "payment_provider",
            "items",
            "shipping_address",
            "tracking",
            "paid_at",
            "cancelled_at",
            "cancel_reason",
            "created_at",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    """Operator view including provider correlation ids."""

    user_id = serializers.IntegerField(read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + [
            "user_id",
            "paypal_order_id",
            "paypal_capture_id",
            "paypal_payer_email",
            "mp_preference_id",
            "mp_payment_id",
            "mp_merchant_order_id",
        ]
        read_only_fields = fields


class CheckoutShippingSerializer(serializers.Serializer):
    """Shape-only validation; field presence and the country allow-list are checked by the checkout service."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    address1 = serializers.CharField(required=False, allow_blank=True, max_length=255)
    address2 = serializers.CharField(required=False, allow_blank=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, max_length=120)
    state = serializers.CharField(required=False, allow_blank=True, max_length=120)
    postal_code = serializers.CharField(required=False, allow_blank=True, max_length=20)
    country = serializers.CharField(required=False, allow_blank=True, max_length=8)


class CheckoutSerializer(serializers.Serializer):
    shipping = CheckoutShippingSerializer(required=False)


class ShipOrderSerializer(serializers.Serializer):
    tracking_code = serializers.CharField(max_length=128)
    carrier = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    tracking_url = serializers.URLField(max_length=500, required=False, allow_blank=True, default="")
