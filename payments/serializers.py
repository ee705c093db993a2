from rest_framework import serializers


class PayPalCreateOrderSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)


class PayPalCaptureSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    paypal_order_id = serializers.CharField(max_length=64, trim_whitespace=True)


class MercadoPagoPreferenceSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)
    locale = serializers.CharField(max_length=8, required=False, default="en", allow_blank=True)


class SettlementResultSerializer(serializers.Serializer):
    order_id = serializers.IntegerField()
    status = serializers.CharField()
    settlement = serializers.CharField()
    applied = serializers.BooleanField()
