from common.ids import ProductIdField
from rest_framework import serializers


class ToggleFavoriteSerializer(serializers.Serializer):
    product_id = ProductIdField()


class FavoriteStateSerializer(serializers.Serializer):
    product_id = serializers.CharField()
    favorited = serializers.BooleanField()
