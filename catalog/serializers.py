"""Serializers for the catalog app."""

from rest_framework import serializers

from .models import Product


class ProductListSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sport",
            "title",
            "player",
            "price_cents",
            "image",
            "great_deal",
            "autograph",
            "in_stock",
        ]


class ProductDetailSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "sport",
            "title",
            "player",
            "price_cents",
            "stock",
            "image",
            "image2",
            "great_deal",
            "autograph",
            "in_stock",
            "created_at",
            "updated_at",
        ]
