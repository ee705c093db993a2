"""DRF views for cart operations."""

from common.ids import parse_product_id
from django.conf import settings
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import CartItemReadSerializer, CartReadSerializer, SetItemSerializer
from .services import CartError, clear_cart, remove_item

CART_EXAMPLE = {
    "items": [
        {
            "product_id": "101",
            "title": "1996 Topps Chrome Rookie",
            "image": "/cards/101.jpg",
            "quantity": 2,
            "unit_price_cents": 2000,
            "line_total_cents": 4000,
            "available": 10,
            "exceeds_stock": False,
        }
    ],
    "currency": "USD",
    "subtotal_cents": 4000,
    "item_count": 2,
    "has_stock_issues": False,
}


class CartDetailView(APIView):
    """Return the authenticated user's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description=(
            "Returns the authenticated user's cart at live prices. Lines whose quantity now exceeds stock "
            "are flagged with `exceeds_stock`; they are not rewritten."
        ),
        examples=[OpenApiExample("Cart", value=CART_EXAMPLE)],
    )
    def get(self, request):
        data = CartReadSerializer.for_user(user=request.user, currency=settings.STORE_CURRENCY).data
        return Response(data, status=status.HTTP_200_OK)


class CartSetItemView(APIView):
    """Add a product to the cart or change its quantity."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Set cart item quantity",
        description="Upserts a cart line. The stored quantity is clamped to current stock.",
        request=SetItemSerializer,
        responses={
            200: CartItemReadSerializer,
            400: inline_serializer(name="CartMutationError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[OpenApiExample("Set quantity", value={"product_id": "101", "quantity": 2}, request_only=True)],
    )
    def post(self, request):
        serializer = SetItemSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        try:
            item = serializer.save()
        except CartError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CartItemReadSerializer(item).data, status=status.HTTP_200_OK)


class CartItemDeleteView(APIView):
    """Remove a product from the cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove cart item",
        description="Removes the product's line from the cart. Removing an absent line is a no-op.",
        responses={204: None},
    )
    def delete(self, request, product_id: str):
        try:
            pid = parse_product_id(product_id)
        except ValueError:
            return Response(status=status.HTTP_204_NO_CONTENT)
        remove_item(user=request.user, product_id=pid)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CartClearView(APIView):
    """Delete every line in the cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        responses={
            200: inline_serializer(
                name="CartCleared",
                fields={"status": rf_serializers.CharField(), "removed": rf_serializers.IntegerField()},
            ),
        },
        examples=[OpenApiExample("Cleared", value={"status": "cleared", "removed": 2})],
    )
    def post(self, request):
        removed = clear_cart(user=request.user)
        return Response({"status": "cleared", "removed": removed}, status=status.HTTP_200_OK)
