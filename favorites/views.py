"""Favorites API: list, toggle and idempotent set/unset."""

from common.ids import parse_product_id
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import FavoriteStateSerializer, ToggleFavoriteSerializer
from .services import FavoriteError, list_favorite_ids, set_favorite, toggle_favorite

NotFoundError = inline_serializer(name="FavoriteNotFound", fields={"detail": rf_serializers.CharField()})


class FavoriteListView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "favorites"

    @extend_schema(
        tags=["Favorites Endpoints"],
        summary="List favorites",
        description="Returns the ids of the user's favorite cards, newest first.",
        responses={
            200: inline_serializer(
                name="FavoriteList", fields={"product_ids": rf_serializers.ListField(child=rf_serializers.CharField())}
            )
        },
        examples=[OpenApiExample("Favorites", value={"product_ids": ["101", "7"]})],
    )
    def get(self, request):
        return Response({"product_ids": list_favorite_ids(user=request.user)})


class FavoriteToggleView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "favorites"

    @extend_schema(
        tags=["Favorites Endpoints"],
        summary="Toggle favorite",
        request=ToggleFavoriteSerializer,
        responses={200: FavoriteStateSerializer, 404: NotFoundError},
        examples=[OpenApiExample("Toggled on", value={"product_id": "101", "favorited": True}, response_only=True)],
    )
    def post(self, request):
        serializer = ToggleFavoriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pid = serializer.validated_data["product_id"]
        try:
            favorited = toggle_favorite(user=request.user, product_id=pid)
        except FavoriteError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response({"product_id": pid, "favorited": favorited})


class FavoriteDetailView(APIView):
    """PUT marks a card as favorite, DELETE unmarks it; both are idempotent."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "favorites"

    def _parse(self, product_id):
        try:
            return parse_product_id(product_id)
        except ValueError:
            return None

    @extend_schema(
        tags=["Favorites Endpoints"],
        summary="Add favorite",
        request=None,
        responses={200: FavoriteStateSerializer, 404: NotFoundError},
    )
    def put(self, request, product_id: str):
        pid = self._parse(product_id)
        if pid is None:
            return Response({"detail": "Product not found"}, status=status.HTTP_404_NOT_FOUND)
        try:
            set_favorite(user=request.user, product_id=pid, favorited=True)
        except FavoriteError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response({"product_id": pid, "favorited": True})

    @extend_schema(
        tags=["Favorites Endpoints"],
        summary="Remove favorite",
        responses={200: FavoriteStateSerializer},
    )
    def delete(self, request, product_id: str):
        pid = self._parse(product_id)
        if pid is not None:
            set_favorite(user=request.user, product_id=pid, favorited=False)
        return Response({"product_id": pid or str(product_id), "favorited": False})
