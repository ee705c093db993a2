"""Operator inventory views: movement audit trail and stock corrections."""

from common.ids import parse_product_id
from common.permissions import IsOperator
from django.utils.dateparse import parse_datetime
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import StockMovement
from .serializers import StockAdjustSerializer, StockMovementSerializer
from .services import MovementError, adjust_stock


class MovementListView(generics.ListAPIView):
    permission_classes = [IsOperator]
    serializer_class = StockMovementSerializer
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock movements",
        description=(
            "List movements (reservations, releases, adjustments). "
            "Filters: product_id, movement_type, reference, created_after (ISO)."
        ),
        parameters=[
            OpenApiParameter(
                name="X-Admin-Secret",
                location=OpenApiParameter.HEADER,
                required=False,
                description="Operator secret (staff sessions do not need it)",
                type=str,
            )
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        qs = StockMovement.objects.select_related("product").order_by("-created_at", "-id")
        product_id = self.request.query_params.get("product_id")
        movement_type = self.request.query_params.get("movement_type")
        reference = self.request.query_params.get("reference")
        created_after = self.request.query_params.get("created_after")

        if product_id:
            try:
                qs = qs.filter(product_id=parse_product_id(product_id))
            except ValueError:
                return qs.none()
        if movement_type:
            qs = qs.filter(movement_type=movement_type)
        if reference:
            qs = qs.filter(reference=reference)
        if created_after:
            dt = parse_datetime(created_after)
            if dt:
                qs = qs.filter(created_at__gte=dt)
        return qs


class StockAdjustView(APIView):
    permission_classes = [IsOperator]
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust stock",
        description="Applies a signed stock correction. Refuses to take stock below zero.",
        request=StockAdjustSerializer,
        responses={
            201: StockMovementSerializer,
            400: inline_serializer(name="StockAdjustError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[OpenApiExample("Restock", value={"product_id": "101", "quantity": 5, "reason": "restock"})],
    )
    def post(self, request):
        serializer = StockAdjustSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            movement = adjust_stock(
                product_id=serializer.validated_data["product_id"],
                quantity=serializer.validated_data["quantity"],
                reason=serializer.validated_data["reason"],
                reference=f"operator:{getattr(request.user, 'id', None) or 'secret'}",
            )
        except MovementError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


# EOF
