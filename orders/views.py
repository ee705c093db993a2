"""Orders API endpoints: checkout, order history and admin fulfillment."""

from common.permissions import IsOperator
from django.http import Http404
from django_filters import rest_framework as filters
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .serializers import AdminOrderSerializer, CheckoutSerializer, OrderSerializer, ShipOrderSerializer
from .services import (
    CheckoutError,
    OrderTransitionError,
    compute_request_hash,
    create_order_from_cart,
    mark_delivered,
    mark_shipped,
    with_idempotency,
)

IDEMPOTENCY_PARAMETER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Makes the request idempotent within scope+path+method",
    type=str,
)

ADMIN_SECRET_PARAMETER = OpenApiParameter(
    name="X-Admin-Secret",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Operator secret (staff sessions do not need it)",
    type=str,
)

CheckoutErrorSerializer = inline_serializer(
    name="CheckoutError",
    fields={
        "code": rf_serializers.CharField(),
        "detail": rf_serializers.CharField(),
        "product_id": rf_serializers.CharField(required=False),
        "field": rf_serializers.CharField(required=False),
    },
)

ORDER_EXAMPLE = {
    "id": 123,
    "number": "ORD-000123",
    "status": "pending",
    "email": "user@example.com",
    "currency": "USD",
    "subtotal_cents": 5000,
    "shipping_cents": 3000,
    "total_cents": 8000,
    "payment_provider": "",
    "items": [
        {
            "id": 10,
            "product_id": "101",
            "title": "1996 Topps Chrome Rookie",
            "unit_price_cents": 2500,
            "quantity": 2,
            "line_total_cents": 5000,
        }
    ],
    "shipping_address": {
        "name": "Jane Doe",
        "phone": "+15551234567",
        "address1": "1 Main St",
        "address2": "",
        "city": "Springfield",
        "state": "IL",
        "postal_code": "62701",
        "country": "US",
    },
    "tracking": {"carrier": "", "code": "", "url": "", "shipped_at": None, "delivered_at": None},
    "paid_at": None,
    "cancelled_at": None,
    "cancel_reason": "",
    "created_at": "2025-01-01T12:00:00Z",
}


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class OrderFilterSet(filters.FilterSet):
    """Filters shared by the customer and operator order listings.

    Malformed values are answered with 400 by ``DjangoFilterBackend``.
    """

    status = filters.ChoiceFilter(field_name="status", choices=Order.STATUS_CHOICES)
    number = filters.CharFilter(field_name="number")
    start = filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    end = filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "number", "start", "end"]


ORDER_FILTER_PARAMETERS = [
    OpenApiParameter(name="status", description="Order status filter", required=False, type=str),
    OpenApiParameter(name="number", description="Order number exact match", required=False, type=str),
    OpenApiParameter(name="start", description="Created at >= start (ISO)", required=False, type=str),
    OpenApiParameter(name="end", description="Created at <= end (ISO)", required=False, type=str),
    OpenApiParameter(name="page", description="Page number", required=False, type=int),
    OpenApiParameter(name="page_size", description="Items per page", required=False, type=int),
]


class OrderListCreateView(generics.ListAPIView):
    """List the caller's orders (GET) or check out the current cart (POST)."""

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = OrderFilterSet

    def get_throttles(self):
        self.throttle_scope = "orders_write" if self.request.method == "POST" else "orders"
        return super().get_throttles()

    def get_queryset(self):
        return Order.objects.filter(user_id=self.request.user.id).order_by("-id").prefetch_related("items")

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        description="List current user's orders, newest first, with optional filters and pagination.",
        parameters=ORDER_FILTER_PARAMETERS,
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Checkout cart",
        description=(
            "Creates a PENDING order from the cart. Prices are snapshotted and stock is validated but not "
            "reserved; the cart is left intact until payment settles.\n\n"
            "Errors use `code`: EMPTY_CART, PRODUCT_NOT_FOUND, INSUFFICIENT_STOCK (with `product_id`) or "
            "INVALID_SHIPPING (with `field`)."
        ),
        parameters=[IDEMPOTENCY_PARAMETER],
        request=CheckoutSerializer,
        responses={201: OrderSerializer, 400: CheckoutErrorSerializer},
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "shipping": {
                        "name": "Jane Doe",
                        "phone": "+15551234567",
                        "address1": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62701",
                        "country": "US",
                    }
                },
                request_only=True,
            ),
            OpenApiExample("Created", value=ORDER_EXAMPLE, response_only=True, status_codes=["201"]),
            OpenApiExample(
                "Insufficient stock",
                value={"code": "INSUFFICIENT_STOCK", "detail": "Not enough stock", "product_id": "101"},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        def _handler():
            try:
                order = create_order_from_cart(user=request.user, shipping=serializer.validated_data.get("shipping"))
            except CheckoutError as exc:
                return exc.as_dict(), 400
            return OrderSerializer(order, context={"request": request}).data, 201

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=request.user,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_handler,
            )
            return Response(body, status=code)

        body, code = _handler()
        return Response(body, status=code)


class OrderDetailView(generics.RetrieveAPIView):
    """Retrieve a single order for the authenticated user."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"
    serializer_class = OrderSerializer

    def get_queryset(self):
        return Order.objects.filter(user_id=self.request.user.id).prefetch_related("items")

    def get_object(self):
        try:
            return self.get_queryset().get(id=int(self.kwargs["order_id"]))
        except (Order.DoesNotExist, ValueError):
            raise Http404("Not found.")

    @extend_schema(
        tags=["Orders"],
        summary="Get order detail",
        examples=[OpenApiExample("Order", value=ORDER_EXAMPLE, response_only=True)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderListView(generics.ListAPIView):
    """Operator listing of every order."""

    permission_classes = [IsOperator]
    serializer_class = AdminOrderSerializer
    pagination_class = DefaultPagination
    filter_backends = [filters.DjangoFilterBackend]
    filterset_class = OrderFilterSet
    throttle_scope = "admin_orders"

    def get_queryset(self):
        return Order.objects.all().order_by("-id").prefetch_related("items")

    @extend_schema(
        tags=["Admin Orders"],
        summary="List all orders",
        parameters=[ADMIN_SECRET_PARAMETER, *ORDER_FILTER_PARAMETERS],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderShipView(APIView):
    permission_classes = [IsOperator]
    throttle_scope = "admin_orders"

    @extend_schema(
        tags=["Admin Orders"],
        summary="Ship order",
        description="Records tracking info and moves a PAID order to SHIPPED. `tracking_code` is required.",
        parameters=[ADMIN_SECRET_PARAMETER],
        request=ShipOrderSerializer,
        responses={
            200: AdminOrderSerializer,
            400: inline_serializer(name="OrderTransitionError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[
            OpenApiExample(
                "Ship",
                value={"tracking_code": "1Z999", "carrier": "UPS", "tracking_url": "https://ups.com/track/1Z999"},
                request_only=True,
            )
        ],
    )
    def post(self, request, order_id: int):
        serializer = ShipOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = mark_shipped(order_id=order_id, **serializer.validated_data)
        except Order.DoesNotExist:
            raise Http404
        except OrderTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)


class AdminOrderDeliverView(APIView):
    permission_classes = [IsOperator]
    throttle_scope = "admin_orders"

    @extend_schema(
        tags=["Admin Orders"],
        summary="Mark order delivered",
        description="Moves a PAID or SHIPPED order to DELIVERED. Cancelled orders are refused.",
        parameters=[ADMIN_SECRET_PARAMETER],
        request=None,
        responses={
            200: AdminOrderSerializer,
            400: inline_serializer(name="OrderTransitionError", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def post(self, request, order_id: int):
        try:
            order = mark_delivered(order_id=order_id)
        except Order.DoesNotExist:
            raise Http404
        except OrderTransitionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AdminOrderSerializer(order).data, status=status.HTTP_200_OK)
