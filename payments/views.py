"""Payment endpoints: provider sessions, PayPal capture and Mercado Pago webhooks."""

import logging

from common.choices import PaymentProvider as Provider
from django.http import Http404
from drf_spectacular.utils import OpenApiExample, extend_schema, inline_serializer
from orders.models import Order
from orders.settlement import apply_settlement
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .base import PaymentProviderError
from .registry import get_provider
from .serializers import (
    MercadoPagoPreferenceSerializer,
    PayPalCaptureSerializer,
    PayPalCreateOrderSerializer,
    SettlementResultSerializer,
)

logger = logging.getLogger("slabshop.payments")

WEBHOOK_TOPICS = ("payment", "merchant_order")

DetailSerializer = inline_serializer(name="PaymentDetail", fields={"detail": rf_serializers.CharField()})


def _owned_order(user, order_id: int) -> Order:
    try:
        return Order.objects.get(pk=order_id, user_id=user.id)
    except Order.DoesNotExist:
        raise Http404("Order not found")


def _not_pending(order: Order) -> Response:
    return Response(
        {"detail": f"Order is {order.status}; only pending orders can be paid."},
        status=status.HTTP_400_BAD_REQUEST,
    )


def _provider_failed(exc: PaymentProviderError) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_502_BAD_GATEWAY)


def _correlation_mismatch(order: Order, provider_order_id) -> Response:
    logger.warning(
        "payments.correlation_mismatch",
        extra={
            "event": "payments.correlation_mismatch",
            "provider": Provider.PAYPAL,
            "order_id": order.id,
            "provider_order_id": provider_order_id,
        },
    )
    return Response({"detail": "PayPal order does not belong to this order."}, status=status.HTTP_400_BAD_REQUEST)


class PayPalCreateOrderView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(
        tags=["Payments"],
        summary="Create PayPal order",
        description="Opens a PayPal checkout for a pending order owned by the caller.",
        request=PayPalCreateOrderSerializer,
        responses={
            200: inline_serializer(
                name="PayPalOrderCreated",
                fields={"paypal_order_id": rf_serializers.CharField(), "approve_url": rf_serializers.CharField()},
            ),
            400: DetailSerializer,
            502: DetailSerializer,
        },
        examples=[OpenApiExample("Create", value={"order_id": 123}, request_only=True)],
    )
    def post(self, request):
        serializer = PayPalCreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _owned_order(request.user, serializer.validated_data["order_id"])
        if order.status != Order.STATUS_PENDING:
            return _not_pending(order)
        try:
            session = get_provider(Provider.PAYPAL).create_session(order)
        except PaymentProviderError as exc:
            return _provider_failed(exc)
        order.paypal_order_id = session.reference
        order.payment_provider = Provider.PAYPAL
        order.save(update_fields=["paypal_order_id", "payment_provider", "updated_at"])
        return Response({"paypal_order_id": session.reference, "approve_url": session.redirect_url})


class PayPalCaptureView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(
        tags=["Payments"],
        summary="Capture PayPal order",
        description=(
            "Captures an approved PayPal order and settles it synchronously. A PayPal order not yet linked to "
            "this order is looked up first and must carry its id. Settling an order that is no "
            "longer pending returns its current status without contacting PayPal."
        ),
        request=PayPalCaptureSerializer,
        responses={200: SettlementResultSerializer, 400: DetailSerializer, 502: DetailSerializer},
        examples=[
            OpenApiExample("Capture", value={"order_id": 123, "paypal_order_id": "5O190127TN364715T"}, request_only=True),
            OpenApiExample(
                "Paid",
                value={"order_id": 123, "status": "paid", "settlement": "approved", "applied": True},
                response_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = PayPalCaptureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _owned_order(request.user, serializer.validated_data["order_id"])
        paypal_order_id = serializer.validated_data["paypal_order_id"]
        if order.paypal_order_id and order.paypal_order_id != paypal_order_id:
            return Response({"detail": "PayPal order does not belong to this order."}, status=400)
        if order.status != Order.STATUS_PENDING:
            return Response({"order_id": order.id, "status": order.status, "settlement": "", "applied": False})

        provider = get_provider(Provider.PAYPAL)
        try:
            # Unlinked PayPal orders must name this order before capture
            if not order.paypal_order_id:
                looked_up = provider.to_settlement(
                    provider.fetch_order(paypal_order_id), paypal_order_id=paypal_order_id
                )
                if looked_up.order_id != order.id:
                    return _correlation_mismatch(order, looked_up.order_id)
            settlement = provider.confirm(order, paypal_order_id)
        except PaymentProviderError as exc:
            return _provider_failed(exc)
        if settlement.order_id is not None and settlement.order_id != order.id:
            return _correlation_mismatch(order, settlement.order_id)
        settlement.order_id = order.id
        outcome = apply_settlement(settlement)
        return Response(
            {
                "order_id": outcome.order.id,
                "status": outcome.status,
                "settlement": settlement.status,
                "applied": outcome.applied,
            }
        )


class MercadoPagoPreferenceView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(
        tags=["Payments"],
        summary="Create Mercado Pago preference",
        description="Creates a Checkout Pro preference for a pending order owned by the caller.",
        request=MercadoPagoPreferenceSerializer,
        responses={
            200: inline_serializer(
                name="MercadoPagoPreference",
                fields={"preference_id": rf_serializers.CharField(), "init_point": rf_serializers.CharField()},
            ),
            400: DetailSerializer,
            502: DetailSerializer,
        },
        examples=[OpenApiExample("Preference", value={"order_id": 123, "locale": "es"}, request_only=True)],
    )
    def post(self, request):
        serializer = MercadoPagoPreferenceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _owned_order(request.user, serializer.validated_data["order_id"])
        if order.status != Order.STATUS_PENDING:
            return _not_pending(order)
        try:
            session = get_provider(Provider.MERCADOPAGO).create_session(
                order, locale=serializer.validated_data.get("locale") or "en"
            )
        except PaymentProviderError as exc:
            return _provider_failed(exc)
        order.mp_preference_id = session.reference
        order.payment_provider = Provider.MERCADOPAGO
        order.save(update_fields=["mp_preference_id", "payment_provider", "updated_at"])
        return Response({"preference_id": session.reference, "init_point": session.redirect_url})


class MercadoPagoWebhookView(APIView):
    """Mercado Pago notifications.

    The body only tells us what changed; the payment or merchant order is
    re-fetched from Mercado Pago before anything is settled.
    """

    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_scope = "webhooks"

    @extend_schema(
        tags=["Payments"],
        summary="Mercado Pago webhook",
        description=(
            "Accepts `{type, data: {id}}` bodies or `topic`/`id` query params. Unknown topics and missing ids "
            "are acknowledged without action. Provider failures answer 502 so Mercado Pago retries."
        ),
        request=inline_serializer(
            name="MercadoPagoNotification",
            fields={
                "type": rf_serializers.CharField(required=False),
                "data": inline_serializer(name="MercadoPagoNotificationData", fields={"id": rf_serializers.CharField()}),
            },
        ),
        responses={
            200: inline_serializer(
                name="WebhookAck",
                fields={"status": rf_serializers.CharField(), "applied": rf_serializers.BooleanField(required=False)},
            ),
            401: DetailSerializer,
            502: DetailSerializer,
        },
        examples=[OpenApiExample("Payment", value={"type": "payment", "data": {"id": "123456"}}, request_only=True)],
    )
    def post(self, request):
        body = request.data if isinstance(request.data, dict) else {}
        params = request.query_params
        topic = str(body.get("type") or body.get("topic") or params.get("type") or params.get("topic") or "")
        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        resource_id = str(data.get("id") or body.get("id") or params.get("data.id") or params.get("id") or "").strip()

        if topic not in WEBHOOK_TOPICS or not resource_id:
            return Response({"status": "ignored"})

        provider = get_provider(Provider.MERCADOPAGO)
        if not provider.verify_signature(request.headers, resource_id):
            logger.warning(
                "payments.webhook_bad_signature",
                extra={"event": "payments.webhook_bad_signature", "provider": provider.name, "topic": topic},
            )
            return Response({"detail": "Invalid signature"}, status=status.HTTP_401_UNAUTHORIZED)

        try:
            if topic == "payment":
                settlement = provider.fetch_payment(resource_id)
            else:
                settlement = provider.fetch_merchant_order(resource_id)
        except PaymentProviderError as exc:
            return _provider_failed(exc)

        if settlement.order_id is None or not Order.objects.filter(pk=settlement.order_id).exists():
            logger.info(
                "payments.webhook_unmatched",
                extra={
                    "event": "payments.webhook_unmatched",
                    "provider": provider.name,
                    "topic": topic,
                    "resource_id": resource_id,
                    "order_id": settlement.order_id,
                },
            )
            return Response({"status": "ignored"})

        outcome = apply_settlement(settlement)
        return Response({"status": outcome.status, "applied": outcome.applied})
