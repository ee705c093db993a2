"""URL routes for the payments app (v1)."""

from django.urls import path

from .views import MercadoPagoPreferenceView, MercadoPagoWebhookView, PayPalCaptureView, PayPalCreateOrderView

app_name = "payments"

urlpatterns = [
    path("paypal/orders/", PayPalCreateOrderView.as_view(), name="paypal-create-order"),
    path("paypal/capture/", PayPalCaptureView.as_view(), name="paypal-capture"),
    path("mercadopago/preferences/", MercadoPagoPreferenceView.as_view(), name="mercadopago-preference"),
    path("mercadopago/webhook/", MercadoPagoWebhookView.as_view(), name="mercadopago-webhook"),
]
