"""Operator routes for order fulfillment (v1)."""

from django.urls import path

from .views import AdminOrderDeliverView, AdminOrderListView, AdminOrderShipView

app_name = "orders_admin"

urlpatterns = [
    path("", AdminOrderListView.as_view(), name="admin-order-list"),
    path("<int:order_id>/ship/", AdminOrderShipView.as_view(), name="admin-order-ship"),
    path("<int:order_id>/deliver/", AdminOrderDeliverView.as_view(), name="admin-order-deliver"),
]
