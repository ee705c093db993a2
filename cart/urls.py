"""Cart URL routes (v1)."""

from django.urls import path

from .views import CartClearView, CartDetailView, CartItemDeleteView, CartSetItemView

app_name = "cart"

urlpatterns = [
    path("", CartDetailView.as_view(), name="cart-detail"),
    path("items/", CartSetItemView.as_view(), name="cart-set-item"),
    path("items/<str:product_id>/", CartItemDeleteView.as_view(), name="cart-delete-item"),
    path("clear/", CartClearView.as_view(), name="cart-clear"),
]
