from django.urls import path

from .views import MovementListView, StockAdjustView

app_name = "inventory"

urlpatterns = [
    path("movements/", MovementListView.as_view(), name="movement-list"),
    path("adjustments/", StockAdjustView.as_view(), name="stock-adjust"),
]

# EOF
