"""Admin registration for cart lines."""

from django.contrib import admin

from .models import CartItem


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "product", "quantity", "updated_at")
    search_fields = ("product__id", "product__title", "user__email")
    ordering = ("-updated_at",)
    readonly_fields = ("created_at", "updated_at")
    raw_id_fields = ("user", "product")
    list_select_related = ("user", "product")


# EOF
