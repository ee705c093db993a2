from django.contrib import admin

from .models import IdempotencyKey, Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product", "title", "unit_price_cents", "quantity")
    readonly_fields = fields
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "number", "status", "user", "total_cents", "payment_provider", "created_at")
    list_filter = ("status", "payment_provider", "ship_country", "created_at")
    search_fields = ("number", "email", "paypal_order_id", "mp_payment_id", "tracking_code")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]
    # Status and totals move only through services
    readonly_fields = (
        "status",
        "subtotal_cents",
        "shipping_cents",
        "total_cents",
        "paid_at",
        "cancelled_at",
        "cancel_reason",
        "shipped_at",
        "delivered_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "scope", "path", "method", "response_code", "created_at")
    list_filter = ("method", "response_code", "created_at")
    search_fields = ("key", "scope", "path")
    date_hierarchy = "created_at"
