"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "player", "sport", "price_cents", "stock", "great_deal", "is_active")
    search_fields = ("id", "title", "player")
    list_filter = ("sport", "great_deal", "autograph", "is_active")
    # Stock changes go through inventory movements
    readonly_fields = ("stock", "created_at", "updated_at")
