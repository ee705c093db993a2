"""Shared enumerations and choices used across apps."""

from django.db import models


class Sport(models.TextChoices):
    BASKETBALL = "basketball", "Basketball"
    SOCCER = "soccer", "Soccer"
    NFL = "nfl", "NFL"


class MovementType(models.TextChoices):
    INBOUND = "in", "Inbound"
    OUTBOUND = "out", "Outbound"
    ADJUST = "adjust", "Adjust"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders."""

    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentProvider(models.TextChoices):
    """Payment providers an order can be settled through."""

    PAYPAL = "paypal", "PayPal"
    MERCADOPAGO = "mercadopago", "Mercado Pago"


class SettlementStatus(models.TextChoices):
    """Normalized payment outcome reported by a provider adapter."""

    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    PENDING = "pending", "Pending"
