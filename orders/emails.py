"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def _order_url(order) -> str:
    frontend = getattr(settings, "FRONTEND_URL", "") or ""
    if not frontend:
        return ""
    return f"{frontend.rstrip('/')}/orders?orderId={order.id}"


def _recipient(order):
    return order.email or getattr(order.user, "email", None)


def _format_amount(cents: int, currency: str) -> str:
    return f"{int(cents) / 100:.2f} {currency}"


def send_order_paid_email(order) -> None:
    """Send a payment confirmation email to the order's email address.

    Silently no-ops if no email is present.
    """
    to_email = _recipient(order)
    if not to_email:
        return

    lines = "".join(
        f"- {item.title} x{item.quantity}: {_format_amount(item.line_total_cents, order.currency)}\n"
        for item in order.items.all()
    )
    body = (
        "Thank you for your purchase!\n\n"
        f"Order: {order.number or order.id}\n"
        f"{lines}"
        f"Shipping: {_format_amount(order.shipping_cents, order.currency)}\n"
        f"Total: {_format_amount(order.total_cents, order.currency)}\n\n"
        f"You can view your order here: {_order_url(order)}\n"
    )

    send_mail(
        f"Your order {order.number or order.id} is confirmed",
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )


def send_order_shipped_email(order) -> None:
    """Let the customer know their cards are on the way."""
    to_email = _recipient(order)
    if not to_email:
        return

    tracking = order.tracking_code
    if order.tracking_carrier:
        tracking = f"{order.tracking_carrier} {tracking}"
    body = (
        f"Your order {order.number or order.id} has shipped.\n\n"
        f"Tracking: {tracking}\n"
        + (f"Track it here: {order.tracking_url}\n" if order.tracking_url else "")
        + f"\nOrder details: {_order_url(order)}\n"
    )
    send_mail(
        f"Your order {order.number or order.id} has shipped",
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )
