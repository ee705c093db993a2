from types import SimpleNamespace

import pytest
from cart.models import CartItem
from cart.tests.factories import CartItemFactory, UserFactory
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.choices import PaymentProvider, SettlementStatus
from django.core import mail
from inventory.models import StockMovement
from orders.models import Order
from orders.settlement import (
    CANCEL_INSUFFICIENT_STOCK,
    CANCEL_PAYMENT_REJECTED,
    apply_settlement,
    settle_payment_approved,
    settle_payment_failed,
)
from orders.tests.factories import OrderFactory, add_line


def _stock(pid):
    return Product.objects.get(pk=pid).stock


@pytest.mark.django_db
def test_approved_reserves_stock_marks_paid_and_clears_cart(django_capture_on_commit_callbacks):
    user = UserFactory()
    a = ProductFactory(id="1", stock=5)
    b = ProductFactory(id="2", stock=2)
    CartItemFactory(user=user, product=a, quantity=2)
    order = OrderFactory(user=user)
    add_line(order, a, 2)
    add_line(order, b, 2)

    with django_capture_on_commit_callbacks(execute=True):
        outcome = settle_payment_approved(
            order_id=order.id,
            provider=PaymentProvider.PAYPAL,
            references={"paypal_order_id": "PP-1", "paypal_capture_id": "CAP-1", "mp_payment_id": "ignored"},
        )

    assert outcome.applied is True
    order.refresh_from_db()
    assert order.status == Order.STATUS_PAID
    assert order.paid_at is not None
    assert order.payment_provider == PaymentProvider.PAYPAL
    assert order.paypal_capture_id == "CAP-1"
    assert order.mp_payment_id == ""
    assert _stock("1") == 3
    assert _stock("2") == 0
    assert not CartItem.objects.filter(user=user).exists()
    assert StockMovement.objects.filter(reference=f"order:{order.id}").count() == 2
    assert len(mail.outbox) == 1
    assert order.number in mail.outbox[0].subject


@pytest.mark.django_db
def test_duplicate_approval_is_a_no_op():
    product = ProductFactory(stock=5)
    order = OrderFactory()
    add_line(order, product, 2)

    first = settle_payment_approved(order_id=order.id, provider=PaymentProvider.PAYPAL)
    second = settle_payment_approved(order_id=order.id, provider=PaymentProvider.PAYPAL)

    assert first.applied is True
    assert second.applied is False
    assert second.status == Order.STATUS_PAID
    assert _stock(product.id) == 3


@pytest.mark.django_db
def test_stock_conflict_cancels_and_releases_partial_reservations():
    user = UserFactory()
    a = ProductFactory(id="1", stock=5)
    b = ProductFactory(id="2", stock=5)
    CartItemFactory(user=user, product=a, quantity=1)
    order = OrderFactory(user=user)
    add_line(order, a, 2)
    add_line(order, b, 3)
    Product.objects.filter(pk="2").update(stock=1)

    outcome = settle_payment_approved(
        order_id=order.id, provider=PaymentProvider.MERCADOPAGO, references={"mp_payment_id": "MP-9"}
    )

    assert outcome.applied is True
    order.refresh_from_db()
    assert order.status == Order.STATUS_CANCELLED
    assert order.cancel_reason == CANCEL_INSUFFICIENT_STOCK
    assert order.cancelled_at is not None
    assert order.mp_payment_id == "MP-9"
    assert _stock("1") == 5
    assert _stock("2") == 1
    assert CartItem.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_approval_after_cancellation_never_pays():
    product = ProductFactory(stock=5)
    order = OrderFactory()
    add_line(order, product, 1)

    settle_payment_failed(order_id=order.id, provider=PaymentProvider.PAYPAL)
    outcome = settle_payment_approved(order_id=order.id, provider=PaymentProvider.PAYPAL)

    assert outcome.applied is False
    assert outcome.status == Order.STATUS_CANCELLED
    assert _stock(product.id) == 5


@pytest.mark.django_db
def test_failed_cancels_pending_without_inventory():
    product = ProductFactory(stock=5)
    order = OrderFactory()
    add_line(order, product, 1)

    outcome = settle_payment_failed(
        order_id=order.id, provider=PaymentProvider.MERCADOPAGO, references={"mp_merchant_order_id": "MO-1"}
    )

    assert outcome.applied is True
    order.refresh_from_db()
    assert order.status == Order.STATUS_CANCELLED
    assert order.cancel_reason == CANCEL_PAYMENT_REJECTED
    assert order.mp_merchant_order_id == "MO-1"
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_refund_notice_on_paid_order_is_ignored():
    product = ProductFactory(stock=5)
    order = OrderFactory()
    add_line(order, product, 1)
    settle_payment_approved(order_id=order.id, provider=PaymentProvider.MERCADOPAGO)

    outcome = settle_payment_failed(order_id=order.id, provider=PaymentProvider.MERCADOPAGO, reason="payment_refunded")

    assert outcome.applied is False
    assert Order.objects.get(pk=order.pk).status == Order.STATUS_PAID
    assert _stock(product.id) == 4


@pytest.mark.django_db
def test_two_orders_compete_for_last_unit():
    product = ProductFactory(stock=1)
    first = OrderFactory()
    second = OrderFactory()
    add_line(first, product, 1)
    add_line(second, product, 1)

    settle_payment_approved(order_id=first.id, provider=PaymentProvider.PAYPAL)
    settle_payment_approved(order_id=second.id, provider=PaymentProvider.PAYPAL)

    assert Order.objects.get(pk=first.pk).status == Order.STATUS_PAID
    loser = Order.objects.get(pk=second.pk)
    assert loser.status == Order.STATUS_CANCELLED
    assert loser.cancel_reason == CANCEL_INSUFFICIENT_STOCK
    assert _stock(product.id) == 0


def _result(order, status, provider_status=""):
    return SimpleNamespace(
        order_id=order.id,
        provider=PaymentProvider.MERCADOPAGO,
        status=status,
        references={"mp_payment_id": "123"},
        provider_status=provider_status,
    )


@pytest.mark.django_db
def test_apply_settlement_dispatch():
    product = ProductFactory(stock=5)
    pending = OrderFactory()
    add_line(pending, product, 1)

    outcome = apply_settlement(_result(pending, SettlementStatus.PENDING, "in_process"))
    assert outcome.applied is False
    assert Order.objects.get(pk=pending.pk).status == Order.STATUS_PENDING

    outcome = apply_settlement(_result(pending, SettlementStatus.REJECTED, "Charged_Back"))
    assert outcome.status == Order.STATUS_CANCELLED
    assert Order.objects.get(pk=pending.pk).cancel_reason == "payment_charged_back"

    approved = OrderFactory()
    add_line(approved, product, 2)
    outcome = apply_settlement(_result(approved, SettlementStatus.APPROVED, "approved"))
    assert outcome.status == Order.STATUS_PAID
    assert Order.objects.get(pk=approved.pk).mp_payment_id == "123"
    assert _stock(product.id) == 3
