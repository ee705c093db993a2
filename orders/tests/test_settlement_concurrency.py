import threading
from typing import List

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.choices import PaymentProvider
from django.db import close_old_connections, connection
from orders.models import Order
from orders.settlement import settle_payment_approved
from orders.tests.factories import OrderFactory, add_line


def _settle_worker(barrier: threading.Barrier, order_id: int, outcomes: List[bool], errors: List[Exception]):
    # Ensure this thread uses its own DB connection
    close_old_connections()
    barrier.wait()
    try:
        outcomes.append(settle_payment_approved(order_id=order_id, provider=PaymentProvider.PAYPAL).applied)
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        connection.close()


@pytest.mark.django_db(transaction=True)
def test_threaded_duplicate_notifications_settle_once():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=3)
    order = OrderFactory()
    add_line(order, product, 2)

    barrier = threading.Barrier(3)
    outcomes: List[bool] = []
    errors: List[Exception] = []
    threads = [threading.Thread(target=_settle_worker, args=(barrier, order.id, outcomes, errors)) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert sorted(outcomes) == [False, False, True]
    assert Order.objects.get(pk=order.pk).status == Order.STATUS_PAID
    assert Product.objects.get(pk=product.pk).stock == 1


@pytest.mark.django_db(transaction=True)
def test_threaded_orders_for_last_unit_one_wins():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    product = ProductFactory(stock=1)
    orders = [OrderFactory() for _ in range(3)]
    for order in orders:
        add_line(order, product, 1)

    barrier = threading.Barrier(len(orders))
    outcomes: List[bool] = []
    errors: List[Exception] = []
    threads = [threading.Thread(target=_settle_worker, args=(barrier, o.id, outcomes, errors)) for o in orders]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    statuses = sorted(Order.objects.filter(pk__in=[o.pk for o in orders]).values_list("status", flat=True))
    assert statuses == [Order.STATUS_CANCELLED, Order.STATUS_CANCELLED, Order.STATUS_PAID]
    assert Product.objects.get(pk=product.pk).stock == 0
