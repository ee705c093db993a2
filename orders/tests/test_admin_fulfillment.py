import pytest
from cart.tests.factories import UserFactory
from django.core import mail
from orders.models import Order
from orders.services import OrderTransitionError, mark_delivered, mark_shipped
from orders.tests.factories import OrderFactory
from rest_framework.test import APIClient

SECRET = {"HTTP_X_ADMIN_SECRET": "test-admin-secret"}


@pytest.mark.django_db
def test_ship_requires_operator_credentials():
    order = OrderFactory(status=Order.STATUS_PAID)
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    r = client.post(f"/api/v1/admin/orders/{order.id}/ship/", {"tracking_code": "1Z"}, format="json")
    assert r.status_code == 403
    r = client.post(
        f"/api/v1/admin/orders/{order.id}/ship/",
        {"tracking_code": "1Z"},
        format="json",
        HTTP_X_ADMIN_SECRET="wrong",
    )
    assert r.status_code == 403
    assert Order.objects.get(pk=order.pk).status == Order.STATUS_PAID


@pytest.mark.django_db
def test_ship_then_deliver_with_secret(django_capture_on_commit_callbacks):
    order = OrderFactory(status=Order.STATUS_PAID)
    client = APIClient()

    with django_capture_on_commit_callbacks(execute=True):
        r = client.post(
            f"/api/v1/admin/orders/{order.id}/ship/",
            {"tracking_code": "1Z999", "carrier": "UPS", "tracking_url": "https://ups.example/1Z999"},
            format="json",
            **SECRET,
        )
    assert r.status_code == 200, r.content
    body = r.json()
    assert body["status"] == "shipped"
    assert body["tracking"]["code"] == "1Z999"
    assert body["tracking"]["carrier"] == "UPS"
    assert len(mail.outbox) == 1
    assert "1Z999" in mail.outbox[0].body

    r = client.post(f"/api/v1/admin/orders/{order.id}/deliver/", **SECRET)
    assert r.status_code == 200
    assert r.json()["status"] == "delivered"
    assert r.json()["tracking"]["delivered_at"] is not None


@pytest.mark.django_db
def test_ship_requires_tracking_code():
    order = OrderFactory(status=Order.STATUS_PAID)
    r = APIClient().post(f"/api/v1/admin/orders/{order.id}/ship/", {}, format="json", **SECRET)
    assert r.status_code == 400
    assert "tracking_code" in r.json()


@pytest.mark.django_db
@pytest.mark.parametrize("status", [Order.STATUS_PENDING, Order.STATUS_CANCELLED, Order.STATUS_DELIVERED])
def test_ship_refused_outside_paid_or_shipped(status):
    order = OrderFactory(status=status)
    r = APIClient().post(f"/api/v1/admin/orders/{order.id}/ship/", {"tracking_code": "X"}, format="json", **SECRET)
    assert r.status_code == 400
    assert Order.objects.get(pk=order.pk).status == status


@pytest.mark.django_db
def test_reship_updates_tracking():
    order = OrderFactory(status=Order.STATUS_PAID)
    mark_shipped(order_id=order.id, tracking_code="A1", carrier="UPS")
    order = mark_shipped(order_id=order.id, tracking_code="B2", carrier="DHL")
    assert order.status == Order.STATUS_SHIPPED
    assert (order.tracking_code, order.tracking_carrier) == ("B2", "DHL")


@pytest.mark.django_db
def test_deliver_transitions():
    paid = OrderFactory(status=Order.STATUS_PAID)
    assert mark_delivered(order_id=paid.id).status == Order.STATUS_DELIVERED
    # Re-delivering is a no-op
    assert mark_delivered(order_id=paid.id).status == Order.STATUS_DELIVERED

    for status in (Order.STATUS_PENDING, Order.STATUS_CANCELLED):
        order = OrderFactory(status=status)
        with pytest.raises(OrderTransitionError):
            mark_delivered(order_id=order.id)


@pytest.mark.django_db
def test_unknown_order_is_404():
    client = APIClient()
    assert client.post("/api/v1/admin/orders/999999/deliver/", **SECRET).status_code == 404
    r = client.post("/api/v1/admin/orders/999999/ship/", {"tracking_code": "X"}, format="json", **SECRET)
    assert r.status_code == 404


@pytest.mark.django_db
def test_admin_list_filters_by_status():
    paid = OrderFactory(status=Order.STATUS_PAID, paypal_order_id="PP-1")
    OrderFactory(status=Order.STATUS_PENDING)

    r = APIClient().get("/api/v1/admin/orders/?status=paid", **SECRET)
    assert r.status_code == 200
    results = r.json()["results"]
    assert [o["id"] for o in results] == [paid.id]
    assert results[0]["paypal_order_id"] == "PP-1"
    assert results[0]["user_id"] == paid.user_id
