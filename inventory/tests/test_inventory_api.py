import pytest
from cart.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from inventory.models import StockMovement
from inventory.services import reserve
from rest_framework.test import APIClient

SECRET = {"HTTP_X_ADMIN_SECRET": "test-admin-secret"}


@pytest.mark.django_db
def test_inventory_endpoints_require_operator():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    assert client.get("/api/v1/inventory/movements/").status_code == 403
    assert client.post("/api/v1/inventory/adjustments/", {}, format="json").status_code == 403


@pytest.mark.django_db
def test_adjust_with_secret_and_list_movements():
    product = ProductFactory(id="11", stock=1)
    client = APIClient()

    r = client.post(
        "/api/v1/inventory/adjustments/",
        {"product_id": "Card-011", "quantity": 4, "reason": "restock"},
        format="json",
        **SECRET,
    )
    assert r.status_code == 201, r.content
    assert r.json()["quantity"] == 4
    assert r.json()["reference"] == "operator:secret"
    product.refresh_from_db()
    assert product.stock == 5

    reserve(product_id="11", quantity=2, reference="order:7")
    listed = client.get("/api/v1/inventory/movements/?product_id=011&reference=order:7", **SECRET)
    assert listed.status_code == 200
    results = listed.json()["results"]
    assert len(results) == 1
    assert results[0]["movement_type"] == StockMovement.TYPE_OUTBOUND


@pytest.mark.django_db
def test_adjust_below_zero_is_400():
    ProductFactory(id="12", stock=1)
    staff = UserFactory(is_staff=True)
    client = APIClient()
    client.force_authenticate(user=staff)

    r = client.post("/api/v1/inventory/adjustments/", {"product_id": "12", "quantity": -2}, format="json")
    assert r.status_code == 400
    assert "detail" in r.json()


@pytest.mark.django_db
def test_adjust_zero_quantity_rejected():
    ProductFactory(id="13", stock=1)
    r = APIClient().post(
        "/api/v1/inventory/adjustments/", {"product_id": "13", "quantity": 0}, format="json", **SECRET
    )
    assert r.status_code == 400
    assert "quantity" in r.json()
