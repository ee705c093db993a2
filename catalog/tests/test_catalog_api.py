import pytest
from catalog.tests.factories import ProductFactory
from common.choices import Sport
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_list_returns_only_active_cards():
    ProductFactory(id="1", title="Visible")
    ProductFactory(id="2", title="Hidden", is_active=False)

    r = APIClient().get("/api/v1/catalog/products/")
    assert r.status_code == 200
    ids = [p["id"] for p in r.json()["results"]]
    assert ids == ["1"]


@pytest.mark.django_db
def test_filter_by_sport_and_stock():
    ProductFactory(id="10", sport=Sport.SOCCER, stock=3)
    ProductFactory(id="11", sport=Sport.SOCCER, stock=0)
    ProductFactory(id="12", sport=Sport.NFL, stock=5)
    client = APIClient()

    soccer = {p["id"] for p in client.get("/api/v1/catalog/products/?sport=soccer").json()["results"]}
    assert soccer == {"10", "11"}

    in_stock = {p["id"] for p in client.get("/api/v1/catalog/products/?sport=soccer&in_stock=true").json()["results"]}
    assert in_stock == {"10"}


@pytest.mark.django_db
def test_search_with_q_matches_player():
    ProductFactory(id="20", title="Rookie Card", player="Kobe Bryant")
    ProductFactory(id="21", title="Base Card", player="Someone Else")

    r = APIClient().get("/api/v1/catalog/products/?q=kobe")
    assert [p["id"] for p in r.json()["results"]] == ["20"]


@pytest.mark.django_db
def test_ordering_by_price():
    ProductFactory(id="30", price_cents=500)
    ProductFactory(id="31", price_cents=100)

    r = APIClient().get("/api/v1/catalog/products/?ordering=price_cents")
    assert [p["id"] for p in r.json()["results"]] == ["31", "30"]


@pytest.mark.django_db
def test_detail_accepts_any_id_spelling():
    ProductFactory(id="11", title="Card eleven", stock=2)
    client = APIClient()

    for spelling in ("11", "011", "Card-011"):
        r = client.get(f"/api/v1/catalog/products/{spelling}/")
        assert r.status_code == 200, spelling
        body = r.json()
        assert body["id"] == "11"
        assert body["stock"] == 2
        assert body["in_stock"] is True


@pytest.mark.django_db
def test_detail_missing_or_inactive_is_404():
    ProductFactory(id="40", is_active=False)
    client = APIClient()
    assert client.get("/api/v1/catalog/products/40/").status_code == 404
    assert client.get("/api/v1/catalog/products/999/").status_code == 404
