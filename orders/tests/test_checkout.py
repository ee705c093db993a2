from unittest import mock

import pytest
from cart.models import CartItem
from cart.tests.factories import CartItemFactory, UserFactory
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from orders.models import Order
from orders.services import CheckoutError, create_order_from_cart, normalize_shipping, shipping_fee_cents

SHIPPING = {
    "name": "Jane Doe",
    "phone": "+15551234567",
    "address1": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "country": "US",
}


@pytest.mark.django_db
def test_checkout_creates_pending_snapshot_without_touching_stock_or_cart():
    user = UserFactory(email="buyer@example.com")
    a = ProductFactory(id="1", price_cents=2000, stock=5, title="Card A")
    b = ProductFactory(id="2", price_cents=500, stock=1, title="Card B")
    CartItemFactory(user=user, product=a, quantity=2)
    CartItemFactory(user=user, product=b, quantity=1)

    order = create_order_from_cart(user=user, shipping=SHIPPING)

    assert order.status == Order.STATUS_PENDING
    assert order.number == f"ORD-{order.id:06d}"
    assert order.email == "buyer@example.com"
    assert order.subtotal_cents == 4500
    assert order.shipping_cents == 3000
    assert order.total_cents == 7500
    assert order.ship_country == "US"
    lines = {i.product_id: (i.title, i.unit_price_cents, i.quantity) for i in order.items.all()}
    assert lines == {"1": ("Card A", 2000, 2), "2": ("Card B", 500, 1)}

    assert Product.objects.get(pk="1").stock == 5
    assert Product.objects.get(pk="2").stock == 1
    assert CartItem.objects.filter(user=user).count() == 2


@pytest.mark.django_db
def test_order_prices_are_frozen_at_checkout():
    user = UserFactory()
    product = ProductFactory(price_cents=1000, stock=3)
    CartItemFactory(user=user, product=product, quantity=1)
    order = create_order_from_cart(user=user, shipping=SHIPPING)

    Product.objects.filter(pk=product.pk).update(price_cents=9999, title="Renamed")

    item = Order.objects.get(pk=order.pk).items.get()
    assert item.unit_price_cents == 1000
    assert item.title != "Renamed"


@pytest.mark.django_db
def test_empty_cart_rejected():
    with pytest.raises(CheckoutError) as exc:
        create_order_from_cart(user=UserFactory(), shipping=SHIPPING)
    assert exc.value.code == CheckoutError.EMPTY_CART
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_insufficient_stock_names_product_and_writes_nothing():
    user = UserFactory()
    ok = ProductFactory(id="1", stock=5)
    short = ProductFactory(id="2", stock=5, title="Short")
    CartItemFactory(user=user, product=ok, quantity=1)
    CartItemFactory(user=user, product=short, quantity=3)
    Product.objects.filter(pk="2").update(stock=2)

    with pytest.raises(CheckoutError) as exc:
        create_order_from_cart(user=user, shipping=SHIPPING)
    assert exc.value.code == CheckoutError.INSUFFICIENT_STOCK
    assert exc.value.product_id == "2"
    assert exc.value.as_dict()["product_id"] == "2"
    assert not Order.objects.exists()


@pytest.mark.django_db
def test_missing_product_reported():
    user = UserFactory()
    CartItemFactory(user=user, product=ProductFactory(id="3"), quantity=1)

    with mock.patch("orders.services.get_products_by_ids", return_value=({}, ["3"])):
        with pytest.raises(CheckoutError) as exc:
            create_order_from_cart(user=user, shipping=SHIPPING)
    assert exc.value.code == CheckoutError.PRODUCT_NOT_FOUND
    assert exc.value.product_id == "3"


@pytest.mark.django_db
def test_product_deactivated_after_carting_is_not_found():
    user = UserFactory()
    product = ProductFactory(id="4", stock=5)
    CartItemFactory(user=user, product=product, quantity=1)
    Product.objects.filter(pk="4").update(is_active=False)

    with pytest.raises(CheckoutError) as exc:
        create_order_from_cart(user=user, shipping=SHIPPING)
    assert exc.value.code == CheckoutError.PRODUCT_NOT_FOUND
    assert exc.value.product_id == "4"
    assert not Order.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_default_country_and_fee():
    user = UserFactory()
    CartItemFactory(user=user, product=ProductFactory(price_cents=100), quantity=1)

    order = create_order_from_cart(user=user, shipping={k: v for k, v in SHIPPING.items() if k != "country"})
    assert order.ship_country == "AR"
    assert order.shipping_cents == 1200
    assert order.total_cents == 1300


@pytest.mark.parametrize(
    "country,fee",
    [("AR", 1200), ("us", 3000), ("ES", 5000), ("IT", 5000), ("DE", 5000), ("FR", 5000)],
)
def test_normalize_shipping_countries(country, fee):
    data = normalize_shipping({**SHIPPING, "country": country})
    assert data["country"] == country.upper()
    assert shipping_fee_cents(data["country"]) == fee


def test_country_validated_before_other_fields():
    with pytest.raises(CheckoutError) as exc:
        normalize_shipping({"country": "BR"})
    assert exc.value.code == CheckoutError.INVALID_SHIPPING
    assert exc.value.field == "country"


def test_first_missing_field_is_reported():
    with pytest.raises(CheckoutError) as exc:
        normalize_shipping({**SHIPPING, "name": "  ", "city": ""})
    assert exc.value.field == "name"


def test_address2_optional_and_values_trimmed():
    data = normalize_shipping({**SHIPPING, "name": "  Jane  "})
    assert data["name"] == "Jane"
    assert data["address2"] == ""
