import pytest
from cart.models import CartItem
from cart.services import CartError, clear_cart, remove_item, set_item_quantity
from cart.tests.factories import CartItemFactory, UserFactory
from catalog.models import Product
from catalog.tests.factories import ProductFactory


@pytest.mark.django_db
def test_set_item_creates_then_updates_line():
    user = UserFactory()
    product = ProductFactory(stock=10)

    item = set_item_quantity(user=user, product_id=product.id, quantity=2)
    assert item.quantity == 2

    item = set_item_quantity(user=user, product_id=product.id, quantity=5)
    assert item.quantity == 5
    assert CartItem.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_set_item_clamps_to_stock_without_reserving():
    user = UserFactory()
    product = ProductFactory(stock=3)

    item = set_item_quantity(user=user, product_id=product.id, quantity=8)
    assert item.quantity == 3
    assert Product.objects.get(pk=product.id).stock == 3


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides,qty",
    [
        ({"stock": 0}, 1),
        ({"is_active": False}, 1),
        ({}, 0),
    ],
)
def test_set_item_rejections(overrides, qty):
    user = UserFactory()
    product = ProductFactory(**{"stock": 5, **overrides})
    with pytest.raises(CartError):
        set_item_quantity(user=user, product_id=product.id, quantity=qty)
    assert not CartItem.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_set_item_unknown_product():
    with pytest.raises(CartError):
        set_item_quantity(user=UserFactory(), product_id="nope", quantity=1)


@pytest.mark.django_db
def test_remove_and_clear_only_touch_own_cart():
    user = UserFactory()
    other = UserFactory()
    mine = CartItemFactory(user=user)
    CartItemFactory(user=user)
    CartItemFactory(user=other, product=mine.product)

    assert remove_item(user=user, product_id=mine.product_id) is True
    assert remove_item(user=user, product_id=mine.product_id) is False
    assert clear_cart(user=user) == 1
    assert CartItem.objects.filter(user=other).count() == 1
