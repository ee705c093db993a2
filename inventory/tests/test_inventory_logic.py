import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from inventory.models import StockMovement
from inventory.selectors import list_movements_for_reference, stock_for_product
from inventory.services import MovementError, adjust_stock, release, reserve


@pytest.mark.django_db
def test_reserve_decrements_and_records_movement():
    product = ProductFactory(stock=5)

    assert reserve(product_id=product.id, quantity=3, reference="order:1") is True
    product.refresh_from_db()
    assert product.stock == 2

    movement = StockMovement.objects.get(product=product)
    assert movement.movement_type == StockMovement.TYPE_OUTBOUND
    assert movement.quantity == -3
    assert movement.reference == "order:1"


@pytest.mark.django_db
def test_reserve_insufficient_stock_changes_nothing():
    product = ProductFactory(stock=2)

    assert reserve(product_id=product.id, quantity=3) is False
    product.refresh_from_db()
    assert product.stock == 2
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_reserve_exact_stock_reaches_zero():
    product = ProductFactory(stock=1)
    assert reserve(product_id=product.id, quantity=1) is True
    assert reserve(product_id=product.id, quantity=1) is False
    assert Product.objects.get(pk=product.id).stock == 0


@pytest.mark.django_db
def test_reserve_unknown_product_returns_false():
    assert reserve(product_id="does-not-exist", quantity=1) is False


@pytest.mark.django_db
@pytest.mark.parametrize("qty", [0, -1])
def test_reserve_rejects_non_positive_quantity(qty):
    product = ProductFactory(stock=5)
    with pytest.raises(MovementError):
        reserve(product_id=product.id, quantity=qty)


@pytest.mark.django_db
def test_release_restores_stock():
    product = ProductFactory(stock=4)
    reserve(product_id=product.id, quantity=4, reference="order:9")
    release(product_id=product.id, quantity=4, reference="order:9")

    product.refresh_from_db()
    assert product.stock == 4
    quantities = sorted(StockMovement.objects.filter(reference="order:9").values_list("quantity", flat=True))
    assert quantities == [-4, 4]


@pytest.mark.django_db
def test_release_unknown_product_raises():
    with pytest.raises(MovementError):
        release(product_id="nope", quantity=1)


@pytest.mark.django_db
def test_adjust_stock_signed_and_guarded():
    product = ProductFactory(stock=10)

    movement = adjust_stock(product_id=product.id, quantity=5, reason="restock")
    product.refresh_from_db()
    assert product.stock == 15
    assert movement.movement_type == StockMovement.TYPE_ADJUST

    adjust_stock(product_id=product.id, quantity=-15, reason="damaged")
    product.refresh_from_db()
    assert product.stock == 0

    with pytest.raises(MovementError):
        adjust_stock(product_id=product.id, quantity=-1)
    assert adjust_stock(product_id=product.id, quantity=0) is None


@pytest.mark.django_db
def test_selectors_report_stock_and_movement_trail():
    product = ProductFactory(stock=4)
    reserve(product_id=product.id, quantity=3, reference="order:9")
    release(product_id=product.id, quantity=3, reference="order:9")

    assert stock_for_product(product.id) == 4
    assert stock_for_product("does-not-exist") == 0
    trail = list_movements_for_reference("order:9")
    assert [(m["movement_type"], m["quantity"]) for m in trail] == [
        (StockMovement.TYPE_OUTBOUND, -3),
        (StockMovement.TYPE_INBOUND, 3),
    ]
