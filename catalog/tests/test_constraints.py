import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from django.db import IntegrityError, transaction


@pytest.mark.django_db
def test_stock_cannot_go_negative_at_db_level():
    product = ProductFactory(stock=1)
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Product.objects.filter(pk=product.pk).update(stock=-1)


@pytest.mark.django_db
def test_in_stock_property():
    assert ProductFactory(stock=0).in_stock is False
    assert ProductFactory(stock=1).in_stock is True
