import factory
from cart.models import CartItem
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory


class UserFactory(DjangoModelFactory):
    class Meta:
        model = get_user_model()

    username = factory.Sequence(lambda n: f"collector{n}")
    email = factory.Sequence(lambda n: f"collector{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "pass")


class CartItemFactory(DjangoModelFactory):
    class Meta:
        model = CartItem

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory("catalog.tests.factories.ProductFactory")
    quantity = 1
