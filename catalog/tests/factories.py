from decimal import Decimal

import factory
from catalog.models import Product
from common.choices import ProductCategory
from factory import Faker
from factory.django import DjangoModelFactory


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    name = factory.Sequence(lambda n: f"Instrument {n}")
    slug = factory.LazyAttribute(lambda o: "-".join(o.name.lower().split()))
    description = Faker("paragraph")
    category = ProductCategory.GUITARS
    brand = "Fender"
    model = Faker("bothify", text="MDL-###")
    price = Decimal("100.00")
    stock = 10
    is_available = True


class RentalProductFactory(ProductFactory):
    name = factory.Sequence(lambda n: f"PA Speaker {n}")
    category = ProductCategory.SOUND
    brand = "JBL"
    is_for_rental = True
    rental_price_daily = Decimal("20.00")
