from decimal import Decimal

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from django.db import IntegrityError


@pytest.mark.django_db
def test_stock_cannot_go_negative():
    with pytest.raises(IntegrityError):
        ProductFactory(stock=-1)


@pytest.mark.django_db
def test_slug_is_derived_and_deduplicated():
    a = Product.objects.create(name="Shure SM58", category="microphones", price=Decimal("99.00"))
    b = Product.objects.create(name="Shure SM58", category="microphones", price=Decimal("99.00"))
    assert a.slug == "shure-sm58"
    assert b.slug == "shure-sm58-2"


def test_discounted_price_and_stock_check():
    p = Product(price=Decimal("19.99"), is_on_sale=True, sale_percentage=15, stock=2)
    assert p.discounted_price == Decimal("16.99")
    assert Product(price=Decimal("50.00"), sale_percentage=15).discounted_price == Decimal("50.00")
    assert p.is_in_stock(2)
    assert not p.is_in_stock(3)
    assert Product(price=Decimal("1.00")).daily_rate == Decimal("0.00")
