from datetime import date

import pytest
from catalog.tests.factories import ProductFactory, RentalProductFactory
from rentals.models import Rental
from rentals.selectors import available_stock, intervals_overlap, reserved_quantity, resolve_availability

from .factories import RentalItemFactory, book

D = date


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ((D(2024, 6, 1), D(2024, 6, 4)), (D(2024, 6, 2), D(2024, 6, 5)), True),
        ((D(2024, 6, 1), D(2024, 6, 4)), (D(2024, 6, 4), D(2024, 6, 8)), True),
        ((D(2024, 6, 1), D(2024, 6, 4)), (D(2024, 6, 5), D(2024, 6, 8)), False),
        ((D(2024, 6, 1), D(2024, 6, 30)), (D(2024, 6, 10), D(2024, 6, 12)), True),
    ],
)
def test_overlap_is_symmetric(a, b, expected):
    assert intervals_overlap(*a, *b) is expected
    assert intervals_overlap(*b, *a) is expected


def test_touching_boundary_days_overlap():
    assert intervals_overlap(D(2024, 6, 1), D(2024, 6, 4), D(2024, 6, 4), D(2024, 6, 6))
    assert not intervals_overlap(D(2024, 6, 1), D(2024, 6, 3), D(2024, 6, 4), D(2024, 6, 6))


@pytest.mark.django_db
def test_only_reserving_statuses_count():
    product = RentalProductFactory(stock=10)
    start, end = D(2024, 6, 1), D(2024, 6, 4)
    for status, qty in [
        (Rental.STATUS_CONFIRMED, 1),
        (Rental.STATUS_PREPARING, 1),
        (Rental.STATUS_READY, 1),
        (Rental.STATUS_ACTIVE, 1),
        (Rental.STATUS_PENDING, 5),
        (Rental.STATUS_CANCELLED, 5),
        (Rental.STATUS_COMPLETED, 5),
        (Rental.STATUS_OVERDUE, 5),
        (Rental.STATUS_RETURNING, 5),
    ]:
        book(product, qty, start, end, status=status)

    assert reserved_quantity(product.id, start, end) == 4
    assert available_stock(product, start, end) == 6


@pytest.mark.django_db
def test_lines_of_same_product_in_one_rental_are_summed():
    product = RentalProductFactory(stock=10)
    rental = book(product, 2, D(2024, 6, 1), D(2024, 6, 4))
    RentalItemFactory(rental=rental, product=product, quantity=3)
    assert reserved_quantity(product.id, D(2024, 6, 2), D(2024, 6, 3)) == 5


@pytest.mark.django_db
def test_exclude_rental_removes_its_own_units():
    product = RentalProductFactory(stock=4)
    rental = book(product, 3, D(2024, 6, 1), D(2024, 6, 4))
    assert available_stock(product, D(2024, 6, 1), D(2024, 6, 4)) == 1
    assert available_stock(product, D(2024, 6, 1), D(2024, 6, 4), exclude_rental_id=rental.id) == 4


@pytest.mark.django_db
def test_available_never_exceeds_stock_and_may_go_negative():
    product = RentalProductFactory(stock=5)
    assert available_stock(product, D(2024, 6, 1), D(2024, 6, 4)) == 5

    book(product, 4, D(2024, 6, 1), D(2024, 6, 4))
    book(product, 4, D(2024, 6, 3), D(2024, 6, 6))
    assert available_stock(product, D(2024, 6, 1), D(2024, 6, 6)) == -3


@pytest.mark.django_db
def test_confirmed_reservation_leaves_two_units():
    product = RentalProductFactory(stock=10)
    book(product, 8, D(2024, 6, 2), D(2024, 6, 5))

    result = resolve_availability(product.id, 3, D(2024, 6, 1), D(2024, 6, 4))
    assert result.ok is False
    assert result.available == 2
    assert result.as_dict() == {
        "productId": product.id,
        "productName": product.name,
        "requested": 3,
        "available": 2,
        "reason": "Insufficient stock for the requested dates",
    }


@pytest.mark.django_db
def test_missing_and_non_rental_products_are_unavailable():
    missing = resolve_availability(999999, 1, D(2024, 6, 1), D(2024, 6, 2))
    assert missing.ok is False
    assert missing.reason == "Product not found"
    assert missing.as_dict()["productName"] is None

    plain = ProductFactory(is_for_rental=False)
    result = resolve_availability(plain.id, 1, D(2024, 6, 1), D(2024, 6, 2))
    assert result.ok is False
    assert result.reason == "Product is not available for rental"


@pytest.mark.django_db
def test_sufficient_stock_is_ok():
    product = RentalProductFactory(stock=3)
    result = resolve_availability(product.id, 3, D(2024, 6, 1), D(2024, 6, 2))
    assert result.ok is True
    assert result.available == 3
    assert result.reason == ""
