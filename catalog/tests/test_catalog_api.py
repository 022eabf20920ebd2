from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, RentalProductFactory
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_products_list_envelope_and_pagination():
    for i in range(3):
        ProductFactory(name=f"Guitar {i}")
    ProductFactory(name="Hidden", is_available=False)

    client = APIClient()
    resp = client.get("/api/products/?limit=2")
    assert resp.status_code == 200
    assert resp.data["success"] is True
    pagination = resp.data["data"]["pagination"]
    assert pagination == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    names = [p["name"] for p in resp.data["data"]["results"]]
    assert "Hidden" not in names


@pytest.mark.django_db
def test_products_filters():
    ProductFactory(name="Strat", category="guitars", brand="Fender", price=Decimal("700.00"))
    ProductFactory(name="Nord Stage", category="keyboards", brand="Nord", price=Decimal("3500.00"), is_featured=True)
    ProductFactory(name="Cajon", category="percussion", brand="Meinl", price=Decimal("90.00"), is_on_sale=True)
    RentalProductFactory(name="EON 715", price=Decimal("699.00"))

    client = APIClient()

    def names(query):
        resp = client.get(f"/api/products/?{query}")
        assert resp.status_code == 200, resp.data
        return {p["name"] for p in resp.data["data"]["results"]}

    assert names("category=guitars") == {"Strat"}
    assert names("brand=fender") == {"Strat"}
    assert names("featured=true") == {"Nord Stage"}
    assert names("onSale=true") == {"Cajon"}
    assert names("forRental=true") == {"EON 715"}
    assert names("minPrice=100&maxPrice=1000") == {"Strat", "EON 715"}
    assert names("search=nord") == {"Nord Stage"}


@pytest.mark.django_db
def test_products_ordering_by_price_desc():
    ProductFactory(name="Cheap", price=Decimal("10.00"))
    ProductFactory(name="Pricey", price=Decimal("999.00"))
    resp = APIClient().get("/api/products/?ordering=-price")
    assert [p["name"] for p in resp.data["data"]["results"]] == ["Pricey", "Cheap"]


@pytest.mark.django_db
def test_invalid_category_filter_is_rejected():
    resp = APIClient().get("/api/products/?category=spaceships")
    assert resp.status_code == 400
    assert resp.data["success"] is False


@pytest.mark.django_db
def test_product_detail_by_slug():
    p = ProductFactory(name="Gibson Les Paul", is_on_sale=True, sale_percentage=20, price=Decimal("2000.00"))
    resp = APIClient().get(f"/api/products/{p.slug}/")
    assert resp.status_code == 200
    product = resp.data["data"]["product"]
    assert product["slug"] == p.slug
    assert product["discounted_price"] == "1600.00"
    assert "description" in product


@pytest.mark.django_db
def test_unavailable_product_detail_is_404():
    p = ProductFactory(is_available=False)
    resp = APIClient().get(f"/api/products/{p.slug}/")
    assert resp.status_code == 404
    assert resp.data["success"] is False


@pytest.mark.django_db
def test_categories_lists_all_choices_with_counts():
    ProductFactory(category="guitars")
    ProductFactory(category="guitars")
    resp = APIClient().get("/api/products/categories/")
    assert resp.status_code == 200
    cats = {c["value"]: c for c in resp.data["data"]["categories"]}
    assert len(cats) == 11
    assert cats["guitars"]["count"] == 2
    assert cats["lighting"]["count"] == 0
