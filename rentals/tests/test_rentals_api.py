from datetime import date
from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, RentalProductFactory
from rentals.models import Rental
from rest_framework.test import APIClient
from users.tests.factories import StaffFactory, UserFactory

from .factories import book


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


def _payload(product, quantity=3, start="2024-06-01", end="2024-06-04", **extra):
    return {
        "equipment": [{"productId": product.id, "quantity": quantity}],
        "startDate": start,
        "endDate": end,
        **extra,
    }


@pytest.mark.django_db
def test_equipment_lists_only_rentable_in_stock_products():
    speaker = RentalProductFactory(name="EON 715", stock=4)
    RentalProductFactory(name="Sold out", stock=0)
    RentalProductFactory(name="Withdrawn", is_available=False)
    ProductFactory(name="Strat")

    resp = _client().get("/api/rentals/equipment/")
    assert resp.status_code == 200
    results = resp.data["data"]["results"]
    assert [p["name"] for p in results] == [speaker.name]
    assert results[0]["availableStock"] is None


@pytest.mark.django_db
def test_equipment_reports_available_stock_for_period():
    speaker = RentalProductFactory(stock=10)
    book(speaker, 8, date(2024, 6, 2), date(2024, 6, 5))

    resp = _client().get("/api/rentals/equipment/?startDate=2024-06-01&endDate=2024-06-04")
    assert resp.status_code == 200
    assert resp.data["data"]["results"][0]["availableStock"] == 2


@pytest.mark.django_db
def test_equipment_requires_both_dates():
    resp = _client().get("/api/rentals/equipment/?startDate=2024-06-01")
    assert resp.status_code == 400
    assert resp.data["success"] is False


@pytest.mark.django_db
def test_quote_endpoint():
    speaker = RentalProductFactory(stock=10, rental_price_daily=Decimal("20.00"))
    resp = _client().post("/api/rentals/quote/", _payload(speaker), format="json")

    assert resp.status_code == 200, resp.data
    quote = resp.data["data"]["quote"]
    assert quote["pricing"]["totalAmount"] == "180.00"
    assert quote["pricing"]["deposit"] == "54.00"
    assert quote["rentalPeriod"] == {"startDate": "2024-06-01", "endDate": "2024-06-04", "totalDays": 3}
    assert quote["equipmentItems"][0]["subtotal"] == "180.00"


@pytest.mark.django_db
def test_equipment_pages_by_twelve():
    RentalProductFactory.create_batch(13)

    data = _client().get("/api/rentals/equipment/").data["data"]
    assert len(data["results"]) == 12
    assert data["pagination"] == {"page": 1, "limit": 12, "total": 13, "pages": 2}

    assert len(_client().get("/api/rentals/equipment/?limit=5").data["data"]["results"]) == 5


@pytest.mark.django_db
def test_quote_accepts_timestamps_as_calendar_days():
    speaker = RentalProductFactory(stock=10, rental_price_daily=Decimal("20.00"))
    payload = _payload(speaker, start="2024-06-01T00:00:00Z", end="2024-06-04T18:30:00+02:00")

    resp = _client().post("/api/rentals/quote/", payload, format="json")

    assert resp.status_code == 200, resp.data
    quote = resp.data["data"]["quote"]
    assert quote["rentalPeriod"] == {"startDate": "2024-06-01", "endDate": "2024-06-04", "totalDays": 3}
    assert quote["pricing"]["subtotal"] == "180.00"


@pytest.mark.django_db
def test_quote_rejects_malformed_timestamp():
    speaker = RentalProductFactory()
    resp = _client().post("/api/rentals/quote/", _payload(speaker, start="2024-06-01Tlunch"), format="json")
    assert resp.status_code == 400
    assert "startDate" in resp.data["errors"]


@pytest.mark.django_db
def test_quote_endpoint_reports_unavailable_items():
    speaker = RentalProductFactory(stock=10)
    book(speaker, 8, date(2024, 6, 2), date(2024, 6, 5))

    resp = _client().post("/api/rentals/quote/", _payload(speaker), format="json")
    assert resp.status_code == 400
    assert resp.data["success"] is False
    assert resp.data["unavailableItems"][0]["available"] == 2


@pytest.mark.django_db
def test_quote_rejects_reversed_dates():
    speaker = RentalProductFactory()
    resp = _client().post("/api/rentals/quote/", _payload(speaker, start="2024-06-04", end="2024-06-01"), format="json")
    assert resp.status_code == 400
    assert resp.data["message"] == "Validation error"
    assert "endDate" in resp.data["errors"]


@pytest.mark.django_db
def test_create_requires_authentication():
    speaker = RentalProductFactory()
    resp = _client().post("/api/rentals/", _payload(speaker), format="json")
    assert resp.status_code == 401
    assert resp.data["success"] is False


@pytest.mark.django_db
def test_create_rental():
    user = UserFactory()
    speaker = RentalProductFactory(stock=10, rental_price_daily=Decimal("20.00"))
    payload = _payload(
        speaker,
        eventType="wedding",
        venue="Masia Can Roca",
        deliveryRequired=True,
        deliveryAddress={"street": "Carrer Major 1", "city": "Girona"},
        customerInfo={"phone": "+34600111222"},
    )

    resp = _client(user).post("/api/rentals/", payload, format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["message"] == "Rental request created"
    rental = resp.data["data"]["rental"]
    assert rental["status"] == "pending"
    assert rental["delivery_fee"] == "25.00"
    assert rental["total_amount"] == "205.00"
    assert rental["customer_phone"] == "+34600111222"
    assert rental["status_history"][0]["status"] == "pending"
    assert "internal_notes" not in rental


@pytest.mark.django_db
def test_create_rental_conflict():
    speaker = RentalProductFactory(stock=10)
    book(speaker, 8, date(2024, 6, 2), date(2024, 6, 5))

    resp = _client(UserFactory()).post("/api/rentals/", _payload(speaker), format="json")
    assert resp.status_code == 400
    assert resp.data["conflicts"][0]["productId"] == speaker.id


@pytest.mark.django_db
def test_list_own_rentals_with_status_filter():
    user = UserFactory()
    speaker = RentalProductFactory(stock=50)
    book(speaker, 1, date(2024, 6, 1), date(2024, 6, 2), user=user)
    book(speaker, 1, date(2024, 6, 1), date(2024, 6, 2), user=user, status=Rental.STATUS_CANCELLED)
    book(speaker, 1, date(2024, 6, 1), date(2024, 6, 2))

    client = _client(user)
    resp = client.get("/api/rentals/")
    assert resp.data["data"]["pagination"]["total"] == 2
    resp = client.get("/api/rentals/?status=cancelled")
    assert [r["status"] for r in resp.data["data"]["results"]] == ["cancelled"]


@pytest.mark.django_db
def test_detail_is_owner_or_staff_only():
    owner = UserFactory()
    rental = book(RentalProductFactory(), 1, date(2024, 6, 1), date(2024, 6, 2), user=owner)
    url = f"/api/rentals/{rental.id}/"

    assert _client(owner).get(url).status_code == 200
    assert _client(UserFactory()).get(url).status_code == 403
    staff_resp = _client(StaffFactory()).get(url)
    assert staff_resp.status_code == 200
    assert "internal_notes" in staff_resp.data["data"]["rental"]
    assert _client(owner).get("/api/rentals/999999/").status_code == 404


@pytest.mark.django_db
def test_extend_endpoint():
    owner = UserFactory()
    speaker = RentalProductFactory(stock=10, rental_price_daily=Decimal("20.00"))
    rental = book(speaker, 3, date(2024, 6, 1), date(2024, 6, 4), user=owner, status=Rental.STATUS_ACTIVE)
    rental.subtotal = rental.total_amount = Decimal("180.00")
    rental.save()

    resp = _client(owner).put(f"/api/rentals/{rental.id}/extend/", {"newEndDate": "2024-06-06"}, format="json")

    assert resp.status_code == 200, resp.data
    assert resp.data["data"]["additionalDays"] == 2
    assert resp.data["data"]["additionalCost"] == "120.00"
    assert resp.data["data"]["rental"]["total_amount"] == "300.00"
    assert resp.data["data"]["rental"]["end_date"] == "2024-06-06"


@pytest.mark.django_db
def test_extend_rejects_earlier_date():
    owner = UserFactory()
    rental = book(RentalProductFactory(), 1, date(2024, 6, 1), date(2024, 6, 4), user=owner)
    resp = _client(owner).put(f"/api/rentals/{rental.id}/extend/", {"newEndDate": "2024-06-03"}, format="json")
    assert resp.status_code == 400
    assert resp.data["success"] is False


@pytest.mark.django_db
def test_status_update_is_staff_only():
    owner = UserFactory()
    rental = book(RentalProductFactory(), 1, date(2024, 6, 1), date(2024, 6, 2), user=owner)
    url = f"/api/rentals/{rental.id}/status/"

    assert _client(owner).put(url, {"status": "active"}, format="json").status_code == 403

    resp = _client(StaffFactory()).put(url, {"status": "active", "note": "Picked up"}, format="json")
    assert resp.status_code == 200, resp.data
    data = resp.data["data"]["rental"]
    assert data["status"] == "active"
    assert data["actual_start_date"] is not None
    assert data["status_history"][-1]["note"] == "Picked up"


@pytest.mark.django_db
def test_status_update_rejects_disallowed_transition():
    rental = book(RentalProductFactory(), 1, date(2024, 6, 1), date(2024, 6, 2), status=Rental.STATUS_COMPLETED)
    resp = _client(StaffFactory()).put(f"/api/rentals/{rental.id}/status/", {"status": "active"}, format="json")
    assert resp.status_code == 400
    assert "completed" in resp.data["message"]


@pytest.mark.django_db
def test_admin_listing_filters():
    speaker = RentalProductFactory(stock=50)
    june = book(speaker, 1, date(2024, 6, 1), date(2024, 6, 4), event_name="Jazz Night")
    book(speaker, 1, date(2024, 8, 1), date(2024, 8, 4), status=Rental.STATUS_PENDING)

    staff = _client(StaffFactory())
    assert _client(UserFactory()).get("/api/rentals/admin/all/").status_code == 403

    resp = staff.get("/api/rentals/admin/all/")
    assert resp.data["data"]["pagination"]["total"] == 2

    resp = staff.get("/api/rentals/admin/all/?startDate=2024-06-03&endDate=2024-06-10")
    assert [r["id"] for r in resp.data["data"]["results"]] == [june.id]

    resp = staff.get("/api/rentals/admin/all/?search=jazz")
    assert [r["id"] for r in resp.data["data"]["results"]] == [june.id]

    resp = staff.get("/api/rentals/admin/all/?status=pending")
    assert resp.data["data"]["pagination"]["total"] == 1
