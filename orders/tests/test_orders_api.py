from decimal import Decimal

import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from orders.models import Order
from rest_framework.test import APIClient
from users.tests.factories import StaffFactory, UserFactory

from .factories import OrderFactory


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


def _payload(product, quantity=1, **extra):
    return {
        "items": [{"productId": product.id, "quantity": quantity}],
        "paymentMethod": "card",
        "shippingAddress": {"street": "Carrer Major 1", "city": "Girona", "postalCode": "17001"},
        **extra,
    }


@pytest.mark.django_db
def test_place_order():
    user = UserFactory()
    product = ProductFactory(price=Decimal("20.00"), stock=5)

    resp = _client(user).post("/api/orders/", _payload(product, 2), format="json")

    assert resp.status_code == 201, resp.data
    order = resp.data["data"]["order"]
    assert order["status"] == "pending"
    assert order["subtotal"] == "40.00"
    assert order["tax_amount"] == "8.40"
    assert order["shipping_cost"] == "5.95"
    assert order["total_amount"] == "54.35"
    assert order["shipping_city"] == "Girona"
    assert Product.objects.get(pk=product.pk).stock == 3


@pytest.mark.django_db
def test_place_order_requires_auth_and_address():
    product = ProductFactory()
    assert _client().post("/api/orders/", _payload(product), format="json").status_code == 401

    payload = _payload(product)
    del payload["shippingAddress"]
    resp = _client(UserFactory()).post("/api/orders/", payload, format="json")
    assert resp.status_code == 400
    assert "shippingAddress" in resp.data["errors"]


@pytest.mark.django_db
def test_place_order_out_of_stock():
    product = ProductFactory(stock=1)
    resp = _client(UserFactory()).post("/api/orders/", _payload(product, 3), format="json")
    assert resp.status_code == 400
    assert resp.data["success"] is False
    assert resp.data["unavailableItems"][0]["requested"] == 3


@pytest.mark.django_db
def test_place_order_is_idempotent_with_key():
    user = UserFactory()
    product = ProductFactory(stock=5)
    client = _client(user)

    first = client.post("/api/orders/", _payload(product), format="json", HTTP_IDEMPOTENCY_KEY="abc-1")
    second = client.post("/api/orders/", _payload(product), format="json", HTTP_IDEMPOTENCY_KEY="abc-1")

    assert first.status_code == second.status_code == 201
    assert second.json() == first.json()
    assert Order.objects.count() == 1
    assert Product.objects.get(pk=product.pk).stock == 4

    reused = client.post("/api/orders/", _payload(product, 2), format="json", HTTP_IDEMPOTENCY_KEY="abc-1")
    assert reused.status_code == 409
    assert reused.data["success"] is False


@pytest.mark.django_db
def test_list_and_detail_are_scoped_to_owner():
    user = UserFactory()
    mine = OrderFactory(user=user)
    OrderFactory(user=user, status=Order.STATUS_CANCELLED)
    other = OrderFactory()

    client = _client(user)
    resp = client.get("/api/orders/")
    assert resp.data["data"]["pagination"]["total"] == 2
    resp = client.get("/api/orders/?status=cancelled")
    assert [o["status"] for o in resp.data["data"]["results"]] == ["cancelled"]

    assert client.get(f"/api/orders/{mine.id}/").data["data"]["order"]["id"] == mine.id
    assert client.get(f"/api/orders/{other.id}/").status_code == 403
    assert _client(StaffFactory()).get(f"/api/orders/{other.id}/").status_code == 200
    assert client.get("/api/orders/999999/").status_code == 404


@pytest.mark.django_db
def test_cancel_endpoint():
    user = UserFactory()
    product = ProductFactory(stock=2)
    client = _client(user)
    order_id = client.post("/api/orders/", _payload(product, 2), format="json").data["data"]["order"]["id"]

    resp = client.put(f"/api/orders/{order_id}/cancel/", {"cancelReason": "Duplicate"}, format="json")

    assert resp.status_code == 200, resp.data
    assert resp.data["data"]["order"]["status"] == "cancelled"
    assert resp.data["data"]["order"]["cancel_reason"] == "Duplicate"
    assert Product.objects.get(pk=product.pk).stock == 2


@pytest.mark.django_db
def test_cancel_rejected_once_shipped_or_not_owner():
    user = UserFactory()
    shipped = OrderFactory(user=user, status=Order.STATUS_SHIPPED)
    resp = _client(user).put(f"/api/orders/{shipped.id}/cancel/", {}, format="json")
    assert resp.status_code == 400

    pending = OrderFactory()
    assert _client(user).put(f"/api/orders/{pending.id}/cancel/", {}, format="json").status_code == 403


@pytest.mark.django_db
def test_pay_endpoint():
    user = UserFactory()
    order = OrderFactory(user=user)
    resp = _client(user).post(f"/api/orders/{order.id}/pay/", format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["order"]["payment_status"] == "paid"
    assert resp.data["data"]["order"]["status"] == "confirmed"


@pytest.mark.django_db
def test_status_endpoint_is_staff_only():
    order = OrderFactory(status=Order.STATUS_CONFIRMED)
    url = f"/api/orders/{order.id}/status/"

    assert _client(order.user).put(url, {"status": "processing"}, format="json").status_code == 403

    staff = _client(StaffFactory())
    resp = staff.put(url, {"status": "shipped", "trackingNumber": "TRK9"}, format="json")
    assert resp.status_code == 200, resp.data
    assert resp.data["data"]["order"]["tracking_number"] == "TRK9"

    resp = staff.put(url, {"status": "pending"}, format="json")
    assert resp.status_code == 400
    assert "shipped" in resp.data["message"]


@pytest.mark.django_db
def test_admin_listing_with_stats():
    OrderFactory(status=Order.STATUS_PENDING, total_amount=Decimal("10.00"), shipping_last_name="Puig")
    OrderFactory(status=Order.STATUS_PENDING, total_amount=Decimal("5.00"))
    OrderFactory(status=Order.STATUS_DELIVERED, total_amount=Decimal("100.00"), tracking_number="TRK777")

    assert _client(UserFactory()).get("/api/orders/admin/all/").status_code == 403

    staff = _client(StaffFactory())
    resp = staff.get("/api/orders/admin/all/")
    assert resp.status_code == 200
    data = resp.data["data"]
    assert data["pagination"]["total"] == 3
    assert data["stats"]["pending"] == {"count": 2, "revenue": "15.00"}
    assert data["stats"]["delivered"] == {"count": 1, "revenue": "100.00"}

    assert staff.get("/api/orders/admin/all/?status=delivered").data["data"]["pagination"]["total"] == 1
    assert staff.get("/api/orders/admin/all/?search=trk777").data["data"]["pagination"]["total"] == 1
    assert staff.get("/api/orders/admin/all/?search=puig").data["data"]["pagination"]["total"] == 1
