import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_register_creates_user_and_returns_tokens():
    client = APIClient()
    resp = client.post(
        "/api/account/register/",
        {
            "email": "  Marta@Example.com ",
            "password": "StrongPass123!",
            "first_name": "Marta",
            "last_name": "Gil",
            "phone": "+34600111222",
        },
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["success"] is True
    assert resp.data["data"]["user"]["email"] == "marta@example.com"
    assert "access" in resp.data["data"]
    user = get_user_model().objects.get(email="marta@example.com")
    assert user.check_password("StrongPass123!")
    assert user.phone == "+34600111222"


@pytest.mark.django_db
def test_register_rejects_duplicate_email_and_weak_password():
    UserFactory(email="taken@example.com")
    client = APIClient()
    resp = client.post(
        "/api/account/register/",
        {"email": "taken@example.com", "password": "123", "first_name": "A", "last_name": "B"},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.data["success"] is False
    assert "email" in resp.data["errors"]
    assert "password" in resp.data["errors"]


@pytest.mark.django_db
def test_profile_patch_updates_editable_fields_only():
    user = UserFactory(first_name="Old")
    client = APIClient()
    client.force_authenticate(user=user)
    resp = client.patch(
        "/api/account/profile/",
        {"first_name": "New", "email": "hijack@example.com", "is_staff": True},
        format="json",
    )
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.first_name == "New"
    assert user.email != "hijack@example.com"
    assert user.is_staff is False


@pytest.mark.django_db
def test_user_save_normalizes_email():
    user = UserFactory(email="  MiXeD@Example.COM ")
    user.refresh_from_db()
    assert user.email == "mixed@example.com"
