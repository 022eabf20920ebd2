import pytest
from contact.models import ContactMessage
from rest_framework.test import APIClient
from users.tests.factories import StaffFactory, UserFactory

from .factories import ContactMessageFactory


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


def _form(**overrides):
    data = {
        "firstName": "Laia",
        "lastName": "Font",
        "email": "Laia@Example.com",
        "subject": "Broken pedal",
        "message": "My sustain pedal stopped working after two weeks.",
        "category": "warranty",
    }
    data.update(overrides)
    return data


@pytest.mark.django_db
def test_send_contact_message():
    resp = _client().post("/api/contact/", _form(), format="json", HTTP_USER_AGENT="Mozilla/5.0")

    assert resp.status_code == 201, resp.data
    assert resp.data["success"] is True
    assert resp.data["data"]["ticketNumber"].startswith("TCK")
    assert resp.data["data"]["estimatedResponse"]
    contact = ContactMessage.objects.get()
    assert contact.email == "laia@example.com"
    assert contact.priority == "high"
    assert contact.user_agent == "Mozilla/5.0"


@pytest.mark.django_db
def test_send_contact_message_validation():
    resp = _client().post("/api/contact/", _form(category="gossip", phone="abc"), format="json")
    assert resp.status_code == 400
    assert set(resp.data["errors"]) == {"category", "phone"}


@pytest.mark.django_db
def test_contact_message_linked_to_order_must_exist():
    resp = _client().post("/api/contact/", _form(relatedOrder=424242), format="json")
    assert resp.status_code == 400
    assert "relatedOrder" in resp.data["errors"]


@pytest.mark.django_db
def test_categories():
    resp = _client().get("/api/contact/categories/")
    assert resp.status_code == 200
    categories = resp.data["data"]["categories"]
    assert len(categories) == 12
    assert categories[5]["value"] == "technical-support"
    assert all(c["description"] for c in categories)


@pytest.mark.django_db
def test_admin_inbox_hides_spam_and_sorts_by_priority():
    low = ContactMessageFactory(priority="low")
    urgent = ContactMessageFactory(priority="urgent")
    spam = ContactMessageFactory(is_spam=True, spam_score=100)

    assert _client(UserFactory()).get("/api/contact/admin/all/").status_code == 403

    staff = _client(StaffFactory())
    resp = staff.get("/api/contact/admin/all/")
    assert resp.status_code == 200
    data = resp.data["data"]
    assert [c["id"] for c in data["results"]] == [urgent.id, low.id]
    assert data["stats"]["byStatus"] == {"new": 2}

    resp = staff.get("/api/contact/admin/all/?includeSpam=true")
    assert spam.id in [c["id"] for c in resp.data["data"]["results"]]


@pytest.mark.django_db
def test_staff_workflow(mailoutbox, django_capture_on_commit_callbacks):
    contact = ContactMessageFactory()
    staff_user = StaffFactory()
    staff = _client(staff_user)

    resp = staff.put(f"/api/contact/{contact.id}/assign/", {}, format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["contact"]["status"] == "in-progress"
    assert resp.data["data"]["contact"]["assigned_to"] == staff_user.id

    with django_capture_on_commit_callbacks(execute=True):
        resp = staff.put(f"/api/contact/{contact.id}/reply/", {"message": "It ships with a cover."}, format="json")
    assert resp.status_code == 200
    assert resp.data["data"]["contact"]["status"] == "replied"
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == [contact.email]
    assert contact.ticket_number in mailoutbox[0].subject

    resp = staff.put(f"/api/contact/{contact.id}/resolve/", {"resolution": "Answered"}, format="json")
    assert resp.data["data"]["contact"]["status"] == "resolved"
    assert resp.data["data"]["contact"]["resolved_at"] is not None

    resp = staff.put(f"/api/contact/{contact.id}/close/", format="json")
    assert resp.data["data"]["contact"]["status"] == "closed"


@pytest.mark.django_db
def test_assign_to_another_staff_member():
    contact = ContactMessageFactory()
    colleague = StaffFactory()
    resp = _client(StaffFactory()).put(
        f"/api/contact/{contact.id}/assign/", {"assignedTo": colleague.id}, format="json"
    )
    assert resp.data["data"]["contact"]["assigned_to"] == colleague.id

    customer = UserFactory()
    resp = _client(StaffFactory()).put(f"/api/contact/{contact.id}/assign/", {"assignedTo": customer.id}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_reply_and_resolve_require_text():
    contact = ContactMessageFactory()
    staff = _client(StaffFactory())
    assert staff.put(f"/api/contact/{contact.id}/reply/", {}, format="json").status_code == 400
    assert staff.put(f"/api/contact/{contact.id}/resolve/", {}, format="json").status_code == 400


@pytest.mark.django_db
def test_mark_spam():
    contact = ContactMessageFactory()
    resp = _client(StaffFactory()).put(f"/api/contact/{contact.id}/spam/", format="json")
    assert resp.status_code == 200
    contact.refresh_from_db()
    assert (contact.is_spam, contact.spam_score) == (True, 100)
    assert _client(UserFactory()).put(f"/api/contact/{contact.id}/spam/", format="json").status_code == 403
    assert _client(StaffFactory()).put("/api/contact/999999/spam/", format="json").status_code == 404
