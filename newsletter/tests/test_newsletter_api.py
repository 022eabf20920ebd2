import pytest
from newsletter.models import Subscriber
from rest_framework.test import APIClient
from users.tests.factories import StaffFactory, UserFactory

from .factories import PendingSubscriberFactory, SubscriberFactory


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


@pytest.mark.django_db
def test_subscribe(mailoutbox, django_capture_on_commit_callbacks):
    payload = {
        "email": "Gemma@Example.com",
        "firstName": "Gemma",
        "categories": ["guitars", "amplifiers"],
        "preferences": {"offers": False},
        "source": "concert",
    }
    with django_capture_on_commit_callbacks(execute=True):
        resp = _client().post("/api/newsletter/subscribe/", payload, format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["data"] == {"email": "gemma@example.com", "isConfirmed": False}
    subscriber = Subscriber.objects.get()
    assert subscriber.source == "concert"
    assert subscriber.categories == ["guitars", "amplifiers"]
    assert len(mailoutbox) == 1
    assert f"/newsletter/confirm/{subscriber.confirmation_token}" in mailoutbox[0].body


@pytest.mark.django_db
def test_subscribe_validation():
    resp = _client().post(
        "/api/newsletter/subscribe/",
        {"email": "not-an-email", "categories": ["kazoos"], "preferences": {"gossip": True}},
        format="json",
    )
    assert resp.status_code == 400
    assert set(resp.data["errors"]) == {"email", "categories", "preferences"}


@pytest.mark.django_db
def test_subscribe_existing_and_lapsed():
    SubscriberFactory(email="oriol@example.com")
    SubscriberFactory(email="clara@example.com", is_active=False)
    client = _client()

    resp = client.post("/api/newsletter/subscribe/", {"email": "oriol@example.com"}, format="json")
    assert resp.status_code == 400
    assert resp.data["message"] == "This email is already subscribed to our newsletter"

    resp = client.post("/api/newsletter/subscribe/", {"email": "clara@example.com"}, format="json")
    assert resp.status_code == 200
    assert resp.data["message"].startswith("Welcome back")
    assert Subscriber.objects.get(email="clara@example.com").is_active is True


@pytest.mark.django_db
def test_confirm_and_unsubscribe_links():
    pending = PendingSubscriberFactory()
    client = _client()

    resp = client.post(f"/api/newsletter/confirm/{pending.confirmation_token}/")
    assert resp.status_code == 200
    assert resp.data["message"] == "Subscription confirmed"
    assert client.post(f"/api/newsletter/confirm/{pending.confirmation_token}/").status_code == 400

    resp = client.post(f"/api/newsletter/unsubscribe/{pending.unsubscribe_token}/")
    assert resp.status_code == 200
    pending.refresh_from_db()
    assert pending.is_active is False
    assert client.post("/api/newsletter/unsubscribe/unknown/").status_code == 404


@pytest.mark.django_db
def test_update_preferences():
    subscriber = SubscriberFactory()
    url = f"/api/newsletter/preferences/{subscriber.unsubscribe_token}/"

    resp = _client().put(url, {"preferences": {"news": False}, "categories": ["headphones"]}, format="json")

    assert resp.status_code == 200
    assert resp.data["data"]["preferences"]["news"] is False
    assert resp.data["data"]["categories"] == ["headphones"]
    resp = _client().put(url, {"preferences": {"news": "sometimes"}}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_admin_endpoints_are_staff_only():
    client = _client(UserFactory())
    assert client.get("/api/newsletter/admin/subscribers/").status_code == 403
    assert client.get("/api/newsletter/admin/stats/").status_code == 403
    assert _client().post("/api/newsletter/admin/send-campaign/", {}, format="json").status_code == 401


@pytest.mark.django_db
def test_admin_subscriber_list_filters_and_stats():
    SubscriberFactory(categories=["lighting"])
    SubscriberFactory(categories=["guitars"])
    PendingSubscriberFactory(categories=["lighting"])
    SubscriberFactory(is_active=False)

    resp = _client(StaffFactory()).get("/api/newsletter/admin/subscribers/?confirmed=true&categories=lighting,wind")

    assert resp.status_code == 200
    data = resp.data["data"]
    assert data["pagination"]["total"] == 1
    assert data["results"][0]["categories"] == ["lighting"]
    assert data["stats"]["byStatus"] == {"active": 3, "inactive": 1}

    resp = _client(StaffFactory()).get("/api/newsletter/admin/subscribers/?isActive=false")
    assert resp.data["data"]["pagination"]["total"] == 1


@pytest.mark.django_db
def test_send_campaign(mailoutbox):
    fan = SubscriberFactory(categories=["microphones"])
    SubscriberFactory(categories=["guitars"])
    client = _client(StaffFactory())

    campaign = {
        "subject": "Mic week",
        "content": "New condensers in store.",
        "targetAudience": "category",
        "categories": ["microphones"],
    }
    resp = client.post("/api/newsletter/admin/send-campaign/", campaign, format="json")

    assert resp.status_code == 200, resp.data
    assert resp.data["data"] == {"recipientCount": 1}
    assert [m.to for m in mailoutbox] == [[fan.email]]

    resp = client.post(
        "/api/newsletter/admin/send-campaign/",
        {"subject": "Hi", "content": "Hello", "targetAudience": "custom"},
        format="json",
    )
    assert resp.status_code == 400
    assert "customEmails" in resp.data["errors"]

    resp = client.post(
        "/api/newsletter/admin/send-campaign/",
        {"subject": "Hi", "content": "Hello", "targetAudience": "custom", "customEmails": ["nobody@example.com"]},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.data["message"] == "No recipients found for this campaign"


@pytest.mark.django_db
def test_stats_and_delete():
    subscriber = SubscriberFactory()
    PendingSubscriberFactory()
    client = _client(StaffFactory())

    resp = client.get("/api/newsletter/admin/stats/")
    assert resp.status_code == 200
    assert resp.data["data"]["summary"]["totalSubscribers"] == 2
    assert resp.data["data"]["summary"]["confirmationRate"] == 50

    resp = client.delete(f"/api/newsletter/admin/subscriber/{subscriber.id}/")
    assert resp.status_code == 200
    assert not Subscriber.objects.filter(pk=subscriber.pk).exists()
    assert client.delete(f"/api/newsletter/admin/subscriber/{subscriber.id}/").status_code == 404
