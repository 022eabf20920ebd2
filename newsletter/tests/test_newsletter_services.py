from datetime import timedelta

import pytest
from django.utils import timezone
from newsletter.models import Subscriber
from newsletter.selectors import campaign_recipients, list_stats, newsletter_stats, search_subscribers
from newsletter.services import (
    NewsletterError,
    confirm_subscription,
    record_bounce,
    send_campaign,
    subscribe,
    unsubscribe,
    update_preferences,
)

from .factories import PendingSubscriberFactory, SubscriberFactory


@pytest.mark.django_db
def test_subscribe_sends_confirmation(mailoutbox, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        subscriber, created = subscribe(
            {"email": "nuria@example.com", "first_name": "Nuria", "preferences": {"offers": False}}
        )

    assert created is True
    assert subscriber.is_active is True
    assert subscriber.is_confirmed is False
    assert len(subscriber.confirmation_token) == 64
    assert subscriber.preferences == {"products": True, "offers": False, "concerts": True, "news": True}
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["nuria@example.com"]
    assert subscriber.confirmation_token in mailoutbox[0].body


@pytest.mark.django_db
def test_subscribe_twice_is_rejected():
    SubscriberFactory(email="pau@example.com")
    with pytest.raises(NewsletterError, match="already subscribed"):
        subscribe({"email": "pau@example.com"})


@pytest.mark.django_db
def test_resubscribe_reactivates_lapsed_subscriber(mailoutbox, django_capture_on_commit_callbacks):
    lapsed = SubscriberFactory(
        email="pau@example.com", is_active=False, unsubscribed_at=timezone.now(), bounce_count=2
    )

    with django_capture_on_commit_callbacks(execute=True):
        subscriber, created = subscribe({"email": "pau@example.com", "categories": ["keyboards"]})

    assert created is False
    assert subscriber.pk == lapsed.pk
    assert subscriber.is_active is True
    assert subscriber.unsubscribed_at is None
    assert subscriber.bounce_count == 0
    assert subscriber.categories == ["keyboards"]
    # still confirmed from the first subscription
    assert mailoutbox == []


@pytest.mark.django_db
def test_confirm_subscription():
    pending = PendingSubscriberFactory()

    subscriber = confirm_subscription(pending.confirmation_token)

    assert subscriber.is_confirmed is True
    assert subscriber.confirmation_token == ""
    with pytest.raises(NewsletterError, match="Invalid or expired"):
        confirm_subscription(pending.confirmation_token)


@pytest.mark.django_db
def test_confirm_requires_active_subscription():
    pending = PendingSubscriberFactory(is_active=False)
    with pytest.raises(NewsletterError):
        confirm_subscription(pending.confirmation_token)
    with pytest.raises(NewsletterError):
        confirm_subscription("")


@pytest.mark.django_db
def test_unsubscribe_is_idempotent():
    subscriber = SubscriberFactory()

    unsubscribe(subscriber.unsubscribe_token)
    subscriber.refresh_from_db()
    first = subscriber.unsubscribed_at
    unsubscribe(subscriber.unsubscribe_token)
    subscriber.refresh_from_db()

    assert subscriber.is_active is False
    assert subscriber.unsubscribed_at == first
    with pytest.raises(NewsletterError):
        unsubscribe("no-such-token")


@pytest.mark.django_db
def test_update_preferences_merges_topics():
    subscriber = SubscriberFactory()

    subscriber = update_preferences(subscriber.unsubscribe_token, {"concerts": False}, ["percussion", "wind"])

    assert subscriber.preferences["concerts"] is False
    assert subscriber.preferences["products"] is True
    assert subscriber.categories == ["percussion", "wind"]


@pytest.mark.django_db
def test_bounces_deactivate_after_limit(settings):
    settings.NEWSLETTER_MAX_BOUNCES = 2
    subscriber = SubscriberFactory()

    record_bounce(subscriber)
    assert subscriber.is_active is True
    record_bounce(subscriber)

    subscriber.refresh_from_db()
    assert subscriber.bounce_count == 2
    assert subscriber.is_active is False
    assert subscriber.unsubscribed_at is not None


@pytest.mark.django_db
def test_campaign_recipients_by_audience():
    guitars = SubscriberFactory(categories=["guitars"])
    keys = SubscriberFactory(categories=["keyboards", "sound"])
    PendingSubscriberFactory(categories=["guitars"])
    SubscriberFactory(categories=["guitars"], is_active=False)

    assert set(campaign_recipients("all")) == {guitars, keys}
    assert list(campaign_recipients("category", ["sound"])) == [keys]
    assert list(campaign_recipients("custom", emails=[f" {guitars.email.upper()} "])) == [guitars]


@pytest.mark.django_db
def test_send_campaign_emails_each_recipient(mailoutbox):
    first, second = SubscriberFactory(), SubscriberFactory()
    SubscriberFactory(is_active=False)

    sent = send_campaign("Spring sale", "20% off all ukuleles.")

    assert sent == 2
    assert {m.to[0] for m in mailoutbox} == {first.email, second.email}
    assert all("/newsletter/unsubscribe/" in m.body for m in mailoutbox)
    first.refresh_from_db()
    assert first.total_emails_sent == 1
    assert first.last_email_sent_at is not None


@pytest.mark.django_db
def test_send_campaign_without_recipients():
    PendingSubscriberFactory()
    with pytest.raises(NewsletterError, match="No recipients"):
        send_campaign("Hello", "Nobody home", "all")


@pytest.mark.django_db
def test_search_subscribers_filters():
    match = SubscriberFactory(first_name="Berta", categories=["percussion"])
    SubscriberFactory(first_name="Berta", categories=["guitars"])
    PendingSubscriberFactory(first_name="Berta", categories=["percussion"])

    qs = search_subscribers(confirmed=True, categories=["percussion"], search="bert")

    assert list(qs) == [match]


@pytest.mark.django_db
def test_stats():
    SubscriberFactory(categories=["guitars"], source="store")
    SubscriberFactory(categories=["guitars", "wind"])
    PendingSubscriberFactory(categories=[])
    SubscriberFactory(is_active=False)
    old = SubscriberFactory()
    Subscriber.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=400))

    stats = newsletter_stats()

    assert stats["summary"] == {
        "totalSubscribers": 5,
        "activeSubscribers": 3,
        "pendingConfirmation": 1,
        "unsubscribed": 1,
        "confirmationRate": 60,
    }
    assert sum(row["count"] for row in stats["subscriptionsByMonth"]) == 4
    assert stats["topCategories"][0] == {"category": "guitars", "count": 3}

    summary = list_stats()
    assert summary["byStatus"] == {"active": 4, "inactive": 1}
    assert summary["bySource"] == {"store": 1, "website": 3}
