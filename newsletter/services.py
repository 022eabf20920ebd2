"""Newsletter subscription lifecycle and campaign delivery."""

import logging
from typing import Iterable, Mapping, Optional

from common.choices import CampaignAudience, SubscriberSource
from django.conf import settings
from django.core.mail import get_connection
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .emails import campaign_message, send_confirmation_email
from .models import Subscriber, default_preferences, new_token
from .selectors import campaign_recipients

logger = logging.getLogger("musicstore.newsletter")

ALREADY_SUBSCRIBED = "This email is already subscribed to our newsletter"


class NewsletterError(Exception):
    """Business rule violation on a subscription or campaign."""


@transaction.atomic
def subscribe(data: Mapping) -> tuple[Subscriber, bool]:
    """Create a subscription or reactivate a lapsed one; returns ``(subscriber, created)``.

    Unconfirmed subscribers get a fresh confirmation token by email.
    """

    preferences = data.get("preferences") or {}
    categories = data.get("categories") or []
    subscriber = Subscriber.objects.select_for_update().filter(email=data["email"]).first()
    if subscriber is not None and subscriber.is_active:
        raise NewsletterError(ALREADY_SUBSCRIBED)

    if subscriber is None:
        created = True
        try:
            with transaction.atomic():
                subscriber = Subscriber.objects.create(
                    email=data["email"],
                    first_name=data.get("first_name", ""),
                    last_name=data.get("last_name", ""),
                    preferences={**default_preferences(), **preferences},
                    categories=categories,
                    source=data.get("source") or SubscriberSource.WEBSITE,
                    confirmation_token=new_token(),
                )
        except IntegrityError as exc:
            raise NewsletterError(ALREADY_SUBSCRIBED) from exc
    else:
        created = False
        subscriber.is_active = True
        subscriber.unsubscribed_at = None
        subscriber.bounce_count = 0
        subscriber.first_name = data.get("first_name") or subscriber.first_name
        subscriber.last_name = data.get("last_name") or subscriber.last_name
        subscriber.preferences = {**subscriber.preferences, **preferences}
        subscriber.categories = categories or subscriber.categories
        subscriber.source = data.get("source") or subscriber.source
        if not subscriber.is_confirmed:
            subscriber.confirmation_token = new_token()
        subscriber.save()

    if not subscriber.is_confirmed:
        transaction.on_commit(lambda: send_confirmation_email(subscriber))
    logger.info(
        "newsletter_subscribed",
        extra={"subscriber_id": subscriber.id, "source": subscriber.source, "reactivated": not created},
    )
    return subscriber, created


def confirm_subscription(token: str) -> Subscriber:
    subscriber = (
        Subscriber.objects.filter(confirmation_token=token, is_active=True).exclude(confirmation_token="").first()
    )
    if subscriber is None:
        raise NewsletterError("Invalid or expired confirmation token")
    subscriber.confirmed_at = timezone.now()
    subscriber.confirmation_token = ""
    subscriber.save(update_fields=["confirmed_at", "confirmation_token", "updated_at"])
    logger.info("newsletter_confirmed", extra={"subscriber_id": subscriber.id})
    return subscriber


def _by_unsubscribe_token(token: str) -> Subscriber:
    subscriber = Subscriber.objects.filter(unsubscribe_token=token).first()
    if subscriber is None:
        raise NewsletterError("Invalid subscription token")
    return subscriber


def unsubscribe(token: str) -> Subscriber:
    """Deactivate the subscription; unsubscribing twice is a no-op."""

    subscriber = _by_unsubscribe_token(token)
    if subscriber.is_active:
        subscriber.is_active = False
        subscriber.unsubscribed_at = timezone.now()
        subscriber.save(update_fields=["is_active", "unsubscribed_at", "updated_at"])
        logger.info("newsletter_unsubscribed", extra={"subscriber_id": subscriber.id})
    return subscriber


def update_preferences(
    token: str, preferences: Optional[Mapping] = None, categories: Optional[list[str]] = None
) -> Subscriber:
    subscriber = _by_unsubscribe_token(token)
    if preferences:
        subscriber.preferences = {**subscriber.preferences, **preferences}
    if categories is not None:
        subscriber.categories = categories
    subscriber.save(update_fields=["preferences", "categories", "updated_at"])
    return subscriber


def record_bounce(subscriber: Subscriber) -> Subscriber:
    """Count a delivery failure; the subscription lapses at ``NEWSLETTER_MAX_BOUNCES``."""

    subscriber.bounce_count += 1
    update_fields = ["bounce_count", "updated_at"]
    if subscriber.is_active and subscriber.bounce_count >= settings.NEWSLETTER_MAX_BOUNCES:
        subscriber.is_active = False
        subscriber.unsubscribed_at = timezone.now()
        update_fields += ["is_active", "unsubscribed_at"]
        logger.info("newsletter_bounced_out", extra={"subscriber_id": subscriber.id})
    subscriber.save(update_fields=update_fields)
    return subscriber


def send_campaign(
    subject: str,
    content: str,
    audience: str = CampaignAudience.ALL,
    categories: Iterable[str] = (),
    emails: Iterable[str] = (),
) -> int:
    """Email ``content`` to the campaign audience; returns the number of recipients."""

    recipients = list(campaign_recipients(audience, categories, emails))
    if not recipients:
        raise NewsletterError("No recipients found for this campaign")

    connection = get_connection(fail_silently=True)
    connection.send_messages([campaign_message(s, subject, content) for s in recipients])
    Subscriber.objects.filter(pk__in=[s.pk for s in recipients]).update(
        last_email_sent_at=timezone.now(), total_emails_sent=F("total_emails_sent") + 1
    )
    logger.info(
        "newsletter_campaign_sent",
        extra={"subject": subject, "audience": audience, "recipients": len(recipients)},
    )
    return len(recipients)


# EOF
