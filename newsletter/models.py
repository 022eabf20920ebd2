"""Newsletter subscribers.

A subscription is created active but unconfirmed; the emailed confirmation
token confirms it. The unsubscribe token is permanent and doubles as the key
for managing preferences without an account.
"""

from common.choices import SubscriberSource
from django.db import models
from django.utils.crypto import get_random_string

TOKEN_LENGTH = 64
PREFERENCE_TOPICS = ("products", "offers", "concerts", "news")


def new_token() -> str:
    return get_random_string(TOKEN_LENGTH)


def default_preferences() -> dict:
    return {topic: True for topic in PREFERENCE_TOPICS}


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Subscriber(TimeStampedModel):
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)

    preferences = models.JSONField(default=default_preferences, blank=True)
    # Product category values (common.choices.ProductCategory)
    categories = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    source = models.CharField(max_length=16, choices=SubscriberSource.choices, default=SubscriberSource.WEBSITE)

    is_active = models.BooleanField(default=True)
    confirmation_token = models.CharField(max_length=TOKEN_LENGTH, blank=True, db_index=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    unsubscribe_token = models.CharField(max_length=TOKEN_LENGTH, unique=True, default=new_token, editable=False)
    unsubscribed_at = models.DateTimeField(null=True, blank=True)

    last_email_sent_at = models.DateTimeField(null=True, blank=True)
    total_emails_sent = models.PositiveIntegerField(default=0)
    bounce_count = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["is_active", "confirmed_at"], name="subscriber_active_conf_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.email} ({'active' if self.is_active else 'inactive'})"

    @property
    def is_confirmed(self) -> bool:
        return self.confirmed_at is not None

    @property
    def full_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name or self.email
