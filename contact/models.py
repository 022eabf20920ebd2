"""Customer contact messages (support tickets).

Messages arrive through the public contact form, get a priority from their
category and a spam score from their text, and are then worked by staff:
assigned, replied to, resolved and closed.
"""

from common.choices import (
    ContactCategory,
    ContactPriority,
    ContactResponseMethod,
    ContactSource,
    ContactStatus,
    CustomerType,
)
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Q


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ContactMessage(TimeStampedModel):
    STATUS_NEW = ContactStatus.NEW
    STATUS_IN_PROGRESS = ContactStatus.IN_PROGRESS
    STATUS_REPLIED = ContactStatus.REPLIED
    STATUS_RESOLVED = ContactStatus.RESOLVED
    STATUS_CLOSED = ContactStatus.CLOSED

    OPEN_STATUSES = (STATUS_NEW, STATUS_IN_PROGRESS)

    ticket_number = models.CharField(max_length=32, unique=True, null=True, blank=True, db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="contact_messages", on_delete=models.SET_NULL
    )

    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    email = models.EmailField(db_index=True)
    phone = models.CharField(
        max_length=20,
        blank=True,
        validators=[RegexValidator(r"^\+?[0-9\s-]{9,15}$", message="Enter a valid phone number")],
    )
    subject = models.CharField(max_length=100)
    message = models.TextField(max_length=2000)

    category = models.CharField(max_length=32, choices=ContactCategory.choices, db_index=True)
    priority = models.CharField(
        max_length=16, choices=ContactPriority.choices, default=ContactPriority.MEDIUM, db_index=True
    )
    status = models.CharField(max_length=16, choices=ContactStatus.choices, default=STATUS_NEW, db_index=True)
    source = models.CharField(max_length=16, choices=ContactSource.choices, default=ContactSource.WEBSITE)
    customer_type = models.CharField(max_length=16, choices=CustomerType.choices, default=CustomerType.NEW)

    related_order = models.ForeignKey(
        "orders.Order", null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    related_rental = models.ForeignKey(
        "rentals.Rental", null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    related_product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="assigned_contact_messages",
        on_delete=models.SET_NULL,
    )

    response_message = models.TextField(blank=True)
    response_method = models.CharField(max_length=16, choices=ContactResponseMethod.choices, blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    is_spam = models.BooleanField(default=False, db_index=True)
    spam_score = models.PositiveSmallIntegerField(
        default=0, validators=[MinValueValidator(0), MaxValueValidator(100)]
    )

    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=255, blank=True)
    referrer = models.CharField(max_length=255, blank=True)

    internal_notes = models.TextField(blank=True)
    estimated_response_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolution = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "is_spam"], name="contact_status_spam_idx"),
            models.Index(fields=["assigned_to", "status"], name="contact_assignee_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="contact_spam_score_range", condition=Q(spam_score__lte=100)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.ticket_number or self.id} {self.email} [{self.category}]"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def response_time_hours(self):
        if self.responded_at and self.created_at:
            return round((self.responded_at - self.created_at).total_seconds() / 3600, 1)
        return None
