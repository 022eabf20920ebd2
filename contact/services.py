"""Contact intake and the staff workflow around it."""

import logging
import re
from datetime import datetime, timedelta
from typing import Mapping, Optional

from common.choices import ContactCategory, ContactPriority, ContactResponseMethod, CustomerType
from common.sequences import next_number
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .emails import send_reply_email
from .models import ContactMessage

logger = logging.getLogger("musicstore.contact")

SPAM_KEYWORDS = ("viagra", "casino", "lottery", "winner", "congratulations", "million dollars")
KEYWORD_WEIGHT = 20
LINK_WEIGHT = 30
MAX_LINKS = 3
SHOUTING_WEIGHT = 25
SHOUTING_RATIO = 0.5

CATEGORY_PRIORITY = {
    ContactCategory.TECHNICAL_SUPPORT: ContactPriority.HIGH,
    ContactCategory.WARRANTY: ContactPriority.HIGH,
    ContactCategory.COMPLAINTS: ContactPriority.URGENT,
    ContactCategory.GENERAL: ContactPriority.LOW,
    ContactCategory.SUGGESTIONS: ContactPriority.LOW,
}

RESPONSE_HOURS = {
    ContactPriority.URGENT: 2,
    ContactPriority.HIGH: 4,
    ContactPriority.MEDIUM: 12,
    ContactPriority.LOW: 48,
}


def spam_score(subject: str, message: str) -> int:
    """Heuristic 0..100 score from keywords, link count and uppercase ratio of ``message``."""

    text = f"{subject} {message}".lower()
    score = sum(KEYWORD_WEIGHT for keyword in SPAM_KEYWORDS if keyword in text)
    if text.count("http") > MAX_LINKS:
        score += LINK_WEIGHT
    if message and len(re.findall(r"[A-Z]", message)) / len(message) > SHOUTING_RATIO:
        score += SHOUTING_WEIGHT
    return min(score, 100)


def priority_for(category: str) -> str:
    return CATEGORY_PRIORITY.get(category, ContactPriority.MEDIUM)


def estimated_response(priority: str, now: Optional[datetime] = None) -> datetime:
    now = now or timezone.now()
    return now + timedelta(hours=RESPONSE_HOURS.get(priority, 24))


def submit_message(data: Mapping, user=None, meta: Optional[Mapping] = None) -> ContactMessage:
    """Store a contact form submission with its priority, spam verdict and ticket number.

    ``meta`` carries request details (``ip_address``, ``user_agent``, ``referrer``).
    """

    meta = meta or {}
    authenticated = bool(user is not None and getattr(user, "is_authenticated", False))
    score = spam_score(data["subject"], data["message"])
    priority = priority_for(data["category"])

    contact = ContactMessage.objects.create(
        ticket_number=next_number(settings.CONTACT_TICKET_PREFIX),
        user=user if authenticated else None,
        customer_type=CustomerType.EXISTING if authenticated else CustomerType.NEW,
        spam_score=score,
        is_spam=score >= settings.CONTACT_SPAM_THRESHOLD,
        priority=priority,
        estimated_response_at=estimated_response(priority),
        ip_address=meta.get("ip_address"),
        user_agent=(meta.get("user_agent") or "")[:255],
        referrer=(meta.get("referrer") or "")[:255],
        **data,
    )
    logger.info(
        "contact_received",
        extra={
            "contact_id": contact.id,
            "ticket_number": contact.ticket_number,
            "category": contact.category,
            "priority": contact.priority,
            "spam_score": score,
            "is_spam": contact.is_spam,
        },
    )
    return contact


def _log_status(contact: ContactMessage, prev: str, by=None) -> None:
    logger.info(
        "contact_status_changed",
        extra={
            "contact_id": contact.id,
            "ticket_number": contact.ticket_number,
            "status_from": prev,
            "status_to": contact.status,
            "updated_by": getattr(by, "id", None),
        },
    )


def assign_message(contact: ContactMessage, assignee) -> ContactMessage:
    prev = contact.status
    contact.assigned_to = assignee
    contact.status = ContactMessage.STATUS_IN_PROGRESS
    contact.save(update_fields=["assigned_to", "status", "updated_at"])
    _log_status(contact, prev, assignee)
    return contact


@transaction.atomic
def reply_to_message(
    contact: ContactMessage, text: str, responded_by, method: str = ContactResponseMethod.EMAIL
) -> ContactMessage:
    """Record the staff reply; email replies are also sent to the customer."""

    prev = contact.status
    contact.response_message = text
    contact.response_method = method
    contact.responded_by = responded_by
    contact.responded_at = timezone.now()
    contact.status = ContactMessage.STATUS_REPLIED
    contact.save(
        update_fields=[
            "response_message",
            "response_method",
            "responded_by",
            "responded_at",
            "status",
            "updated_at",
        ]
    )
    _log_status(contact, prev, responded_by)
    if method == ContactResponseMethod.EMAIL:
        transaction.on_commit(lambda: send_reply_email(contact))
    return contact


def resolve_message(contact: ContactMessage, resolution: str, by=None) -> ContactMessage:
    prev = contact.status
    contact.status = ContactMessage.STATUS_RESOLVED
    contact.resolution = resolution
    contact.resolved_at = timezone.now()
    contact.save(update_fields=["status", "resolution", "resolved_at", "updated_at"])
    _log_status(contact, prev, by)
    return contact


def close_message(contact: ContactMessage, by=None) -> ContactMessage:
    prev = contact.status
    contact.status = ContactMessage.STATUS_CLOSED
    contact.save(update_fields=["status", "updated_at"])
    _log_status(contact, prev, by)
    return contact


def mark_spam(contact: ContactMessage, by=None) -> ContactMessage:
    contact.is_spam = True
    contact.spam_score = 100
    contact.save(update_fields=["is_spam", "spam_score", "updated_at"])
    logger.info("contact_marked_spam", extra={"contact_id": contact.id, "updated_by": getattr(by, "id", None)})
    return contact


# EOF
