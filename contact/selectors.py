from datetime import date
from typing import Optional

from common.choices import ContactPriority
from django.db.models import Case, Count, IntegerField, Q, QuerySet, Value, When
from django.utils import timezone

from .models import ContactMessage

PRIORITY_RANK = Case(
    When(priority=ContactPriority.URGENT, then=Value(4)),
    When(priority=ContactPriority.HIGH, then=Value(3)),
    When(priority=ContactPriority.MEDIUM, then=Value(2)),
    default=Value(1),
    output_field=IntegerField(),
)


def search_messages(
    *,
    status: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: Optional[str] = None,
    include_spam: bool = False,
) -> QuerySet[ContactMessage]:
    """Staff inbox, most urgent first; spam is hidden unless ``include_spam``."""

    qs = ContactMessage.objects.select_related("assigned_to")
    if not include_spam:
        qs = qs.filter(is_spam=False)
    if status:
        qs = qs.filter(status=status)
    if category:
        qs = qs.filter(category=category)
    if priority:
        qs = qs.filter(priority=priority)
    if assigned_to:
        qs = qs.filter(assigned_to_id=assigned_to)
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    if search:
        qs = qs.filter(
            Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(email__icontains=search)
            | Q(subject__icontains=search)
            | Q(message__icontains=search)
            | Q(ticket_number__icontains=search)
        )
    return qs.annotate(priority_rank=PRIORITY_RANK).order_by("-priority_rank", "-created_at", "-id")


def inbox_stats(now=None) -> dict:
    """Non-spam counts per status, plus open messages past their estimated response time."""

    now = now or timezone.now()
    ham = ContactMessage.objects.filter(is_spam=False)
    by_status = {row["status"]: row["count"] for row in ham.values("status").annotate(count=Count("id"))}
    overdue = ham.filter(status__in=ContactMessage.OPEN_STATUSES, estimated_response_at__lt=now).count()
    return {"byStatus": by_status, "overdue": overdue}
