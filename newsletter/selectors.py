from collections import Counter
from datetime import date, timedelta
from typing import Iterable, Optional

from common.choices import CampaignAudience
from django.db.models import Count, Q, QuerySet
from django.db.models.functions import TruncMonth
from django.utils import timezone

from .models import Subscriber


def with_categories(qs: QuerySet[Subscriber], categories: Iterable[str]) -> QuerySet[Subscriber]:
    """Subscribers following any of ``categories``.

    Category lists are matched in Python: JSON containment lookups are not
    available on every database backend.
    """

    wanted = set(categories)
    ids = [pk for pk, chosen in qs.values_list("pk", "categories") if wanted.intersection(chosen or [])]
    return qs.filter(pk__in=ids)


def search_subscribers(
    *,
    is_active: Optional[bool] = None,
    confirmed: Optional[bool] = None,
    source: Optional[str] = None,
    categories: Optional[list[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: Optional[str] = None,
) -> QuerySet[Subscriber]:
    qs = Subscriber.objects.all()
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    if confirmed is not None:
        qs = qs.filter(confirmed_at__isnull=not confirmed)
    if source:
        qs = qs.filter(source=source)
    if start:
        qs = qs.filter(created_at__date__gte=start)
    if end:
        qs = qs.filter(created_at__date__lte=end)
    if search:
        qs = qs.filter(Q(email__icontains=search) | Q(first_name__icontains=search) | Q(last_name__icontains=search))
    if categories:
        qs = with_categories(qs, categories)
    return qs


def category_counts(qs: QuerySet[Subscriber], limit: Optional[int] = None) -> list[dict]:
    counter = Counter(category for chosen in qs.values_list("categories", flat=True) for category in chosen or [])
    return [{"category": category, "count": count} for category, count in counter.most_common(limit)]


def list_stats() -> dict:
    """Breakdown shown next to the staff subscriber list."""

    active = Subscriber.objects.filter(is_active=True)
    by_status = {
        "active": active.count(),
        "inactive": Subscriber.objects.filter(is_active=False).count(),
    }
    by_source = {row["source"]: row["count"] for row in active.values("source").annotate(count=Count("id"))}
    return {"byStatus": by_status, "bySource": by_source, "byCategory": category_counts(active)}


def newsletter_stats(now=None) -> dict:
    """Audience summary, monthly sign-ups over the last year and the top categories."""

    now = now or timezone.now()
    total = Subscriber.objects.count()
    confirmed = Subscriber.objects.filter(is_active=True, confirmed_at__isnull=False).count()
    pending = Subscriber.objects.filter(is_active=True, confirmed_at__isnull=True).count()
    unsubscribed = Subscriber.objects.filter(is_active=False).count()

    since = now - timedelta(days=365)
    months = (
        Subscriber.objects.filter(created_at__gte=since)
        .annotate(month=TruncMonth("created_at"))
        .values("month")
        .annotate(count=Count("id"))
        .order_by("month")
    )
    return {
        "summary": {
            "totalSubscribers": total,
            "activeSubscribers": confirmed,
            "pendingConfirmation": pending,
            "unsubscribed": unsubscribed,
            "confirmationRate": round(confirmed * 100 / total) if total else 0,
        },
        "subscriptionsByMonth": [{"month": row["month"].strftime("%Y-%m"), "count": row["count"]} for row in months],
        "topCategories": category_counts(Subscriber.objects.filter(is_active=True), limit=10),
    }


def campaign_recipients(
    audience: str, categories: Iterable[str] = (), emails: Iterable[str] = ()
) -> QuerySet[Subscriber]:
    """Active, confirmed subscribers addressed by a campaign."""

    qs = Subscriber.objects.filter(is_active=True, confirmed_at__isnull=False)
    if audience == CampaignAudience.CUSTOM:
        return qs.filter(email__in=[email.strip().lower() for email in emails])
    if audience == CampaignAudience.CATEGORY:
        return with_categories(qs, categories)
    return qs
