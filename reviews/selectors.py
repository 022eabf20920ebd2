from django.db.models import Count, QuerySet

from .models import Review

SORT_ORDERS = {
    "newest": ("-created_at", "-id"),
    "oldest": ("created_at", "id"),
    "highest-rating": ("-rating", "-created_at", "-id"),
    "lowest-rating": ("rating", "-created_at", "-id"),
    "most-helpful": ("-helpful_votes", "-created_at", "-id"),
}


def published_reviews(product_id: int, sort: str = "newest") -> QuerySet[Review]:
    ordering = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
    return (
        Review.objects.filter(product_id=product_id, status=Review.STATUS_APPROVED)
        .select_related("user")
        .order_by(*ordering)
    )


def rating_breakdown(product_id: int) -> dict[str, int]:
    """Approved review count per star, from 5 down to 1, zeros included."""

    rows = (
        Review.objects.filter(product_id=product_id, status=Review.STATUS_APPROVED)
        .values("rating")
        .annotate(count=Count("id"))
    )
    counts = {row["rating"]: row["count"] for row in rows}
    return {str(stars): counts.get(stars, 0) for stars in range(5, 0, -1)}


def moderation_queue() -> QuerySet[Review]:
    """Pending reviews nobody has reported; reported ones have their own queue."""

    return Review.objects.filter(status=Review.STATUS_PENDING, is_reported=False).select_related("user", "product")


def reported_reviews() -> QuerySet[Review]:
    return Review.objects.filter(is_reported=True).select_related("user", "product")
