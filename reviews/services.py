"""Review submission, moderation and the product rating aggregate."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from catalog.models import Product
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F
from django.utils import timezone
from orders.models import Order

from .models import Review, ReviewHelpfulVote

logger = logging.getLogger("musicstore.reviews")

RATING_STEP = Decimal("0.1")
DUPLICATE_MESSAGE = "You have already reviewed this product"


class ReviewError(Exception):
    """Business rule violation on a review."""


def delivered_order_for(user, product: Product):
    """Most recent delivered order of ``user`` containing ``product``, if any."""

    return (
        Order.objects.filter(user=user, status=Order.STATUS_DELIVERED, items__product=product)
        .order_by("-created_at", "-id")
        .first()
    )


def refresh_product_rating(product_id: int) -> tuple[Decimal, int]:
    """Recompute ``average_rating`` (one decimal) and ``num_reviews`` from approved reviews."""

    stats = Review.objects.filter(product_id=product_id, status=Review.STATUS_APPROVED).aggregate(
        avg=Avg("rating"), n=Count("id")
    )
    average = Decimal(str(stats["avg"] or 0)).quantize(RATING_STEP, rounding=ROUND_HALF_UP)
    Product.objects.filter(pk=product_id).update(average_rating=average, num_reviews=stats["n"])
    return average, stats["n"]


@transaction.atomic
def submit_review(user, product: Product, data: Mapping) -> Review:
    """Store a pending review; purchases are verified against delivered orders."""

    if Review.objects.filter(user=user, product=product).exists():
        raise ReviewError(DUPLICATE_MESSAGE)
    order = delivered_order_for(user, product)
    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=user,
                product=product,
                order=order,
                is_verified_purchase=order is not None,
                **data,
            )
    except IntegrityError as exc:
        raise ReviewError(DUPLICATE_MESSAGE) from exc

    logger.info(
        "review_submitted",
        extra={
            "review_id": review.id,
            "product_id": product.id,
            "user_id": user.id,
            "rating": review.rating,
            "verified": review.is_verified_purchase,
        },
    )
    return review


def _moderate(review: Review, status: str, by, notes: str = "") -> Review:
    prev = review.status
    review.status = status
    review.moderated_by = by
    review.moderated_at = timezone.now()
    update_fields = ["status", "moderated_by", "moderated_at", "updated_at"]
    if status == Review.STATUS_APPROVED and review.is_reported:
        review.is_reported = False
        update_fields.append("is_reported")
    if notes:
        review.admin_notes = notes
        update_fields.append("admin_notes")
    review.save(update_fields=update_fields)
    average, count = refresh_product_rating(review.product_id)
    logger.info(
        "review_status_changed",
        extra={
            "review_id": review.id,
            "product_id": review.product_id,
            "status_from": prev,
            "status_to": status,
            "updated_by": getattr(by, "id", None),
            "average_rating": str(average),
            "num_reviews": count,
        },
    )
    return review


@transaction.atomic
def approve_review(review: Review, by=None) -> Review:
    """Publish a review; approving a reported review dismisses the report."""

    return _moderate(review, Review.STATUS_APPROVED, by)


@transaction.atomic
def reject_review(review: Review, reason: str = "", by=None) -> Review:
    return _moderate(review, Review.STATUS_REJECTED, by, notes=reason)


def report_review(review: Review, reason: str, by=None) -> Review:
    review.is_reported = True
    review.report_reason = reason
    review.reported_at = timezone.now()
    review.save(update_fields=["is_reported", "report_reason", "reported_at", "updated_at"])
    logger.info("review_reported", extra={"review_id": review.id, "reported_by": getattr(by, "id", None)})
    return review


def respond_to_review(review: Review, comment: str, by) -> Review:
    review.response_comment = comment
    review.responded_by = by
    review.responded_at = timezone.now()
    review.save(update_fields=["response_comment", "responded_by", "responded_at", "updated_at"])
    return review


@transaction.atomic
def toggle_helpful(review: Review, user) -> tuple[int, bool]:
    """Add or withdraw ``user``'s helpful mark; returns ``(helpful_votes, has_voted)``."""

    removed, _ = ReviewHelpfulVote.objects.filter(review=review, user=user).delete()
    if removed:
        Review.objects.filter(pk=review.pk, helpful_votes__gt=0).update(helpful_votes=F("helpful_votes") - 1)
    else:
        ReviewHelpfulVote.objects.create(review=review, user=user)
        Review.objects.filter(pk=review.pk).update(helpful_votes=F("helpful_votes") + 1)
    review.refresh_from_db(fields=["helpful_votes"])
    return review.helpful_votes, not removed


# EOF
