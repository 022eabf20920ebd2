"""Product reviews.

Customers post one review per product; it stays hidden until staff approve
it. Only approved reviews feed the product's ``average_rating`` and
``num_reviews``.
"""

from common.choices import ReviewStatus
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Review(TimeStampedModel):
    STATUS_PENDING = ReviewStatus.PENDING
    STATUS_APPROVED = ReviewStatus.APPROVED
    STATUS_REJECTED = ReviewStatus.REJECTED

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="reviews", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="reviews", on_delete=models.CASCADE)
    # Delivered order that proves the purchase, when there is one
    order = models.ForeignKey("orders.Order", null=True, blank=True, related_name="+", on_delete=models.SET_NULL)

    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=100)
    comment = models.TextField(max_length=1000)
    pros = models.JSONField(default=list, blank=True)
    cons = models.JSONField(default=list, blank=True)
    is_verified_purchase = models.BooleanField(default=False)

    status = models.CharField(max_length=16, choices=ReviewStatus.choices, default=STATUS_PENDING, db_index=True)
    moderated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    moderated_at = models.DateTimeField(null=True, blank=True)
    admin_notes = models.TextField(blank=True)

    is_reported = models.BooleanField(default=False, db_index=True)
    report_reason = models.TextField(blank=True)
    reported_at = models.DateTimeField(null=True, blank=True)

    helpful_votes = models.PositiveIntegerField(default=0)

    response_comment = models.TextField(blank=True)
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="uniq_review_user_product"),
            models.CheckConstraint(name="review_rating_range", condition=Q(rating__gte=1, rating__lte=5)),
        ]
        indexes = [
            models.Index(fields=["product", "status"], name="review_product_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Review#{self.id} product={self.product_id} rating={self.rating} [{self.status}]"

    @property
    def author_name(self) -> str:
        first = (self.user.first_name or "").strip()
        last = (self.user.last_name or "").strip()
        if first and last:
            return f"{first} {last[0]}."
        return first or "Customer"


class ReviewHelpfulVote(models.Model):
    """One "helpful" mark per user and review."""

    review = models.ForeignKey(Review, related_name="helpful_marks", on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="+", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["review", "user"], name="uniq_review_helpful_vote"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.user_id} found review {self.review_id} helpful"
