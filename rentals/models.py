"""Rental (equipment reservation) models.

A `Rental` reserves quantities of rentable products over a closed calendar
interval ``[start_date, end_date]``. Status changes are recorded in the
append-only `RentalStatusEvent` log.
"""

from decimal import Decimal

from common.choices import DepositStatus, EventType, PaymentStatus, RentalStatus
from django.conf import settings
from django.db import models
from django.db.models import F, Q


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Rental(TimeStampedModel):
    """Equipment reservation owned by a single user.

    Pricing is denormalized; ``calculate_totals`` keeps ``total_amount``
    consistent with the fee/discount columns.
    """

    STATUS_PENDING = RentalStatus.PENDING
    STATUS_CONFIRMED = RentalStatus.CONFIRMED
    STATUS_PREPARING = RentalStatus.PREPARING
    STATUS_READY = RentalStatus.READY
    STATUS_ACTIVE = RentalStatus.ACTIVE
    STATUS_OVERDUE = RentalStatus.OVERDUE
    STATUS_RETURNING = RentalStatus.RETURNING
    STATUS_COMPLETED = RentalStatus.COMPLETED
    STATUS_CANCELLED = RentalStatus.CANCELLED
    STATUS_CHOICES = RentalStatus.choices

    # Statuses whose items count against product stock for overlapping periods
    RESERVING_STATUSES = (STATUS_CONFIRMED, STATUS_ACTIVE, STATUS_PREPARING, STATUS_READY)
    TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

    number = models.CharField(max_length=32, unique=True, null=True, blank=True, db_index=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="rentals", on_delete=models.CASCADE)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)

    start_date = models.DateField()
    end_date = models.DateField()
    actual_start_date = models.DateField(null=True, blank=True)
    actual_end_date = models.DateField(null=True, blank=True)

    delivery_required = models.BooleanField(default=False)
    delivery_address = models.JSONField(null=True, blank=True)

    event_type = models.CharField(max_length=16, choices=EventType.choices, blank=True)
    event_name = models.CharField(max_length=200, blank=True)
    venue = models.CharField(max_length=200, blank=True)

    customer_first_name = models.CharField(max_length=150)
    customer_last_name = models.CharField(max_length=150)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=32, blank=True)

    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    deposit_status = models.CharField(max_length=16, choices=DepositStatus.choices, default=DepositStatus.PENDING)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    setup_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    late_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    damage_fee = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    payment_status = models.CharField(max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)

    customer_notes = models.TextField(blank=True)
    internal_notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="rental_end_after_start", condition=Q(end_date__gt=F("start_date"))),
        ]
        indexes = [
            models.Index(fields=["status", "start_date", "end_date"], name="rental_status_period_idx"),
            models.Index(fields=["user", "status"], name="rental_user_status_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Rental {self.number or self.id} user={self.user_id} status={self.status}"

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def calculate_totals(self) -> Decimal:
        self.total_amount = (
            self.subtotal + self.delivery_fee + self.setup_fee + self.late_fee + self.damage_fee - self.discount_amount
        )
        return self.total_amount


class RentalItem(TimeStampedModel):
    """Line item snapshotting the product's daily rate at booking time."""

    rental = models.ForeignKey(Rental, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="rental_items", on_delete=models.PROTECT)
    name = models.CharField(max_length=200, blank=True)
    daily_rate = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    quantity = models.PositiveIntegerField(default=1)
    total_days = models.PositiveIntegerField(default=1)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["product", "rental"], name="rentalitem_product_idx"),
        ]
        constraints = [
            models.CheckConstraint(name="rentalitem_quantity_positive", condition=Q(quantity__gte=1)),
            models.CheckConstraint(name="rentalitem_days_positive", condition=Q(total_days__gte=1)),
            models.CheckConstraint(name="rentalitem_rate_non_negative", condition=Q(daily_rate__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"RentalItem#{self.id} rental={self.rental_id} product={self.product_id} qty={self.quantity}"


class RentalStatusEvent(models.Model):
    """Append-only status history entry."""

    rental = models.ForeignKey(Rental, related_name="status_history", on_delete=models.CASCADE)
    status = models.CharField(max_length=16, choices=Rental.STATUS_CHOICES)
    note = models.TextField(blank=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, related_name="+", on_delete=models.SET_NULL
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.rental_id} -> {self.status}"
