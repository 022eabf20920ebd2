"""Availability queries for rentable equipment.

All intervals are closed calendar-day ranges: a rental ending on day N and
another starting on day N compete for the same units.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from catalog.models import Product
from django.db.models import Q, QuerySet, Sum

from .models import Rental, RentalItem


def intervals_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """True when ``[a_start, a_end]`` and ``[b_start, b_end]`` share at least one day."""

    return a_start <= b_end and a_end >= b_start


def overlapping_items(
    product_id: int, start: date, end: date, exclude_rental_id: Optional[int] = None
) -> QuerySet[RentalItem]:
    """Items of ``product_id`` in reserving rentals whose period overlaps ``[start, end]``."""

    qs = RentalItem.objects.filter(
        product_id=product_id,
        rental__status__in=Rental.RESERVING_STATUSES,
        rental__start_date__lte=end,
        rental__end_date__gte=start,
    )
    if exclude_rental_id is not None:
        qs = qs.exclude(rental_id=exclude_rental_id)
    return qs


def reserved_quantity(product_id: int, start: date, end: date, exclude_rental_id: Optional[int] = None) -> int:
    """Units of a product held by other reservations over ``[start, end]``.

    Several lines of the same product within one rental are summed.
    """

    total = overlapping_items(product_id, start, end, exclude_rental_id).aggregate(n=Sum("quantity"))["n"]
    return int(total or 0)


def available_stock(product: Product, start: date, end: date, exclude_rental_id: Optional[int] = None) -> int:
    """``stock - reserved``; negative when the product is already overbooked."""

    return int(product.stock) - reserved_quantity(product.id, start, end, exclude_rental_id)


@dataclass(frozen=True)
class Availability:
    ok: bool
    product_id: int
    requested: int
    available: int
    reason: str = ""
    product: Optional[Product] = None

    def as_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product.name if self.product else None,
            "requested": self.requested,
            "available": self.available,
            "reason": self.reason,
        }


def resolve_availability(
    product_id: int,
    quantity: int,
    start: date,
    end: date,
    exclude_rental_id: Optional[int] = None,
    product: Optional[Product] = None,
) -> Availability:
    """Point-in-time availability of ``quantity`` units over ``[start, end]``.

    Never raises for business failures: a missing product, a product not
    offered for rent, or insufficient units produce ``ok=False`` with a reason.
    """

    if product is None:
        product = Product.objects.filter(pk=product_id).first()
    if product is None:
        return Availability(False, product_id, quantity, 0, "Product not found")
    if not product.is_for_rental:
        return Availability(False, product_id, quantity, 0, "Product is not available for rental", product)

    available = available_stock(product, start, end, exclude_rental_id)
    if available < quantity:
        return Availability(
            False, product_id, quantity, available, "Insufficient stock for the requested dates", product
        )
    return Availability(True, product_id, quantity, available, "", product)


def rentals_for_user(user, status: Optional[str] = None) -> QuerySet[Rental]:
    qs = Rental.objects.filter(user=user).prefetch_related("items")
    if status:
        qs = qs.filter(status=status)
    return qs


def search_rentals(
    *,
    status: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    search: Optional[str] = None,
) -> QuerySet[Rental]:
    """Back-office listing; ``start``/``end`` select rentals overlapping that window."""

    qs = Rental.objects.select_related("user").prefetch_related("items")
    if status:
        qs = qs.filter(status=status)
    if start:
        qs = qs.filter(end_date__gte=start)
    if end:
        qs = qs.filter(start_date__lte=end)
    if search:
        qs = qs.filter(
            Q(number__icontains=search)
            | Q(customer_email__icontains=search)
            | Q(customer_last_name__icontains=search)
            | Q(event_name__icontains=search)
        )
    return qs
