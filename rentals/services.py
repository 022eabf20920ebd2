"""Rental services: quoting, booking, lifecycle transitions and extensions.

Every write runs in a single transaction that locks the affected `Product`
rows before re-checking availability, so two concurrent bookings of the same
equipment cannot both pass the conflict check.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from catalog.models import Product
from common.choices import RentalStatus
from common.sequences import next_number
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Rental, RentalItem, RentalStatusEvent
from .selectors import resolve_availability

logger = logging.getLogger("musicstore.rentals")

CENT = Decimal("0.01")

ALLOWED_TRANSITIONS: dict[str, frozenset] = {
    RentalStatus.PENDING: frozenset({RentalStatus.CONFIRMED, RentalStatus.CANCELLED}),
    RentalStatus.CONFIRMED: frozenset(
        {RentalStatus.PREPARING, RentalStatus.READY, RentalStatus.ACTIVE, RentalStatus.CANCELLED}
    ),
    RentalStatus.PREPARING: frozenset({RentalStatus.READY, RentalStatus.ACTIVE, RentalStatus.CANCELLED}),
    RentalStatus.READY: frozenset({RentalStatus.ACTIVE, RentalStatus.CANCELLED}),
    RentalStatus.ACTIVE: frozenset(
        {RentalStatus.OVERDUE, RentalStatus.RETURNING, RentalStatus.COMPLETED, RentalStatus.CANCELLED}
    ),
    RentalStatus.OVERDUE: frozenset({RentalStatus.RETURNING, RentalStatus.COMPLETED, RentalStatus.CANCELLED}),
    RentalStatus.RETURNING: frozenset({RentalStatus.COMPLETED, RentalStatus.CANCELLED}),
    RentalStatus.COMPLETED: frozenset(),
    RentalStatus.CANCELLED: frozenset(),
}

EXTENDABLE_STATUSES = (RentalStatus.ACTIVE, RentalStatus.CONFIRMED)


class RentalError(Exception):
    pass


class RentalConflict(RentalError):
    """Raised when requested equipment is not available for the period."""

    def __init__(self, conflicts: list[dict]):
        super().__init__("Some equipment is not available for the selected dates")
        self.conflicts = conflicts


class InvalidTransition(RentalError):
    pass


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class QuotedLine:
    product: Product
    quantity: int
    daily_rate: Decimal
    days: int
    subtotal: Decimal

    def as_dict(self) -> dict:
        return {
            "productId": self.product.id,
            "name": self.product.name,
            "quantity": self.quantity,
            "dailyRate": str(self.daily_rate),
            "totalDays": self.days,
            "subtotal": str(self.subtotal),
        }


@dataclass(frozen=True)
class Quote:
    lines: list[QuotedLine]
    start_date: date
    end_date: date
    days: int
    subtotal: Decimal
    delivery_fee: Decimal
    setup_fee: Decimal
    deposit: Decimal
    total_amount: Decimal
    valid_until: datetime
    delivery_required: bool = False
    address: Optional[Mapping] = None

    def as_dict(self) -> dict:
        return {
            "equipmentItems": [line.as_dict() for line in self.lines],
            "pricing": {
                "subtotal": str(self.subtotal),
                "deliveryFee": str(self.delivery_fee),
                "setupFee": str(self.setup_fee),
                "totalAmount": str(self.total_amount),
                "deposit": str(self.deposit),
            },
            "rentalPeriod": {
                "startDate": self.start_date.isoformat(),
                "endDate": self.end_date.isoformat(),
                "totalDays": self.days,
            },
            "deliveryRequired": self.delivery_required,
            "validUntil": self.valid_until.isoformat(),
        }


@dataclass(frozen=True)
class QuoteResult:
    ok: bool
    quote: Optional[Quote] = None
    unavailable_items: list[dict] = field(default_factory=list)


@dataclass(frozen=True)
class Extension:
    rental: Rental
    additional_days: int
    additional_cost: Decimal


def rental_days(start_date: date, end_date: date) -> int:
    """Billable days for ``[start_date, end_date]``; raises on an empty or reversed period."""

    days = (end_date - start_date).days
    if days < 1:
        raise RentalError("invalid period")
    return days


def merge_lines(lines: Iterable[Mapping]) -> "OrderedDict[int, int]":
    """Collapse ``[{product_id, quantity}, ...]`` into ``{product_id: total_quantity}`` keeping first-seen order."""

    merged: "OrderedDict[int, int]" = OrderedDict()
    for line in lines:
        product_id = int(line["product_id"])
        quantity = int(line["quantity"])
        if quantity < 1:
            raise RentalError("Quantity must be at least 1")
        merged[product_id] = merged.get(product_id, 0) + quantity
    if not merged:
        raise RentalError("At least one equipment item is required")
    return merged


def delivery_fee_for(subtotal: Decimal, delivery_required: bool) -> Decimal:
    if not delivery_required or subtotal > settings.RENTAL_FREE_DELIVERY_THRESHOLD:
        return money(0)
    return money(settings.RENTAL_DELIVERY_FEE)


def setup_fee_for(line_count: int) -> Decimal:
    if line_count > settings.RENTAL_SETUP_FEE_MIN_LINES:
        return money(settings.RENTAL_SETUP_FEE)
    return money(0)


def _check_lines(
    merged: Mapping[int, int],
    start_date: date,
    end_date: date,
    products: Mapping[int, Product],
    exclude_rental_id: Optional[int] = None,
) -> list:
    """Resolve every line without short-circuiting; returns the availabilities in order."""

    return [
        resolve_availability(
            product_id,
            quantity,
            start_date,
            end_date,
            exclude_rental_id=exclude_rental_id,
            product=products.get(product_id),
        )
        for product_id, quantity in merged.items()
    ]


def _price(availabilities, days: int, delivery_required: bool) -> tuple[list[QuotedLine], dict]:
    lines = []
    for availability in availabilities:
        rate = money(availability.product.daily_rate)
        lines.append(
            QuotedLine(
                product=availability.product,
                quantity=availability.requested,
                daily_rate=rate,
                days=days,
                subtotal=money(rate * availability.requested * days),
            )
        )
    subtotal = money(sum((line.subtotal for line in lines), Decimal("0")))
    delivery_fee = delivery_fee_for(subtotal, delivery_required)
    setup_fee = setup_fee_for(len(lines))
    pricing = {
        "subtotal": subtotal,
        "delivery_fee": delivery_fee,
        "setup_fee": setup_fee,
        "deposit": money(subtotal * settings.RENTAL_DEPOSIT_RATE),
        "total_amount": money(subtotal + delivery_fee + setup_fee),
    }
    return lines, pricing


def build_quote(
    lines: Iterable[Mapping],
    start_date: date,
    end_date: date,
    delivery_required: bool = False,
    address: Optional[Mapping] = None,
    now: Optional[datetime] = None,
) -> QuoteResult:
    """Price a prospective rental without persisting anything.

    Returns ``QuoteResult(ok=False, unavailable_items=[...])`` listing every
    line that cannot be served; otherwise the quote is valid for
    ``RENTAL_QUOTE_TTL_HOURS`` from ``now``. Delivery is charged whenever it
    is requested below the free-delivery threshold; ``address`` is carried
    through as information only.
    """

    days = rental_days(start_date, end_date)
    merged = merge_lines(lines)
    products = Product.objects.in_bulk(list(merged.keys()))
    availabilities = _check_lines(merged, start_date, end_date, products)

    unavailable = [a.as_dict() for a in availabilities if not a.ok]
    if unavailable:
        return QuoteResult(ok=False, unavailable_items=unavailable)

    quoted, pricing = _price(availabilities, days, delivery_required)
    now = now or timezone.now()
    quote = Quote(
        lines=quoted,
        start_date=start_date,
        end_date=end_date,
        days=days,
        valid_until=now + timedelta(hours=settings.RENTAL_QUOTE_TTL_HOURS),
        delivery_required=delivery_required,
        address=address,
        **pricing,
    )
    return QuoteResult(ok=True, quote=quote)


def _lock_products(product_ids: Iterable[int]) -> dict[int, Product]:
    # Fixed lock order keeps concurrent bookings of overlapping equipment sets from deadlocking
    locked = Product.objects.select_for_update().filter(pk__in=list(product_ids)).order_by("pk")
    return {p.pk: p for p in locked}


@transaction.atomic
def create_rental(user, data: Mapping) -> Rental:
    """Book equipment for ``user`` in ``pending`` status.

    ``data`` carries ``equipment`` (``[{product_id, quantity}]``),
    ``start_date``, ``end_date`` and optional delivery, event, customer and
    notes fields. Raises `RentalConflict` listing every unavailable line.
    """

    start_date, end_date = data["start_date"], data["end_date"]
    days = rental_days(start_date, end_date)
    merged = merge_lines(data["equipment"])
    products = _lock_products(merged.keys())

    availabilities = _check_lines(merged, start_date, end_date, products)
    conflicts = [a.as_dict() for a in availabilities if not a.ok]
    if conflicts:
        logger.info(
            "rental_conflict",
            extra={"user_id": getattr(user, "id", None), "conflicts": len(conflicts)},
        )
        raise RentalConflict(conflicts)

    delivery_required = bool(data.get("delivery_required", False))
    quoted, pricing = _price(availabilities, days, delivery_required)
    customer = data.get("customer") or {}

    rental = Rental(
        number=next_number(settings.RENTAL_NUMBER_PREFIX),
        user=user,
        status=Rental.STATUS_PENDING,
        start_date=start_date,
        end_date=end_date,
        delivery_required=delivery_required,
        delivery_address=data.get("delivery_address"),
        event_type=data.get("event_type", ""),
        event_name=data.get("event_name", ""),
        venue=data.get("venue", ""),
        customer_first_name=customer.get("first_name") or user.first_name,
        customer_last_name=customer.get("last_name") or user.last_name,
        customer_email=customer.get("email") or user.email,
        customer_phone=customer.get("phone") or getattr(user, "phone", ""),
        customer_notes=data.get("customer_notes", ""),
        subtotal=pricing["subtotal"],
        delivery_fee=pricing["delivery_fee"],
        setup_fee=pricing["setup_fee"],
        deposit_amount=pricing["deposit"],
    )
    rental.calculate_totals()
    rental.save()

    RentalItem.objects.bulk_create(
        [
            RentalItem(
                rental=rental,
                product=line.product,
                name=line.product.name,
                daily_rate=line.daily_rate,
                quantity=line.quantity,
                total_days=line.days,
                subtotal=line.subtotal,
            )
            for line in quoted
        ]
    )
    RentalStatusEvent.objects.create(
        rental=rental, status=Rental.STATUS_PENDING, note="Rental request created", updated_by=user
    )
    logger.info(
        "rental_created",
        extra={
            "rental_id": rental.id,
            "number": rental.number,
            "user_id": rental.user_id,
            "total_amount": str(rental.total_amount),
        },
    )
    return rental


def _ensure_still_available(rental: Rental, start_date: date, end_date: date) -> None:
    merged = merge_lines({"product_id": item.product_id, "quantity": item.quantity} for item in rental.items.all())
    products = _lock_products(merged.keys())
    availabilities = _check_lines(merged, start_date, end_date, products, exclude_rental_id=rental.id)
    conflicts = [a.as_dict() for a in availabilities if not a.ok]
    if conflicts:
        raise RentalConflict(conflicts)


@transaction.atomic
def transition_rental(
    rental: Rental,
    status: str,
    note: str = "",
    updated_by=None,
    today: Optional[date] = None,
) -> Rental:
    """Move a rental to ``status`` if the transition table allows it.

    Confirming a pending rental re-checks availability, since pending rentals
    do not hold stock. Entering ``active`` stamps ``actual_start_date`` and
    entering ``completed`` stamps ``actual_end_date`` (when unset).
    """

    if status not in RentalStatus.values:
        raise InvalidTransition(f"Unknown rental status '{status}'")
    rental = Rental.objects.select_for_update().get(pk=rental.pk)
    prev = rental.status
    if status not in ALLOWED_TRANSITIONS.get(prev, frozenset()):
        raise InvalidTransition(f"Cannot change rental status from '{prev}' to '{status}'")

    if prev not in Rental.RESERVING_STATUSES and status in Rental.RESERVING_STATUSES:
        _ensure_still_available(rental, rental.start_date, rental.end_date)

    today = today or timezone.localdate()
    rental.status = status
    update_fields = ["status", "updated_at"]
    if status == Rental.STATUS_ACTIVE and rental.actual_start_date is None:
        rental.actual_start_date = today
        update_fields.append("actual_start_date")
    if status == Rental.STATUS_COMPLETED and rental.actual_end_date is None:
        rental.actual_end_date = today
        update_fields.append("actual_end_date")
    rental.save(update_fields=update_fields)

    RentalStatusEvent.objects.create(rental=rental, status=status, note=note, updated_by=updated_by)
    logger.info(
        "rental_status_changed",
        extra={
            "rental_id": rental.id,
            "number": rental.number,
            "status_from": prev,
            "status_to": status,
            "updated_by": getattr(updated_by, "id", None),
        },
    )
    return rental


@transaction.atomic
def extend_rental(rental: Rental, new_end_date: date, updated_by=None) -> Extension:
    """Push ``end_date`` to ``new_end_date`` and bill the extra days.

    ``additional_cost = sum(daily_rate * quantity) * additional_days`` is added
    to both ``subtotal`` and ``total_amount``. The added days are conflict
    checked against other reservations first.
    """

    rental = Rental.objects.select_for_update().get(pk=rental.pk)
    if rental.status not in EXTENDABLE_STATUSES:
        raise RentalError("Only active or confirmed rentals can be extended")
    if new_end_date <= rental.end_date:
        raise RentalError("New end date must be after the current end date")

    _ensure_still_available(rental, rental.end_date + timedelta(days=1), new_end_date)

    additional_days = (new_end_date - rental.end_date).days
    items = list(rental.items.all())
    daily_total = sum((item.daily_rate * item.quantity for item in items), Decimal("0"))
    additional_cost = money(daily_total * additional_days)

    for item in items:
        item.total_days += additional_days
        item.subtotal = money(item.subtotal + item.daily_rate * item.quantity * additional_days)
    RentalItem.objects.bulk_update(items, ["total_days", "subtotal"])

    prev_end = rental.end_date
    rental.end_date = new_end_date
    rental.subtotal = money(rental.subtotal + additional_cost)
    rental.total_amount = money(rental.total_amount + additional_cost)
    rental.save(update_fields=["end_date", "subtotal", "total_amount", "updated_at"])

    RentalStatusEvent.objects.create(
        rental=rental,
        status=rental.status,
        note=f"Extended from {prev_end.isoformat()} to {new_end_date.isoformat()} (+{additional_cost} EUR)",
        updated_by=updated_by,
    )
    logger.info(
        "rental_extended",
        extra={
            "rental_id": rental.id,
            "number": rental.number,
            "additional_days": additional_days,
            "additional_cost": str(additional_cost),
        },
    )
    return Extension(rental=rental, additional_days=additional_days, additional_cost=additional_cost)


def mark_overdue_rentals(today: Optional[date] = None) -> int:
    """Flag active rentals whose end date has passed; returns how many changed."""

    today = today or timezone.localdate()
    count = 0
    for rental in Rental.objects.filter(status=Rental.STATUS_ACTIVE, end_date__lt=today).only("pk"):
        transition_rental(rental, Rental.STATUS_OVERDUE, note="Return date passed", today=today)
        count += 1
    return count


# EOF
