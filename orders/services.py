"""Order services: checkout, payment, cancellation and status changes.

Stock is deducted at checkout and restored on cancellation, both while the
affected `Product` rows are locked.
"""

import hashlib
import json
import logging
from collections import OrderedDict
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Mapping, Optional, Tuple

from catalog.models import Product
from common.choices import OrderPaymentStatus, OrderStatus
from common.sequences import next_number
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .emails import send_order_confirmation_email, send_order_paid_email
from .models import IdempotencyKey, Order, OrderItem, OrderStatusEvent

logger = logging.getLogger("musicstore.orders")

CENT = Decimal("0.01")

ALLOWED_TRANSITIONS: dict[str, frozenset] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


class OrderError(Exception):
    """Business rule violation; ``items`` lists offending lines when relevant."""

    def __init__(self, message: str, items: Optional[list] = None):
        super().__init__(message)
        self.items = items or []


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def shipping_cost_for(subtotal: Decimal, requires_pickup: bool) -> Decimal:
    if requires_pickup or subtotal >= settings.ORDER_FREE_SHIPPING_THRESHOLD:
        return money(0)
    return money(settings.ORDER_SHIPPING_COST)


def price_order(subtotal: Decimal, requires_pickup: bool = False, discount: Decimal = Decimal("0")) -> dict:
    """Tax, shipping and total for a subtotal; ``total = subtotal + tax + shipping - discount``."""

    subtotal = money(subtotal)
    tax = money(subtotal * settings.ORDER_TAX_RATE)
    shipping = shipping_cost_for(subtotal, requires_pickup)
    discount = money(discount)
    return {
        "subtotal": subtotal,
        "tax_amount": tax,
        "shipping_cost": shipping,
        "discount_amount": discount,
        "total_amount": money(subtotal + tax + shipping - discount),
    }


def _merge_items(items: Iterable[Mapping]) -> "OrderedDict[int, int]":
    merged: "OrderedDict[int, int]" = OrderedDict()
    for item in items:
        product_id = int(item["product_id"])
        merged[product_id] = merged.get(product_id, 0) + int(item["quantity"])
    if not merged:
        raise OrderError("At least one item is required")
    return merged


def _log_status(order: Order, prev: str, updated_by=None) -> None:
    logger.info(
        "order_status_changed",
        extra={
            "order_id": order.id,
            "number": order.number,
            "user_id": order.user_id,
            "status_from": prev,
            "status_to": order.status,
            "updated_by": getattr(updated_by, "id", None),
        },
    )


@transaction.atomic
def create_order(user, data: Mapping) -> Order:
    """Check out ``data['items']`` (``[{product_id, quantity}]``) for ``user``.

    Locks the products, verifies each is available with enough stock, snapshots
    the sale-adjusted unit price and deducts stock. Raises `OrderError` with
    the offending lines otherwise.
    """

    merged = _merge_items(data["items"])
    locked = Product.objects.select_for_update().filter(pk__in=list(merged.keys())).order_by("pk")
    products = {p.pk: p for p in locked}

    problems = []
    for product_id, quantity in merged.items():
        product = products.get(product_id)
        if product is None:
            problems.append(
                {"productId": product_id, "requested": quantity, "available": 0, "reason": "Product not found"}
            )
        elif not product.is_in_stock(quantity):
            problems.append(
                {
                    "productId": product_id,
                    "productName": product.name,
                    "requested": quantity,
                    "available": product.stock if product.is_available else 0,
                    "reason": "Insufficient stock",
                }
            )
    if problems:
        raise OrderError("Some products are not available", items=problems)

    lines = []
    for product_id, quantity in merged.items():
        product = products[product_id]
        unit_price = money(product.discounted_price)
        lines.append((product, quantity, unit_price, money(unit_price * quantity)))

    requires_pickup = bool(data.get("requires_pickup", False))
    pricing = price_order(sum((line[3] for line in lines), Decimal("0")), requires_pickup)
    address = data.get("shipping_address") or {}

    order = Order.objects.create(
        user=user,
        number=next_number(settings.ORDER_NUMBER_PREFIX),
        email=getattr(user, "email", None),
        payment_method=data["payment_method"],
        requires_pickup=requires_pickup,
        customer_notes=data.get("customer_notes", ""),
        shipping_first_name=address.get("first_name") or user.first_name,
        shipping_last_name=address.get("last_name") or user.last_name,
        shipping_street=address.get("street", ""),
        shipping_city=address.get("city", ""),
        shipping_postal_code=address.get("postal_code", ""),
        shipping_province=address.get("province", ""),
        shipping_country=address.get("country") or "ES",
        shipping_phone=address.get("phone") or getattr(user, "phone", "") or "",
        **pricing,
    )
    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product=product,
                product_name=product.name,
                quantity=quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
            for product, quantity, unit_price, line_total in lines
        ]
    )
    for product, quantity, _, _ in lines:
        Product.objects.filter(pk=product.pk).update(stock=F("stock") - quantity)

    OrderStatusEvent.objects.create(order=order, status=Order.STATUS_PENDING, note="Order placed", updated_by=user)
    logger.info(
        "order_created",
        extra={
            "order_id": order.id,
            "number": order.number,
            "user_id": order.user_id,
            "total_amount": str(order.total_amount),
        },
    )
    transaction.on_commit(lambda: send_order_confirmation_email(order))
    return order


def _restore_stock(order: Order) -> None:
    items = list(order.items.all())
    # lock in pk order, same as checkout
    list(Product.objects.select_for_update().filter(pk__in=[i.product_id for i in items]).order_by("pk"))
    for item in items:
        Product.objects.filter(pk=item.product_id).update(stock=F("stock") + item.quantity)


@transaction.atomic
def transition_order(order: Order, status: str, note: str = "", updated_by=None, tracking_number: str = "") -> Order:
    """Apply a staff status change; entering ``cancelled`` restores stock."""

    order = Order.objects.select_for_update().get(pk=order.pk)
    prev = order.status
    if status not in ALLOWED_TRANSITIONS.get(prev, frozenset()):
        raise OrderError(f"Cannot change order status from '{prev}' to '{status}'")

    order.status = status
    update_fields = ["status", "updated_at"]
    if tracking_number:
        order.tracking_number = tracking_number
        update_fields.append("tracking_number")
    if status == Order.STATUS_CANCELLED:
        _restore_stock(order)
        order.cancelled_at = timezone.now()
        order.cancel_reason = note
        update_fields += ["cancelled_at", "cancel_reason"]
    if status == Order.STATUS_REFUNDED and order.payment_status == OrderPaymentStatus.PAID:
        order.payment_status = OrderPaymentStatus.REFUNDED
        update_fields.append("payment_status")
    order.save(update_fields=update_fields)

    OrderStatusEvent.objects.create(order=order, status=status, note=note, updated_by=updated_by)
    _log_status(order, prev, updated_by)
    return order


def cancel_order(order: Order, reason: str = "", updated_by=None) -> Order:
    """Customer cancellation; only ``pending`` and ``confirmed`` orders qualify."""

    if order.status == Order.STATUS_CANCELLED:
        return order
    if not order.can_be_cancelled:
        raise OrderError("This order can no longer be cancelled")
    return transition_order(order, Order.STATUS_CANCELLED, note=reason, updated_by=updated_by)


@transaction.atomic
def pay_order(order: Order, updated_by=None) -> Order:
    """Record payment; a pending order moves to ``confirmed``.

    Paying an already paid order is a no-op.
    """

    order = Order.objects.select_for_update().get(pk=order.pk)
    if order.status in (Order.STATUS_CANCELLED, Order.STATUS_REFUNDED):
        raise OrderError("Cannot pay a cancelled order")
    if order.payment_status == OrderPaymentStatus.PAID:
        return order

    order.payment_status = OrderPaymentStatus.PAID
    order.save(update_fields=["payment_status", "updated_at"])
    logger.info("order_paid", extra={"order_id": order.id, "number": order.number, "user_id": order.user_id})
    if order.status == Order.STATUS_PENDING:
        order = transition_order(order, Order.STATUS_CONFIRMED, note="Payment received", updated_by=updated_by)
    transaction.on_commit(lambda: send_order_paid_email(order))
    return order


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope is derived from the caller: for authenticated users, "user:<id>"; otherwise "anon".
    - If a record exists and the stored `request_hash` differs from the provided one, returns 409.
    - If a record exists but response is not yet stored, returns 409 to indicate in-progress.
    """

    scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + timedelta(hours=settings.IDEMPOTENCY_TTL_HOURS),
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"success": False, "message": "Idempotency key reused with different request payload"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            return idem.response_json, int(idem.response_code)
        return {"success": False, "message": "Request in progress"}, 409

    body, code = handler()
    # Decimal and date values become plain JSON
    safe_body = json.loads(json.dumps(body, default=str))
    IdempotencyKey.objects.filter(id=idem.id).update(response_json=safe_body, response_code=code)
    return body, code


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Canonical SHA256 of the request body (sorted-keys JSON); None for an empty body."""

    if not data:
        return None
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def purge_expired_keys(now=None) -> int:
    now = now or timezone.now()
    deleted, _ = IdempotencyKey.objects.filter(expires_at__lt=now).delete()
    return deleted


# EOF
