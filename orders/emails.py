"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def _order_url(order) -> str:
    frontend = getattr(settings, "FRONTEND_URL", "")
    return f"{frontend.rstrip('/')}/orders/{order.id}" if frontend else ""


def _send(order, subject: str, body: str) -> None:
    to_email = order.email or getattr(order.user, "email", None)
    if not to_email:
        return
    send_mail(subject, body, getattr(settings, "DEFAULT_FROM_EMAIL", None), [to_email], fail_silently=True)


def send_order_confirmation_email(order) -> None:
    """Acknowledge a new order with its number, total and a link to it."""

    lines = "".join(f"  {item.quantity} x {item.product_name}: {item.line_total} EUR\n" for item in order.items.all())
    body = (
        "Thank you for your order!\n\n"
        f"Order: {order.number}\n"
        f"{lines}"
        f"Total: {order.total_amount} EUR\n\n"
        f"You can follow your order here: {_order_url(order)}\n"
    )
    _send(order, f"Order {order.number} received", body)


def send_order_paid_email(order) -> None:
    body = (
        "We have received your payment.\n\n"
        f"Order: {order.number}\n"
        f"Status: {order.status}\n\n"
        f"You can view your order here: {_order_url(order)}\n"
    )
    _send(order, f"Your order {order.number} is confirmed", body)
