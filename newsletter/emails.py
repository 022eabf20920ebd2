"""Newsletter emails: the subscription confirmation and campaign messages.

Links point at the storefront (FRONTEND_URL), which calls the token endpoints.
"""

from django.conf import settings
from django.core.mail import EmailMessage, send_mail


def _link(path: str) -> str:
    frontend = getattr(settings, "FRONTEND_URL", "")
    return f"{frontend.rstrip('/')}/newsletter/{path}"


def send_confirmation_email(subscriber) -> None:
    body = (
        f"Hello {subscriber.full_name},\n\n"
        "Please confirm your subscription to our newsletter:\n"
        f"{_link('confirm/' + subscriber.confirmation_token)}\n\n"
        "If you did not subscribe, just ignore this message.\n"
    )
    send_mail(
        "Confirm your newsletter subscription",
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [subscriber.email],
        fail_silently=True,
    )


def campaign_message(subscriber, subject: str, content: str) -> EmailMessage:
    body = f"{content}\n\n--\nUnsubscribe: {_link('unsubscribe/' + subscriber.unsubscribe_token)}\n"
    return EmailMessage(subject, body, getattr(settings, "DEFAULT_FROM_EMAIL", None), [subscriber.email])
