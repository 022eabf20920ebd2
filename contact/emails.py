"""Outgoing contact emails: the staff reply to the customer."""

from django.conf import settings
from django.core.mail import send_mail


def send_reply_email(contact) -> None:
    subject = f"Re: {contact.subject} [{contact.ticket_number}]"
    body = f"Hello {contact.first_name},\n\n{contact.response_message}\n\nTicket: {contact.ticket_number}\n"
    send_mail(
        subject,
        body,
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [contact.email],
        fail_silently=True,
    )
