"""Atomic document numbering (``PREFIX + YYMMDD + NNN``)."""

from datetime import date
from typing import Optional

from django.db import transaction
from django.utils import timezone

from .models import DailySequence


def next_number(prefix: str, day: Optional[date] = None, pad_width: int = 3) -> str:
    """Return the next number for ``prefix`` on ``day`` (defaults to today, local time).

    The counter row is locked for the duration of the increment, so concurrent
    callers never receive the same value. Sequences past ``10**pad_width - 1``
    simply grow wider.
    """

    day = day or timezone.localdate()
    with transaction.atomic():
        seq, _ = DailySequence.objects.select_for_update().get_or_create(prefix=prefix, day=day)
        seq.last_value += 1
        seq.save(update_fields=["last_value"])
    return f"{prefix}{day:%y%m%d}{seq.last_value:0{pad_width}d}"
