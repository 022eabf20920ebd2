from django.utils.dateparse import parse_datetime
from rest_framework import serializers


class CalendarDateField(serializers.DateField):
    """ISO-8601 date that also accepts a full timestamp.

    ``2024-06-01T00:00:00Z`` is read as ``2024-06-01``: the calendar day as
    written by the client, without shifting to the server timezone.
    """

    def to_internal_value(self, value):
        if isinstance(value, str) and "T" in value:
            parsed = parse_datetime(value.strip())
            if parsed is None:
                self.fail("invalid", format="YYYY-MM-DD")
            return parsed.date()
        return super().to_internal_value(value)
