from django.db import models


class DailySequence(models.Model):
    """Per-prefix, per-day counter backing human-readable document numbers.

    One row per ``(prefix, day)``; ``last_value`` is the last number handed out.
    Rows are only ever incremented under ``select_for_update``.
    """

    prefix = models.CharField(max_length=16)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["prefix", "day"], name="uniq_daily_sequence_prefix_day"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.prefix}{self.day:%y%m%d} -> {self.last_value}"
