from datetime import date

import pytest
from common.models import DailySequence
from common.sequences import next_number


@pytest.mark.django_db
def test_next_number_starts_at_one_and_increments_per_day():
    day = date(2024, 3, 15)
    assert next_number("ALQ", day) == "ALQ240315001"
    assert next_number("ALQ", day) == "ALQ240315002"
    assert next_number("ALQ", date(2024, 3, 16)) == "ALQ240316001"
    assert DailySequence.objects.get(prefix="ALQ", day=day).last_value == 2


@pytest.mark.django_db
def test_prefixes_are_counted_independently():
    day = date(2024, 3, 15)
    next_number("ALQ", day)
    assert next_number("EPK", day) == "EPK240315001"


@pytest.mark.django_db
def test_sequence_grows_past_padding():
    day = date(2024, 3, 15)
    DailySequence.objects.create(prefix="ALQ", day=day, last_value=999)
    assert next_number("ALQ", day) == "ALQ2403151000"
