from datetime import date, time

import pytest

from scheduling.errors import SlotsAlreadyGenerated, ValidationError
from scheduling.models import Slot
from scheduling.slots import (
    delete_slots_for_date,
    generate_slots,
    list_available_dates,
    list_available_times,
    mark_available,
    mark_unavailable,
    parse_time,
)


pytestmark = pytest.mark.django_db


def test_generate_slots_sorts_and_deduplicates(booking_day):
    created = generate_slots(booking_day, ["14:00", "08:00", "08:00"])

    assert len(created) == 2
    assert list_available_times(booking_day) == [time(8, 0), time(14, 0)]


def test_generate_slots_uses_the_configured_template(settings, booking_day):
    settings.AGENDA_SLOT_TEMPLATE = ["10:00", "11:00", "15:00"]

    generate_slots(booking_day)

    assert Slot.objects.filter(date=booking_day).count() == 3


def test_generate_slots_rejects_a_date_that_already_has_slots(day_slots, booking_day):
    with pytest.raises(SlotsAlreadyGenerated):
        generate_slots(booking_day, ["10:00"])

    assert Slot.objects.filter(date=booking_day).count() == 2


def test_generate_slots_rejects_bad_templates(booking_day):
    with pytest.raises(ValidationError):
        generate_slots(booking_day, [])
    with pytest.raises(ValidationError):
        generate_slots(booking_day, ["8h"])
    assert not Slot.objects.exists()


def test_available_dates_are_distinct_and_ascending():
    generate_slots(date(2025, 10, 11), ["08:00"])
    generate_slots(date(2025, 10, 9), ["08:00", "09:00"])
    generate_slots(date(2025, 10, 10), ["08:00"])
    mark_unavailable(date(2025, 10, 10), time(8, 0))

    assert list_available_dates() == [date(2025, 10, 9), date(2025, 10, 11)]
    assert list_available_dates(since=date(2025, 10, 10)) == [date(2025, 10, 11)]


def test_mark_flags_and_no_op_on_missing_slot(day_slots, booking_day):
    assert mark_unavailable(booking_day, time(8, 0)) == 1
    assert list_available_times(booking_day) == [time(9, 0)]

    assert mark_available(booking_day, time(8, 0)) == 1
    assert list_available_times(booking_day) == [time(8, 0), time(9, 0)]

    assert mark_unavailable(booking_day, time(17, 0)) == 0


def test_delete_slots_for_date_reports_count(day_slots, booking_day):
    generate_slots(date(2025, 10, 10), ["08:00"])

    assert delete_slots_for_date(booking_day) == 2
    assert delete_slots_for_date(booking_day) == 0
    assert Slot.objects.count() == 1


def test_parse_time_requires_hh_mm():
    assert parse_time("09:30") == time(9, 30)
    with pytest.raises(ValidationError):
        parse_time("9h30")
