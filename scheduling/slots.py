from __future__ import annotations

import logging
from datetime import date as date_type
from datetime import datetime
from datetime import time as time_type
from typing import Iterable

from django.conf import settings
from django.db import IntegrityError, transaction

from .errors import SlotsAlreadyGenerated, ValidationError
from .models import Booking, Slot


logger = logging.getLogger(__name__)


def parse_date(value: str) -> date_type:
    try:
        return date_type.fromisoformat((value or "").strip())
    except ValueError as exc:
        raise ValidationError("Data inválida. Use o formato AAAA-MM-DD.") from exc


def parse_time(value: str) -> time_type:
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError as exc:
        raise ValidationError("Horário inválido. Use o formato HH:MM.") from exc


def generate_slots(target_date: date_type, template_times: Iterable[str] | None = None) -> list[Slot]:
    """
    Create one slot per template time for a date. Times already held by a
    booking are created unavailable.

    A date is generated once: if any slot already exists for it the whole
    batch is rejected, so re-running never duplicates rows. Delete the date's
    slots first to regenerate.
    """
    if template_times is None:
        template_times = settings.AGENDA_SLOT_TEMPLATE

    times = sorted({parse_time(value) for value in template_times})
    if not times:
        raise ValidationError("Informe ao menos um horário.")

    try:
        with transaction.atomic():
            if Slot.objects.filter(date=target_date).exists():
                raise SlotsAlreadyGenerated(f"Já existem horários cadastrados para {target_date:%d/%m/%Y}.")
            booked = set(Booking.objects.filter(date=target_date).values_list("time", flat=True))
            created = Slot.objects.bulk_create(
                Slot(date=target_date, time=t, available=t not in booked) for t in times
            )
    except IntegrityError as exc:
        raise SlotsAlreadyGenerated(f"Já existem horários cadastrados para {target_date:%d/%m/%Y}.") from exc

    logger.info("Generated %d slots for %s", len(created), target_date.isoformat())
    return created


def list_available_dates(since: date_type | None = None) -> list[date_type]:
    qs = Slot.objects.filter(available=True)
    if since is not None:
        qs = qs.filter(date__gte=since)
    return list(qs.order_by("date").values_list("date", flat=True).distinct())


def list_available_times(target_date: date_type) -> list[time_type]:
    return list(
        Slot.objects.filter(date=target_date, available=True).order_by("time").values_list("time", flat=True)
    )


def mark_unavailable(target_date: date_type, target_time: time_type) -> int:
    return Slot.objects.filter(date=target_date, time=target_time).update(available=False)


def mark_available(target_date: date_type, target_time: time_type) -> int:
    return Slot.objects.filter(date=target_date, time=target_time).update(available=True)


def delete_slots_for_date(target_date: date_type) -> int:
    deleted, _ = Slot.objects.filter(date=target_date).delete()
    logger.info("Deleted %d slots for %s", deleted, target_date.isoformat())
    return deleted
