from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as date_type
from datetime import time as time_type

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from . import receipts
from .errors import DuplicateBooking, SlotUnavailable, StoreError, ValidationError
from .models import Booking, BookingStatus, Slot
from .slots import mark_available
from .validators import normalize_cpf, normalize_phone, validate_email


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingInput:
    name: str
    cpf: str
    date: date_type
    time: time_type
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class BookingResult:
    booking: Booking
    receipt: str | None = None


def _clean_input(data: BookingInput) -> BookingInput:
    name = (data.name or "").strip()
    email = (data.email or "").strip()
    phone = (data.phone or "").strip()
    require_contact = settings.AGENDA_REQUIRE_CONTACT

    missing = not name or not (data.cpf or "").strip() or data.date is None or data.time is None
    if require_contact and (not email or not phone):
        missing = True
    if missing:
        if require_contact:
            raise ValidationError("Nome, CPF, e-mail, telefone, data e hora são obrigatórios.")
        raise ValidationError("Nome, CPF, data e hora são obrigatórios.")

    if data.date < timezone.localdate():
        raise ValidationError("Não é possível agendar em uma data passada.")

    if len(name) > Booking._meta.get_field("name").max_length:
        raise ValidationError("Nome muito longo.")
    if len(email) > Booking._meta.get_field("email").max_length:
        raise ValidationError("E-mail muito longo.")

    cpf = normalize_cpf(data.cpf)
    if email:
        email = validate_email(email)
    if phone:
        phone = normalize_phone(phone)

    return BookingInput(name=name, cpf=cpf, date=data.date, time=data.time, email=email, phone=phone)


def _has_active_booking(cpf: str) -> bool:
    return Booking.objects.filter(cpf=cpf, status=BookingStatus.PENDING).exists()


def book(data: BookingInput, *, with_receipt: bool | None = None) -> BookingResult:
    """
    Create a booking safely:
    - Validates fields and the CPF check digits.
    - Locks the target Slot row and re-checks availability in-transaction.
    - Inserts the booking and flips the slot in the same transaction.
    - Relies on the unique constraints as the final guard against races.
    """
    data = _clean_input(data)

    try:
        with transaction.atomic():
            if _has_active_booking(data.cpf):
                raise DuplicateBooking("Este CPF já possui um agendamento ativo.")

            slot = (
                Slot.objects.select_for_update()
                .filter(date=data.date, time=data.time, available=True)
                .first()
            )
            if slot is None:
                raise SlotUnavailable("Horário indisponível.")

            booking = Booking.objects.create(
                name=data.name,
                cpf=data.cpf,
                email=data.email,
                phone=data.phone,
                date=data.date,
                time=data.time,
                status=BookingStatus.PENDING,
            )
            slot.available = False
            slot.save(update_fields=["available"])
    except IntegrityError as exc:
        # Lost a race against a concurrent booking; work out which constraint fired.
        if _has_active_booking(data.cpf):
            raise DuplicateBooking("Este CPF já possui um agendamento ativo.") from exc
        raise SlotUnavailable("Este horário acabou de ser reservado. Escolha outro.") from exc
    except DatabaseError as exc:
        logger.exception("Failed to store booking for %s %s", data.date, data.time)
        raise StoreError("Erro ao agendar.") from exc

    logger.info("Booking %s created for %s %s", booking.id, booking.date, booking.time.strftime("%H:%M"))

    if with_receipt is None:
        with_receipt = settings.AGENDA_RECEIPTS_ENABLED

    receipt = None
    if with_receipt:
        try:
            receipt = receipts.render_receipt(booking)
        except Exception:
            logger.exception("Failed to render receipt for booking %s", booking.id)

    return BookingResult(booking=booking, receipt=receipt)


def cancel(booking_id: int) -> None:
    """
    Delete a booking and give its slot back, in one transaction.
    """
    try:
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(id=booking_id)
            booking_date, booking_time = booking.date, booking.time
            booking.delete()
            mark_available(booking_date, booking_time)
    except DatabaseError as exc:
        logger.exception("Failed to cancel booking %s", booking_id)
        raise StoreError("Erro ao cancelar agendamento.") from exc

    logger.info("Booking %s cancelled, slot %s %s released", booking_id, booking_date, booking_time.strftime("%H:%M"))


def set_status(booking_id: int, status: str) -> Booking:
    """
    Change only the status field. Slot availability is untouched.
    """
    if status not in BookingStatus.values:
        raise ValidationError("Status inválido. Use 'pending' ou 'served'.")

    try:
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(id=booking_id)
            if booking.status == status:
                return booking
            if (
                status == BookingStatus.PENDING
                and Booking.objects.filter(cpf=booking.cpf, status=BookingStatus.PENDING).exclude(id=booking.id).exists()
            ):
                raise DuplicateBooking("Este CPF já possui um agendamento ativo.")
            booking.status = status
            booking.save(update_fields=["status", "updated_at"])
    except IntegrityError as exc:
        raise DuplicateBooking("Este CPF já possui um agendamento ativo.") from exc
    except DatabaseError as exc:
        logger.exception("Failed to update status of booking %s", booking_id)
        raise StoreError("Erro ao atualizar agendamento.") from exc

    return booking


def list_bookings(start: date_type | None = None, end: date_type | None = None):
    if start and end and start > end:
        raise ValidationError("A data inicial deve ser anterior à data final.")

    qs = Booking.objects.all()
    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    return qs.order_by("date", "time", "id")
