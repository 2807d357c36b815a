from __future__ import annotations

import json
import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.auth import require_session

from .errors import DuplicateBooking, SlotsAlreadyGenerated, StoreError, ValidationError
from .models import Booking
from .services import cancel, list_bookings, set_status
from .slots import delete_slots_for_date, generate_slots, parse_date
from .validators import format_cpf


logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({"success": False, "message": message}, status=status)


def _load_payload(request) -> dict:
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("JSON inválido.") from exc
    if not isinstance(payload, dict):
        raise ValidationError("JSON inválido.")
    return payload


def _serialize_booking(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "nome": booking.name,
        "cpf": format_cpf(booking.cpf),
        "email": booking.email,
        "telefone": booking.phone,
        "data": booking.date.isoformat(),
        "hora": booking.time.strftime("%H:%M"),
        "status": booking.status,
    }


@require_GET
@require_session
def bookings_api(request):
    """
    GET /admin/api/agendamentos?inicio=YYYY-MM-DD&fim=YYYY-MM-DD
    Both bounds are optional and inclusive.
    """
    start_str = request.GET.get("inicio", "").strip()
    end_str = request.GET.get("fim", "").strip()

    try:
        start = parse_date(start_str) if start_str else None
        end = parse_date(end_str) if end_str else None
        bookings = [_serialize_booking(b) for b in list_bookings(start, end)]
    except ValidationError as exc:
        return _error(str(exc), 400)
    except DatabaseError:
        logger.exception("Failed to list bookings")
        return _error("Erro ao buscar agendamentos.", 500)

    return JsonResponse({"success": True, "agendamentos": bookings})


@require_http_methods(["DELETE"])
@require_session
def cancel_booking_api(request, booking_id: int):
    """
    DELETE /admin/api/agendamentos/<id>
    Deletes the booking and frees its slot.
    """
    try:
        cancel(booking_id)
    except Booking.DoesNotExist:
        return _error("Agendamento não encontrado.", 404)
    except StoreError as exc:
        return _error(str(exc), 500)

    return JsonResponse({"success": True, "message": "Agendamento cancelado."})


@require_POST
@require_session
def booking_status_api(request, booking_id: int):
    """
    POST /admin/api/agendamentos/<id>/status
    Payload (JSON): status ("pending" | "served")
    """
    try:
        payload = _load_payload(request)
        set_status(booking_id, str(payload.get("status") or "").strip())
    except ValidationError as exc:
        return _error(str(exc), 400)
    except Booking.DoesNotExist:
        return _error("Agendamento não encontrado.", 404)
    except DuplicateBooking as exc:
        return _error(str(exc), 409)
    except StoreError as exc:
        return _error(str(exc), 500)

    return JsonResponse({"success": True, "message": "Status atualizado."})


@require_POST
@require_session
def generate_slots_api(request):
    """
    POST /admin/api/cadastrar-horarios
    Payload (JSON):
      - data: YYYY-MM-DD
      - horarios: optional list of HH:MM (defaults to the daily template)
    """
    try:
        payload = _load_payload(request)
        date_str = str(payload.get("data") or "").strip()
        if not date_str:
            raise ValidationError("Parâmetro obrigatório: data.")
        times = payload.get("horarios")
        if times is not None and not isinstance(times, list):
            raise ValidationError("horarios deve ser uma lista de HH:MM.")
        created = generate_slots(parse_date(date_str), [str(t) for t in times] if times is not None else None)
    except ValidationError as exc:
        return _error(str(exc), 400)
    except SlotsAlreadyGenerated as exc:
        return _error(str(exc), 409)
    except DatabaseError:
        logger.exception("Failed to generate slots")
        return _error("Erro ao cadastrar horários.", 500)

    return JsonResponse(
        {"success": True, "message": "Horários cadastrados.", "total": len(created)},
        status=201,
    )


@require_http_methods(["DELETE"])
@require_session
def delete_slots_api(request, date_str: str):
    """
    DELETE /admin/api/horarios/<data>
    """
    try:
        removed = delete_slots_for_date(parse_date(date_str))
    except ValidationError as exc:
        return _error(str(exc), 400)
    except DatabaseError:
        logger.exception("Failed to delete slots for %s", date_str)
        return _error("Erro ao remover horários.", 500)

    return JsonResponse({"success": True, "removidos": removed})
