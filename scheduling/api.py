from __future__ import annotations

import json
import logging

from django.conf import settings
from django.db import DatabaseError
from django.http import HttpResponse, JsonResponse
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from .errors import DuplicateBooking, SlotUnavailable, StoreError, ValidationError
from .receipts import pop_receipt
from .services import BookingInput, book
from .slots import list_available_dates, list_available_times, parse_date, parse_time


logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({"success": False, "message": message}, status=status)


@require_GET
def home(request):
    return HttpResponse(f"Agenda - {settings.AGENDA_OFFICE_NAME} está online!", content_type="text/plain")


@require_GET
def available_dates_api(request):
    """
    GET /api/datas-disponiveis

    Dates from today on that still have at least one free slot.
    """
    try:
        dates = list_available_dates(since=timezone.localdate())
    except DatabaseError:
        logger.exception("Failed to list available dates")
        return _error("Erro ao buscar datas disponíveis.", 500)
    return JsonResponse({"success": True, "datas": [d.isoformat() for d in dates]})


@require_GET
def available_times_api(request):
    """
    GET /api/horarios-disponiveis?data=YYYY-MM-DD
    """
    date_str = request.GET.get("data", "").strip()
    if not date_str:
        return _error("Parâmetro obrigatório: data.", 400)

    try:
        target_date = parse_date(date_str)
        times = list_available_times(target_date)
    except ValidationError as exc:
        return _error(str(exc), 400)
    except DatabaseError:
        logger.exception("Failed to list available times for %s", date_str)
        return _error("Erro ao buscar horários disponíveis.", 500)

    return JsonResponse({"success": True, "data": target_date.isoformat(), "horarios": [t.strftime("%H:%M") for t in times]})


@require_POST
def book_api(request):
    """
    POST /api/agendar
    Payload (JSON):
      - nome, cpf, data (YYYY-MM-DD), hora (HH:MM)
      - email, telefone (required unless AGENDA_REQUIRE_CONTACT is off)
    """
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("JSON inválido.", 400)
    if not isinstance(payload, dict):
        return _error("JSON inválido.", 400)

    date_str = str(payload.get("data") or "").strip()
    time_str = str(payload.get("hora") or "").strip()

    try:
        result = book(
            BookingInput(
                name=str(payload.get("nome") or ""),
                cpf=str(payload.get("cpf") or ""),
                email=str(payload.get("email") or ""),
                phone=str(payload.get("telefone") or ""),
                date=parse_date(date_str) if date_str else None,
                time=parse_time(time_str) if time_str else None,
            )
        )
    except ValidationError as exc:
        return _error(str(exc), 400)
    except (DuplicateBooking, SlotUnavailable) as exc:
        return _error(str(exc), 409)
    except StoreError as exc:
        return _error(str(exc), 500)

    body = {
        "success": True,
        "message": "Agendamento realizado com sucesso.",
        "agendamento_id": result.booking.id,
    }
    if result.receipt:
        body["comprovante"] = reverse("scheduling:receipt_download", args=[result.receipt])
    return JsonResponse(body, status=201)


@require_GET
def receipt_download(request, filename: str):
    """
    GET /api/comprovante/<arquivo>

    Serves the receipt once; the file is removed after it is read.
    """
    try:
        content = pop_receipt(filename)
    except FileNotFoundError:
        return _error("Comprovante não encontrado.", 404)

    response = HttpResponse(content, content_type="application/pdf")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
