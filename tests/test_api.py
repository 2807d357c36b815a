import json
from datetime import timedelta

import pytest
from django.utils import timezone

from scheduling.models import Booking, BookingStatus, Slot
from scheduling.receipts import receipts_dir
from scheduling.slots import generate_slots


pytestmark = pytest.mark.django_db


@pytest.fixture
def future_day():
    return timezone.localdate() + timedelta(days=7)


@pytest.fixture
def payload(future_day):
    return {
        "nome": "João Souza",
        "cpf": "123.456.789-09",
        "email": "joao@example.com",
        "telefone": "75988887777",
        "data": future_day.isoformat(),
        "hora": "08:00",
    }


def test_home_is_online(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "online" in response.content.decode()


def test_available_dates_hide_past_and_full_days(client, future_day):
    generate_slots(future_day, ["08:00"])
    generate_slots(future_day + timedelta(days=1), ["08:00"])
    generate_slots(timezone.localdate() - timedelta(days=3), ["08:00"])

    response = client.get("/api/datas-disponiveis")

    assert response.status_code == 200
    assert response.json()["datas"] == [future_day.isoformat(), (future_day + timedelta(days=1)).isoformat()]


def test_available_times(client, future_day):
    generate_slots(future_day, ["14:00", "08:00"])

    response = client.get("/api/horarios-disponiveis", {"data": future_day.isoformat()})

    assert response.json() == {"success": True, "data": future_day.isoformat(), "horarios": ["08:00", "14:00"]}


def test_available_times_requires_a_valid_date(client):
    assert client.get("/api/horarios-disponiveis").status_code == 400
    assert client.get("/api/horarios-disponiveis", {"data": "09/10/2025"}).status_code == 400


def test_book_then_times_shrink(client, post_json, payload, future_day):
    generate_slots(future_day, ["08:00", "09:00"])

    response = post_json(client, "/api/agendar", payload)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert "comprovante" not in body
    assert Booking.objects.get(id=body["agendamento_id"]).cpf == "12345678909"

    times = client.get("/api/horarios-disponiveis", {"data": future_day.isoformat()}).json()["horarios"]
    assert times == ["09:00"]


def test_book_errors_map_to_status_codes(client, post_json, payload, future_day):
    generate_slots(future_day, ["08:00", "09:00"])

    assert post_json(client, "/api/agendar", {**payload, "cpf": "123.456.789-00"}).status_code == 400
    assert post_json(client, "/api/agendar", {**payload, "telefone": ""}).status_code == 400
    assert post_json(client, "/api/agendar", {**payload, "hora": "8h"}).status_code == 400
    assert post_json(client, "/api/agendar", payload).status_code == 201

    duplicate = post_json(client, "/api/agendar", {**payload, "hora": "09:00"})
    assert duplicate.status_code == 409
    assert duplicate.json()["success"] is False

    taken = post_json(client, "/api/agendar", {**payload, "cpf": "529.982.247-25"})
    assert taken.status_code == 409


def test_book_rejects_invalid_json(client):
    response = client.post("/api/agendar", data="{nope", content_type="application/json")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_receipt_is_served_once(client, post_json, payload, future_day, settings):
    settings.AGENDA_RECEIPTS_ENABLED = True
    generate_slots(future_day, ["08:00"])

    url = post_json(client, "/api/agendar", payload).json()["comprovante"]
    download = client.get(url)

    assert download.status_code == 200
    assert download["Content-Type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")
    assert list(receipts_dir().iterdir()) == []
    assert client.get(url).status_code == 404


@pytest.mark.parametrize(
    "method, url",
    [
        ("get", "/admin/api/agendamentos"),
        ("delete", "/admin/api/agendamentos/1"),
        ("post", "/admin/api/agendamentos/1/status"),
        ("post", "/admin/api/cadastrar-horarios"),
        ("delete", "/admin/api/horarios/2025-10-09"),
    ],
)
def test_admin_routes_require_a_session(client, method, url):
    generate_slots(timezone.localdate(), ["08:00"])

    response = getattr(client, method)(url)

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert Slot.objects.count() == 1


def test_admin_generates_and_deletes_slots(staff_client, post_json, future_day):
    created = post_json(staff_client, "/admin/api/cadastrar-horarios", {"data": future_day.isoformat()})
    assert created.status_code == 201
    assert created.json()["total"] == 6

    again = post_json(staff_client, "/admin/api/cadastrar-horarios", {"data": future_day.isoformat()})
    assert again.status_code == 409

    removed = staff_client.delete(f"/admin/api/horarios/{future_day.isoformat()}")
    assert removed.json() == {"success": True, "removidos": 6}


def test_admin_generates_custom_times(staff_client, post_json, future_day):
    response = post_json(
        staff_client,
        "/admin/api/cadastrar-horarios",
        {"data": future_day.isoformat(), "horarios": ["10:00", "11:00"]},
    )
    assert response.json()["total"] == 2

    bad = post_json(staff_client, "/admin/api/cadastrar-horarios", {"data": future_day.isoformat(), "horarios": "10:00"})
    assert bad.status_code == 400


def test_admin_lists_cancels_and_serves(staff_client, post_json, payload, future_day):
    generate_slots(future_day, ["08:00", "09:00"])
    booking_id = post_json(staff_client, "/api/agendar", payload).json()["agendamento_id"]

    listing = staff_client.get(
        "/admin/api/agendamentos",
        {"inicio": future_day.isoformat(), "fim": future_day.isoformat()},
    ).json()["agendamentos"]
    assert [b["id"] for b in listing] == [booking_id]
    assert listing[0]["cpf"] == "123.456.789-09"
    assert listing[0]["hora"] == "08:00"

    served = post_json(staff_client, f"/admin/api/agendamentos/{booking_id}/status", {"status": "served"})
    assert served.status_code == 200
    assert Booking.objects.get(id=booking_id).status == BookingStatus.SERVED

    cancelled = staff_client.delete(f"/admin/api/agendamentos/{booking_id}")
    assert cancelled.json()["success"] is True
    times = staff_client.get("/api/horarios-disponiveis", {"data": future_day.isoformat()}).json()["horarios"]
    assert times == ["08:00", "09:00"]

    assert staff_client.delete(f"/admin/api/agendamentos/{booking_id}").status_code == 404


def test_admin_status_validation(staff_client, post_json):
    assert post_json(staff_client, "/admin/api/agendamentos/42/status", {"status": "served"}).status_code == 404
    assert post_json(staff_client, "/admin/api/agendamentos/42/status", {"status": "gone"}).status_code == 400


def test_admin_listing_rejects_bad_window(staff_client):
    response = staff_client.get("/admin/api/agendamentos", {"inicio": "2025-10-20", "fim": "2025-10-01"})
    assert response.status_code == 400
    assert json.loads(response.content)["success"] is False


def test_book_rejects_past_dates_even_with_slots(client, post_json, payload):
    past_day = timezone.localdate() - timedelta(days=5)
    generate_slots(past_day, ["08:00"])

    response = post_json(client, "/api/agendar", {**payload, "data": past_day.isoformat()})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert not Booking.objects.exists()
