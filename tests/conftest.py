import json
from datetime import time, timedelta

import pytest
from django.utils import timezone

from scheduling.services import BookingInput
from scheduling.slots import generate_slots


VALID_CPFS = ["12345678909", "52998224725", "11144477735"]


@pytest.fixture(autouse=True)
def _receipts_in_tmp(settings, tmp_path):
    # Keep generated PDFs out of the repo.
    settings.AGENDA_RECEIPTS_DIR = tmp_path / "comprovantes"
    yield


@pytest.fixture
def booking_day():
    return timezone.localdate() + timedelta(days=10)


@pytest.fixture
def day_slots(db, booking_day):
    return generate_slots(booking_day, ["08:00", "09:00"])


@pytest.fixture
def make_input(booking_day):
    def _make(cpf="123.456.789-09", at="08:00", **overrides):
        hour, minute = (int(part) for part in at.split(":"))
        fields = {
            "name": "Maria da Silva",
            "cpf": cpf,
            "email": "maria@example.com",
            "phone": "(75) 99999-1234",
            "date": booking_day,
            "time": time(hour, minute),
        }
        fields.update(overrides)
        return BookingInput(**fields)

    return _make


@pytest.fixture
def staff_client(client, django_user_model):
    django_user_model.objects.create_user(username="atendente", password="s3nha-forte!", is_staff=True)
    client.login(username="atendente", password="s3nha-forte!")
    return client


@pytest.fixture
def post_json():
    def _post(client, url, payload):
        return client.post(url, data=json.dumps(payload), content_type="application/json")

    return _post
