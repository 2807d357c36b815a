from django.urls import path

from .admin_api import (
    booking_status_api,
    bookings_api,
    cancel_booking_api,
    delete_slots_api,
    generate_slots_api,
)
from .api import available_dates_api, available_times_api, book_api, home, receipt_download


app_name = "scheduling"

urlpatterns = [
    path("", home, name="home"),
    path("api/datas-disponiveis", available_dates_api, name="available_dates_api"),
    path("api/horarios-disponiveis", available_times_api, name="available_times_api"),
    path("api/agendar", book_api, name="book_api"),
    path("api/comprovante/<str:filename>", receipt_download, name="receipt_download"),
    path("admin/api/agendamentos", bookings_api, name="bookings_api"),
    path("admin/api/agendamentos/<int:booking_id>", cancel_booking_api, name="cancel_booking_api"),
    path("admin/api/agendamentos/<int:booking_id>/status", booking_status_api, name="booking_status_api"),
    path("admin/api/cadastrar-horarios", generate_slots_api, name="generate_slots_api"),
    path("admin/api/horarios/<str:date_str>", delete_slots_api, name="delete_slots_api"),
]
