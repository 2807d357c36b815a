from django.db import models
from django.db.models import Q


class Slot(models.Model):
    date = models.DateField()
    time = models.TimeField()
    available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["date", "time"], name="unique_slot_date_time"),
        ]
        indexes = [
            models.Index(fields=["date", "available"], name="idx_slot_date_available"),
        ]
        ordering = ["date", "time"]

    def __str__(self) -> str:  # pragma: no cover
        state = "livre" if self.available else "ocupado"
        return f"{self.date:%d/%m/%Y} {self.time:%H:%M} ({state})"


class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    SERVED = "served", "Atendido"


class Booking(models.Model):
    name = models.CharField(max_length=150)
    cpf = models.CharField(max_length=11)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=11, blank=True)
    date = models.DateField()
    time = models.TimeField()
    status = models.CharField(max_length=10, choices=BookingStatus.choices, default=BookingStatus.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["cpf"],
                condition=Q(status="pending"),
                name="unique_pending_booking_per_cpf",
            ),
            models.UniqueConstraint(fields=["date", "time"], name="unique_booking_date_time"),
        ]
        indexes = [
            models.Index(fields=["status", "date"], name="idx_booking_status_date"),
        ]
        ordering = ["date", "time"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name} · {self.date:%d/%m/%Y} {self.time:%H:%M} · {self.get_status_display()}"
