from django.contrib import admin, messages
from django.db import transaction

from .models import Booking, BookingStatus, Slot
from .slots import mark_available


admin.site.site_header = "Agenda - Posto de Identificação"
admin.site.site_title = "Agenda"
admin.site.index_title = "Controle de agendamentos"


class ActiveBookingFilter(admin.SimpleListFilter):
    title = "situação"
    parameter_name = "situacao"

    def lookups(self, request, model_admin):
        return (("active", "Ativos"), ("served", "Atendidos"))

    def queryset(self, request, queryset):
        value = self.value()
        if value == "active":
            return queryset.filter(status=BookingStatus.PENDING)
        if value == "served":
            return queryset.filter(status=BookingStatus.SERVED)
        return queryset


@admin.register(Slot)
class SlotAdmin(admin.ModelAdmin):
    list_display = ("date", "time", "available")
    list_filter = ("available", "date")
    ordering = ("date", "time")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "cpf", "date", "time", "status", "created_at")
    list_filter = (ActiveBookingFilter, "date")
    search_fields = ("name", "cpf", "email")
    ordering = ("date", "time")
    # Status changes go through the actions or the admin API.
    readonly_fields = ("date", "time", "status", "created_at", "updated_at")
    actions = ["mark_served", "cancel_selected"]

    def get_actions(self, request):
        actions = super().get_actions(request)
        # Plain deletes would leave the slots marked as taken.
        actions.pop("delete_selected", None)
        return actions

    def has_add_permission(self, request):
        return False

    @admin.action(description="Marcar como atendido")
    def mark_served(self, request, queryset):
        updated = queryset.update(status=BookingStatus.SERVED)
        self.message_user(request, f"{updated} agendamento(s) marcados como atendidos.", messages.SUCCESS)

    @admin.action(description="Cancelar e liberar horários")
    def cancel_selected(self, request, queryset):
        count = 0
        with transaction.atomic():
            for booking in queryset.select_for_update():
                booking.delete()
                mark_available(booking.date, booking.time)
                count += 1
        self.message_user(request, f"{count} agendamento(s) cancelados.", messages.SUCCESS)

    def delete_model(self, request, obj):
        with transaction.atomic():
            super().delete_model(request, obj)
            mark_available(obj.date, obj.time)
