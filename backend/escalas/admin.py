from __future__ import annotations

from django.contrib import admin, messages
from django.db.models import Count

from escalas.domain.models import (
    Area,
    AuditLog,
    Booking,
    Environment,
    Ministry,
    PeriodStatus,
    RegularEvent,
    ScheduleAssignment,
    ScheduleEvent,
    SchedulePeriod,
    Servant,
    ServantAvailability,
)
from escalas.services import assignments as assignment_service
from escalas.services import calendar as calendar_service
from escalas.services import periods as period_service
from escalas.services.errors import EscalaError

# =========================
# Inlines
# =========================

class AreaInline(admin.TabularInline):
    model = Area
    extra = 0
    fields = ("name", "order_index", "min_servants", "max_servants", "is_active")

class ScheduleEventInline(admin.TabularInline):
    """Eventos do período; editáveis só fora de publicado/encerrado, removíveis só em rascunho."""
    model = ScheduleEvent
    extra = 0
    fields = ("event_date", "event_time", "title", "event_type", "source")
    readonly_fields = ("source",)
    classes = ("collapse",)

    def has_add_permission(self, request, obj=None):
        if obj is not None and obj.status in calendar_service.LOCKED_STATUSES:
            return False
        return super().has_add_permission(request, obj)

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.status in calendar_service.LOCKED_STATUSES:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.status != PeriodStatus.DRAFT:
            return False
        return super().has_delete_permission(request, obj)

class AssignmentInline(admin.TabularInline):
    model = ScheduleAssignment
    extra = 0
    fields = ("area", "servant", "confirmed", "notes")
    autocomplete_fields = ("servant",)

    @staticmethod
    def _closed(event) -> bool:
        return event is not None and event.period.status == PeriodStatus.CLOSED

    def has_add_permission(self, request, obj=None):
        return not self._closed(obj) and super().has_add_permission(request, obj)

    def has_change_permission(self, request, obj=None):
        return not self._closed(obj) and super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        return not self._closed(obj) and super().has_delete_permission(request, obj)

# =========================
# Exclusão via serviços
# =========================

class ServiceDeleteMixin:
    """Exclusões do admin passam pelas regras do serviço correspondente."""

    def service_delete(self, obj) -> None:
        raise NotImplementedError

    def can_delete(self, obj) -> bool:
        return True

    def has_delete_permission(self, request, obj=None):
        if obj is not None and not self.can_delete(obj):
            return False
        return super().has_delete_permission(request, obj)

    def delete_model(self, request, obj):
        self.service_delete(obj)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            try:
                self.service_delete(obj)
            except EscalaError as e:
                self.message_user(request, f"{obj}: {e.message}", level=messages.ERROR)

# =========================
# Ministry / Area / Servant
# =========================

@admin.register(Ministry)
class MinistryAdmin(admin.ModelAdmin):
    list_display = ("name", "color", "is_active", "areas_count")
    list_filter = ("is_active",)
    search_fields = ("name",)
    inlines = (AreaInline,)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_areas=Count("areas"))

    @admin.display(description="Áreas", ordering="_areas")
    def areas_count(self, obj) -> int:
        return obj._areas

@admin.register(Area)
class AreaAdmin(admin.ModelAdmin):
    list_display = ("name", "ministry", "order_index", "min_servants", "max_servants", "is_active")
    list_filter = ("ministry", "is_active")
    search_fields = ("name", "ministry__name")
    list_select_related = ("ministry",)

@admin.register(Servant)
class ServantAdmin(admin.ModelAdmin):
    list_display = ("name", "area", "email", "phone", "is_leader", "is_active")
    list_filter = ("is_active", "is_leader", "area__ministry")
    search_fields = ("name", "email", "phone")
    list_select_related = ("area", "area__ministry")
    list_per_page = 50

    actions = ["activate_servants", "deactivate_servants"]

    @admin.action(description="Ativar servos selecionados")
    def activate_servants(self, request, qs):
        qs.update(is_active=True)

    @admin.action(description="Desativar servos selecionados")
    def deactivate_servants(self, request, qs):
        qs.update(is_active=False)

@admin.register(RegularEvent)
class RegularEventAdmin(admin.ModelAdmin):
    list_display = ("title", "day_of_week", "time", "week_of_month", "is_active")
    list_filter = ("day_of_week", "is_active", "ministries")
    search_fields = ("title",)
    filter_horizontal = ("ministries",)

# =========================
# SchedulePeriod
# =========================

@admin.register(SchedulePeriod)
class SchedulePeriodAdmin(ServiceDeleteMixin, admin.ModelAdmin):
    list_display = ("ministry", "month", "year", "status", "events_count", "published_at")
    list_filter = ("status", "ministry", "year")
    ordering = ("-year", "-month")
    readonly_fields = ("status", "start_date", "end_date", "published_at", "availability_token", "created_by")
    inlines = (ScheduleEventInline,)

    actions = ["generate_events", "publish"]

    def can_delete(self, obj) -> bool:
        return obj.status != PeriodStatus.PUBLISHED

    def service_delete(self, obj) -> None:
        period_service.delete_period(obj.pk)

    def get_deleted_objects(self, objs, request):
        # a cascata de eventos e atribuições segue delete_period
        deleted, model_count, _perms, protected = super().get_deleted_objects(objs, request)
        blocked = {obj._meta.verbose_name for obj in objs if not self.can_delete(obj)}
        return deleted, model_count, blocked, protected

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_events=Count("events"))

    @admin.display(description="Eventos", ordering="_events")
    def events_count(self, obj) -> int:
        return obj._events

    @admin.action(description="Gerar eventos do calendário regular")
    def generate_events(self, request, qs):
        for period in qs:
            try:
                n = calendar_service.generate_regular_events_for_period(period)
                self.message_user(request, f"{period}: {n} evento(s) gerado(s)")
            except EscalaError as e:
                self.message_user(request, f"{period}: {e.message}", level=messages.ERROR)

    @admin.action(description="Publicar escala")
    def publish(self, request, qs):
        for period in qs:
            try:
                period_service.publish_period(period.pk)
                self.message_user(request, f"{period}: publicada")
            except EscalaError as e:
                self.message_user(request, f"{period}: {e.message}", level=messages.ERROR)

# =========================
# ScheduleEvent / Assignment / Availability
# =========================

@admin.register(ScheduleEvent)
class ScheduleEventAdmin(ServiceDeleteMixin, admin.ModelAdmin):
    list_display = ("event_date", "event_time", "title", "period", "event_type", "source")
    list_filter = ("event_type", "source", "period__ministry")
    search_fields = ("title",)
    date_hierarchy = "event_date"
    list_select_related = ("period", "period__ministry")
    inlines = (AssignmentInline,)

    def can_delete(self, obj) -> bool:
        return obj.period.status == PeriodStatus.DRAFT

    def service_delete(self, obj) -> None:
        calendar_service.delete_event(obj)

@admin.register(ScheduleAssignment)
class ScheduleAssignmentAdmin(ServiceDeleteMixin, admin.ModelAdmin):
    list_display = ("event", "area", "servant", "confirmed", "created_at")
    list_filter = ("confirmed", "area__ministry")
    search_fields = ("servant__name", "event__title")
    list_select_related = ("event", "area", "servant")
    autocomplete_fields = ("servant",)

    def can_delete(self, obj) -> bool:
        return obj.event.period.status != PeriodStatus.CLOSED

    def service_delete(self, obj) -> None:
        assignment_service.unassign(assignment_id=obj.pk)

@admin.register(ServantAvailability)
class ServantAvailabilityAdmin(admin.ModelAdmin):
    list_display = ("servant", "event", "is_available", "submitted_at")
    list_filter = ("is_available", "period")
    search_fields = ("servant__name",)
    list_select_related = ("servant", "event")

# =========================
# Agendamentos
# =========================

@admin.register(Environment)
class EnvironmentAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("booking_date", "start_time", "end_time", "occasion", "environment", "status")
    list_filter = ("status", "environment")
    date_hierarchy = "booking_date"

# =========================
# AuditLog
# =========================

@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action", "table", "record_id", "created_at", "author")
    list_filter = ("table", "action")
    search_fields = ("table", "record_id", "author__username")
    readonly_fields = ("action", "table", "record_id", "before", "after", "author", "created_at", "ip_address")
