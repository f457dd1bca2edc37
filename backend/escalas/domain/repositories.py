from __future__ import annotations

from datetime import date, time
from typing import Iterable, Optional, Set, Tuple

from django.db import connection
from django.db.models import Count, QuerySet

from escalas.domain.models import (
    Area,
    Booking,
    BookingStatus,
    EventSource,
    Ministry,
    RegularEvent,
    ScheduleAssignment,
    ScheduleEvent,
    SchedulePeriod,
    Servant,
    ServantAvailability,
)

# ==========================================================
# Ministry / Area / Servant
# ==========================================================
class MinistryRepository:
    """Repositório para operações relacionadas a Ministry."""

    @classmethod
    def actives(cls) -> QuerySet[Ministry]:
        return Ministry.objects.filter(is_active=True).order_by("name")

class AreaRepository:
    """Repositório para operações relacionadas a Area."""

    @classmethod
    def actives_for_ministry(cls, ministry: Ministry) -> QuerySet[Area]:
        """Retorna as áreas ativas do ministério, na ordem de exibição."""
        return Area.objects.filter(ministry=ministry, is_active=True).order_by("order_index", "name")

class ServantRepository:
    """Repositório para operações relacionadas a Servant."""

    @classmethod
    def actives_for_ministry(cls, ministry: Ministry) -> QuerySet[Servant]:
        """Retorna os servos ativos de todas as áreas ativas do ministério.

        Args:
            ministry (Ministry): O ministério dono das áreas.

        Returns:
            QuerySet[Servant]: Servos ativos com a área já carregada.
        """
        return (
            Servant.objects
            .filter(is_active=True, area__ministry=ministry, area__is_active=True)
            .select_related("area")
            .order_by("area__order_index", "name")
        )

# ==========================================================
# RegularEvent Repository
# ==========================================================
class RegularEventRepository:
    """Repositório para operações relacionadas a RegularEvent."""

    @classmethod
    def active_for_ministry(cls, ministry: Ministry) -> QuerySet[RegularEvent]:
        """Retorna os eventos regulares ativos associados ao ministério.

        Args:
            ministry (Ministry): O ministério.

        Returns:
            QuerySet[RegularEvent]: Modelos ativos, por dia da semana e horário.
        """
        return (
            RegularEvent.objects
            .filter(is_active=True, ministries=ministry)
            .distinct()
            .order_by("day_of_week", "time", "id")
        )

# ==========================================================
# SchedulePeriod Repository
# ==========================================================
class PeriodRepository:
    """Repositório para operações relacionadas a SchedulePeriod."""

    @classmethod
    def by_token(cls, token: str) -> Optional[SchedulePeriod]:
        """Retorna o período dono do token de disponibilidade, ou None."""
        if not token:
            return None
        return (
            SchedulePeriod.objects
            .select_related("ministry")
            .filter(availability_token=token)
            .first()
        )

    @classmethod
    def locked(cls, period_id: int) -> Optional[SchedulePeriod]:
        """Retorna o período com lock de linha (quando o banco suporta)."""
        qs = SchedulePeriod.objects.select_related("ministry")
        if connection.features.has_select_for_update:
            qs = qs.select_for_update()
        return qs.filter(id=period_id).first()

    @classmethod
    def with_detail(cls) -> QuerySet[SchedulePeriod]:
        """Períodos com ministério, eventos e atribuições pré-carregados."""
        return (
            SchedulePeriod.objects
            .select_related("ministry")
            .prefetch_related(
                "events",
                "events__assignments",
                "events__assignments__servant",
                "events__assignments__area",
            )
        )

# ==========================================================
# ScheduleEvent Repository
# ==========================================================
class EventRepository:
    """Repositório para operações relacionadas a ScheduleEvent."""

    @classmethod
    def for_period(cls, period: SchedulePeriod) -> QuerySet[ScheduleEvent]:
        return ScheduleEvent.objects.filter(period=period).order_by("event_date", "event_time", "title")

    @classmethod
    def existing_keys(cls, period: SchedulePeriod, dates: Iterable[date]) -> Set[Tuple[date, time, str]]:
        """Chaves (data, hora, título) já existentes no período para as datas informadas."""
        return set(
            ScheduleEvent.objects
            .filter(period=period, event_date__in=list(dates))
            .values_list("event_date", "event_time", "title")
        )

    @classmethod
    def imported_external_ids(cls, period: SchedulePeriod) -> Set[str]:
        """IDs de reservas já importadas para o período."""
        return set(
            ScheduleEvent.objects
            .filter(period=period, source=EventSource.BOOKING_SYSTEM, external_id__isnull=False)
            .values_list("external_id", flat=True)
        )

    @classmethod
    def without_assignments(cls, period: SchedulePeriod) -> QuerySet[ScheduleEvent]:
        """Eventos do período que ainda não têm nenhuma atribuição."""
        return (
            ScheduleEvent.objects
            .filter(period=period)
            .annotate(n_assignments=Count("assignments"))
            .filter(n_assignments=0)
        )

# ==========================================================
# ServantAvailability Repository
# ==========================================================
class AvailabilityRepository:
    """Repositório para operações relacionadas a ServantAvailability."""

    @classmethod
    def for_period(cls, period: SchedulePeriod) -> QuerySet[ServantAvailability]:
        """Respostas do período, mais recentes primeiro."""
        return (
            ServantAvailability.objects
            .filter(period=period)
            .select_related("servant", "servant__area", "event")
            .order_by("-submitted_at", "servant__name", "event__event_date", "event__event_time")
        )

    @classmethod
    def for_servant(cls, servant: Servant, period: SchedulePeriod) -> QuerySet[ServantAvailability]:
        return ServantAvailability.objects.filter(servant=servant, period=period)

# ==========================================================
# ScheduleAssignment Repository
# ==========================================================
class AssignmentRepository:
    """Repositório para operações relacionadas a ScheduleAssignment."""

    @classmethod
    def listing(cls, period_id: Optional[int] = None, event_id: Optional[int] = None) -> QuerySet[ScheduleAssignment]:
        """Lista atribuições filtrando por evento (prioritário) ou por período.

        Args:
            period_id (Optional[int], optional): Período dos eventos. Defaults to None.
            event_id (Optional[int], optional): Evento específico. Defaults to None.

        Returns:
            QuerySet[ScheduleAssignment]: Atribuições com servo, área e evento carregados.
        """
        qs = ScheduleAssignment.objects.select_related("servant", "area", "event").order_by("created_at")
        if event_id:
            return qs.filter(event_id=event_id)
        if period_id:
            return qs.filter(event__period_id=period_id)
        return qs

    @classmethod
    def for_slot(cls, event_id: int, area_id: int) -> QuerySet[ScheduleAssignment]:
        return ScheduleAssignment.objects.filter(event_id=event_id, area_id=area_id)

# ==========================================================
# Booking Repository (sistema de agendamentos)
# ==========================================================
class BookingRepository:
    """Leitura das reservas aprovadas usadas na importação."""

    @classmethod
    def approved_between(cls, start: date, end: date) -> QuerySet[Booking]:
        return (
            Booking.objects
            .filter(status=BookingStatus.APPROVED, booking_date__gte=start, booking_date__lte=end)
            .select_related("environment")
            .order_by("booking_date", "start_time")
        )

    @classmethod
    def approved_by_ids(cls, ids: Iterable[int]) -> QuerySet[Booking]:
        return (
            Booking.objects
            .filter(status=BookingStatus.APPROVED, id__in=list(ids))
            .select_related("environment")
            .order_by("booking_date", "start_time")
        )
