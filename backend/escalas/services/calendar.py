from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Dict, Iterable, List, Optional

from django.db import IntegrityError, transaction

from escalas.domain.models import (
    EventSource,
    EventType,
    Ministry,
    PeriodStatus,
    ScheduleEvent,
    SchedulePeriod,
)
from escalas.domain.repositories import BookingRepository, EventRepository, RegularEventRepository
from escalas.services.audit import audit
from escalas.services.errors import AlreadyExists, StateConflict, ValidationFailed
from escalas.services.fixed_events import (
    FixedEventRule,
    build_fixed_events,
    default_church_rules,
    rules_for_templates,
)
from escalas.utils import _get_setting, _parse_time

log = logging.getLogger(__name__)

LOCKED_STATUSES = (PeriodStatus.PUBLISHED, PeriodStatus.CLOSED)
IMPORTED_FALLBACK_TITLE = "Evento importado"

# ========= Regras =========

def _default_times() -> Dict[str, time]:
    """Horários da programação padrão vindos do settings."""
    return {
        "sunday_morning": _parse_time(_get_setting("DEFAULT_SUNDAY_MORNING_TIME", "10:00")),
        "sunday_evening": _parse_time(_get_setting("DEFAULT_SUNDAY_EVENING_TIME", "18:00")),
        "prayer": _parse_time(_get_setting("DEFAULT_PRAYER_TIME", "19:00")),
        "fasting": _parse_time(_get_setting("DEFAULT_FASTING_TIME", "19:30")),
    }

def rules_for_ministry(ministry: Ministry) -> List[FixedEventRule]:
    """Regras de recorrência do ministério.

    Usa os eventos regulares ativos do ministério; sem nenhum, cai na
    programação fixa padrão da igreja.

    Args:
        ministry (Ministry): O ministério do período.

    Returns:
        List[FixedEventRule]: Regras a expandir.
    """
    templates = list(RegularEventRepository.active_for_ministry(ministry))
    if templates:
        return rules_for_templates(templates)
    return default_church_rules(**_default_times())

def _ensure_editable(period: SchedulePeriod) -> None:
    if period.status in LOCKED_STATUSES:
        raise StateConflict(
            "Não é possível alterar eventos de um período publicado ou encerrado",
            status=period.status,
        )

# ========= Operações principais =========

@transaction.atomic
def generate_regular_events_for_period(period: SchedulePeriod) -> int:
    """Gera os eventos regulares do período a partir do calendário.

    Idempotente: linhas cuja chave (data, hora, título) já existe no período
    são ignoradas.

    Args:
        period (SchedulePeriod): O período alvo.

    Raises:
        StateConflict: Se o período estiver publicado ou encerrado.

    Returns:
        int: Número de eventos criados.
    """
    _ensure_editable(period)
    rows = build_fixed_events(period.start_date, period.end_date, rules_for_ministry(period.ministry))
    if not rows:
        return 0

    existing_keys = EventRepository.existing_keys(period, {r.event_date for r in rows})
    missing = [
        ScheduleEvent(
            period=period,
            event_date=r.event_date,
            event_time=r.event_time,
            title=r.title,
            event_type=r.event_type,
            source=r.source,
        )
        for r in rows
        if r.key not in existing_keys
    ]
    if not missing:
        return 0

    ScheduleEvent.objects.bulk_create(missing, ignore_conflicts=True)
    audit("generate_events", period, after={"created": len(missing)})
    log.info("Período %s: %d evento(s) regular(es) gerado(s)", period.pk, len(missing))
    return len(missing)

def bookings_for_period(period: SchedulePeriod) -> List[Dict[str, Any]]:
    """Reservas aprovadas dentro do período, marcando as já importadas.

    Args:
        period (SchedulePeriod): O período.

    Returns:
        List[Dict[str, Any]]: Uma entrada por reserva com ``already_imported``.
    """
    imported = EventRepository.imported_external_ids(period)
    out = []
    for b in BookingRepository.approved_between(period.start_date, period.end_date):
        out.append({
            "id": b.id,
            "booking_date": b.booking_date,
            "start_time": b.start_time,
            "end_time": b.end_time,
            "occasion": b.occasion,
            "responsible_person": b.responsible_person,
            "name": b.name,
            "environment": {"id": b.environment_id, "name": b.environment.name},
            "already_imported": str(b.id) in imported,
        })
    return out

def _booking_description(booking) -> str:
    env = booking.environment.name if booking.environment_id else "N/A"
    return f"Reserva: {booking.occasion} | Responsável: {booking.responsible_person} | Local: {env}"

@transaction.atomic
def import_bookings_to_period(period: SchedulePeriod, booking_ids: Optional[Iterable[int]] = None) -> int:
    """Importa reservas aprovadas como eventos do período.

    Sem ``booking_ids`` importa todas as reservas aprovadas do intervalo.
    Reservas fora do intervalo, já importadas ou que colidem com um evento
    existente no mesmo horário e título são ignoradas.

    Args:
        period (SchedulePeriod): O período alvo.
        booking_ids (Optional[Iterable[int]], optional): Reservas escolhidas. Defaults to None.

    Raises:
        StateConflict: Se o período estiver publicado ou encerrado.

    Returns:
        int: Número de eventos importados.
    """
    _ensure_editable(period)
    if booking_ids is None:
        bookings = list(BookingRepository.approved_between(period.start_date, period.end_date))
    else:
        bookings = [
            b for b in BookingRepository.approved_by_ids(booking_ids)
            if period.start_date <= b.booking_date <= period.end_date
        ]
    if not bookings:
        return 0

    imported = EventRepository.imported_external_ids(period)
    existing_keys = EventRepository.existing_keys(period, {b.booking_date for b in bookings})

    missing = []
    for b in bookings:
        title = (b.occasion or IMPORTED_FALLBACK_TITLE)[:120]
        key = (b.booking_date, b.start_time, title)
        if str(b.id) in imported or key in existing_keys:
            continue
        existing_keys.add(key)
        missing.append(ScheduleEvent(
            period=period,
            event_date=b.booking_date,
            event_time=b.start_time,
            event_type=EventType.IMPORTED,
            title=title,
            description=_booking_description(b),
            source=EventSource.BOOKING_SYSTEM,
            external_id=str(b.id),
        ))
    if not missing:
        return 0

    ScheduleEvent.objects.bulk_create(missing, ignore_conflicts=True)
    audit("import_bookings", period, after={"external_ids": [e.external_id for e in missing]})
    log.info("Período %s: %d reserva(s) importada(s)", period.pk, len(missing))
    return len(missing)

def create_manual_event(
    period: SchedulePeriod, *,
    event_date: date,
    event_time: time,
    title: str,
    description: Optional[str] = None,
    event_type: str = EventType.SPECIAL,
) -> ScheduleEvent:
    """Cria um evento avulso no período.

    Raises:
        StateConflict: Período publicado ou encerrado.
        ValidationFailed: Data fora do período.
        AlreadyExists: Já existe evento com a mesma data, hora e título.
    """
    _ensure_editable(period)
    if not (period.start_date <= event_date <= period.end_date):
        raise ValidationFailed(
            "A data do evento deve estar dentro do período",
            errors={"event_date": ["Fora do período"]},
        )
    try:
        with transaction.atomic():
            return ScheduleEvent.objects.create(
                period=period,
                event_date=event_date,
                event_time=event_time,
                title=title,
                description=description,
                event_type=event_type,
                source=EventSource.MANUAL,
            )
    except IntegrityError:
        raise AlreadyExists("Já existe um evento com esta data, horário e título neste período")

def delete_event(event: ScheduleEvent) -> None:
    """Remove um evento; só é permitido com o período em rascunho."""
    if event.period.status != PeriodStatus.DRAFT:
        raise StateConflict("Só é possível remover eventos de períodos em rascunho", status=event.period.status)
    event.delete()
