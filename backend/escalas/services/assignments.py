from __future__ import annotations

import logging
from typing import Dict, List, Optional

from django.contrib.auth.models import User
from django.db import IntegrityError, connection, transaction
from django.db.models import Count
from django.utils import timezone

from escalas.domain.models import (
    Area,
    PeriodStatus,
    ScheduleAssignment,
    ScheduleEvent,
    SchedulePeriod,
    Servant,
)
from escalas.domain.repositories import AreaRepository, AssignmentRepository
from escalas.services.errors import AlreadyExists, NotFound, StateConflict, ValidationFailed

log = logging.getLogger(__name__)

DUPLICATE_SERVANT = "Este servo já está escalado para este evento"

def _lock_event(event_id: int) -> ScheduleEvent:
    qs = ScheduleEvent.objects.select_related("period", "period__ministry")
    if connection.features.has_select_for_update:
        qs = qs.select_for_update()
    event = qs.filter(id=event_id).first()
    if event is None:
        raise NotFound("Evento não encontrado")
    return event

def _validate(event: ScheduleEvent, servant_id: int, area_id: int) -> tuple[Servant, Area]:
    if event.period.status == PeriodStatus.CLOSED:
        raise StateConflict("Não é possível alterar a escala de um período encerrado", status=event.period.status)

    area = Area.objects.filter(id=area_id, ministry_id=event.period.ministry_id).first()
    if area is None:
        raise ValidationFailed("Área inválida para este período", errors={"area_id": ["Área de outro ministério"]})

    servant = Servant.objects.filter(id=servant_id, area=area, is_active=True).first()
    if servant is None:
        raise ValidationFailed(
            "Servo inválido para esta área",
            errors={"servant_id": ["Servo inativo ou de outra área"]},
        )
    return servant, area

def assign(
    event_id: int,
    servant_id: int,
    area_id: int, *,
    notes: Optional[str] = None,
    actor: Optional[User] = None,
) -> ScheduleAssignment:
    """Escala o servo na área do evento, substituindo quem ocupava a vaga.

    Args:
        event_id (int): Evento da escala.
        servant_id (int): Servo a escalar.
        area_id (int): Área (vaga) no evento.
        notes (Optional[str], optional): Observações. Defaults to None.
        actor (Optional[User], optional): Quem fez a alteração. Defaults to None.

    Raises:
        NotFound: Evento inexistente.
        StateConflict: Período encerrado.
        ValidationFailed: Área ou servo inconsistentes com o período.
        AlreadyExists: Servo já escalado em outra área do mesmo evento.

    Returns:
        ScheduleAssignment: A nova atribuição.
    """
    with transaction.atomic():
        event = _lock_event(event_id)
        servant, area = _validate(event, servant_id, area_id)

        taken = (
            ScheduleAssignment.objects
            .filter(event=event, servant=servant)
            .exclude(area=area)
            .exists()
        )
        if taken:
            raise AlreadyExists(DUPLICATE_SERVANT)

        for old in AssignmentRepository.for_slot(event.id, area.id):
            old.delete()
        try:
            with transaction.atomic():
                assignment = ScheduleAssignment.objects.create(
                    event=event,
                    servant=servant,
                    area=area,
                    notes=notes or None,
                    created_by=actor if actor and actor.is_authenticated else None,
                )
        except IntegrityError:
            raise AlreadyExists(DUPLICATE_SERVANT)

    log.info("Evento %s / área %s: servo %s escalado", event.id, area.id, servant.id)
    return assignment

@transaction.atomic
def unassign(*, assignment_id: Optional[int] = None, event_id: Optional[int] = None, area_id: Optional[int] = None) -> int:
    """Remove por ``assignment_id`` ou pelo par ``event_id`` + ``area_id``.

    Raises:
        ValidationFailed: Nenhum identificador informado.
        StateConflict: Período encerrado.

    Returns:
        int: Quantidade removida.
    """
    if assignment_id:
        qs = ScheduleAssignment.objects.filter(id=assignment_id)
    elif event_id and area_id:
        qs = AssignmentRepository.for_slot(event_id, area_id)
    else:
        raise ValidationFailed("ID ou event_id + area_id são obrigatórios")

    items = list(qs.select_related("event__period"))
    if any(a.event.period.status == PeriodStatus.CLOSED for a in items):
        raise StateConflict("Não é possível alterar a escala de um período encerrado", status=PeriodStatus.CLOSED)
    for a in items:
        a.delete()
    return len(items)

@transaction.atomic
def confirm(assignment_id: int) -> ScheduleAssignment:
    """Marca a atribuição como confirmada pelo servo (idempotente)."""
    assignment = ScheduleAssignment.objects.select_related("event__period").filter(id=assignment_id).first()
    if assignment is None:
        raise NotFound("Atribuição não encontrada")
    if not assignment.confirmed:
        assignment.confirmed = True
        assignment.confirmed_at = timezone.now()
        assignment.save(update_fields=["confirmed", "confirmed_at", "updated_at"])
    return assignment

def list_assignments(period_id: Optional[int] = None, event_id: Optional[int] = None):
    return AssignmentRepository.listing(period_id=period_id, event_id=event_id)

def area_coverage(period: SchedulePeriod) -> List[Dict]:
    """Cobertura por área no período (limites são apenas indicativos).

    Returns:
        List[Dict]: Uma linha por área ativa com ``filled_events``, o total de
            eventos e os limites ``min_servants``/``max_servants``.
    """
    total_events = period.events.count()
    filled = dict(
        ScheduleAssignment.objects
        .filter(event__period=period)
        .values("area_id")
        .annotate(n=Count("event_id", distinct=True))
        .values_list("area_id", "n")
    )
    rows = []
    for area in AreaRepository.actives_for_ministry(period.ministry):
        n = filled.get(area.id, 0)
        rows.append({
            "area_id": area.id,
            "area": area.name,
            "min_servants": area.min_servants,
            "max_servants": area.max_servants,
            "filled_events": n,
            "total_events": total_events,
            "below_minimum": area.min_servants > 0 and n < total_events,
        })
    return rows
