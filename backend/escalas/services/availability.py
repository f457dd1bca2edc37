from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

from django.db import transaction
from django.utils import timezone

from escalas.domain.models import PeriodStatus, ScheduleEvent, SchedulePeriod, Servant, ServantAvailability
from escalas.domain.repositories import AvailabilityRepository, EventRepository, PeriodRepository, ServantRepository
from escalas.services.audit import audit
from escalas.services.errors import AvailabilityClosed, NotFound, ValidationFailed

log = logging.getLogger(__name__)

INVALID_LINK = "Link inválido ou expirado"

def period_for_token(token: str) -> SchedulePeriod:
    """Resolve o token público para o período.

    Raises:
        NotFound: Token desconhecido.
    """
    period = PeriodRepository.by_token(token)
    if period is None:
        raise NotFound(INVALID_LINK)
    return period

def ensure_collecting(period: SchedulePeriod) -> None:
    """Garante que o período aceita respostas agora.

    Raises:
        AvailabilityClosed: Fora do status de coleta (extra ``status``) ou
            depois do prazo (extra ``deadline``).
    """
    if period.status != PeriodStatus.COLLECTING:
        raise AvailabilityClosed(status=period.status)
    deadline = period.availability_deadline
    if deadline and timezone.now() > deadline:
        raise AvailabilityClosed(deadline=deadline)

def open_period_for_token(token: str) -> SchedulePeriod:
    """Período do token, desde que esteja coletando e dentro do prazo."""
    period = period_for_token(token)
    ensure_collecting(period)
    return period

def availability_form_data(period: SchedulePeriod) -> dict:
    """Dados do formulário público: período, eventos e servos do ministério.

    Returns:
        dict: ``{"period", "events", "servants"}`` com os objetos de modelo.
    """
    return {
        "period": period,
        "events": list(EventRepository.for_period(period)),
        "servants": list(ServantRepository.actives_for_ministry(period.ministry)),
    }

def _validate_servant(period: SchedulePeriod, servant_id: int) -> Servant:
    servant = (
        Servant.objects
        .select_related("area")
        .filter(id=servant_id, is_active=True, area__ministry_id=period.ministry_id)
        .first()
    )
    if servant is None:
        raise ValidationFailed(
            "Servo inválido para este período",
            errors={"servant_id": ["Servo inativo ou de outro ministério"]},
        )
    return servant

def _validate_events(period: SchedulePeriod, event_ids: List[int]) -> None:
    if len(event_ids) != len(set(event_ids)):
        raise ValidationFailed(
            "Evento repetido na lista de disponibilidades",
            errors={"availabilities": ["Cada evento só pode aparecer uma vez"]},
        )
    found = set(ScheduleEvent.objects.filter(period=period, id__in=event_ids).values_list("id", flat=True))
    unknown = sorted(set(event_ids) - found)
    if unknown:
        raise ValidationFailed(
            "Evento não pertence a este período",
            errors={"availabilities": [f"Eventos inválidos: {unknown}"]},
        )

def submit_availability(
    token: str,
    servant_id: int,
    entries: Iterable[Mapping],
    *,
    period_id: Optional[int] = None,
) -> int:
    """Registra a disponibilidade de um servo, substituindo a anterior.

    Todas as linhas do servo no período são apagadas e o novo conjunto é
    inserido com um único ``submitted_at``, na mesma transação.

    Args:
        token (str): Token público do período.
        servant_id (int): Servo que responde.
        entries (Iterable[Mapping]): ``{"event_id", "is_available", "notes"?}`` por evento.
        period_id (Optional[int], optional): Se informado, deve ser o período do token. Defaults to None.

    Raises:
        NotFound: Token desconhecido.
        AvailabilityClosed: Fora da coleta ou após o prazo.
        ValidationFailed: Servo, período ou eventos inconsistentes.

    Returns:
        int: Número de respostas gravadas.
    """
    entries = list(entries)
    with transaction.atomic():
        period = PeriodRepository.locked(period_for_token(token).id)
        if period is None:
            raise NotFound(INVALID_LINK)
        if period_id is not None and int(period_id) != period.id:
            raise ValidationFailed(
                "O período informado não corresponde ao link",
                errors={"period_id": ["Divergente do token"]},
            )
        ensure_collecting(period)
        servant = _validate_servant(period, servant_id)
        _validate_events(period, [int(e["event_id"]) for e in entries])

        AvailabilityRepository.for_servant(servant, period).delete()
        now = timezone.now()
        ServantAvailability.objects.bulk_create([
            ServantAvailability(
                servant=servant,
                period=period,
                event_id=int(e["event_id"]),
                is_available=bool(e["is_available"]),
                notes=e.get("notes") or None,
                submitted_at=now,
            )
            for e in entries
        ])
        audit("submit_availability", period, after={"servant_id": servant.id, "count": len(entries)})

    log.info("Disponibilidade: servo %s, período %s, %d resposta(s)", servant.id, period.id, len(entries))
    return len(entries)

def period_responses(period: SchedulePeriod):
    """Respostas do período (mais recentes primeiro) para a visão do admin."""
    return AvailabilityRepository.for_period(period)
