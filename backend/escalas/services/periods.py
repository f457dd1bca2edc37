"""Ciclo de vida do período de escala.

Toda mudança de status passa por :func:`transition`, que consulta a tabela
``ALLOWED_TRANSITIONS``. Os ganchos de entrada rodam na mesma transação;
os avisos por e-mail só são enfileirados após o commit:

    - ``collecting``: garante o token e avisa os servos (e-mail);
    - ``published``: exige eventos e todos atribuídos, carimba ``published_at``
      e avisa os servos escalados.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.utils import timezone

from escalas.domain.models import Ministry, PeriodStatus, SchedulePeriod, new_availability_token
from escalas.domain.repositories import EventRepository, PeriodRepository
from escalas.services.audit import audit
from escalas.services.calendar import generate_regular_events_for_period
from escalas.services.errors import (
    AlreadyExists,
    InvalidTransition,
    NotFound,
    PublishBlocked,
    StateConflict,
    ValidationFailed,
)
from escalas.utils import _month_bounds

log = logging.getLogger(__name__)

PERIOD_NOT_FOUND = "Período não encontrado"

ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    PeriodStatus.DRAFT: frozenset({PeriodStatus.COLLECTING, PeriodStatus.SCHEDULING, PeriodStatus.PUBLISHED}),
    PeriodStatus.COLLECTING: frozenset({PeriodStatus.DRAFT, PeriodStatus.SCHEDULING, PeriodStatus.PUBLISHED}),
    PeriodStatus.SCHEDULING: frozenset({PeriodStatus.COLLECTING, PeriodStatus.PUBLISHED}),
    PeriodStatus.PUBLISHED: frozenset({PeriodStatus.CLOSED}),
    PeriodStatus.CLOSED: frozenset(),
}

# =========================
# Máquina de estados
# =========================

def transition(current: str, requested: str) -> str:
    """Valida a mudança de status e devolve o novo status.

    Args:
        current (str): Status atual.
        requested (str): Status pedido.

    Raises:
        ValidationFailed: Status desconhecido.
        InvalidTransition: Mudança não permitida pela tabela.

    Returns:
        str: O status resultante (igual ao atual quando nada muda).
    """
    if requested not in PeriodStatus.values:
        raise ValidationFailed(f"Status inválido: {requested}", errors={"status": ["Valor inválido"]})
    cur, req = PeriodStatus(current), PeriodStatus(requested)
    if req == cur:
        return cur
    if req not in ALLOWED_TRANSITIONS[cur]:
        raise InvalidTransition(
            f"Não é possível mudar de '{cur.label}' para '{req.label}'",
            status=cur.value,
        )
    return req

def _check_publishable(period: SchedulePeriod) -> None:
    if not EventRepository.for_period(period).exists():
        raise PublishBlocked("Não há eventos neste período para publicar")
    missing = EventRepository.without_assignments(period).count()
    if missing:
        raise PublishBlocked(
            f"Existem {missing} evento(s) sem atribuições. Monte a escala completa antes de publicar.",
            events_without_assignments=missing,
        )

def _enqueue(task, period_id: int) -> None:
    try:
        task.delay(period_id)
    except Exception:
        log.exception("Falha ao enfileirar %s (período %s)", task.name, period_id)

def _enter(period: SchedulePeriod, new_status: str) -> List[Callable[[], None]]:
    """Aplica os ganchos de entrada no objeto (ainda não salvo).

    Returns:
        List[Callable[[], None]]: Ações a executar após o commit.
    """
    from escalas import tasks

    after: List[Callable[[], None]] = []
    if new_status == PeriodStatus.COLLECTING:
        if not period.availability_token:
            period.availability_token = new_availability_token()
        after.append(lambda: _enqueue(tasks.notify_availability_open, period.pk))
    elif new_status == PeriodStatus.PUBLISHED:
        _check_publishable(period)
        period.published_at = timezone.now()
        after.append(lambda: _enqueue(tasks.notify_period_published, period.pk))
    period.status = new_status
    return after

def _locked_or_404(period_id: int) -> SchedulePeriod:
    period = PeriodRepository.locked(period_id)
    if period is None:
        raise NotFound(PERIOD_NOT_FOUND)
    return period

# =========================
# Operações
# =========================

def create_period(
    ministry: Ministry, *,
    year: int,
    month: int,
    availability_deadline: Optional[datetime] = None,
    notes: Optional[str] = None,
    created_by: Optional[User] = None,
    generate: bool = True,
) -> SchedulePeriod:
    """Cria o período (rascunho) do mês e gera os eventos regulares.

    A geração é um segundo passo: se falhar, o erro é registrado em log e o
    período é devolvido mesmo assim (basta chamar a geração de novo).

    Args:
        ministry (Ministry): Ministério dono do período.
        year (int): Ano.
        month (int): Mês (1-12).
        availability_deadline (Optional[datetime], optional): Prazo de disponibilidade. Defaults to None.
        notes (Optional[str], optional): Observações. Defaults to None.
        created_by (Optional[User], optional): Autor. Defaults to None.
        generate (bool, optional): Se deve gerar os eventos regulares. Defaults to True.

    Raises:
        AlreadyExists: Já existe período para o mês/ano no ministério.

    Returns:
        SchedulePeriod: O período criado.
    """
    start, end = _month_bounds(year, month)
    try:
        with transaction.atomic():
            period = SchedulePeriod.objects.create(
                ministry=ministry,
                year=year,
                month=month,
                start_date=start,
                end_date=end,
                availability_deadline=availability_deadline,
                notes=notes,
                created_by=created_by if created_by and created_by.is_authenticated else None,
            )
    except IntegrityError:
        raise AlreadyExists("Já existe um período para este mês/ano neste ministério")

    if generate:
        try:
            generate_regular_events_for_period(period)
        except Exception:
            log.exception("Falha ao gerar eventos do período %s", period.pk)
    return period

@transaction.atomic
def update_period(period_id: int, **changes: Any) -> SchedulePeriod:
    """Atualização parcial de ``availability_deadline``, ``notes`` e ``status``.

    Status igual ao atual não dispara transição nem ganchos.

    Raises:
        NotFound: Período inexistente.
        InvalidTransition: Mudança de status não permitida.
        PublishBlocked: Publicação sem eventos ou com eventos sem atribuição.
    """
    period = _locked_or_404(period_id)
    requested = changes.pop("status", None)
    for field in ("availability_deadline", "notes"):
        if field in changes:
            setattr(period, field, changes[field])

    after: List[Callable[[], None]] = []
    if requested is not None:
        new_status = transition(period.status, requested)
        if new_status != period.status:
            after = _enter(period, new_status)
    period.save()
    for action in after:
        transaction.on_commit(action)
    return period

@transaction.atomic
def publish_period(period_id: int) -> SchedulePeriod:
    """Publica a escala do período.

    Raises:
        NotFound: Período inexistente.
        StateConflict: Período já publicado.
        InvalidTransition: Período encerrado.
        PublishBlocked: Sem eventos ou com eventos sem atribuição.

    Returns:
        SchedulePeriod: O período publicado.
    """
    period = _locked_or_404(period_id)
    if period.status == PeriodStatus.PUBLISHED:
        raise StateConflict("Este período já está publicado", status=period.status)
    transition(period.status, PeriodStatus.PUBLISHED)
    after = _enter(period, PeriodStatus.PUBLISHED)
    period.save(update_fields=["status", "published_at", "updated_at"])
    audit("publish", period, after={"published_at": period.published_at})
    log.info("Período %s publicado", period.pk)
    for action in after:
        transaction.on_commit(action)
    return period

@transaction.atomic
def delete_period(period_id: int) -> None:
    """Exclui o período e, em cascata, eventos, atribuições e disponibilidades.

    Raises:
        NotFound: Período inexistente.
        StateConflict: Período publicado.
    """
    period = _locked_or_404(period_id)
    if period.status == PeriodStatus.PUBLISHED:
        raise StateConflict("Não é possível excluir um período já publicado", status=period.status)
    period.delete()

@transaction.atomic
def rotate_token(period_id: int) -> SchedulePeriod:
    """Emite um novo token de disponibilidade; o link anterior deixa de valer."""
    period = _locked_or_404(period_id)
    period.availability_token = new_availability_token()
    period.save(update_fields=["availability_token", "updated_at"])
    audit("rotate_token", period)
    return period
