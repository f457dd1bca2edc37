from __future__ import annotations

import logging
from typing import Iterable, List

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from escalas.domain.models import SchedulePeriod
from escalas.domain.repositories import MinistryRepository, ServantRepository
from escalas.services.errors import AlreadyExists
from escalas.utils import _next_year_month, availability_url

log = logging.getLogger(__name__)

# =========================
# Helpers
# =========================

def _distinct_valid_emails(people: Iterable) -> List[str]:
    emails = {p.email.strip().lower() for p in people if getattr(p, "email", None)}
    return sorted(e for e in emails if e)

def _load_period(period_id: int):
    period = SchedulePeriod.objects.select_related("ministry").filter(id=period_id).first()
    if period is None:
        log.warning("Período %s não existe mais.", period_id)
    return period

# =========================
# Tasks
# =========================

@shared_task
def notify_availability_open(period_id: int) -> int:
    """Envia o link de disponibilidade aos servos ativos do ministério.

    Args:
        period_id (int): Período que entrou em coleta.

    Returns:
        int: Número de destinatários.
    """
    period = _load_period(period_id)
    if period is None:
        return 0
    recipients = _distinct_valid_emails(ServantRepository.actives_for_ministry(period.ministry))
    if not recipients:
        log.info("notify_availability_open: nenhum destinatário (período %s).", period_id)
        return 0

    subject = f"{period.ministry.name}: informe sua disponibilidade ({period.month:02d}/{period.year})"
    lines = [
        f"A escala de {period.month:02d}/{period.year} do ministério {period.ministry.name} está sendo montada.",
        f"Informe sua disponibilidade em: {availability_url(period.availability_token)}",
    ]
    if period.availability_deadline:
        deadline = timezone.localtime(period.availability_deadline)
        lines.append(f"Prazo: {deadline:%d/%m/%Y %H:%M}")
    send_mail(subject, "\n".join(lines), settings.DEFAULT_FROM_EMAIL, recipients, fail_silently=True)
    log.info("notify_availability_open: enviado para %d destinatário(s).", len(recipients))
    return len(recipients)

@shared_task
def notify_period_published(period_id: int) -> int:
    """Envia a cada servo escalado a lista dos seus eventos no período.

    Returns:
        int: Número de e-mails enviados.
    """
    period = _load_period(period_id)
    if period is None:
        return 0

    per_servant = {}
    qs = (
        period.events
        .prefetch_related("assignments__servant", "assignments__area")
        .order_by("event_date", "event_time")
    )
    for event in qs:
        for a in event.assignments.all():
            if not a.servant.email:
                continue
            per_servant.setdefault(a.servant, []).append(
                f"- {event.event_date:%d/%m} {event.event_time:%H:%M} {event.title} ({a.area.name})"
            )

    subject = f"{period.ministry.name}: escala de {period.month:02d}/{period.year} publicada"
    sent = 0
    for servant, lines in per_servant.items():
        body = "\n".join([f"Olá, {servant.name}! Você foi escalado(a) para:", *lines])
        sent += send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [servant.email], fail_silently=True)
    log.info("notify_period_published: %d e-mail(s) (período %s).", sent, period_id)
    return sent

@shared_task
def monthly_draft_periods() -> str:
    """Cria os períodos em rascunho do mês seguinte para cada ministério ativo.

    Returns:
        str: Mensagem com o resultado.
    """
    if not settings.AUTO_DRAFT_PERIODS:
        return "Disabled."
    now = timezone.localtime()
    if now.day != settings.DRAFT_GENERATION_DAY or now.hour != settings.DRAFT_GENERATION_HOUR:
        return "Not the scheduled time."

    from escalas.services.periods import create_period

    year, month = _next_year_month(now.year, now.month)
    created = 0
    for ministry in MinistryRepository.actives():
        try:
            create_period(ministry, year=year, month=month)
            created += 1
        except AlreadyExists:
            continue
    log.info("monthly_draft_periods: %d período(s) criado(s) para %04d-%02d", created, year, month)
    return f"{created} draft period(s) for {year}-{month:02d}"
