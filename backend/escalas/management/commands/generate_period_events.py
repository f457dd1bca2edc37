from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from escalas.domain.models import Ministry, SchedulePeriod
from escalas.services.calendar import generate_regular_events_for_period, rules_for_ministry
from escalas.services.errors import EscalaError
from escalas.services.fixed_events import build_fixed_events
from escalas.services.periods import create_period
from escalas.utils import _month_bounds, _next_year_month

class Command(BaseCommand):
    help = "Garante o período do mês para o ministério e gera os eventos do calendário regular."

    def add_arguments(self, parser):
        parser.add_argument("--ministry", type=int, required=True, help="ID do ministério.")
        parser.add_argument("--year", type=int, help="Ano alvo (padrão: atual ou --next).")
        parser.add_argument("--month", type=int, help="Mês alvo [1..12] (padrão: atual ou --next).")
        parser.add_argument(
            "--next",
            action="store_true",
            help="Usa o mês seguinte ao atual (quando year/month não forem informados).",
        )
        parser.add_argument(
            "--commit",
            action="store_true",
            help="Grava período e eventos (sem a flag, apenas lista o que seria gerado).",
        )

    def handle(self, *args, **opts):
        today = timezone.localdate()
        year, month = opts["year"], opts["month"]
        if year is None or month is None:
            year, month = _next_year_month(today.year, today.month) if opts["next"] else (today.year, today.month)
        if not (1 <= month <= 12):
            raise CommandError("Mês inválido")

        ministry = Ministry.objects.filter(id=opts["ministry"]).first()
        if ministry is None:
            raise CommandError(f"Ministério {opts['ministry']} não encontrado")

        if not opts["commit"]:
            start, end = _month_bounds(year, month)
            rows = build_fixed_events(start, end, rules_for_ministry(ministry))
            for r in rows:
                self.stdout.write(f"{r.event_date:%d/%m/%Y} {r.event_time:%H:%M} {r.title}")
            self.stdout.write(
                f"Dry-run: {len(rows)} evento(s) para {year}-{month:02d}. Use --commit para gravar."
            )
            return

        period = SchedulePeriod.objects.filter(ministry=ministry, year=year, month=month).first()
        if period is None:
            period = create_period(ministry, year=year, month=month, generate=False)
            self.stdout.write(self.style.SUCCESS(f"[period] criado {period}"))

        try:
            created = generate_regular_events_for_period(period)
        except EscalaError as e:
            raise CommandError(e.message)
        total = period.events.count()
        self.stdout.write(
            self.style.SUCCESS(f"[events] {created} evento(s) criado(s); total em {year}-{month:02d}: {total}")
        )
