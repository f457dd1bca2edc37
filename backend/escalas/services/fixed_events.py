"""Expansão do calendário regular em eventos datados.

Funções puras (sem acesso ao banco): recebem um intervalo de datas e uma
lista de regras e devolvem as linhas a inserir em ``ScheduleEvent``.

Convenções:
    - dia da semana: 0=Domingo ... 6=Sábado;
    - ocorrência no mês: 1 = primeira vez que aquele dia da semana aparece no
      mês (dias 1-7), 2 = segunda (dias 8-14) e assim por diante.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import FrozenSet, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

from escalas.domain.models import EventSource, EventType

ALL_WEEKS: FrozenSet[int] = frozenset({1, 2, 3, 4, 5})

SUNDAY_MORNING_TITLE = "Culto Dominical - Manhã"
SUNDAY_EVENING_TITLE = "Culto Dominical - Noite"
PRAYER_TITLE = "Culto de Oração"
FASTING_TITLE = "Culto de Jejum e Oração"

# =========================
# Tipos
# =========================

@dataclass(frozen=True)
class FixedEventRule:
    """Regra de recorrência: dia da semana + horário + ocorrências do mês.

    ``weeks`` vazio (None) significa todas as ocorrências do dia no mês.
    """
    day_of_week: int
    time: time
    title: str
    weeks: Optional[FrozenSet[int]] = None

    def matches(self, d: date) -> bool:
        if church_day_of_week(d) != self.day_of_week:
            return False
        return self.weeks is None or occurrence_in_month(d) in self.weeks

@dataclass(frozen=True)
class FixedEventRow:
    """Linha pronta para virar um ScheduleEvent regular."""
    event_date: date
    event_time: time
    title: str
    event_type: str = EventType.REGULAR
    source: str = EventSource.REGULAR_CALENDAR

    @property
    def key(self) -> Tuple[date, time, str]:
        return (self.event_date, self.event_time, self.title)

# =========================
# Calendário
# =========================

def church_day_of_week(d: date) -> int:
    """Dia da semana com domingo = 0 (``date.weekday()`` usa segunda = 0)."""
    return (d.weekday() + 1) % 7

def occurrence_in_month(d: date) -> int:
    """Qual ocorrência do dia da semana no mês é a data (1 a 5)."""
    return (d.day - 1) // 7 + 1

def iter_dates(start: date, end: date) -> Iterator[date]:
    """Itera todas as datas de ``start`` até ``end``, inclusive."""
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)

# =========================
# Regras
# =========================

def rule_from_template(template) -> FixedEventRule:
    """Converte um RegularEvent (ou objeto equivalente) em regra."""
    week = getattr(template, "week_of_month", None)
    return FixedEventRule(
        day_of_week=int(template.day_of_week),
        time=template.time,
        title=template.title,
        weeks=frozenset({int(week)}) if week else None,
    )

def default_church_rules(
    sunday_morning: time,
    sunday_evening: time,
    prayer: time,
    fasting: time,
) -> List[FixedEventRule]:
    """Programação fixa padrão da igreja.

    - Domingos: culto da manhã e da noite;
    - Quartas: culto de oração, exceto na primeira semana (dias 1-7);
    - Primeira semana, segunda a sexta: culto de jejum e oração.
    """
    rules = [
        FixedEventRule(0, sunday_morning, SUNDAY_MORNING_TITLE),
        FixedEventRule(0, sunday_evening, SUNDAY_EVENING_TITLE),
        FixedEventRule(3, prayer, PRAYER_TITLE, weeks=ALL_WEEKS - {1}),
    ]
    rules += [FixedEventRule(dow, fasting, FASTING_TITLE, weeks=frozenset({1})) for dow in range(1, 6)]
    return rules

# =========================
# Geração
# =========================

def build_fixed_events(start: date, end: date, rules: Sequence[FixedEventRule]) -> List[FixedEventRow]:
    """Gera uma linha por (regra, data que casa com a regra) no intervalo.

    Args:
        start (date): Primeiro dia do intervalo (inclusive).
        end (date): Último dia do intervalo (inclusive).
        rules (Sequence[FixedEventRule]): Regras de recorrência.

    Returns:
        List[FixedEventRow]: Linhas ordenadas por data; chaves (data, hora, título) repetidas aparecem uma vez.
    """
    rows: List[FixedEventRow] = []
    seen: Set[Tuple[date, time, str]] = set()
    for d in iter_dates(start, end):
        for rule in rules:
            if not rule.matches(d):
                continue
            row = FixedEventRow(event_date=d, event_time=rule.time, title=rule.title)
            if row.key in seen:
                continue
            seen.add(row.key)
            rows.append(row)
    return rows

def rules_for_templates(templates: Iterable) -> List[FixedEventRule]:
    return [rule_from_template(t) for t in templates]
