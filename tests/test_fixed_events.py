from datetime import date, time
from types import SimpleNamespace

from escalas.services.fixed_events import (
    FASTING_TITLE,
    PRAYER_TITLE,
    FixedEventRule,
    build_fixed_events,
    church_day_of_week,
    default_church_rules,
    occurrence_in_month,
    rule_from_template,
)

MARCH_START, MARCH_END = date(2025, 3, 1), date(2025, 3, 31)


def _defaults():
    return default_church_rules(time(10), time(18), time(19), time(19, 30))


def test_day_of_week_starts_on_sunday():
    assert church_day_of_week(date(2025, 3, 2)) == 0
    assert church_day_of_week(date(2025, 3, 1)) == 6
    assert occurrence_in_month(date(2025, 3, 7)) == 1
    assert occurrence_in_month(date(2025, 3, 8)) == 2
    assert occurrence_in_month(date(2025, 3, 30)) == 5


def test_sunday_template_every_week():
    rows = build_fixed_events(MARCH_START, MARCH_END, [FixedEventRule(0, time(10), "Culto")])
    assert [r.event_date.day for r in rows] == [2, 9, 16, 23, 30]
    assert all(r.event_type == "regular" and r.source == "regular_calendar" for r in rows)


def test_week_of_month_picks_nth_occurrence():
    template = SimpleNamespace(day_of_week=3, time=time(19, 30), title="Jejum", week_of_month=1)
    rows = build_fixed_events(MARCH_START, MARCH_END, [rule_from_template(template)])
    assert [r.event_date for r in rows] == [date(2025, 3, 5)]


def test_rows_stay_inside_range():
    start, end = date(2025, 3, 10), date(2025, 3, 20)
    rows = build_fixed_events(start, end, _defaults())
    assert rows
    assert all(start <= r.event_date <= end for r in rows)


def test_default_schedule_for_march():
    rows = build_fixed_events(MARCH_START, MARCH_END, _defaults())
    assert len(rows) == 18
    titles_on_5th = {r.title for r in rows if r.event_date == date(2025, 3, 5)}
    assert titles_on_5th == {FASTING_TITLE}
    prayer_days = [r.event_date.day for r in rows if r.title == PRAYER_TITLE]
    assert prayer_days == [12, 19, 26]
    fasting_days = [r.event_date.day for r in rows if r.title == FASTING_TITLE]
    assert fasting_days == [3, 4, 5, 6, 7]


def test_duplicate_rules_emit_once():
    rule = FixedEventRule(0, time(10), "Culto")
    rows = build_fixed_events(MARCH_START, MARCH_END, [rule, rule])
    assert len(rows) == 5


def test_february_short_month():
    rows = build_fixed_events(date(2026, 2, 1), date(2026, 2, 28), [FixedEventRule(0, time(10), "Culto")])
    assert [r.event_date.day for r in rows] == [1, 8, 15, 22]
