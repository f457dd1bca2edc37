from __future__ import annotations

from datetime import datetime, timedelta

from django.utils.timezone import (
    get_current_timezone,
    get_current_timezone_name,
    make_aware,
    now as tz_now,
)
from icalendar import Calendar, Event, vCalAddress, vText

from escalas.domain.models import SchedulePeriod
from escalas.domain.repositories import EventRepository
from escalas.utils import _get_setting

def export_period_ics(period: SchedulePeriod) -> bytes:
    """Exporta os eventos do período para ICS, com os escalados como participantes.

    Args:
        period (SchedulePeriod): O período a exportar.

    Returns:
        bytes: O conteúdo do arquivo ICS.
    """
    cal = Calendar()
    cal.add("prodid", "-//Escalas de Ministérios//")
    cal.add("version", "2.0")
    cal.add("X-WR-CALNAME", f"Escala {period.ministry.name} {period.year}-{period.month:02d}")
    cal.add("X-WR-TIMEZONE", get_current_timezone_name())

    tz = get_current_timezone()
    duration_min = int(_get_setting("ICS_EVENT_DURATION_MINUTES", 120))
    loc = _get_setting("CALENDAR_LOCATION", None)
    now = tz_now()

    events = EventRepository.for_period(period).prefetch_related("assignments__servant", "assignments__area")
    for e in events:
        ev = Event()
        dtstart = make_aware(datetime.combine(e.event_date, e.event_time), tz)

        ev.add("uid", f"evt-{e.id}@escalas.local")
        ev.add("dtstamp", now)
        ev.add("dtstart", dtstart)
        ev.add("dtend", dtstart + timedelta(minutes=duration_min))
        ev.add("categories", [e.get_event_type_display()])
        ev.add("summary", f"{e.title} ({period.ministry.name})")

        assignments = list(e.assignments.all())
        desc_lines = [f"{e.title} em {e.event_date:%d/%m/%Y} às {e.event_time:%H:%M}"]
        if e.description:
            desc_lines.append(e.description)
        desc_lines += [f"{a.area.name}: {a.servant.name}" for a in assignments]
        ev.add("description", "\n".join(desc_lines))

        if loc:
            ev.add("location", loc)

        for a in assignments:
            if a.servant.email:
                attendee = vCalAddress(f"MAILTO:{a.servant.email}")
                attendee.params["cn"] = vText(a.servant.name)
                attendee.params["role"] = vText("REQ-PARTICIPANT")
                ev.add("attendee", attendee, encode=0)

        cal.add_component(ev)

    return cal.to_ical()
