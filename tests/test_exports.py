import io

import pytest
from icalendar import Calendar
from openpyxl import load_workbook

from escalas.services.exporters.export_ics import export_period_ics


@pytest.mark.django_db
def test_xlsx_endpoint(api, period, servants, fill_period):
    fill_period(period, servants["ana"])
    resp = api.get(f"/api/v1/schedule-periods/{period.id}/export.xlsx")
    assert resp.status_code == 200
    assert resp["Content-Type"].startswith("application/vnd.openxmlformats")

    wb = load_workbook(io.BytesIO(resp.content))
    grid, summary = wb.worksheets
    assert [c.value for c in grid[1]] == ["Data", "Hora", "Evento", "Som", "Projeção"]
    assert grid.max_row == 19
    assert grid.cell(row=2, column=4).value == "Ana"
    assert summary.cell(row=2, column=1).value == "Ana"
    assert summary.cell(row=2, column=2).value == 18


@pytest.mark.django_db
def test_ics_has_one_event_per_schedule_event(period, servants, fill_period):
    fill_period(period, servants["carla"])
    cal = Calendar.from_ical(export_period_ics(period))
    events = [c for c in cal.walk() if c.name == "VEVENT"]
    assert len(events) == 18
    assert "MAILTO:carla@example.com" in str(events[0].get("attendee"))
    assert "Projeção: Carla" in str(events[0].get("description"))


@pytest.mark.django_db
def test_ics_endpoint(api, period):
    resp = api.get(f"/api/v1/schedule-periods/{period.id}/export.ics")
    assert resp.status_code == 200
    assert resp["Content-Type"] == "text/calendar"
    assert b"BEGIN:VCALENDAR" in resp.content
