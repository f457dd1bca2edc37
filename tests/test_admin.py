import pytest
from django.contrib import admin
from django.test import RequestFactory

from escalas.admin import AssignmentInline, ScheduleEventInline
from escalas.domain.models import ScheduleAssignment, ScheduleEvent, SchedulePeriod
from escalas.services.periods import publish_period, update_period

ADMIN = "/admin/escalas"


@pytest.fixture
def admin_client_logged(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def published(period, servants, fill_period):
    fill_period(period, servants["ana"])
    return publish_period(period.id)


@pytest.mark.django_db
def test_published_period_cannot_be_deleted(admin_client_logged, published):
    resp = admin_client_logged.post(f"{ADMIN}/scheduleperiod/{published.id}/delete/", {"post": "yes"})
    assert resp.status_code == 403
    assert SchedulePeriod.objects.filter(id=published.id).exists()


@pytest.mark.django_db
def test_bulk_delete_keeps_published_period(admin_client_logged, published):
    resp = admin_client_logged.post(f"{ADMIN}/scheduleperiod/", {
        "action": "delete_selected",
        "_selected_action": [published.id],
        "post": "yes",
    })
    assert resp.status_code == 403
    assert SchedulePeriod.objects.filter(id=published.id).exists()


@pytest.mark.django_db
def test_non_published_period_deletes_with_events(admin_client_logged, period):
    update_period(period.id, status="scheduling")
    resp = admin_client_logged.post(f"{ADMIN}/scheduleperiod/{period.id}/delete/", {"post": "yes"})
    assert resp.status_code == 302
    assert not SchedulePeriod.objects.filter(id=period.id).exists()
    assert not ScheduleEvent.objects.filter(period_id=period.id).exists()


@pytest.mark.django_db
def test_event_delete_only_in_draft(admin_client_logged, period):
    event = period.events.first()
    update_period(period.id, status="collecting")
    resp = admin_client_logged.post(f"{ADMIN}/scheduleevent/{event.id}/delete/", {"post": "yes"})
    assert resp.status_code == 403
    assert ScheduleEvent.objects.filter(id=event.id).exists()

    update_period(period.id, status="draft")
    resp = admin_client_logged.post(f"{ADMIN}/scheduleevent/{event.id}/delete/", {"post": "yes"})
    assert resp.status_code == 302
    assert not ScheduleEvent.objects.filter(id=event.id).exists()


@pytest.mark.django_db
def test_assignment_delete_refused_when_closed(admin_client_logged, published):
    assignment = ScheduleAssignment.objects.filter(event__period=published).first()
    update_period(published.id, status="closed")
    resp = admin_client_logged.post(f"{ADMIN}/scheduleassignment/{assignment.id}/delete/", {"post": "yes"})
    assert resp.status_code == 403
    assert ScheduleAssignment.objects.filter(id=assignment.id).exists()


@pytest.mark.django_db
def test_inlines_follow_period_status(admin_user, published):
    request = RequestFactory().get("/")
    request.user = admin_user
    events = ScheduleEventInline(SchedulePeriod, admin.site)
    assert not events.has_delete_permission(request, published)
    assert not events.has_add_permission(request, published)

    event = published.events.first()
    assignments = AssignmentInline(ScheduleEvent, admin.site)
    assert assignments.has_delete_permission(request, event)
    update_period(published.id, status="closed")
    event.period.refresh_from_db()
    assert not assignments.has_delete_permission(request, event)
