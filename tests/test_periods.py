import pytest
from django.core import mail
from django.db import transaction
from django.utils import timezone

from escalas.domain.models import (
    PeriodStatus,
    ScheduleAssignment,
    ScheduleEvent,
    SchedulePeriod,
    ServantAvailability,
)
from escalas.services.errors import (
    AlreadyExists,
    InvalidTransition,
    PublishBlocked,
    StateConflict,
)
from escalas.services.periods import (
    create_period,
    delete_period,
    publish_period,
    rotate_token,
    transition,
    update_period,
)

S = PeriodStatus


@pytest.mark.parametrize("current,requested", [
    (S.DRAFT, S.COLLECTING),
    (S.DRAFT, S.SCHEDULING),
    (S.DRAFT, S.PUBLISHED),
    (S.COLLECTING, S.DRAFT),
    (S.COLLECTING, S.SCHEDULING),
    (S.SCHEDULING, S.COLLECTING),
    (S.SCHEDULING, S.PUBLISHED),
    (S.PUBLISHED, S.CLOSED),
])
def test_allowed_transitions(current, requested):
    assert transition(current, requested) == requested


@pytest.mark.parametrize("current,requested", [
    (S.DRAFT, S.CLOSED),
    (S.SCHEDULING, S.DRAFT),
    (S.PUBLISHED, S.DRAFT),
    (S.PUBLISHED, S.SCHEDULING),
    (S.CLOSED, S.DRAFT),
    (S.CLOSED, S.PUBLISHED),
])
def test_refused_transitions(current, requested):
    with pytest.raises(InvalidTransition):
        transition(current, requested)


def test_same_status_is_noop():
    assert transition("scheduling", "scheduling") == S.SCHEDULING


@pytest.mark.django_db
def test_create_sets_month_bounds(period):
    assert period.status == S.DRAFT
    assert (period.start_date.day, period.end_date.day) == (1, 31)
    assert len(period.availability_token) == 32


@pytest.mark.django_db
def test_create_duplicate_month(period, ministry):
    with pytest.raises(AlreadyExists):
        create_period(ministry, year=2025, month=3)


@pytest.mark.django_db
def test_publish_without_events(empty_period):
    with pytest.raises(PublishBlocked) as exc:
        publish_period(empty_period.id)
    assert exc.value.message == "Não há eventos neste período para publicar"


@pytest.mark.django_db
def test_publish_reports_unassigned_events(period, servants):
    ScheduleAssignment.objects.create(
        event=period.events.first(), servant=servants["ana"], area=servants["ana"].area
    )
    with pytest.raises(PublishBlocked) as exc:
        publish_period(period.id)
    assert exc.value.extra == {"events_without_assignments": 17}
    period.refresh_from_db()
    assert period.status == S.DRAFT and period.published_at is None


@pytest.mark.django_db
def test_publish_stamps_and_notifies(period, servants, fill_period, django_capture_on_commit_callbacks):
    fill_period(period, servants["ana"])
    with django_capture_on_commit_callbacks(execute=True):
        published = publish_period(period.id)
    assert published.status == S.PUBLISHED
    assert published.published_at is not None
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["ana@example.com"]
    assert "publicada" in mail.outbox[0].subject

    with pytest.raises(StateConflict) as exc:
        publish_period(period.id)
    assert exc.value.message == "Este período já está publicado"


@pytest.mark.django_db
def test_generic_update_goes_through_publish_checks(period):
    with pytest.raises(PublishBlocked):
        update_period(period.id, status="published")
    period.refresh_from_db()
    assert period.published_at is None


@pytest.mark.django_db
def test_update_same_status_runs_no_hooks(period, servants, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        update_period(period.id, status="draft", notes="revisar")
    assert callbacks == []
    period.refresh_from_db()
    assert period.notes == "revisar"
    assert mail.outbox == []


@pytest.mark.django_db
def test_entering_collecting_sends_link(period, servants, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        update_period(period.id, status="collecting")
    assert len(mail.outbox) == 1
    msg = mail.outbox[0]
    assert sorted(msg.to) == ["ana@example.com", "bruno@example.com", "carla@example.com"]
    assert f"http://testserver/disponibilidade/{period.availability_token}" in msg.body


@pytest.mark.django_db
def test_rolled_back_publish_sends_nothing(period, servants, fill_period, django_capture_on_commit_callbacks):
    fill_period(period, servants["ana"])
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                publish_period(period.id)
                raise RuntimeError("falha depois de publicar")
    assert callbacks == []
    assert mail.outbox == []
    period.refresh_from_db()
    assert period.status == S.DRAFT and period.published_at is None


@pytest.mark.django_db
def test_closed_is_terminal(period, servants, fill_period):
    fill_period(period, servants["ana"])
    publish_period(period.id)
    update_period(period.id, status="closed")
    with pytest.raises(InvalidTransition):
        update_period(period.id, status="scheduling")


@pytest.mark.django_db
def test_delete_cascades(period, servants):
    event = period.events.first()
    ScheduleAssignment.objects.create(event=event, servant=servants["ana"], area=servants["ana"].area)
    ServantAvailability.objects.create(
        servant=servants["ana"], period=period, event=event, submitted_at=timezone.now()
    )
    delete_period(period.id)
    assert not SchedulePeriod.objects.filter(id=period.id).exists()
    assert ScheduleEvent.objects.count() == 0
    assert ScheduleAssignment.objects.count() == 0
    assert ServantAvailability.objects.count() == 0


@pytest.mark.django_db
def test_delete_published_refused(period, servants, fill_period):
    fill_period(period, servants["ana"])
    publish_period(period.id)
    with pytest.raises(StateConflict):
        delete_period(period.id)
    assert SchedulePeriod.objects.filter(id=period.id).exists()


@pytest.mark.django_db
def test_rotate_token(period):
    old = period.availability_token
    assert rotate_token(period.id).availability_token != old
