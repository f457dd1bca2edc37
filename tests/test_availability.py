from datetime import timedelta

import pytest
from django.utils import timezone

from escalas.domain.models import Area, Servant, ServantAvailability
from escalas.services.availability import (
    availability_form_data,
    open_period_for_token,
    period_responses,
    submit_availability,
)
from escalas.services.errors import AvailabilityClosed, NotFound, ValidationFailed
from escalas.services.periods import create_period, update_period


@pytest.fixture
def collecting(period, servants):
    return update_period(period.id, status="collecting")


def _entries(events, available=True):
    return [{"event_id": e.id, "is_available": available} for e in events]


@pytest.mark.django_db
def test_unknown_token():
    with pytest.raises(NotFound) as exc:
        open_period_for_token("nao-existe")
    assert exc.value.message == "Link inválido ou expirado"


@pytest.mark.django_db
def test_draft_period_is_closed_for_answers(period):
    with pytest.raises(AvailabilityClosed) as exc:
        open_period_for_token(period.availability_token)
    assert exc.value.extra == {"status": "draft"}


@pytest.mark.django_db
def test_past_deadline(collecting):
    deadline = timezone.now() - timedelta(hours=1)
    update_period(collecting.id, availability_deadline=deadline)
    with pytest.raises(AvailabilityClosed) as exc:
        open_period_for_token(collecting.availability_token)
    assert "deadline" in exc.value.extra


@pytest.mark.django_db
def test_form_data_lists_ministry_servants(collecting, other_ministry):
    outsider_area = Area.objects.create(ministry=other_ministry, name="Vocal")
    Servant.objects.create(area=outsider_area, name="Zeca")
    data = availability_form_data(open_period_for_token(collecting.availability_token))
    assert len(data["events"]) == 18
    assert {s.name for s in data["servants"]} == {"Ana", "Bruno", "Carla"}


@pytest.mark.django_db
def test_resubmission_replaces_previous(collecting, servants):
    events = list(collecting.events.order_by("event_date")[:3])
    ana = servants["ana"]

    assert submit_availability(collecting.availability_token, ana.id, _entries(events)) == 3
    assert submit_availability(collecting.availability_token, ana.id, _entries(events[:1], available=False)) == 1

    rows = ServantAvailability.objects.filter(servant=ana, period=collecting)
    assert rows.count() == 1
    assert rows.get().is_available is False
    assert len(period_responses(collecting)) == 1


@pytest.mark.django_db
def test_servant_from_other_ministry_rejected(collecting, other_ministry):
    outsider = Servant.objects.create(area=Area.objects.create(ministry=other_ministry, name="Vocal"), name="Zeca")
    with pytest.raises(ValidationFailed):
        submit_availability(collecting.availability_token, outsider.id, [])


@pytest.mark.django_db
def test_inactive_servant_rejected(collecting, servants):
    bruno = servants["bruno"]
    bruno.is_active = False
    bruno.save()
    with pytest.raises(ValidationFailed):
        submit_availability(collecting.availability_token, bruno.id, [])


@pytest.mark.django_db
def test_event_of_other_period_rejected(collecting, servants, ministry):
    april = create_period(ministry, year=2025, month=4)
    foreign = april.events.first()
    with pytest.raises(ValidationFailed):
        submit_availability(collecting.availability_token, servants["ana"].id, _entries([foreign]))


@pytest.mark.django_db
def test_duplicate_event_ids_rejected(collecting, servants):
    e = collecting.events.first()
    with pytest.raises(ValidationFailed):
        submit_availability(collecting.availability_token, servants["ana"].id, _entries([e, e]))


@pytest.mark.django_db
def test_period_id_must_match_token(collecting, servants, empty_period):
    with pytest.raises(ValidationFailed):
        submit_availability(collecting.availability_token, servants["ana"].id, [], period_id=empty_period.id)
