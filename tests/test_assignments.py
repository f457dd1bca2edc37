import pytest

from escalas.domain.models import Area, PeriodStatus, ScheduleAssignment, Servant
from escalas.services.assignments import area_coverage, assign, confirm, list_assignments, unassign
from escalas.services.errors import AlreadyExists, StateConflict, ValidationFailed


@pytest.fixture
def event(period):
    return period.events.order_by("event_date", "event_time").first()


@pytest.mark.django_db
def test_occupied_slot_is_replaced(event, servants, areas):
    som, _ = areas
    assign(event.id, servants["ana"].id, som.id)
    newest = assign(event.id, servants["bruno"].id, som.id)

    slot = ScheduleAssignment.objects.filter(event=event, area=som)
    assert slot.count() == 1
    assert slot.get().pk == newest.pk
    assert slot.get().servant == servants["bruno"]


@pytest.mark.django_db
def test_servant_once_per_event(event, servants, areas, ministry):
    som, projecao = areas
    assign(event.id, servants["ana"].id, som.id)
    # Ana também na projeção: precisa estar na área para passar da validação
    servants["ana"].area = projecao
    servants["ana"].save()
    with pytest.raises(AlreadyExists) as exc:
        assign(event.id, servants["ana"].id, projecao.id)
    assert exc.value.status_code == 409
    assert exc.value.message == "Este servo já está escalado para este evento"


@pytest.mark.django_db
def test_servant_must_belong_to_area(event, servants, areas):
    _, projecao = areas
    with pytest.raises(ValidationFailed):
        assign(event.id, servants["ana"].id, projecao.id)


@pytest.mark.django_db
def test_area_of_other_ministry_rejected(event, servants, other_ministry):
    vocal = Area.objects.create(ministry=other_ministry, name="Vocal")
    zeca = Servant.objects.create(area=vocal, name="Zeca")
    with pytest.raises(ValidationFailed):
        assign(event.id, zeca.id, vocal.id)


@pytest.mark.django_db
def test_closed_period_is_frozen(event, servants, areas, period):
    type(period).objects.filter(pk=period.pk).update(status=PeriodStatus.CLOSED)
    with pytest.raises(StateConflict):
        assign(event.id, servants["ana"].id, areas[0].id)


@pytest.mark.django_db
def test_unassign_by_pair_and_missing_keys(event, servants, areas):
    som, _ = areas
    assign(event.id, servants["ana"].id, som.id)
    assert unassign(event_id=event.id, area_id=som.id) == 1
    assert not ScheduleAssignment.objects.exists()
    with pytest.raises(ValidationFailed) as exc:
        unassign()
    assert exc.value.message == "ID ou event_id + area_id são obrigatórios"


@pytest.mark.django_db
def test_confirm(event, servants, areas):
    a = assign(event.id, servants["ana"].id, areas[0].id)
    confirmed = confirm(a.id)
    assert confirmed.confirmed is True
    assert confirmed.confirmed_at is not None


@pytest.mark.django_db
def test_list_and_coverage(period, event, servants, areas):
    som, projecao = areas
    assign(event.id, servants["ana"].id, som.id)
    assign(event.id, servants["carla"].id, projecao.id)
    assert len(list_assignments(period_id=period.id)) == 2
    assert len(list_assignments(event_id=event.id)) == 2

    rows = {r["area"]: r for r in area_coverage(period)}
    assert rows["Som"]["filled_events"] == 1
    assert rows["Som"]["total_events"] == 18
    assert rows["Som"]["below_minimum"] is True
    assert rows["Projeção"]["below_minimum"] is False
