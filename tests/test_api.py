import pytest
from django.contrib.auth.models import User

from escalas.domain.models import Area, Ministry, PeriodStatus, ScheduleAssignment, SchedulePeriod
from escalas.services.periods import update_period

BASE = "/api/v1"


@pytest.mark.django_db
def test_requires_authentication(anon_api):
    resp = anon_api.get(f"{BASE}/schedule-periods/")
    assert resp.status_code in (401, 403)


@pytest.mark.django_db
def test_writes_require_model_permission(anon_api, period):
    user = User.objects.create_user("leitor", "l@example.com", "pw")
    anon_api.force_login(user)
    assert anon_api.get(f"{BASE}/schedule-periods/").status_code == 200
    assert anon_api.post(f"{BASE}/schedule-periods/{period.id}/publish/").status_code == 403


@pytest.mark.django_db
def test_create_period_generates_events(api, ministry):
    resp = api.post(f"{BASE}/schedule-periods/", {"ministry_id": ministry.id, "month": 3, "year": 2025}, format="json")
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "draft"
    assert SchedulePeriod.objects.get(id=body["id"]).events.count() == 18

    dup = api.post(f"{BASE}/schedule-periods/", {"ministry_id": ministry.id, "month": 3, "year": 2025}, format="json")
    assert dup.status_code == 409
    assert dup.json()["detail"] == "Já existe um período para este mês/ano neste ministério"


@pytest.mark.django_db
def test_validation_error_shape(api, ministry):
    resp = api.post(f"{BASE}/schedule-periods/", {"ministry_id": ministry.id, "month": 13, "year": 2025}, format="json")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Dados inválidos"
    assert "month" in resp.json()["errors"]


@pytest.mark.django_db
def test_list_filters(api, period, empty_period):
    update_period(empty_period.id, status="scheduling")
    resp = api.get(f"{BASE}/schedule-periods/", {"status": "draft"})
    assert [p["id"] for p in resp.json()] == [period.id]


@pytest.mark.django_db
def test_detail_has_events_and_coverage(api, period, areas):
    resp = api.get(f"{BASE}/schedule-periods/{period.id}/")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["events"]) == 18
    assert {c["area"] for c in body["coverage"]} == {"Som", "Projeção"}
    assert body["availability_url"].endswith(period.availability_token)


@pytest.mark.django_db
def test_missing_period(api):
    resp = api.get(f"{BASE}/schedule-periods/999/")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Período não encontrado"


@pytest.mark.django_db
def test_publish_blocked_then_ok(api, period, servants, fill_period):
    resp = api.post(f"{BASE}/schedule-periods/{period.id}/publish/")
    assert resp.status_code == 400
    assert resp.json()["events_without_assignments"] == 18

    fill_period(period, servants["ana"])
    resp = api.post(f"{BASE}/schedule-periods/{period.id}/publish/")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Escala publicada com sucesso!"
    assert resp.json()["period"]["published_at"]

    assert api.delete(f"{BASE}/schedule-periods/{period.id}/").status_code == 400


@pytest.mark.django_db
def test_patch_invalid_transition(api, period):
    resp = api.patch(f"{BASE}/schedule-periods/{period.id}/", {"status": "closed"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["status"] == "draft"


@pytest.mark.django_db
def test_delete_draft(api, period):
    assert api.delete(f"{BASE}/schedule-periods/{period.id}/").status_code == 204
    assert not SchedulePeriod.objects.exists()


@pytest.mark.django_db
def test_generate_events_endpoint(api, empty_period):
    resp = api.post(f"{BASE}/schedule-periods/{empty_period.id}/generate-events/")
    assert resp.status_code == 200
    assert resp.json()["created"] > 0
    assert "gerado(s) a partir do calendário regular" in resp.json()["message"]


@pytest.mark.django_db
def test_import_bookings_requires_selection(api, period):
    resp = api.post(f"{BASE}/schedule-periods/{period.id}/import-bookings/", {"booking_ids": []}, format="json")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Nenhum agendamento selecionado"


@pytest.mark.django_db
def test_schedule_events_create_and_delete(api, period):
    payload = {"period_id": period.id, "event_date": "2025-03-22", "event_time": "19:00", "title": "Vigília"}
    resp = api.post(f"{BASE}/schedule-events/", payload, format="json")
    assert resp.status_code == 201
    assert api.post(f"{BASE}/schedule-events/", payload, format="json").status_code == 409
    assert api.delete(f"{BASE}/schedule-events/{resp.json()['id']}/").status_code == 204


@pytest.mark.django_db
def test_public_availability_flow(anon_api, api, period, servants):
    token = period.availability_token
    closed = anon_api.get(f"{BASE}/availability/{token}/")
    assert closed.status_code == 400
    assert closed.json() == {"detail": "O prazo para informar disponibilidade já encerrou", "status": "draft"}

    update_period(period.id, status=PeriodStatus.COLLECTING)
    resp = anon_api.get(f"{BASE}/availability/{token}/")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["events"]) == 18
    assert all("email" not in s for s in body["servants"])

    event_id = body["events"][0]["id"]
    resp = anon_api.post(f"{BASE}/availability/", {
        "token": token,
        "servant_id": servants["ana"].id,
        "period_id": period.id,
        "availabilities": [{"event_id": event_id, "is_available": True, "notes": "chego 18h"}],
    }, format="json")
    assert resp.status_code == 200
    assert resp.json() == {"count": 1, "message": "Disponibilidade registrada com sucesso!"}

    admin_view = api.get(f"{BASE}/schedule-periods/{period.id}/availability/")
    assert admin_view.json()[0]["servant"]["name"] == "Ana"

    assert anon_api.get(f"{BASE}/availability/desconhecido/").status_code == 404


@pytest.mark.django_db
def test_assignments_endpoint(api, period, servants, areas):
    som, projecao = areas
    event = period.events.first()
    resp = api.post(f"{BASE}/assignments/", {
        "schedule_event_id": event.id, "servant_id": servants["ana"].id, "area_id": som.id,
    }, format="json")
    assert resp.status_code == 201
    assert resp.json()["servant"]["name"] == "Ana"

    listed = api.get(f"{BASE}/assignments/", {"period_id": period.id})
    assert len(listed.json()) == 1

    confirm = api.post(f"{BASE}/assignments/{resp.json()['id']}/confirm/")
    assert confirm.json()["confirmed"] is True

    bad = api.delete(f"{BASE}/assignments/")
    assert bad.status_code == 400
    assert bad.json()["detail"] == "ID ou event_id + area_id são obrigatórios"

    gone = api.delete(f"{BASE}/assignments/?event_id={event.id}&area_id={som.id}")
    assert gone.status_code == 204
    assert not ScheduleAssignment.objects.exists()


@pytest.mark.django_db
def test_ministry_crud_soft_delete(api):
    resp = api.post(f"{BASE}/ministries/", {"name": "Recepção"}, format="json")
    assert resp.status_code == 201
    dup = api.post(f"{BASE}/ministries/", {"name": "Recepção"}, format="json")
    assert dup.status_code == 409
    assert dup.json()["detail"] == "Já existe um ministério com este nome"

    mid = resp.json()["id"]
    assert api.delete(f"{BASE}/ministries/{mid}/").status_code == 204
    assert Ministry.objects.get(id=mid).is_active is False
    assert all(m["id"] != mid for m in api.get(f"{BASE}/ministries/").json())


@pytest.mark.django_db
def test_regular_event_needs_ministry(api):
    resp = api.post(f"{BASE}/regular-events/", {
        "title": "Culto", "day_of_week": 0, "time": "10:00", "ministry_ids": [],
    }, format="json")
    assert resp.status_code == 400
    assert "ministry_ids" in resp.json()["errors"]


@pytest.mark.django_db
def test_area_name_unique_among_active(api, ministry, other_ministry):
    payload = {"ministry_id": ministry.id, "name": "Som"}
    first = api.post(f"{BASE}/areas/", payload, format="json")
    assert first.status_code == 201
    dup = api.post(f"{BASE}/areas/", payload, format="json")
    assert dup.status_code == 409
    assert dup.json()["detail"] == "Já existe uma área com este nome neste ministério"
    assert Area.objects.filter(ministry=ministry, name="Som").count() == 1

    elsewhere = api.post(f"{BASE}/areas/", {"ministry_id": other_ministry.id, "name": "Som"}, format="json")
    assert elsewhere.status_code == 201

    assert api.delete(f"{BASE}/areas/{first.json()['id']}/").status_code == 204
    again = api.post(f"{BASE}/areas/", payload, format="json")
    assert again.status_code == 201


@pytest.mark.django_db
def test_area_capacity_validation(api, ministry):
    zero = api.post(f"{BASE}/areas/", {"ministry_id": ministry.id, "name": "Som", "max_servants": 0}, format="json")
    assert zero.status_code == 400
    assert "max_servants" in zero.json()["errors"]

    inverted = api.post(f"{BASE}/areas/", {
        "ministry_id": ministry.id, "name": "Som", "min_servants": 3, "max_servants": 2,
    }, format="json")
    assert inverted.status_code == 400
    assert inverted.json()["errors"]["max_servants"] == ["Deve ser maior ou igual ao mínimo"]
    assert not Area.objects.exists()
