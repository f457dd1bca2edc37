from io import StringIO

import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command
from django.core.management.base import CommandError

from escalas.domain.models import Ministry, SchedulePeriod, Servant


@pytest.mark.django_db
def test_generate_period_events_dry_run(ministry):
    out = StringIO()
    call_command("generate_period_events", "--ministry", str(ministry.id), "--year", "2025", "--month", "3", stdout=out)
    assert "Dry-run: 18 evento(s)" in out.getvalue()
    assert not SchedulePeriod.objects.exists()


@pytest.mark.django_db
def test_generate_period_events_commit_is_idempotent(ministry):
    args = ["generate_period_events", "--ministry", str(ministry.id), "--year", "2025", "--month", "3", "--commit"]
    call_command(*args, stdout=StringIO())
    out = StringIO()
    call_command(*args, stdout=out)
    period = SchedulePeriod.objects.get(ministry=ministry, year=2025, month=3)
    assert period.events.count() == 18
    assert "0 evento(s) criado(s)" in out.getvalue()


@pytest.mark.django_db
def test_generate_period_events_unknown_ministry():
    with pytest.raises(CommandError):
        call_command("generate_period_events", "--ministry", "999", "--commit", stdout=StringIO())


@pytest.mark.django_db
def test_create_roles():
    call_command("create_roles", stdout=StringIO())
    leader = Group.objects.get(name="Líder")
    codenames = set(leader.permissions.values_list("codename", flat=True))
    assert "change_scheduleassignment" in codenames
    assert "change_scheduleperiod" not in codenames
    assert Group.objects.filter(name__in=["Admin", "Coordenador"]).count() == 2


@pytest.mark.django_db
def test_seed_demo_is_idempotent():
    call_command("seed_demo", stdout=StringIO())
    call_command("seed_demo", stdout=StringIO())
    assert Ministry.objects.count() == 1
    assert Servant.objects.count() == 9
