import pytest
from django.core import mail
from django.utils import timezone

from escalas.domain.models import SchedulePeriod
from escalas.tasks import monthly_draft_periods, notify_availability_open, notify_period_published
from escalas.utils import _next_year_month


@pytest.mark.django_db
def test_notify_missing_period_is_noop():
    assert notify_availability_open(999) == 0
    assert notify_period_published(999) == 0
    assert mail.outbox == []


@pytest.mark.django_db
def test_notify_availability_skips_servants_without_email(period, servants):
    servants["bruno"].email = ""
    servants["bruno"].save()
    assert notify_availability_open(period.id) == 2


@pytest.mark.django_db
def test_monthly_draft_disabled(settings, ministry):
    settings.AUTO_DRAFT_PERIODS = False
    assert monthly_draft_periods() == "Disabled."
    assert not SchedulePeriod.objects.exists()


@pytest.mark.django_db
def test_monthly_draft_creates_next_month(settings, ministry, other_ministry):
    now = timezone.localtime()
    settings.AUTO_DRAFT_PERIODS = True
    settings.DRAFT_GENERATION_DAY = now.day
    settings.DRAFT_GENERATION_HOUR = now.hour

    monthly_draft_periods()
    year, month = _next_year_month(now.year, now.month)
    assert SchedulePeriod.objects.filter(year=year, month=month).count() == 2

    # segunda execução não duplica
    monthly_draft_periods()
    assert SchedulePeriod.objects.filter(year=year, month=month).count() == 2
