import pytest
from django.contrib.auth.models import User
from rest_framework.test import APIClient

from escalas.domain.models import Area, Ministry, ScheduleAssignment, Servant
from escalas.services.periods import create_period


@pytest.fixture
def ministry(db):
    return Ministry.objects.create(name="Mídia")


@pytest.fixture
def other_ministry(db):
    return Ministry.objects.create(name="Louvor")


@pytest.fixture
def areas(ministry):
    som = Area.objects.create(ministry=ministry, name="Som", order_index=1, min_servants=1)
    projecao = Area.objects.create(ministry=ministry, name="Projeção", order_index=2)
    return som, projecao


@pytest.fixture
def servants(areas):
    som, projecao = areas
    return {
        "ana": Servant.objects.create(area=som, name="Ana", email="ana@example.com"),
        "bruno": Servant.objects.create(area=som, name="Bruno", email="bruno@example.com"),
        "carla": Servant.objects.create(area=projecao, name="Carla", email="carla@example.com"),
    }


@pytest.fixture
def period(ministry):
    # março/2025 sem eventos regulares cadastrados: usa a programação padrão (18 eventos)
    return create_period(ministry, year=2025, month=3)


@pytest.fixture
def empty_period(ministry):
    return create_period(ministry, year=2025, month=4, generate=False)


@pytest.fixture
def fill_period():
    """Atribui um servo em todos os eventos do período."""
    def _fill(period, servant):
        for event in period.events.all():
            ScheduleAssignment.objects.create(event=event, servant=servant, area=servant.area)
    return _fill


@pytest.fixture
def admin_user(db):
    return User.objects.create_superuser("admin", "admin@example.com", "pw")


@pytest.fixture
def api(admin_user):
    client = APIClient()
    client.force_login(admin_user)
    return client


@pytest.fixture
def anon_api():
    return APIClient()
