from __future__ import annotations

import logging
from typing import List

from django.apps import AppConfig
from django.core.checks import Error, Tags, register

from escalas.utils import _get_setting

log = logging.getLogger(__name__)

# =========================
# System checks (validações de settings)
# =========================

DEFAULT_TIME_SETTINGS = (
    ("DEFAULT_SUNDAY_MORNING_TIME", "10:00", "escalas.E001"),
    ("DEFAULT_SUNDAY_EVENING_TIME", "18:00", "escalas.E002"),
    ("DEFAULT_PRAYER_TIME", "19:00", "escalas.E003"),
    ("DEFAULT_FASTING_TIME", "19:30", "escalas.E004"),
)

def _validate_time_string(value: str, setting_name: str, error_id: str) -> List[Error]:
    try:
        hh, mm = str(value).split(":")
        h, m = int(hh), int(mm)
        if not (0 <= h <= 23 and 0 <= m <= 59):
            raise ValueError
    except ValueError:
        return [
            Error(
                f"{setting_name} deve estar no formato HH:MM (ex.: '19:30'). Valor atual: {value!r}",
                id=error_id,
            )
        ]
    return []

@register(Tags.compatibility)
def escalas_settings_check(app_configs, **kwargs):
    """Garante que os settings essenciais estejam válidos."""
    errors: List[Error] = []
    for name, default, error_id in DEFAULT_TIME_SETTINGS:
        errors += _validate_time_string(_get_setting(name, default), name, error_id)

    duration = _get_setting("ICS_EVENT_DURATION_MINUTES", 120)
    if not isinstance(duration, int) or duration < 1:
        errors.append(Error("ICS_EVENT_DURATION_MINUTES deve ser um inteiro >= 1.", id="escalas.E005"))
    return errors

# =========================
# AppConfig
# =========================

class EscalasConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "escalas"
    verbose_name = "Escalas de Ministérios"

    def ready(self):
        """Conecta os signals de auditoria."""
        from .domain import signals  # noqa: F401
