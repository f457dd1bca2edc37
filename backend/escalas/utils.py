from __future__ import annotations

import calendar as pycal
from datetime import date, time
from typing import Any, Tuple

from django.conf import settings

# =========================
# Helpers
# =========================

def _get_setting(name: str, default: Any = None) -> Any:
    """Obtém uma configuração do Django settings com um valor padrão."""
    return getattr(settings, name, default)

def _parse_time(s: str | time) -> time:
    """Padroniza a entrada ("HH:MM" ou "HH:MM:SS") como time.

    Raises:
        ValueError: Se a string não estiver num formato de horário válido.
    """
    if isinstance(s, time):
        return s
    parts = str(s).strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Horário inválido: {s!r}")
    hh, mm = int(parts[0]), int(parts[1])
    ss = int(parts[2]) if len(parts) == 3 else 0
    return time(hour=hh, minute=mm, second=ss)

def _month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Primeiro e último dia do mês."""
    last_day = pycal.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)

def _next_year_month(y: int, m: int) -> Tuple[int, int]:
    return (y + 1, 1) if m == 12 else (y, m + 1)

def availability_url(token: str) -> str:
    """Link público do formulário de disponibilidade."""
    base = str(_get_setting("SITE_URL", "")).rstrip("/")
    path = str(_get_setting("AVAILABILITY_PATH", "/disponibilidade/"))
    if not path.endswith("/"):
        path += "/"
    return f"{base}{path}{token}"
