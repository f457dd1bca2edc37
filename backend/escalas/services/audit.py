from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from django.forms.models import model_to_dict
from django.contrib.auth.models import User

from core.middleware import get_current_user
from escalas.domain.models import AuditLog

DEFAULT_EXCLUDE = {"id"}

def snapshot_instance(
    instance, *,
    include: Optional[Iterable[str]] = None,
    exclude: Iterable[str] = DEFAULT_EXCLUDE
) -> Dict[str, Any]:
    """Cria um snapshot do estado atual de um modelo Django.

    Campos não editáveis (ex.: token de disponibilidade) ficam de fora.

    Args:
        instance (Django Model): A instância a ser capturada.
        include (Optional[Iterable[str]], optional): Campos a incluir. Defaults to None.
        exclude (Iterable[str], optional): Campos a excluir. Defaults to DEFAULT_EXCLUDE.

    Returns:
        Dict[str, Any]: Estado atual do modelo.
    """
    if include:
        return model_to_dict(instance, fields=list(include))
    return model_to_dict(instance, exclude=list(exclude))

def audit(
    action: str,
    instance, *,
    before: Optional[Dict[str, Any]] = None,
    after: Optional[Dict[str, Any]] = None,
    author: Optional[User] = None,
    table: Optional[str] = None,
    record_id: Optional[str] = None,
) -> None:
    """Registra uma ação de auditoria para uma instância de modelo Django.

    Args:
        action (str): A ação realizada ("create", "update", "delete", "publish"...).
        instance (Django Model): A instância afetada.
        before (Optional[Dict[str, Any]], optional): Estado antes da ação. Defaults to None.
        after (Optional[Dict[str, Any]], optional): Estado após a ação. Defaults to None.
        author (Optional[User], optional): Autor; se None, usa o usuário do middleware. Defaults to None.
        table (Optional[str], optional): Nome da tabela; se None, usa a do modelo. Defaults to None.
        record_id (Optional[str], optional): ID do registro; se None, usa o da instância. Defaults to None.
    """
    if not table:
        table = instance._meta.db_table
    if not record_id:
        record_id = str(getattr(instance, "id", "unknown"))
    user = author or get_current_user()

    AuditLog.objects.create(
        action=action,
        table=table,
        record_id=record_id,
        before=before,
        after=after,
        author=user if user and user.is_authenticated else None,
    )
