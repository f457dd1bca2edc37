from __future__ import annotations

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from escalas.services.errors import EscalaError

log = logging.getLogger(__name__)

def escalas_exception_handler(exc, context):
    """Converte erros de domínio e de validação em ``{"detail": ...}``.

    - ``EscalaError``: status da própria exceção e extras estruturados;
    - ``ValidationError`` do DRF: 400 com os erros por campo em ``errors``;
    - ``DatabaseError`` inesperado: loga com traceback e responde 500.
    """
    if isinstance(exc, EscalaError):
        return Response(exc.as_dict(), status=exc.status_code)

    if isinstance(exc, ValidationError):
        return Response({"detail": "Dados inválidos", "errors": exc.detail}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, DatabaseError):
        view = context.get("view")
        log.error("Erro de banco em %s", type(view).__name__ if view else "?", exc_info=exc)
        return Response({"detail": "Erro interno do servidor"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return exception_handler(exc, context)
