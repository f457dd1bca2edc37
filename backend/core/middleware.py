from __future__ import annotations
import threading
from typing import Optional, Any
import json
import logging
import re
import uuid

from urllib.parse import quote

from django.conf import settings
from django.shortcuts import redirect

_local = threading.local()

SENSITIVE = {"password", "passwd", "senha", "token", "availability_token", "authorization", "csrfmiddlewaretoken"}
REDACTED = "***redacted***"

# /api/v1/availability/<token>/ e o link público /disponibilidade/<token>
_TOKEN_IN_PATH = re.compile(r"(/(?:availability|disponibilidade)/)[0-9A-Za-z_-]{8,}")

def get_current_user() -> Optional[Any]:
    """Retorna o usuário atual armazenado no thread-local, ou None se não houver."""
    return getattr(_local, "user", None)

def _client_ip(request):
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")

def _redact_path(path: str) -> str:
    return _TOKEN_IN_PATH.sub(lambda m: f"{m.group(1)}{REDACTED}", path or "")

def _redact_mapping(data):
    out = {}
    try:
        items = (data or {}).items()
    except Exception:
        return {}
    for k, v in items:
        key = str(k).lower()
        if key in SENSITIVE:
            out[k] = REDACTED
        else:
            # evita objetos não serializáveis
            out[k] = v if isinstance(v, (str, int, float, bool, type(None))) else str(v)
    return out

def _redact_json_body(raw: bytes) -> str:
    text = raw[:2048].decode("utf-8", errors="replace")
    try:
        parsed = json.loads(raw)
    except ValueError:
        return text
    if isinstance(parsed, dict):
        return json.dumps(_redact_mapping(parsed), ensure_ascii=False)[:2048]
    return text


class CurrentUserMiddleware:
    """Armazena o request.user num thread-local para ser lido pelos signals/serviços."""
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        _local.user = request.user if getattr(request, "user", None) and request.user.is_authenticated else None
        try:
            return self.get_response(request)
        finally:
            _local.user = None

class LoginRequiredMiddleware:
    """Redireciona usuários não autenticados para a página de login.

    A API fica de fora (``LOGIN_EXEMPT_PREFIXES``): lá quem responde 401/403
    são as permissões do DRF.
    """
    def __init__(self, get_response):
        self.get_response = get_response
        self.exempt = tuple(getattr(settings, "LOGIN_EXEMPT_PREFIXES", []))

    def __call__(self, request):
        path = request.path_info or "/"
        if path.startswith(getattr(settings, "STATIC_URL", "/static/")):
            return self.get_response(request)
        if any(path.startswith(p) for p in self.exempt):
            return self.get_response(request)
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            return self.get_response(request)
        login_url = getattr(settings, "LOGIN_URL", "/admin/login/")
        next_param = quote(_redact_path(request.get_full_path()) or "/")
        return redirect(f"{login_url}?next={next_param}")

class ErrorLoggingMiddleware:
    """Loga exceções não tratadas e respostas 5xx com o contexto da requisição."""
    def __init__(self, get_response):
        self.get_response = get_response
        self.logger = logging.getLogger("django.request")

    def __call__(self, request):
        req_id = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        request._request_id = req_id
        try:
            response = self.get_response(request)
        except Exception:
            self._log_exception(request)
            raise
        if getattr(response, "status_code", 200) >= 500:
            self._log_5xx(request, response)
        return response

    def _build_context(self, request):
        content_type = request.META.get("CONTENT_TYPE", "")
        body_excerpt = None

        if "application/json" in content_type:
            try:
                body_excerpt = _redact_json_body(request.body or b"")
            except Exception:
                body_excerpt = "<unavailable>"

        user = getattr(request, "user", None)
        username = (user.username or "<unavailable>") if user and user.is_authenticated else "Anonymous"

        return {
            "id": getattr(request, "_request_id", None),
            "method": request.method,
            "path": _redact_path(request.get_full_path()),
            "ip": _client_ip(request),
            "user": username,
            "ua": request.META.get("HTTP_USER_AGENT", ""),
            "referer": _redact_path(request.META.get("HTTP_REFERER", "")),
            "get": _redact_mapping(getattr(request, "GET", {})),
            "post": _redact_mapping(getattr(request, "POST", {})),
            "json_body_excerpt": body_excerpt,
        }

    def _log_exception(self, request):
        ctx = self._build_context(request)
        self.logger.error(
            "Unhandled exception | ctx=%s",
            json.dumps(ctx, ensure_ascii=False),
            exc_info=True,
        )

    def _log_5xx(self, request, response):
        ctx = self._build_context(request)
        ctx["status_code"] = getattr(response, "status_code", None)
        self.logger.error(
            "5xx response | ctx=%s",
            json.dumps(ctx, ensure_ascii=False),
        )
