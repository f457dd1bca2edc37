from __future__ import annotations

from typing import Any, Dict, Optional


class EscalaError(Exception):
    """Falha de regra de negócio com mensagem para o usuário e status HTTP."""
    status_code = 400
    default_message = "Operação inválida"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, **self.extra}


class ValidationFailed(EscalaError):
    default_message = "Dados inválidos"


class NotFound(EscalaError):
    status_code = 404
    default_message = "Registro não encontrado"


class StateConflict(EscalaError):
    """A operação viola o ciclo de vida do período."""
    default_message = "Operação não permitida no status atual"


class InvalidTransition(StateConflict):
    pass


class PublishBlocked(StateConflict):
    pass


class AvailabilityClosed(StateConflict):
    default_message = "O prazo para informar disponibilidade já encerrou"


class AlreadyExists(EscalaError):
    status_code = 409
    default_message = "Registro já existe"
