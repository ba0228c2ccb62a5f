"""
Klonk — Canonical Error Structures (v1)

Este módulo define o payload canônico de erro do Klonk, usado quando uma
falha precisa ser registrada (log estruturado, callbacks) em vez de
propagada.

Erros devem ser:

- explícitos
- serializáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional

from .exceptions import (
    ConfigurationError,
    KlonkException,
    TaskExecutionError,
    TaskValidationError,
    TransitionConditionError,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do Klonk.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
TASK_VALIDATION_FAILED = "TASK_VALIDATION_FAILED"
TASK_EXECUTION_FAILED = "TASK_EXECUTION_FAILED"
TRANSITION_CONDITION_FAILED = "TRANSITION_CONDITION_FAILED"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"

_CODES = (
    (ConfigurationError, ENGINE_CONFIGURATION_ERROR),
    (TaskValidationError, TASK_VALIDATION_FAILED),
    (TaskExecutionError, TASK_EXECUTION_FAILED),
    (TransitionConditionError, TRANSITION_CONDITION_FAILED),
)


def exception_to_payload(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - KlonkException: já vem com message/details/hint; o código vem do catálogo.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, KlonkException):
        code = ENGINE_EXECUTION_ERROR
        for exc_type, exc_code in _CODES:
            if isinstance(exc, exc_type):
                code = exc_code
                break
        return ErrorPayload(
            type=code,
            message=exc.message or "Erro de execução",
            details={"exception_class": exc.__class__.__name__, **dict(exc.details or {})},
            hint=exc.hint,
        )

    return ErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a Task que originou a falha",
    )
