"""
Klonk — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Klonk.

Objetivo:
- Permitir que Playlist/Machine levantem exceções semânticas tipadas
- Separar erros de configuração, validação e execução
- Facilitar o mapeamento determinístico para ErrorPayload

Taxonomia:
- Configuração (fatal, nunca há retry): ident ausente/duplicado, transição
  sem alvo, estado inicial ausente, máquina não finalizada.
- Validação (fatal por run): `Task.validate` retornou False.
- Execução (recuperável via política): `Task.execute` retornou Err; só
  chega ao chamador após esgotar o orçamento de retries.

Regras:
- Exceções carregam apenas dados estruturados em `details`.
- Mensagem deve ser curta e humana.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class KlonkException(Exception):
    """Base class para exceções internas do Klonk.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Não congelar: a propagação atribui `__traceback__` e `__cause__`
      (ex.: ao atravessar um `contextlib.contextmanager`)
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuração (grafo, builders, opções)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ConfigurationError(KlonkException):
    """Configuração inválida ou inconsistente; nunca sofre retry."""


@dataclass(eq=False)
class MissingIdentError(ConfigurationError):
    """Task ou StateNode sem identificador."""


@dataclass(eq=False)
class DuplicateIdentError(ConfigurationError):
    """Identificador repetido dentro de uma Playlist ou Machine."""


@dataclass(eq=False)
class UnresolvedTransitionError(ConfigurationError):
    """Transição aponta para um estado que não foi registrado."""


@dataclass(eq=False)
class MissingInitialStateError(ConfigurationError):
    """Machine sem estado inicial (ou sem estados)."""


@dataclass(eq=False)
class MachineNotFinalizedError(ConfigurationError):
    """`run` chamado antes de `finalize`."""


@dataclass(eq=False)
class MachineFinalizedError(ConfigurationError):
    """Tentativa de alterar o grafo após `finalize`."""


@dataclass(eq=False)
class MultipleInitialStatesError(ConfigurationError):
    """Mais de um estado marcado como inicial na mesma Machine."""


@dataclass(eq=False)
class InvalidRunOptionsError(ConfigurationError):
    """Opções de execução fora do domínio (ex.: delay negativo)."""


@dataclass(eq=False)
class WorkflowConfigurationError(ConfigurationError):
    """Workflow iniciado sem Playlist configurada."""


# ---------------------------------------------------------------------------
# Validação / Execução
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class TaskValidationError(KlonkException):
    """`Task.validate` rejeitou o input construído pela Playlist."""


@dataclass(eq=False)
class TaskExecutionError(KlonkException):
    """Task falhou e o orçamento de retries foi esgotado (ou está desabilitado)."""


@dataclass(eq=False)
class TransitionConditionError(KlonkException):
    """Condição de transição levantou exceção em modo estrito."""


@dataclass(eq=False)
class ResultUnwrapError(KlonkException):
    """`unwrap` chamado em um Err cujo erro não é exceção."""
