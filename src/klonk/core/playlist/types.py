"""
Tipos canônicos da Playlist do Klonk.

Componentes principais:
    - SKIP               → sentinela "não executar esta Task nesta run"
    - TaskBinding        → par imutável (Task, builder de input)
    - PlaylistRunOptions → política de retry de uma run

Política padrão (sem opções explícitas):
    - retries ilimitados com delay fixo de 1 segundo

Este default atende daemons de longa duração. Chamadores de
request/response devem informar `retry_limit` ou desabilitar retries
(`retry_delay=None`) para falhar rápido.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from klonk.core.exceptions import InvalidRunOptionsError
from klonk.core.task.task import Task

DEFAULT_RETRY_DELAY = 1.0


class _Skip:
    _instance: Optional["_Skip"] = None

    def __new__(cls) -> "_Skip":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()


def is_skip(value: Any) -> bool:
    """Um builder sinaliza skip retornando `SKIP` ou `None`."""
    return value is None or value is SKIP


# Retornar None (ou SKIP) pula a Task: None nunca chega a uma Task como input real.
InputBuilder = Callable[[Any, Dict[str, Any]], Any]
Finalizer = Callable[[Any, Dict[str, Any]], None]


@dataclass(frozen=True)
class TaskBinding:
    """
    Task + builder que constrói seu input a partir de (source, outputs).

    O builder não pode entregar `None` como input legítimo: `None` é lido
    como skip, assim como `SKIP`.
    """

    task: Task
    builder: InputBuilder

    @property
    def ident(self) -> str:
        return self.task.ident


@dataclass(frozen=True)
class PlaylistRunOptions:
    """
    Política de retry aplicada a Tasks que retornam `Err`.

    Campos:
        - retry_delay: segundos entre tentativas; `None` desabilita retries
        - retry_limit: máximo de retries por Task; `None` = ilimitado
    """

    retry_delay: Optional[float] = DEFAULT_RETRY_DELAY
    retry_limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.retry_delay is not None and self.retry_delay < 0:
            raise InvalidRunOptionsError(
                message="retry_delay must be >= 0 or None",
                details={"retry_delay": self.retry_delay},
            )
        if self.retry_limit is not None and self.retry_limit < 0:
            raise InvalidRunOptionsError(
                message="retry_limit must be >= 0 or None",
                details={"retry_limit": self.retry_limit},
            )

    @property
    def retries_enabled(self) -> bool:
        return self.retry_delay is not None

    @classmethod
    def no_retry(cls) -> "PlaylistRunOptions":
        return cls(retry_delay=None)
