"""
Nó de estado (StateNode) do Klonk.

Um StateNode envolve uma Playlist, executada a cada entrada no nó, e um
conjunto de transições ponderadas e condicionais para outros nós.

Ciclo de vida das transições:
    - Durante a construção, o alvo é referenciado por NOME (`PendingTransition`)
    - `Machine.finalize` resolve nomes em referências (`Transition`)
    - Após a finalização o nó é congelado; mutações levantam MachineFinalizedError

Avaliação (`next`):
    - Ordenação estável por `weight` decrescente; empate mantém ordem de declaração
    - Retorna o alvo da primeira transição cuja condição é verdadeira
    - Condição que levanta exceção é logada e tratada como False
      (ou propagada como TransitionConditionError em modo estrito)

Política de retry do nó (usada pela Machine quando nenhuma transição dispara):
    - retry_delay: segundos entre reavaliações; None desabilita
    - retry_limit: máximo de reavaliações; None = ilimitado
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set, Union

from klonk.core.exceptions import (
    InvalidRunOptionsError,
    MachineFinalizedError,
    TransitionConditionError,
)
from klonk.core.logging import Logger, ensure_logger
from klonk.core.playlist import DEFAULT_RETRY_DELAY, Playlist

Condition = Callable[[Any], bool]


@dataclass(frozen=True)
class PendingTransition:
    to: str
    condition: Condition
    weight: float = 0


@dataclass(frozen=True)
class Transition:
    target: "StateNode"
    condition: Condition
    weight: float = 0


class StateNode:
    """
    Nó da máquina de estados.

    Todos os setters são fluentes (retornam o próprio nó).
    """

    def __init__(self, ident: str = "", playlist: Optional[Playlist] = None):
        self.ident = ident
        self.playlist = playlist if playlist is not None else Playlist()
        self.transitions: List[Transition] = []
        self.pending_transitions: List[PendingTransition] = []
        self.retry_delay: Optional[float] = DEFAULT_RETRY_DELAY
        self.retry_limit: Optional[int] = None
        self.logger: Optional[Logger] = None
        self._frozen = False

    def __repr__(self) -> str:
        return f"StateNode(ident={self.ident!r}, transitions={len(self.transitions) or len(self.pending_transitions)})"

    # -----------------------------
    # Construção
    # -----------------------------
    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise MachineFinalizedError(
                message=f"State '{self.ident}' belongs to a finalized machine",
                details={"state": self.ident},
            )

    def set_ident(self, ident: str) -> "StateNode":
        self._ensure_mutable()
        self.ident = ident
        return self

    def set_playlist(self, playlist: Union[Playlist, Callable[[Playlist], Playlist]]) -> "StateNode":
        """Aceita uma Playlist pronta ou um builder que recebe uma Playlist vazia."""
        self._ensure_mutable()
        if isinstance(playlist, Playlist):
            self.playlist = playlist
        else:
            self.playlist = playlist(Playlist())
        return self

    def add_transition(self, to: str, condition: Condition, weight: float = 0) -> "StateNode":
        self._ensure_mutable()
        self.pending_transitions.append(PendingTransition(to=to, condition=condition, weight=weight))
        return self

    def prevent_retry(self) -> "StateNode":
        self._ensure_mutable()
        self.retry_delay = None
        return self

    def set_retry_delay(self, seconds: float) -> "StateNode":
        self._ensure_mutable()
        if seconds < 0:
            raise InvalidRunOptionsError(
                message="retry delay must be >= 0",
                details={"state": self.ident, "retry_delay": seconds},
            )
        self.retry_delay = seconds
        return self

    def set_retry_limit(self, limit: int) -> "StateNode":
        """Define o máximo de reavaliações. Use `prevent_retry` para desabilitar."""
        self._ensure_mutable()
        if limit < 0:
            raise InvalidRunOptionsError(
                message="retry limit must be >= 0",
                details={"state": self.ident, "retry_limit": limit},
            )
        self.retry_limit = limit
        return self

    # -----------------------------
    # Consulta
    # -----------------------------
    @property
    def is_leaf(self) -> bool:
        return not self.transitions and not self.pending_transitions

    @property
    def retries_enabled(self) -> bool:
        return self.retry_delay is not None

    def get_by_ident(self, ident: str, _visited: Optional[Set[str]] = None) -> Optional["StateNode"]:
        """Busca em profundidade no subgrafo alcançável a partir deste nó."""
        if self.ident == ident:
            return self
        visited = _visited if _visited is not None else set()
        if self.ident in visited:
            return None
        visited.add(self.ident)
        for t in self.transitions:
            found = t.target.get_by_ident(ident, visited)
            if found is not None:
                return found
        return None

    def ordered_transitions(self) -> List[Transition]:
        # sorted() é estável: empates preservam a ordem de declaração
        return sorted(self.transitions, key=lambda t: -t.weight)

    def next(self, state: Any, logger: Optional[Logger] = None, strict: bool = False) -> Optional["StateNode"]:
        log = ensure_logger(logger if logger is not None else self.logger).child(
            path="state.next", state=self.ident
        )
        log.debug("Evaluating next state", phase="start")

        for t in self.ordered_transitions():
            try:
                matched = t.condition(state)
            except Exception as exc:
                if strict:
                    raise TransitionConditionError(
                        message=f"Transition condition failed: {self.ident} -> {t.target.ident}",
                        details={"from": self.ident, "to": t.target.ident, "error": repr(exc)},
                    ) from exc
                log.error("Transition condition failed", phase="error", to=t.target.ident, error=repr(exc))
                continue
            if matched:
                log.info("Condition met, transitioning", phase="end", next_state=t.target.ident)
                return t.target

        log.info("No condition met, no transition", phase="end", next_state=None)
        return None
