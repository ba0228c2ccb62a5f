"""
Máquina de estados finita (Machine) do Klonk.

A Machine possui um registry de StateNodes, exatamente um nó inicial e um
loop de execução que alterna "rodar a Playlist do nó atual" com "avaliar
transições para escolher o próximo nó", sob uma política de término
selecionada por run (`RunMode`).

Ciclo de vida:
    - Construção: add_state / add_logger (grafo mutável)
    - finalize(): resolve transições, rejeita idents duplicados/ausentes,
      exige exatamente um nó inicial; o grafo passa a ser somente leitura
    - run(state, options): pode ser chamado quantas vezes for necessário,
      com objetos de estado diferentes; nunca altera o grafo

Pontos de suspensão (todos via `_sleep`):
    - delay de retry do nó quando nenhuma transição dispara
    - intervalo entre ciclos no modo INFINITELY

Invariantes:
    - Toda entrada em um nó executa sua Playlist exatamente uma vez antes
      da avaliação de transições (inclusive o nó inicial)
    - `stop_after` é checado imediatamente após cada entrada
    - Exceções das Playlists propagam para o chamador e encerram a run

Limites explícitos:
    - Sem paralelismo entre nós
    - Sem cancelamento externo além de stop_after e esgotamento de retries
    - Sem persistência de estado
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Union

from klonk.core.exceptions import (
    MachineFinalizedError,
    MachineNotFinalizedError,
    MissingInitialStateError,
    MultipleInitialStatesError,
)
from klonk.core.logging import Logger, ensure_logger

from .graph import build_registry, reachable_states, resolve_transitions
from .node import StateNode
from .types import MachineRunOptions, RunMode, StopReason

NodeBuilder = Callable[[StateNode], Optional[StateNode]]


class Machine:
    """Máquina de estados que coordena a execução das Playlists de seus nós."""

    def __init__(self, ident: Optional[str] = None, logger: Optional[Logger] = None):
        self.ident = ident
        self.logger = logger
        self.initial_state: Optional[StateNode] = None
        self.finalized = False
        self._pending_states: List[StateNode] = []
        self._states: Dict[str, StateNode] = {}

    @classmethod
    def create(cls, ident: Optional[str] = None) -> "Machine":
        return cls(ident=ident)

    def _log(self, path: str) -> Logger:
        return ensure_logger(self.logger).child(path=path, instance=self.ident)

    def _ensure_mutable(self) -> None:
        if self.finalized:
            raise MachineFinalizedError(
                message="Cannot modify a finalized machine",
                details={"machine": self.ident},
            )

    def _sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    # -----------------------------
    # Construção
    # -----------------------------
    def add_state(
        self,
        state: Union[StateNode, str],
        builder: Optional[NodeBuilder] = None,
        *,
        initial: bool = False,
    ) -> "Machine":
        """
        Registra um estado.

        Aceita um StateNode pronto ou um ident; com ident, um novo nó é criado
        e entregue ao `builder` (que pode retorná-lo ou apenas configurá-lo).

        Raises:
            MachineFinalizedError: Se a máquina já foi finalizada.
            MultipleInitialStatesError: Se já existe um estado inicial.
        """
        self._ensure_mutable()
        node = StateNode(ident=state) if isinstance(state, str) else state
        if builder is not None:
            built = builder(node)
            node = built if isinstance(built, StateNode) else node

        log = self._log("machine.add_state")
        if initial and self.initial_state is not None:
            log.error("Initial state already registered", phase="error", state=node.ident,
                      initial_state=self.initial_state.ident)
            raise MultipleInitialStatesError(
                message=f"Machine already has an initial state: '{self.initial_state.ident}'",
                details={"initial_state": self.initial_state.ident, "state": node.ident},
                hint="Marque apenas um estado com initial=True",
            )

        log.debug("Adding state", state=node.ident, initial=initial)
        node.logger = self.logger
        self._pending_states.append(node)
        if initial:
            self.initial_state = node
        return self

    def add_logger(self, logger: Logger) -> "Machine":
        """
        Anexa um logger à máquina e o propaga a todos os estados registrados.

        Permitido também após `finalize`: o logger é um colaborador de
        observabilidade e não faz parte do grafo somente leitura.
        """
        self.logger = logger
        for node in list(self._pending_states) + list(self._states.values()):
            node.logger = logger
        return self

    def finalize(self, ident: Optional[str] = None) -> "Machine":
        """
        Resolve transições e trava a configuração da máquina.

        Raises:
            MachineFinalizedError: Se a máquina já foi finalizada.
            MissingInitialStateError: Sem estado inicial ou sem estados.
            MissingIdentError: Estado sem ident.
            DuplicateIdentError: Idents repetidos.
            UnresolvedTransitionError: Transição para estado inexistente.
        """
        self._ensure_mutable()
        log = self._log("machine.finalize")

        if self.initial_state is None or not self._pending_states:
            log.error("Finalization failed: no initial state or states to create", phase="error")
            raise MissingInitialStateError(
                message="Cannot finalize a machine without an initial state or states to create.",
                details={"states": len(self._pending_states)},
            )

        self.ident = ident or self.ident or str(uuid.uuid4())
        log = log.child(instance=self.ident)
        log.info("Finalizing machine", phase="start")

        registry = build_registry(self._pending_states)
        resolve_transitions(registry)

        for node in registry.values():
            node._frozen = True

        self._states = registry
        self._pending_states = []
        self.finalized = True
        log.info("Machine finalized", phase="end", count=len(registry))
        return self

    # -----------------------------
    # Consulta
    # -----------------------------
    @property
    def states(self) -> List[StateNode]:
        if self.finalized:
            return list(self._states.values())
        return list(self._pending_states)

    def get_state(self, ident: str) -> StateNode:
        if ident not in self._states:
            raise KeyError(ident)
        return self._states[ident]

    def reachable_states(self) -> List[StateNode]:
        """Estados alcançáveis a partir do inicial (usado pelo modo ANY)."""
        return reachable_states(self.initial_state)

    # -----------------------------
    # Execução
    # -----------------------------
    def _stop(self, log: Logger, reason: StopReason, **fields: Any) -> None:
        if reason is StopReason.RETRIES_EXHAUSTED:
            log.warning("Stop condition met.", phase="end", reason=reason.value, **fields)
        else:
            log.info("Stop condition met.", phase="end", reason=reason.value, **fields)

    def _enter(self, node: StateNode, state: Any, options: MachineRunOptions, log: Logger) -> None:
        log.info("Entering state. Running playlist.", phase="progress", state=node.ident)
        node.playlist.run(state, options.playlist_options, logger=self.logger)

    def _await_transition(
        self, node: StateNode, state: Any, options: MachineRunOptions, log: Logger
    ) -> Optional[StateNode]:
        if not node.retries_enabled:
            self._stop(log, StopReason.NO_TRANSITION_NO_RETRY, state=node.ident)
            return None

        log.info("No next state, beginning retry logic.", phase="progress", state=node.ident,
                 retry_delay=node.retry_delay)
        retries = 0
        while True:
            if node.retry_limit is not None and retries >= node.retry_limit:
                self._stop(log, StopReason.RETRIES_EXHAUSTED, state=node.ident, retries=retries)
                return None
            self._sleep(node.retry_delay)
            retries += 1
            log.debug("Retrying to find next state.", phase="progress", state=node.ident, attempt=retries)
            nxt = node.next(state, logger=self.logger, strict=options.strict_conditions)
            if nxt is not None:
                log.info("Retry successful.", phase="progress", state=node.ident, next_state=nxt.ident)
                return nxt

    def run(self, state: Any, options: Optional[MachineRunOptions] = None) -> Any:
        """
        Executa a máquina até uma condição de término do modo selecionado.

        Args:
            state: Estado externo mutável, repassado a Playlists e condições.
            options: Opções da run; default `MachineRunOptions()` (modo ANY).

        Returns:
            O mesmo objeto `state` recebido.

        Raises:
            MachineNotFinalizedError: Se `finalize` não foi chamado.
            MissingInitialStateError: Se não há estado inicial.
        """
        opts = options or MachineRunOptions()
        mode = opts.mode
        log = self._log("machine.run")
        log.info("Running machine...", phase="start", mode=mode.value, stop_after=opts.stop_after)

        if not self.finalized:
            log.error("Machine not finalized", phase="error")
            raise MachineNotFinalizedError(
                message="Cannot run a machine that is not finalized.",
                hint="Chame finalize() após registrar todos os estados",
            )
        if self.initial_state is None:
            log.error("No initial state", phase="error")
            raise MissingInitialStateError(message="Cannot run a machine without an initial state.")

        reachable = {s.ident for s in self.reachable_states()}
        visited = set()
        entries = 0

        if opts.stop_after_reached(entries):
            self._stop(log, StopReason.STOP_AFTER, count=entries)
            return state

        current = self.initial_state
        self._enter(current, state, opts, log)
        entries += 1
        visited.add(current.ident)

        if opts.stop_after_reached(entries):
            self._stop(log, StopReason.STOP_AFTER, count=entries)
            return state

        while True:
            if current.is_leaf and mode in (RunMode.LEAF, RunMode.ANY):
                self._stop(log, StopReason.LEAF, state=current.ident)
                return state

            nxt = current.next(state, logger=self.logger, strict=opts.strict_conditions)
            if nxt is None:
                nxt = self._await_transition(current, state, opts, log)
                if nxt is None:
                    return state

            if nxt is self.initial_state and mode in (RunMode.ROUNDTRIP, RunMode.ANY):
                self._stop(log, StopReason.ROUNDTRIP, state=current.ident)
                return state

            if mode is RunMode.INFINITELY:
                self._sleep(opts.interval)

            log.info("Transitioning state.", phase="progress", from_state=current.ident, to_state=nxt.ident)
            current = nxt
            self._enter(current, state, opts, log)
            entries += 1
            visited.add(current.ident)

            if opts.stop_after_reached(entries):
                self._stop(log, StopReason.STOP_AFTER, count=entries)
                return state

            # leaf tem precedência; é reportado no topo do loop
            if mode is RunMode.ANY and not current.is_leaf and reachable <= visited:
                self._stop(log, StopReason.ALL_VISITED, count=entries)
                return state
