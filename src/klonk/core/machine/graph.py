"""
Validação e resolução estrutural do grafo de estados.

Este módulo concentra as operações puramente estruturais usadas por
`Machine.finalize` e `Machine.run`:

    - build_registry       → ident → StateNode, rejeitando idents ausentes/duplicados
    - resolve_transitions  → converte PendingTransition (nome) em Transition (referência)
    - reachable_states     → DFS a partir do nó inicial, deduplicado por ident

Decisões arquiteturais:
    - Erros estruturais são fatais e levantados antes de qualquer execução
    - A ordem do registry reflete a ordem de registro dos estados
    - A travessia é protegida contra ciclos

Limites explícitos:
    - Não executa Playlists
    - Não avalia condições de transição
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from klonk.core.exceptions import DuplicateIdentError, MissingIdentError, UnresolvedTransitionError

from .node import StateNode, Transition


def build_registry(states: Iterable[StateNode]) -> Dict[str, StateNode]:
    registry: Dict[str, StateNode] = {}
    for s in states:
        if not isinstance(s.ident, str) or not s.ident.strip():
            raise MissingIdentError(message="State missing ident", details={"state": repr(s)})
        if s.ident in registry:
            raise DuplicateIdentError(
                message=f"Duplicate state ident '{s.ident}'",
                details={"state": s.ident},
            )
        registry[s.ident] = s
    return registry


def resolve_transitions(registry: Dict[str, StateNode]) -> None:
    """
    Resolve os alvos de todas as transições pendentes do registry.

    A resolução é validada por completo antes de qualquer nó ser alterado,
    de modo que uma falha não deixa o grafo parcialmente resolvido.

    Raises:
        UnresolvedTransitionError: Se algum alvo não existir no registry.
    """
    for state in registry.values():
        for pending in state.pending_transitions:
            if pending.to not in registry:
                raise UnresolvedTransitionError(
                    message=f"State '{pending.to}' not found",
                    details={"from": state.ident, "to": pending.to},
                    hint="Registre o estado alvo com add_state antes de finalize",
                )

    for state in registry.values():
        state.transitions = [
            Transition(target=registry[p.to], condition=p.condition, weight=p.weight)
            for p in state.pending_transitions
        ]
        state.pending_transitions = []


def reachable_states(initial: Optional[StateNode]) -> List[StateNode]:
    if initial is None:
        return []
    visited = set()
    result: List[StateNode] = []
    stack: List[StateNode] = [initial]

    while stack:
        node = stack.pop()
        if not node.ident or node.ident in visited:
            continue
        visited.add(node.ident)
        result.append(node)
        for t in node.transitions:
            if t.target.ident and t.target.ident not in visited:
                stack.append(t.target)
    return result
