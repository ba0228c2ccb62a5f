"""
Máquina de estados do Klonk.

Este pacote contém a camada que executa Playlists repetidamente enquanto
transita entre estados segundo condições ponderadas e dependentes de dados.

Componentes principais:
    - node    → StateNode, Transition (avaliação ponderada de transições)
    - graph   → registry, resolução de alvos e alcançabilidade
    - types   → RunMode, StopReason, MachineRunOptions
    - machine → Machine (finalize + loop de execução)

Princípios fundamentais:
    - Construção e execução são fases separadas (finalize é irreversível)
    - As quatro políticas de término não se confundem
    - O estado externo é passado explicitamente a Playlists e condições
"""

from .machine import Machine
from .node import PendingTransition, StateNode, Transition
from .types import DEFAULT_INTERVAL, MachineRunOptions, RunMode, StopReason

__all__ = [
    "Machine",
    "StateNode",
    "Transition",
    "PendingTransition",
    "MachineRunOptions",
    "RunMode",
    "StopReason",
    "DEFAULT_INTERVAL",
]
