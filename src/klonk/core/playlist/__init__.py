"""
# Playlist Core — Klonk

Runner sequencial de Tasks com mapa acumulado de resultados.

## Componentes

- **types**: `SKIP`, `TaskBinding`, `PlaylistRunOptions`
- **playlist**: `Playlist` (construção imutável + `run`)

## Invariantes

- Uma entrada por binding no mapa de outputs (Result ou None)
- Ordem de execução = ordem de declaração
"""

from .playlist import Outputs, Playlist
from .types import DEFAULT_RETRY_DELAY, SKIP, PlaylistRunOptions, TaskBinding, is_skip

__all__ = [
    "Playlist",
    "Outputs",
    "PlaylistRunOptions",
    "TaskBinding",
    "SKIP",
    "is_skip",
    "DEFAULT_RETRY_DELAY",
]
