"""
Tipos canônicos de execução da Machine.

Componentes principais:
    - RunMode           → política de término (selecionada por run)
    - MachineRunOptions → modo, stop_after, intervalo e opções de Playlist

Políticas de término (mutuamente exclusivas):
    - LEAF       → para quando o nó atual não tem transições
    - ROUNDTRIP  → para quando uma transição resolve para o nó inicial
    - ANY        → o primeiro entre leaf, roundtrip e "todos os alcançáveis visitados"
    - INFINITELY → nunca para por leaf/roundtrip; apenas por stop_after ou
                   esgotamento de retries do nó; dorme `interval` entre ciclos

`stop_after` conta ENTRADAS em nós (incluindo a entrada no nó inicial).
`stop_after=0` significa que a Playlist inicial nunca roda.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from klonk.core.exceptions import InvalidRunOptionsError
from klonk.core.playlist import PlaylistRunOptions

DEFAULT_INTERVAL = 1.0


class RunMode(str, Enum):
    LEAF = "leaf"
    ROUNDTRIP = "roundtrip"
    ANY = "any"
    INFINITELY = "infinitely"


class StopReason(str, Enum):
    """Motivo registrado quando uma run da Machine termina."""

    STOP_AFTER = "stop-after"
    LEAF = "leaf"
    ROUNDTRIP = "roundtrip"
    ALL_VISITED = "all-visited"
    NO_TRANSITION_NO_RETRY = "no-transition-no-retry"
    RETRIES_EXHAUSTED = "retries-exhausted"


@dataclass(frozen=True)
class MachineRunOptions:
    """
    Opções de uma run da Machine.

    Campos:
        - mode: política de término (RunMode ou seu valor textual)
        - stop_after: limite de entradas em nós; None = sem limite
        - interval: segundos entre ciclos (apenas INFINITELY)
        - strict_conditions: propaga exceções de condições em vez de tratá-las como False
        - playlist_options: política de retry das Tasks; None = default da Playlist
    """

    mode: RunMode = RunMode.ANY
    stop_after: Optional[int] = None
    interval: float = DEFAULT_INTERVAL
    strict_conditions: bool = False
    playlist_options: Optional[PlaylistRunOptions] = None

    def __post_init__(self) -> None:
        try:
            mode = RunMode(self.mode)
        except ValueError:
            raise InvalidRunOptionsError(
                message=f"Unknown run mode: {self.mode!r}",
                details={"mode": self.mode, "allowed": [m.value for m in RunMode]},
            ) from None
        object.__setattr__(self, "mode", mode)

        if self.stop_after is not None and self.stop_after < 0:
            raise InvalidRunOptionsError(
                message="stop_after must be >= 0 or None",
                details={"stop_after": self.stop_after},
            )
        if self.interval < 0:
            raise InvalidRunOptionsError(
                message="interval must be >= 0",
                details={"interval": self.interval},
            )

    def stop_after_reached(self, entries: int) -> bool:
        return self.stop_after is not None and entries >= self.stop_after
