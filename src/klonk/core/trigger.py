"""
Fontes de eventos (Trigger) do Klonk.

Um Trigger produz eventos de forma assíncrona em relação ao Workflow
(ex.: um watcher, um webhook, um timer) e os deposita em uma fila
limitada. O Workflow consome a fila via `poll()`.

Política da fila:
    - capacidade `queue_size` (default 50, deve ser > 0)
    - em overflow o evento MAIS ANTIGO é descartado
    - `poll()` retorna o evento mais antigo ou None

Limites explícitos:
    - Não há garantia de entrega além da capacidade da fila
    - O ciclo de vida da fonte (start/stop) é responsabilidade da subclasse
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Optional

from klonk.core.exceptions import InvalidRunOptionsError, MissingIdentError

DEFAULT_QUEUE_SIZE = 50


@dataclass(frozen=True)
class TriggerEvent:
    trigger_ident: str
    data: Any


class Trigger(ABC):
    """Fonte de eventos com fila limitada."""

    def __init__(self, ident: str, queue_size: int = DEFAULT_QUEUE_SIZE):
        if not isinstance(ident, str) or not ident.strip():
            raise MissingIdentError(message="Trigger ident must be a non-empty string", details={"ident": ident})
        if isinstance(queue_size, bool) or not isinstance(queue_size, int) or queue_size <= 0:
            raise InvalidRunOptionsError(
                message="queue_size must be a positive integer",
                details={"trigger": ident, "queue_size": queue_size},
            )
        self.ident = ident
        self.queue_size = queue_size
        # deque com maxlen descarta o item mais antigo no overflow
        self._queue: Deque[TriggerEvent] = deque(maxlen=queue_size)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ident={self.ident!r}, pending={self.pending})"

    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        raise NotImplementedError

    def push_event(self, data: Any) -> TriggerEvent:
        event = TriggerEvent(trigger_ident=self.ident, data=data)
        self._queue.append(event)
        return event

    def poll(self) -> Optional[TriggerEvent]:
        try:
            return self._queue.popleft()
        except IndexError:
            return None

    @property
    def pending(self) -> int:
        return len(self._queue)


class ManualTrigger(Trigger):
    """
    Trigger alimentado explicitamente pelo chamador via `emit`.

    Útil para integrar fontes externas já existentes (callbacks de
    bibliotecas, filas próprias) e para testes.
    """

    def __init__(self, ident: str, queue_size: int = DEFAULT_QUEUE_SIZE):
        super().__init__(ident, queue_size)
        self.running = False

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def emit(self, data: Any) -> TriggerEvent:
        return self.push_event(data)
