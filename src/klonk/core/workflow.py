"""
Workflow de polling do Klonk.

Um Workflow conecta um ou mais Triggers a uma Playlist: a cada tick,
cada Trigger é consultado uma vez (`poll`) e, para cada evento obtido, a
Playlist roda com o evento como `source`.

Decisões arquiteturais:
    - O Workflow é imutável; setters retornam uma nova instância
    - Falhas de uma run (ou do callback) são logadas com payload
      canônico de erro e NÃO interrompem o loop
    - O loop é síncrono; `stop()` pode ser chamado de outra thread

Limites explícitos:
    - Não há paralelismo entre eventos
    - Não há reprocessamento de eventos que falharam
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple, Union

from klonk.core.errors import exception_to_payload
from klonk.core.exceptions import InvalidRunOptionsError, WorkflowConfigurationError
from klonk.core.logging import Logger, ensure_logger
from klonk.core.playlist import DEFAULT_RETRY_DELAY, Outputs, Playlist, PlaylistRunOptions
from klonk.core.trigger import Trigger, TriggerEvent

DEFAULT_POLL_INTERVAL = 5.0

Callback = Callable[[TriggerEvent, Outputs], Any]
PlaylistBuilder = Callable[[Playlist], Playlist]


@dataclass(frozen=True)
class Workflow:
    """Triggers + Playlist + política de retry repassada à Playlist."""

    triggers: Tuple[Trigger, ...] = ()
    playlist: Optional[Playlist] = None
    retry_delay: Optional[float] = DEFAULT_RETRY_DELAY
    retry_limit: Optional[int] = None
    _stop_event: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False, compare=False
    )

    @classmethod
    def create(cls) -> "Workflow":
        return cls()

    # -----------------------------
    # Construção
    # -----------------------------
    def add_trigger(self, trigger: Trigger) -> "Workflow":
        if any(t.ident == trigger.ident for t in self.triggers):
            raise WorkflowConfigurationError(
                message=f"Duplicate trigger ident '{trigger.ident}'",
                details={"trigger": trigger.ident},
            )
        return replace(self, triggers=(*self.triggers, trigger))

    def set_playlist(self, playlist: Union[Playlist, PlaylistBuilder]) -> "Workflow":
        built = playlist if isinstance(playlist, Playlist) else playlist(Playlist())
        if not isinstance(built, Playlist):
            raise WorkflowConfigurationError(
                message="Playlist builder must return a Playlist",
                details={"returned": type(built).__name__},
            )
        return replace(self, playlist=built)

    def prevent_retry(self) -> "Workflow":
        return replace(self, retry_delay=None)

    def set_retry_delay(self, seconds: float) -> "Workflow":
        if seconds < 0:
            raise InvalidRunOptionsError(message="retry delay must be >= 0", details={"retry_delay": seconds})
        return replace(self, retry_delay=seconds)

    def set_retry_limit(self, limit: int) -> "Workflow":
        if limit < 0:
            raise InvalidRunOptionsError(message="retry limit must be >= 0", details={"retry_limit": limit})
        return replace(self, retry_limit=limit)

    @property
    def run_options(self) -> PlaylistRunOptions:
        return PlaylistRunOptions(retry_delay=self.retry_delay, retry_limit=self.retry_limit)

    # -----------------------------
    # Execução
    # -----------------------------
    def _require_playlist(self) -> Playlist:
        if self.playlist is None:
            raise WorkflowConfigurationError(
                message="Cannot start a workflow without a playlist.",
                hint="Use set_playlist() antes de start()",
            )
        return self.playlist

    def tick(self, callback: Optional[Callback] = None, logger: Optional[Logger] = None) -> int:
        """
        Executa uma passada sobre todos os Triggers.

        Returns:
            Número de eventos processados com sucesso (run + callback).
        """
        playlist = self._require_playlist()
        log = ensure_logger(logger).child(path="workflow.tick")
        processed = 0

        for trigger in self.triggers:
            event = trigger.poll()
            if event is None:
                continue
            log.debug("Event received", trigger=event.trigger_ident)
            try:
                outputs: Dict[str, Any] = playlist.run(event, self.run_options, logger=logger)
                if callback is not None:
                    callback(event, outputs)
            except Exception as exc:
                payload = exception_to_payload(exc)
                log.error(
                    "Error during playlist execution",
                    phase="error",
                    trigger=event.trigger_ident,
                    error=payload.to_dict(),
                    exc_info=exc,
                )
                continue
            processed += 1

        return processed

    def start(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        callback: Optional[Callback] = None,
        logger: Optional[Logger] = None,
        max_ticks: Optional[int] = None,
    ) -> int:
        """
        Inicia os Triggers e executa o loop de polling até `stop()` ou `max_ticks`.

        Bloqueia a thread chamadora. Os Triggers são parados ao final,
        inclusive quando o loop termina por exceção.

        Returns:
            Total de eventos processados com sucesso.

        Raises:
            WorkflowConfigurationError: Se nenhuma Playlist foi configurada.
        """
        self._require_playlist()
        if interval < 0:
            raise InvalidRunOptionsError(message="interval must be >= 0", details={"interval": interval})

        log = ensure_logger(logger).child(path="workflow.start")
        self._stop_event.clear()

        for trigger in self.triggers:
            trigger.start()
        log.info("Workflow started", phase="start", triggers=[t.ident for t in self.triggers], interval=interval)

        ticks = 0
        processed = 0
        try:
            while not self._stop_event.is_set():
                processed += self.tick(callback=callback, logger=logger)
                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
                self._wait(interval)
        finally:
            for trigger in self.triggers:
                trigger.stop()
            log.info("Workflow stopped", phase="end", ticks=ticks, processed=processed)

        return processed

    def _wait(self, seconds: float) -> None:
        self._stop_event.wait(seconds)

    def stop(self) -> None:
        self._stop_event.set()
