"""
Logger colaborador do Klonk.

O core registra logs apenas em fronteiras bem definidas: entrada em nó,
avaliação de transições, retries e condição de parada. Nunca dentro de
`Task.validate` ou `Task.execute`.

Qualquer objeto que implemente o protocolo `Logger` pode ser injetado.
Implementações fornecidas:
    - BoundLogger  → adapter sobre `logging.Logger` com campos vinculados
    - EventLogger  → registra eventos estruturados em memória (testes, inspeção)
    - NullLogger   → descarta tudo; usado quando nenhum logger é fornecido

Invariantes:
    - `child(**bindings)` nunca muta o logger original
    - Campos do evento sobrescrevem campos vinculados de mesmo nome
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

DEFAULT_LOGGER_NAME = "klonk"


@runtime_checkable
class Logger(Protocol):
    """Contrato mínimo de logger aceito pelo core."""

    def debug(self, message: str, **fields: Any) -> None: ...

    def info(self, message: str, **fields: Any) -> None: ...

    def warning(self, message: str, **fields: Any) -> None: ...

    def error(self, message: str, **fields: Any) -> None: ...

    def child(self, **bindings: Any) -> "Logger": ...


class NullLogger:
    """Logger que descarta todos os eventos."""

    def debug(self, message: str, **fields: Any) -> None:
        return None

    def info(self, message: str, **fields: Any) -> None:
        return None

    def warning(self, message: str, **fields: Any) -> None:
        return None

    def error(self, message: str, **fields: Any) -> None:
        return None

    def child(self, **bindings: Any) -> "NullLogger":
        return self


class BoundLogger:
    """
    Adapter sobre `logging.Logger` com campos vinculados.

    Os campos (vinculados + do evento) são anexados à mensagem no formato
    `key=value` e também expostos em `record.klonk` para handlers
    estruturados.
    """

    def __init__(self, logger: logging.Logger, bindings: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self.bindings: Dict[str, Any] = dict(bindings or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def child(self, **bindings: Any) -> "BoundLogger":
        return BoundLogger(self._logger, {**self.bindings, **bindings})

    def _log(self, level: int, message: str, fields: Dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        merged = {**self.bindings, **fields}
        exc_info = merged.pop("exc_info", None)
        if merged:
            rendered = " ".join(f"{k}={v}" for k, v in merged.items())
            self._logger.log(level, "%s | %s", message, rendered, extra={"klonk": merged}, exc_info=exc_info)
        else:
            self._logger.log(level, "%s", message, extra={"klonk": merged}, exc_info=exc_info)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)


@dataclass
class EventLogger:
    """
    Logger que acumula eventos estruturados em memória.

    Cada evento contém `level`, `message`, `timestamp` (UTC, ISO 8601) e
    todos os campos vinculados/do evento. Loggers filhos compartilham a
    mesma lista de eventos.
    """

    bindings: Dict[str, Any] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def child(self, **bindings: Any) -> "EventLogger":
        return EventLogger(bindings={**self.bindings, **bindings}, events=self.events)

    def _record(self, level: str, message: str, fields: Dict[str, Any]) -> None:
        event: Dict[str, Any] = {
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(self.bindings)
        event.update(fields)
        self.events.append(event)

    def debug(self, message: str, **fields: Any) -> None:
        self._record("debug", message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._record("info", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._record("warning", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._record("error", message, fields)

    def find(self, **criteria: Any) -> List[Dict[str, Any]]:
        """Filtra eventos cujos campos batem com todos os critérios."""
        return [e for e in self.events if all(e.get(k) == v for k, v in criteria.items())]


def get_logger(name: str = DEFAULT_LOGGER_NAME, **bindings: Any) -> BoundLogger:
    return BoundLogger(logging.getLogger(name), bindings)


def ensure_logger(logger: Optional[Logger]) -> Logger:
    """Retorna o logger fornecido ou um NullLogger."""
    return logger if logger is not None else NullLogger()


def setup_logging(level: Optional[str] = None) -> None:
    """Configura o logger `klonk` com um handler de console.

    Seguro para chamadas repetidas: handlers anteriores instalados por esta
    função são substituídos. Níveis desconhecidos caem para INFO.
    """
    level = str(level or "INFO").upper().strip()
    if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        level = "INFO"

    root = logging.getLogger(DEFAULT_LOGGER_NAME)
    for h in list(root.handlers):
        if getattr(h, "_klonk_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler()
    handler._klonk_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
