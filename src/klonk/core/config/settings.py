"""
Settings do engine resolvidos a partir da configuração.

Estrutura esperada (todas as seções e chaves são opcionais):

    playlist:
      retry_delay: 1.0      # segundos; null desabilita retries
      retry_limit: null     # null = ilimitado
    machine:
      mode: any             # leaf | roundtrip | any | infinitely
      stop_after: null
      interval: 1.0
      strict_conditions: false
    workflow:
      poll_interval: 5.0
      queue_size: 50
    logging:
      level: INFO

Chaves ausentes assumem os defaults do engine (`DEFAULT_SETTINGS`).
Valores inválidos levantam `InvalidSettingsError` antes de qualquer execução.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from klonk.core.exceptions import InvalidRunOptionsError
from klonk.core.machine.types import DEFAULT_INTERVAL, MachineRunOptions, RunMode
from klonk.core.playlist.types import DEFAULT_RETRY_DELAY, PlaylistRunOptions

from .errors import InvalidSettingsError
from .loader import load_config

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_QUEUE_SIZE = 50
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = cfg.get(name, {}) if isinstance(cfg, dict) else {}
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise InvalidSettingsError(f"Seção '{name}' deve ser dict, recebido: {type(section).__name__}")
    return section


def _as_float(x: Any, *, key: str, nullable: bool = False) -> Optional[float]:
    if x is None and nullable:
        return None
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        raise InvalidSettingsError(f"'{key}' deve ser numérico, recebido: {x!r}")
    if x < 0:
        raise InvalidSettingsError(f"'{key}' deve ser >= 0, recebido: {x!r}")
    return float(x)


def _as_int(x: Any, *, key: str, nullable: bool = False, minimum: int = 0) -> Optional[int]:
    if x is None and nullable:
        return None
    if isinstance(x, bool) or not isinstance(x, int):
        raise InvalidSettingsError(f"'{key}' deve ser inteiro, recebido: {x!r}")
    if x < minimum:
        raise InvalidSettingsError(f"'{key}' deve ser >= {minimum}, recebido: {x!r}")
    return x


def _as_bool(x: Any, *, key: str) -> bool:
    if not isinstance(x, bool):
        raise InvalidSettingsError(f"'{key}' deve ser booleano, recebido: {x!r}")
    return x


def _as_mode(x: Any) -> RunMode:
    if isinstance(x, str):
        x = x.strip().lower()
    try:
        return RunMode(x)
    except ValueError:
        allowed = ", ".join(m.value for m in RunMode)
        raise InvalidSettingsError(f"'machine.mode' deve ser um de [{allowed}], recebido: {x!r}") from None


def _as_level(x: Any) -> str:
    level = str(x).upper().strip() if isinstance(x, str) else ""
    if level not in _LOG_LEVELS:
        raise InvalidSettingsError(f"'logging.level' inválido: {x!r}")
    return level


@dataclass(frozen=True)
class EngineSettings:
    """Settings efetivos do engine (imutáveis)."""

    retry_delay: Optional[float] = DEFAULT_RETRY_DELAY
    retry_limit: Optional[int] = None
    mode: RunMode = RunMode.ANY
    stop_after: Optional[int] = None
    interval: float = DEFAULT_INTERVAL
    strict_conditions: bool = False
    poll_interval: float = DEFAULT_POLL_INTERVAL
    queue_size: int = DEFAULT_QUEUE_SIZE
    log_level: str = "INFO"

    def playlist_options(self) -> PlaylistRunOptions:
        return PlaylistRunOptions(retry_delay=self.retry_delay, retry_limit=self.retry_limit)

    def machine_options(self, **overrides: Any) -> MachineRunOptions:
        """
        Monta `MachineRunOptions` a partir dos settings.

        `overrides` substitui campos individuais (ex.: `stop_after=3`).
        """
        options = MachineRunOptions(
            mode=self.mode,
            stop_after=self.stop_after,
            interval=self.interval,
            strict_conditions=self.strict_conditions,
            playlist_options=self.playlist_options(),
        )
        if not overrides:
            return options
        try:
            return replace(options, **overrides)
        except InvalidRunOptionsError as exc:
            raise InvalidSettingsError(exc.message) from exc


DEFAULT_SETTINGS = EngineSettings()


def settings_from_config(config: Dict[str, Any]) -> EngineSettings:
    """
    Interpreta a configuração resolvida em `EngineSettings`.

    Raises:
        InvalidSettingsError: Para seções que não são dict ou valores inválidos.
    """
    if not isinstance(config, dict):
        raise InvalidSettingsError(f"Config deve ser dict, recebido: {type(config).__name__}")

    playlist = _section(config, "playlist")
    machine = _section(config, "machine")
    workflow = _section(config, "workflow")
    logging_cfg = _section(config, "logging")
    d = DEFAULT_SETTINGS

    return EngineSettings(
        retry_delay=_as_float(playlist.get("retry_delay", d.retry_delay), key="playlist.retry_delay", nullable=True),
        retry_limit=_as_int(playlist.get("retry_limit", d.retry_limit), key="playlist.retry_limit", nullable=True),
        mode=_as_mode(machine.get("mode", d.mode.value)),
        stop_after=_as_int(machine.get("stop_after", d.stop_after), key="machine.stop_after", nullable=True),
        interval=_as_float(machine.get("interval", d.interval), key="machine.interval"),
        strict_conditions=_as_bool(
            machine.get("strict_conditions", d.strict_conditions), key="machine.strict_conditions"
        ),
        poll_interval=_as_float(workflow.get("poll_interval", d.poll_interval), key="workflow.poll_interval"),
        queue_size=_as_int(workflow.get("queue_size", d.queue_size), key="workflow.queue_size", minimum=1),
        log_level=_as_level(logging_cfg.get("level", d.log_level)),
    )


def load_settings(defaults_path: str, local_path: Optional[str] = None) -> EngineSettings:
    """Atalho: `load_config` seguido de `settings_from_config`."""
    return settings_from_config(load_config(defaults_path=defaults_path, local_path=local_path))
