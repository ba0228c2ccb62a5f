"""
Klonk — engine de execução para automações baseadas em Tasks, Playlists
e máquinas de estados.

Namespace público:
    - Ok, Err, unwrap ...            → resultados explícitos
    - Task, FunctionTask             → unidades de trabalho
    - Playlist, PlaylistRunOptions   → pipelines sequenciais
    - StateNode, Machine, RunMode    → máquinas de estados
    - Trigger, ManualTrigger, Workflow → automação dirigida por eventos

Limites explícitos:
    - Não há CLI nem scaffolding de projetos
    - Não há persistência de estado entre execuções
"""

from klonk.core.result import Err, Ok, Result, is_err, is_ok, unwrap, unwrap_or, unwrap_or_else
from klonk.core.exceptions import (
    ConfigurationError,
    DuplicateIdentError,
    InvalidRunOptionsError,
    KlonkException,
    MachineFinalizedError,
    MachineNotFinalizedError,
    MissingIdentError,
    MissingInitialStateError,
    MultipleInitialStatesError,
    ResultUnwrapError,
    TaskExecutionError,
    TaskValidationError,
    TransitionConditionError,
    UnresolvedTransitionError,
    WorkflowConfigurationError,
)
from klonk.core.errors import ErrorPayload, exception_to_payload
from klonk.core.logging import BoundLogger, EventLogger, Logger, NullLogger, get_logger, setup_logging
from klonk.core.task import FunctionTask, Task
from klonk.core.playlist import SKIP, Outputs, Playlist, PlaylistRunOptions
from klonk.core.machine import Machine, MachineRunOptions, RunMode, StateNode, StopReason
from klonk.core.trigger import ManualTrigger, Trigger, TriggerEvent
from klonk.core.workflow import Workflow
from klonk.core.config import EngineSettings, load_config, load_settings, settings_from_config

__version__ = "0.1.0"

__all__ = [
    "Ok",
    "Err",
    "Result",
    "is_ok",
    "is_err",
    "unwrap",
    "unwrap_or",
    "unwrap_or_else",
    "KlonkException",
    "ConfigurationError",
    "MissingIdentError",
    "DuplicateIdentError",
    "UnresolvedTransitionError",
    "MissingInitialStateError",
    "MultipleInitialStatesError",
    "MachineNotFinalizedError",
    "MachineFinalizedError",
    "InvalidRunOptionsError",
    "WorkflowConfigurationError",
    "TaskValidationError",
    "TaskExecutionError",
    "TransitionConditionError",
    "ResultUnwrapError",
    "ErrorPayload",
    "exception_to_payload",
    "Logger",
    "BoundLogger",
    "EventLogger",
    "NullLogger",
    "get_logger",
    "setup_logging",
    "Task",
    "FunctionTask",
    "Playlist",
    "PlaylistRunOptions",
    "Outputs",
    "SKIP",
    "StateNode",
    "Machine",
    "MachineRunOptions",
    "RunMode",
    "StopReason",
    "Trigger",
    "ManualTrigger",
    "TriggerEvent",
    "Workflow",
    "EngineSettings",
    "load_config",
    "load_settings",
    "settings_from_config",
]
