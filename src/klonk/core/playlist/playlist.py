"""
Runner sequencial de Tasks (Playlist) do Klonk.

Uma Playlist é uma sequência ordenada de `TaskBinding`. Cada Task recebe
um input construído por seu builder a partir do `source` da run e do mapa
acumulado de resultados anteriores (chaveado por `task.ident`).

Regras de execução (por binding, em ordem de declaração):
    1. builder(source, outputs) → input
    2. input é SKIP/None → registra None e segue (validate/execute não rodam)
    3. validate(input) False → TaskValidationError; run abortada, finalizer não roda
    4. execute(input) Ok → registra e segue
    5. execute(input) Err → retry com o MESMO input, conforme PlaylistRunOptions
    6. ao final, finalizer(source, outputs) exatamente uma vez

Decisões arquiteturais:
    - A Playlist é imutável: `add_task` e `with_finalizer` retornam novas instâncias
      (dataclasses.replace)
    - Idents duplicados são rejeitados na construção
    - O mapa de outputs é criado a cada run e nunca compartilhado entre runs
    - O único ponto de suspensão é `_sleep` (delay entre retries)

Limites explícitos:
    - Não executa Tasks em paralelo
    - Não reconstrói inputs entre retries
    - Não captura exceções levantadas por builders, Tasks ou finalizer
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from klonk.core.exceptions import DuplicateIdentError, TaskExecutionError, TaskValidationError
from klonk.core.logging import Logger, ensure_logger
from klonk.core.result import Err, Ok, Result
from klonk.core.task.task import Task

from .types import Finalizer, InputBuilder, PlaylistRunOptions, TaskBinding, is_skip

Outputs = Dict[str, Optional[Result[Any]]]


@dataclass(frozen=True)
class Playlist:
    """
    Sequência ordenada e imutável de Tasks.

    Exemplo:
        playlist = (
            Playlist()
            .add_task(FetchTask("fetch"), lambda src, out: {"url": src["url"]})
            .add_task(ParseTask("parse"), lambda src, out: unwrap_or(out["fetch"], None))
            .with_finalizer(lambda src, out: src.update(done=True))
        )
    """

    bindings: Tuple[TaskBinding, ...] = ()
    finalizer: Optional[Finalizer] = None

    @property
    def idents(self) -> Tuple[str, ...]:
        return tuple(b.ident for b in self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)

    def add_task(self, task: Task, builder: InputBuilder) -> "Playlist":
        if task.ident in self.idents:
            raise DuplicateIdentError(
                message=f"Duplicate task ident: {task.ident}",
                details={"ident": task.ident, "idents": list(self.idents)},
                hint="Use um ident distinto para cada Task da Playlist",
            )
        return replace(self, bindings=self.bindings + (TaskBinding(task=task, builder=builder),))

    def with_finalizer(self, finalizer: Finalizer) -> "Playlist":
        """Registra o callback executado uma vez após todas as Tasks."""
        return replace(self, finalizer=finalizer)

    def _sleep(self, seconds: float) -> None:
        time.sleep(seconds)

    def _execute(self, task: Task, input: Any) -> Result[Any]:
        result = task.execute(input)
        if not isinstance(result, (Ok, Err)):
            raise TaskExecutionError(
                message=f"Task '{task.ident}' must return Ok or Err",
                details={"task": task.ident, "received": type(result).__name__},
                hint="Ajuste a Task para retornar Ok(...) ou Err(...)",
            )
        return result

    def _fail(self, task: Task, result: Err, retries: int, reason: str) -> TaskExecutionError:
        return TaskExecutionError(
            message=f"Task '{task.ident}' failed: {reason}",
            details={"task": task.ident, "retries": retries, "error": repr(result.error)},
        )

    @staticmethod
    def _cause(result: Err) -> Optional[BaseException]:
        return result.error if isinstance(result.error, BaseException) else None

    def run(
        self,
        source: Any,
        options: Optional[PlaylistRunOptions] = None,
        logger: Optional[Logger] = None,
    ) -> Outputs:
        opts = options or PlaylistRunOptions()
        log = ensure_logger(logger).child(path="playlist.run")
        outputs: Outputs = {}

        for binding in self.bindings:
            task = binding.task
            input = binding.builder(source, outputs)

            if is_skip(input):
                outputs[task.ident] = None
                log.debug("Task skipped", task=task.ident)
                continue

            if not task.validate(input):
                log.error("Input validation failed", task=task.ident)
                raise TaskValidationError(
                    message=f"Input validation failed for task '{task.ident}'",
                    details={"task": task.ident},
                    hint="Corrija o builder de input ou as regras de validate da Task",
                )

            result = self._execute(task, input)

            if isinstance(result, Err):
                if not opts.retries_enabled:
                    log.error("Task failed and retries are disabled", task=task.ident)
                    raise self._fail(task, result, 0, "retries are disabled") from self._cause(result)

                retries = 0
                while isinstance(result, Err):
                    if opts.retry_limit is not None and retries >= opts.retry_limit:
                        log.warning("Retries exhausted", task=task.ident, retries=retries)
                        raise self._fail(
                            task, result, retries, f"gave up after {retries} retries"
                        ) from self._cause(result)
                    self._sleep(opts.retry_delay)
                    retries += 1
                    log.debug("Retrying task", task=task.ident, attempt=retries)
                    result = self._execute(task, input)

            outputs[task.ident] = result

        if self.finalizer is not None:
            self.finalizer(source, outputs)
        return outputs
