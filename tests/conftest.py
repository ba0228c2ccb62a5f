# tests/conftest.py
"""
Fixtures compartilhados para testes do Klonk.

Este módulo define fixtures reutilizáveis que fornecem:
- Tasks dummy com roteiro de resultados e registro de chamadas
- Playlists que registram visitas no estado externo
- substituição dos pontos de suspensão (`_sleep`) por gravadores
- configurações YAML mínimas e determinísticas

Decisões arquiteturais:
    - Nenhum teste dorme de verdade: `_sleep` é sempre substituído
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa I/O
    - Nenhuma fixture contém lógica de domínio

Este módulo existe como infraestrutura de teste e não
como validação funcional do engine.
"""

from typing import Any, Callable, List, Optional

import pytest


@pytest.fixture
def make_task() -> Callable[..., Any]:
    """
    Fábrica de Tasks roteirizadas.

    O `execute` da Task devolve, em ordem, os resultados do roteiro; o
    último é repetido quando as chamadas excedem o roteiro. Todas as
    chamadas a `validate` e `execute` são registradas.

    Uso:
        task = make_task("fetch", [Err("x"), Ok(1)])
    """
    from klonk.core.result import Ok
    from klonk.core.task import Task

    class ScriptedTask(Task):
        def __init__(self, ident: str, results: List[Any], valid: bool = True):
            super().__init__(ident)
            self.results = list(results)
            self.valid = valid
            self.validate_calls: List[Any] = []
            self.execute_calls: List[Any] = []

        def validate(self, input: Any) -> bool:
            self.validate_calls.append(input)
            return self.valid

        def execute(self, input: Any):
            self.execute_calls.append(input)
            idx = min(len(self.execute_calls) - 1, len(self.results) - 1)
            return self.results[idx]

    def _make(ident: str, results: Optional[List[Any]] = None, valid: bool = True):
        return ScriptedTask(ident, results if results is not None else [Ok(ident)], valid)

    return _make


@pytest.fixture
def visit_playlist() -> Callable[[str], Any]:
    """
    Fábrica de Playlists que registram `ident` em `state["visits"]` a cada run.
    """

    def _make(ident: str):
        from klonk.core.playlist import Playlist
        from klonk.core.result import Ok
        from klonk.core.task import FunctionTask

        def _visit(state):
            state.setdefault("visits", []).append(ident)
            return Ok(ident)

        return Playlist().add_task(FunctionTask(f"visit-{ident}", _visit), lambda source, outputs: source)

    return _make


@pytest.fixture
def sleeps(monkeypatch) -> List[Any]:
    """
    Substitui `_sleep` de Playlist e Machine por gravadores.

    Cada chamada registra uma tupla `(origem, segundos)`, onde origem é
    "playlist" ou "machine".
    """
    from klonk.core.machine import Machine
    from klonk.core.playlist import Playlist

    calls: List[Any] = []
    monkeypatch.setattr(Playlist, "_sleep", lambda self, seconds: calls.append(("playlist", seconds)))
    monkeypatch.setattr(Machine, "_sleep", lambda self, seconds: calls.append(("machine", seconds)))
    return calls


@pytest.fixture
def event_logger():
    from klonk.core.logging import EventLogger

    return EventLogger()


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def engine_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao uso real do engine.

    Fornecido como string para evitar I/O implícito; os testes escrevem
    o conteúdo em `tmp_path` quando precisam de arquivo.
    """
    return """
playlist:
  retry_delay: 1.0
  retry_limit: null
machine:
  mode: any
  stop_after: null
  interval: 1.0
  strict_conditions: false
workflow:
  poll_interval: 5.0
  queue_size: 50
logging:
  level: INFO
""".lstrip()


@pytest.fixture
def engine_local_yaml() -> str:
    """YAML de overrides locais (precedência sobre defaults)."""
    return """
playlist:
  retry_limit: 3
machine:
  mode: infinitely
  interval: 2
logging:
  level: DEBUG
""".lstrip()
