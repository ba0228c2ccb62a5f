"""
Contrato canônico de Task do Klonk.

Uma Task é a menor unidade executável de uma Playlist: valida um input
candidato e, se válido, o executa produzindo um `Result`.

Responsabilidades de uma Task:
    - validar o input recebido (`validate`)
    - executar sua lógica e devolver `Ok`/`Err` (`execute`)

Princípios fundamentais:
    - Tasks não conhecem Playlist nem Machine
    - Tasks não controlam ordem de execução nem retries
    - Falha de validação é erro de programação (fatal, sem retry)
    - `Err` em `execute` é falha operacional (elegível a retry)

Invariantes:
    - `ident` é imutável e não vazio
    - `ident` é único dentro de uma Playlist (garantido pela Playlist)

Limites explícitos:
    - O engine não gerencia ciclo de vida além de chamar validate/execute
    - Estado por instância (ex.: contador de tentativas) é decisão do implementador
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar

from klonk.core.exceptions import MissingIdentError
from klonk.core.result import Result

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class Task(ABC, Generic[InputT, OutputT]):
    """
    Classe base de todas as unidades executáveis do Klonk.

    Subclasses implementam `validate` para checagens de runtime e
    `execute` para o trabalho propriamente dito. O `ident` também é a
    chave sob a qual o resultado aparece no mapa de outputs da Playlist.
    """

    def __init__(self, ident: str):
        if not isinstance(ident, str) or not ident.strip():
            raise MissingIdentError(
                message="task ident must be a non-empty string",
                details={"ident": ident},
            )
        self._ident = ident

    @property
    def ident(self) -> str:
        return self._ident

    @abstractmethod
    def validate(self, input: InputT) -> bool:
        """Retorna True para prosseguir, False para falhar imediatamente."""

    @abstractmethod
    def execute(self, input: InputT) -> Result[OutputT]:
        """Executa a lógica da Task; codifica falhas como `Err` em vez de levantar."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(ident={self._ident!r})"


class FunctionTask(Task[Any, Any]):
    """Adapter que transforma callables simples em Task.

    Exceções levantadas por `execute_fn` não são convertidas em `Err`;
    elas propagam para o chamador da Playlist.
    """

    def __init__(
        self,
        ident: str,
        execute_fn: Callable[[Any], Result[Any]],
        validate_fn: Optional[Callable[[Any], bool]] = None,
    ):
        super().__init__(ident)
        self._execute_fn = execute_fn
        self._validate_fn = validate_fn

    def validate(self, input: Any) -> bool:
        if self._validate_fn is None:
            return True
        return bool(self._validate_fn(input))

    def execute(self, input: Any) -> Result[Any]:
        return self._execute_fn(input)
