"""
Tipo Result canônico do Klonk.

Este módulo define a representação do desfecho de uma única unidade de
trabalho: sucesso com payload tipado (`Ok`) ou falha com um valor de erro
(`Err`).

Nenhum componente acima deste módulo toma decisões de controle de fluxo
sem inspecionar o tag do Result.

Componentes principais:
    - Ok       → sucesso, carrega `value`
    - Err      → falha, carrega `error`
    - Result   → união `Ok | Err`
    - helpers  → is_ok, is_err, unwrap, unwrap_or, unwrap_or_else

Invariantes:
    - Instâncias são imutáveis (frozen)
    - Exatamente um tag existe por valor: `ok` é True para Ok e False para Err
    - Helpers não possuem estado

Limites explícitos:
    - Não executa Tasks
    - Não decide políticas de retry
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .exceptions import ResultUnwrapError

T = TypeVar("T")
D = TypeVar("D")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Resultado de sucesso de uma execução."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """
    Resultado de falha de uma execução.

    O `error` costuma ser uma exceção, mas qualquer valor é aceito
    (ex.: código de erro, mensagem). Helpers como `unwrap` tratam
    ambos os casos de forma explícita.
    """

    error: Any

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def is_ok(result: Result[T]) -> bool:
    return isinstance(result, Ok)


def is_err(result: Result[T]) -> bool:
    return isinstance(result, Err)


def unwrap(result: Result[T]) -> T:
    """
    Retorna o valor de um `Ok` ou levanta o erro carregado por um `Err`.

    Quando o erro não é uma exceção, é encapsulado em `ResultUnwrapError`
    com o valor original em `details["error"]`.

    Raises:
        BaseException: O próprio erro do `Err`, quando for exceção.
        ResultUnwrapError: Quando o erro do `Err` não for exceção.
    """
    if isinstance(result, Ok):
        return result.value
    error = result.error
    if isinstance(error, BaseException):
        raise error
    raise ResultUnwrapError(
        message=f"Called unwrap on an Err result: {error!r}",
        details={"error": error},
    )


def unwrap_or(result: Result[T], default: D) -> Union[T, D]:
    if isinstance(result, Ok):
        return result.value
    return default


def unwrap_or_else(result: Result[T], fn: Callable[[Any], D]) -> Union[T, D]:
    """Retorna o valor ou um fallback calculado a partir do erro (`fn(error)`)."""
    if isinstance(result, Ok):
        return result.value
    return fn(result.error)
