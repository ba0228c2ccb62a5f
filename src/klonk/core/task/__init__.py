"""
# Task Core — Klonk

Este pacote define o **contrato canônico** de uma unidade de trabalho.

## Componentes

- **task**
  - `Task`: classe base abstrata (validate → execute)
  - `FunctionTask`: adapter para callables simples

## Princípios Fundamentais

- Tasks **não conhecem** Playlist nem Machine
- Validação falha rápido; execução codifica falhas como `Err`
"""

from .task import FunctionTask, Task

__all__ = ["Task", "FunctionTask"]
