"""
Core do Klonk.

Arquitetura em alto nível:
    - core.result     → Ok / Err
    - core.task       → unidade de trabalho (validate + execute)
    - core.playlist   → pipeline sequencial com retries e skip
    - core.machine    → StateNode, transições ponderadas e Machine
    - core.trigger    → fontes de eventos com fila limitada
    - core.workflow   → loop de polling Trigger → Playlist
    - core.config     → carregamento, merge e settings
    - core.logging    → logger colaborador
    - core.exceptions → hierarquia de exceções
    - core.errors     → payload canônico de erro

Este módulo não executa nada na importação.
"""
