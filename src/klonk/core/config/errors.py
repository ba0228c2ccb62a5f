"""
Exceções da camada de configuração do Klonk.

Todas as falhas de carregamento, merge e interpretação de settings herdam
de `ConfigError`, permitindo captura genérica por quem monta Machines e
Workflows a partir de arquivos.

Invariantes:
    - Nenhuma exceção desta camada representa falha de execução de Task
    - Erros estruturais de configuração são fatais
"""


class ConfigError(Exception):
    """Exceção base para erros de configuração do Klonk."""


class DefaultsNotFoundError(ConfigError):
    """
    Levantada quando o arquivo de defaults não existe.

    O arquivo de defaults é obrigatório; não há criação implícita.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Levantada para extensões que o loader não reconhece.

    Formatos suportados:
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Levantada quando o conteúdo raiz do arquivo não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Levantada quando uma mesma chave tem tipos incompatíveis no deep-merge.

    Exemplo de conflito:
        - base:     {"machine": {"mode": "any"}}
        - override: {"machine": "leaf"}
    """


class InvalidSettingsError(ConfigError):
    """
    Levantada quando a configuração resolvida contém valores inválidos
    para o engine (modo desconhecido, números negativos, tipos errados).
    """
