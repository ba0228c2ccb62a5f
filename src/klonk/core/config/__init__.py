"""
Camada de configuração do Klonk.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução da configuração final via deep-merge determinístico
    - Interpretação da configuração em `EngineSettings` tipados

Princípios fundamentais:
    - Configuração não contém lógica de execução
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingsError,
    UnsupportedConfigFormatError,
)
from .loader import load_config
from .merge import deep_merge
from .settings import DEFAULT_SETTINGS, EngineSettings, load_settings, settings_from_config

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingsError",
    "UnsupportedConfigFormatError",
    "load_config",
    "deep_merge",
    "DEFAULT_SETTINGS",
    "EngineSettings",
    "load_settings",
    "settings_from_config",
]
