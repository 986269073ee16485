# src/formula_flow/core/config/__init__.py
"""
Camada de configuração do Formula Flow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Conversão para settings tipados e validados do Engine
    - Hashing canônico (configuração e assinaturas de template)

Limites explícitos:
    - Não avalia nós
    - Não interage com templates diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import canonical_hash, compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .settings import EngineSettings

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "canonical_hash",
    "compute_config_hash",
    "load_config",
    "deep_merge",
    "EngineSettings",
]
