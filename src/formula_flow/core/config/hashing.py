# src/formula_flow/core/config/hashing.py
"""
Hashing canônico do Formula Flow.

Este módulo implementa a geração de hash determinístico sobre estruturas
JSON-serializáveis. É utilizado para:
    - identidade da configuração efetiva
    - assinatura estrutural de templates (chave do cache de planos)

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - Algoritmo SHA-256

Invariantes:
    - Estruturas equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
"""


import json
import hashlib
from typing import Any, Dict


def canonical_hash(obj: Any) -> str:
    """
    SHA-256 hexadecimal do JSON canônico de `obj`.

    Args:
        obj (Any): Estrutura JSON-serializável (dict, list, str, números).

    Returns:
        str: Hash SHA-256 hexadecimal.
    """
    canonical_json = json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva.

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return canonical_hash(config)
