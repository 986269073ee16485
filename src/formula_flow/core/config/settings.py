# src/formula_flow/core/config/settings.py
"""
Settings tipados do Engine, derivados da configuração efetiva.

A configuração resolvida (`dict`) é convertida em `EngineSettings`, uma
estrutura imutável com valores validados. Valores inválidos falham aqui,
antes da criação do cache ou do Engine.

Chaves reconhecidas (v1):
    - engine.include_inputs            → inclui saídas de nós de entrada no resultado
    - engine.validate_plans            → revalida cada plano antes da execução
    - plan_cache.ttl_seconds           → TTL dos planos memoizados (> 0)
    - plan_cache.sweep_interval_seconds→ intervalo da expiração ativa (> 0)
    - plan_cache.shards                → número de shards do cache (>= 1)
    - plan_cache.strict_signature      → assinatura inclui dependências de cada nó
    - batch.max_workers                → paralelismo do batch (None = padrão do executor)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import InvalidConfigValueError
from .hashing import compute_config_hash


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = (config or {}).get(name, {}) or {}
    if not isinstance(value, dict):
        raise InvalidConfigValueError(f"Seção '{name}' deve ser dict, recebido: {type(value).__name__}")
    return value


def _positive(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidConfigValueError(f"'{key}' deve ser numérico e > 0, recebido: {value!r}")
    return float(value)


def _flag(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise InvalidConfigValueError(f"'{key}' deve ser booleano, recebido: {value!r}")
    return value


@dataclass(frozen=True)
class EngineSettings:
    include_inputs: bool = True
    validate_plans: bool = False
    plan_ttl_seconds: float = 1800.0
    sweep_interval_seconds: float = 60.0
    cache_shards: int = 16
    strict_signature: bool = True
    max_workers: Optional[int] = None
    config_hash: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EngineSettings":
        """
        Constrói settings validados a partir da configuração efetiva.

        Raises:
            InvalidConfigValueError: Se algum valor for inválido.
        """
        engine_cfg = _section(config, "engine")
        cache_cfg = _section(config, "plan_cache")
        batch_cfg = _section(config, "batch")

        shards = cache_cfg.get("shards", 16)
        if isinstance(shards, bool) or not isinstance(shards, int) or shards < 1:
            raise InvalidConfigValueError(f"'plan_cache.shards' deve ser inteiro >= 1, recebido: {shards!r}")

        max_workers = batch_cfg.get("max_workers")
        if max_workers is not None and (
            isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
        ):
            raise InvalidConfigValueError(
                f"'batch.max_workers' deve ser inteiro >= 1 ou null, recebido: {max_workers!r}"
            )

        return cls(
            include_inputs=_flag(engine_cfg.get("include_inputs", True), "engine.include_inputs"),
            validate_plans=_flag(engine_cfg.get("validate_plans", False), "engine.validate_plans"),
            plan_ttl_seconds=_positive(cache_cfg.get("ttl_seconds", 1800), "plan_cache.ttl_seconds"),
            sweep_interval_seconds=_positive(
                cache_cfg.get("sweep_interval_seconds", 60), "plan_cache.sweep_interval_seconds"
            ),
            cache_shards=shards,
            strict_signature=_flag(
                cache_cfg.get("strict_signature", True), "plan_cache.strict_signature"
            ),
            max_workers=max_workers,
            config_hash=compute_config_hash(config or {}),
        )
