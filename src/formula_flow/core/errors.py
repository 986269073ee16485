"""
Formula Flow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Formula Flow.
Erros são considerados artefatos de domínio e fazem parte do contrato operacional
do sistema, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Taxonomia (v1):
- Construção: nó duplicado, dependência desconhecida (fatal no build do template)
- Ciclo: detectado no planejamento, corrigível pelo chamador (não por retry)
- Validação: campo ausente no contexto ou sub-campo ausente em dependência
- Cache: TTL inválido, escrita após `stop`

Nenhum fallback silencioso para zero/default é permitido.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FormulaErrorPayload:
    """
    Payload canônico de erro do Formula Flow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Construção do grafo
GRAPH_DUPLICATE_NODE = "GRAPH_DUPLICATE_NODE"
GRAPH_UNKNOWN_NODE = "GRAPH_UNKNOWN_NODE"
GRAPH_UNKNOWN_DEPENDENCY = "GRAPH_UNKNOWN_DEPENDENCY"
GRAPH_CYCLE_DETECTED = "GRAPH_CYCLE_DETECTED"

# Validação de nós
NODE_MISSING_FIELD = "NODE_MISSING_FIELD"
NODE_MISSING_DEPENDENCY_RESULT = "NODE_MISSING_DEPENDENCY_RESULT"
NODE_COMPUTE_FAILED = "NODE_COMPUTE_FAILED"

# Cache
CACHE_INVALID_TTL = "CACHE_INVALID_TTL"
CACHE_STOPPED = "CACHE_STOPPED"

# Engine / Execução
BATCH_LENGTH_MISMATCH = "BATCH_LENGTH_MISMATCH"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"


def _type_for(exc: BaseException) -> str:
    # imports locais: errors.py não depende de graph/engine em tempo de import
    from formula_flow.core import exceptions as ex
    from formula_flow.core.engine.planner import CycleDetectedError
    from formula_flow.core.graph.registry import (
        DuplicateNodeError,
        UnknownDependencyError,
        UnknownNodeError,
    )

    if isinstance(exc, ex.NodeComputeError):
        cause = exc.__cause__
        if isinstance(cause, ex.MissingFieldError):
            return NODE_MISSING_FIELD
        if isinstance(cause, ex.MissingDependencyResultError):
            return NODE_MISSING_DEPENDENCY_RESULT
        return NODE_COMPUTE_FAILED

    mapping = (
        (DuplicateNodeError, GRAPH_DUPLICATE_NODE),
        (UnknownDependencyError, GRAPH_UNKNOWN_DEPENDENCY),
        (UnknownNodeError, GRAPH_UNKNOWN_NODE),
        (CycleDetectedError, GRAPH_CYCLE_DETECTED),
        (ex.MissingFieldError, NODE_MISSING_FIELD),
        (ex.MissingDependencyResultError, NODE_MISSING_DEPENDENCY_RESULT),
        (ex.InvalidTTLError, CACHE_INVALID_TTL),
        (ex.CacheStoppedError, CACHE_STOPPED),
        (ex.BatchLengthMismatchError, BATCH_LENGTH_MISMATCH),
        (ex.EngineConfigurationError, ENGINE_CONFIGURATION_ERROR),
    )
    for klass, code in mapping:
        if isinstance(exc, klass):
            return code
    return ENGINE_EXECUTION_ERROR


def to_error_payload(exc: BaseException) -> FormulaErrorPayload:
    """Converte exceções em FormulaErrorPayload (serializável, acionável).

    Regras:
    - FormulaFlowException: já vem com message/details/hint.
    - Erros estruturais (ValueError do registry/planner): atributos públicos
      viram `details`.
    - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    from formula_flow.core.exceptions import FormulaFlowException

    code = _type_for(exc)

    if isinstance(exc, FormulaFlowException):
        return FormulaErrorPayload(
            type=code,
            message=str(exc) or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    details: Dict[str, Any] = {"exception_class": exc.__class__.__name__}
    for attr in ("node", "dependency", "cycle_nodes"):
        value = getattr(exc, attr, None)
        if value is not None:
            details[attr] = list(value) if isinstance(value, tuple) else value

    hint = None
    if code == ENGINE_EXECUTION_ERROR:
        hint = "Verifique o Event Log e a definição do template"
    elif code == GRAPH_CYCLE_DETECTED:
        hint = "Remova a dependência circular entre os nós listados"

    return FormulaErrorPayload(
        type=code,
        message=str(exc) or "Erro inesperado durante execução",
        details=details,
        hint=hint,
    )
