"""
Formula Flow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Formula Flow.

Objetivo:
- Permitir que nós, cache e engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para FormulaErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Não contém lógica de fórmulas específicas.
- Exceções devem carregar apenas dados estruturados (serializáveis) em `details`.
- Erros estruturais de grafo (duplicidade, dependência desconhecida, ciclo)
  vivem junto ao registry e ao planner, como subclasses de ValueError.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class FormulaFlowException(Exception):
    """Base class para exceções internas do Formula Flow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    @property
    def node(self) -> Optional[str]:
        return self.details.get("node")


# ---------------------------------------------------------------------------
# Validação (falhas de compute ligadas a um nó)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class MissingFieldError(FormulaFlowException):
    """Campo obrigatório do contexto (ou sub-campo de um resultado) está ausente."""

    @classmethod
    def for_field(cls, field_name: str, *, node: Optional[str] = None) -> "MissingFieldError":
        return cls(
            message=f"field {field_name} is not set",
            details={"node": node, "field": field_name},
            hint="Preencha o campo no contexto de entrada; ausência não é tratada como zero.",
        )


@dataclass(frozen=True, eq=False)
class MissingDependencyResultError(FormulaFlowException):
    """Resultado de uma dependência não está presente no mapa de resultados anteriores."""

    @classmethod
    def for_dependency(cls, dependency: str, *, node: Optional[str] = None) -> "MissingDependencyResultError":
        return cls(
            message=f"dependency result '{dependency}' not available for node '{node}'",
            details={"node": node, "dependency": dependency},
            hint="Declare a dependência em `requires` do nó; o planner só ordena dependências declaradas.",
        )


# ---------------------------------------------------------------------------
# Engine / Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class NodeComputeError(FormulaFlowException):
    """Falha de compute de um nó, encapsulada com a identidade do nó.

    A causa original fica disponível em `__cause__` (raise ... from exc).
    """

    @classmethod
    def wrap(cls, node: str, exc: BaseException) -> "NodeComputeError":
        return cls(
            message=f"node {node} compute failed: {exc}",
            details={
                "node": node,
                "exception_class": exc.__class__.__name__,
                "exc_message": str(exc),
            },
        )

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


@dataclass(frozen=True, eq=False)
class BatchLengthMismatchError(FormulaFlowException):
    """Sequências de contextos e templates com tamanhos diferentes."""


@dataclass(frozen=True, eq=False)
class EngineConfigurationError(FormulaFlowException):
    """Configuração inválida ou inconsistente para execução."""


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class CacheError(FormulaFlowException):
    """Erro base das operações de cache."""


@dataclass(frozen=True, eq=False)
class InvalidTTLError(CacheError):
    """TTL não positivo informado em `set`."""


@dataclass(frozen=True, eq=False)
class CacheStoppedError(CacheError):
    """Operação de escrita em um cache já encerrado (`stop`)."""


@dataclass(frozen=True, eq=False)
class PlanCacheError(CacheError):
    """Falha ao memoizar um plano de execução."""
