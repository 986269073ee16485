"""
Contrato canônico de nó do Formula Flow.

Este módulo define o protocolo formal que qualquer nó deve satisfazer
para ser avaliado pelo Engine, e as duas variantes concretas suportadas.

Um nó é a menor unidade de cálculo do grafo e representa uma função
pura de suas entradas: o contexto externo e os resultados já computados
de suas dependências.

Variantes (conjunto fechado):
    - InputNode   → sem dependências; extrai campos do contexto externo
    - FormulaNode → dependências nomeadas; combina resultados anteriores

Princípios fundamentais:
    - Nós não conhecem o Engine nem o planner
    - Nós não controlam ordem de execução
    - Dependências são explícitas e declarativas (`requires`)
    - Conformidade com o protocolo é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `name` é não vazio e estável
    - `requires` é uma tupla ordenada de nomes (vazia para nós de entrada)
    - `compute` retorna um NodeOutput ou levanta exceção

Limites explícitos:
    - Não contém lógica de planejamento
    - Não registra eventos de rastreabilidade
    - Não aplica fallback para dependências ausentes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

from formula_flow.core.exceptions import MissingDependencyResultError
from .types import FormulaValue, InputTriple, NodeKind, NodeOutput


Prior = Mapping[str, NodeOutput]
InputAdapter = Callable[[Any], Union[InputTriple, Tuple[Optional[float], Optional[float], Optional[float]]]]
FormulaFn = Callable[[Any, Prior], Union[float, int, FormulaValue]]


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("node.name must be a non-empty string")
    return name


def _validate_requires(requires: Sequence[str]) -> Tuple[str, ...]:
    if isinstance(requires, str):
        raise ValueError("node.requires must be a sequence of names, not a string")
    out = tuple(requires or ())
    for dep in out:
        _validate_name(dep)
    return out


@runtime_checkable
class Node(Protocol):
    """
    Contrato canônico de um nó do Formula Flow.

    Atributos obrigatórios:
        - name: identificador único e estável do nó (chave primária no registry)
        - kind: classificação do nó (`NodeKind`)
        - requires: nomes dos nós dos quais depende, em ordem declarada

    Invariantes:
        - `name` é único em qualquer registry onde o nó é inserido
        - `compute` é chamado no máximo uma vez por execução
        - O retorno de `compute` é sempre um `NodeOutput`
    """
    name: str
    kind: NodeKind
    requires: Tuple[str, ...]

    def compute(self, context: Any, prior: Prior) -> NodeOutput:
        """Calcula a saída do nó a partir do contexto e dos resultados anteriores."""
        ...


@dataclass(frozen=True)
class InputNode:
    """
    Nó de entrada: extrai uma tripla de campos opcionais do contexto.

    O adapter recebe o contexto externo e retorna uma `InputTriple` ou uma
    tupla `(quantity, price, fee)`. Resultados anteriores são ignorados.
    """
    name: str
    adapter: InputAdapter = field(repr=False)
    kind: NodeKind = field(default=NodeKind.INPUT, init=False)
    requires: Tuple[str, ...] = field(default=(), init=False)

    def __post_init__(self) -> None:
        _validate_name(self.name)
        if not callable(self.adapter):
            raise TypeError(f"InputNode '{self.name}' adapter must be callable")

    def compute(self, context: Any, prior: Prior) -> InputTriple:
        raw = self.adapter(context)
        if isinstance(raw, InputTriple):
            return raw
        quantity, price, fee = raw
        return InputTriple(quantity=quantity, price=price, fee=fee)


@dataclass(frozen=True)
class FormulaNode:
    """
    Nó de fórmula: combina resultados de dependências declaradas.

    A função de fórmula recebe `(context, prior)` e retorna um número
    (ou `FormulaValue`). O contexto bruto deve ser usado apenas para
    checagens de presença/validade de campos.
    """
    name: str
    requires: Tuple[str, ...]
    formula: FormulaFn = field(repr=False)
    kind: NodeKind = field(default=NodeKind.FORMULA, init=False)

    def __post_init__(self) -> None:
        _validate_name(self.name)
        object.__setattr__(self, "requires", _validate_requires(self.requires))
        if not callable(self.formula):
            raise TypeError(f"FormulaNode '{self.name}' formula must be callable")

    def compute(self, context: Any, prior: Prior) -> FormulaValue:
        out = self.formula(context, prior)
        if isinstance(out, FormulaValue):
            return out
        if isinstance(out, bool) or not isinstance(out, (int, float)):
            raise TypeError(
                f"FormulaNode '{self.name}' must return a number, got {type(out).__name__}"
            )
        return FormulaValue(float(out))


# -----------------------------
# Acesso a resultados anteriores
# -----------------------------

def prior_output(prior: Prior, dependency: str, *, node: Optional[str] = None) -> NodeOutput:
    if dependency not in prior:
        raise MissingDependencyResultError.for_dependency(dependency, node=node)
    return prior[dependency]


def prior_value(prior: Prior, dependency: str, *, node: Optional[str] = None) -> float:
    """Valor numérico de uma dependência do tipo fórmula."""
    out = prior_output(prior, dependency, node=node)
    if not isinstance(out, FormulaValue):
        raise TypeError(f"dependency '{dependency}' of node '{node}' is not a formula value")
    return out.value


def prior_triple(prior: Prior, dependency: str, *, node: Optional[str] = None) -> InputTriple:
    """Tripla de uma dependência do tipo entrada."""
    out = prior_output(prior, dependency, node=node)
    if not isinstance(out, InputTriple):
        raise TypeError(f"dependency '{dependency}' of node '{node}' is not an input triple")
    return out
