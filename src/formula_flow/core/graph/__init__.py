"""
# Graph Core — Formula Flow

Este pacote define os **contratos canônicos** e as **estruturas fundamentais**
que compõem um grafo de cálculo no Formula Flow.

## Componentes

- **types**
  - `NodeKind`: classificação de nós (entrada / fórmula)
  - `InputTriple`, `FormulaValue`: união fechada de saídas (`NodeOutput`)

- **node**
  - `Node` (Protocol): contrato mínimo que todo nó deve satisfazer
  - `InputNode`, `FormulaNode`: as duas variantes concretas

- **registry**
  - `NodeRegistry`, `NodeCatalog`: unicidade de nomes e resolução

- **template**
  - `CalcTemplate`: raízes + fechamento de dependências, assinatura estrutural

## Princípios Fundamentais

- Nós **não conhecem** o Engine nem o planner
- Dependências são **explícitas e declarativas**
- Nenhuma decisão implícita ou silenciosa
"""

from .node import FormulaNode, InputNode, Node, prior_output, prior_triple, prior_value
from .registry import (
    DuplicateNodeError,
    NodeCatalog,
    NodeRegistry,
    UnknownDependencyError,
    UnknownNodeError,
    default_catalog,
)
from .template import CalcTemplate, collect_closure, full_template, template_for
from .types import FormulaValue, InputTriple, NodeKind, NodeOutput, describe_output

__all__ = [
    "FormulaNode",
    "InputNode",
    "Node",
    "prior_output",
    "prior_triple",
    "prior_value",
    "DuplicateNodeError",
    "NodeCatalog",
    "NodeRegistry",
    "UnknownDependencyError",
    "UnknownNodeError",
    "default_catalog",
    "CalcTemplate",
    "collect_closure",
    "full_template",
    "template_for",
    "FormulaValue",
    "InputTriple",
    "NodeKind",
    "NodeOutput",
    "describe_output",
]
