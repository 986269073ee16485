"""
Tipos canônicos do grafo de cálculo do Formula Flow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre nós, Engine e camadas de apresentação.

Os tipos aqui definidos representam:
    - a classificação de um nó (entrada ou fórmula)
    - os dois formatos possíveis de saída de um nó
    - a dispatch total sobre esses formatos

Componentes principais:
    - NodeKind     → enum de classificação (INPUT, FORMULA)
    - InputTriple  → saída de nós de entrada (quantidade, preço, valor)
    - FormulaValue → saída numérica de nós de fórmula
    - NodeOutput   → união fechada dos dois formatos

Princípios fundamentais:
    - A união de saídas é fechada: apenas InputTriple e FormulaValue
    - Campos ausentes são `None`, nunca zero implícito
    - Tipos são imutáveis e serializáveis

Limites explícitos:
    - Não executa nós
    - Não planeja templates
    - Não contém fórmulas de domínio
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from formula_flow.core.exceptions import MissingFieldError


class NodeKind(str, Enum):
    """
    Classificação semântica de um nó do grafo.

    Tipos definidos:
        - INPUT: nó folha, sem dependências, lê campos do contexto externo
        - FORMULA: nó derivado, combina resultados de nós anteriores

    Invariantes:
        - Todo nó possui exatamente um `kind`
        - O valor textual do enum é estável e canônico
    """
    INPUT = "input"
    FORMULA = "formula"


@dataclass(frozen=True)
class InputTriple:
    """
    Saída de um nó de entrada: tripla de campos numéricos opcionais.

    Campos:
        - quantity: quantidade (Q)
        - price: preço (P)
        - fee: valor financeiro (F)

    Um campo ausente é `None` e é distinto de um zero presente.
    """
    quantity: Optional[float] = None
    price: Optional[float] = None
    fee: Optional[float] = None

    def require(self, field_name: str, *, node: Optional[str] = None) -> float:
        """Retorna o sub-campo ou levanta MissingFieldError quando ausente."""
        if field_name not in ("quantity", "price", "fee"):
            raise AttributeError(field_name)
        value = getattr(self, field_name)
        if value is None:
            raise MissingFieldError.for_field(f"{node}.{field_name}" if node else field_name, node=node)
        return float(value)

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"quantity": self.quantity, "price": self.price, "fee": self.fee}


@dataclass(frozen=True)
class FormulaValue:
    """Saída numérica de um nó de fórmula."""
    value: float

    def __float__(self) -> float:
        return float(self.value)


NodeOutput = Union[InputTriple, FormulaValue]


def describe_output(output: NodeOutput) -> Dict[str, Any]:
    """
    Converte uma saída de nó em representação serializável.

    A dispatch é total sobre a união fechada `NodeOutput`; qualquer outro
    tipo é erro de programação e não é formatado silenciosamente.

    Returns:
        Dict[str, Any]: {"kind": "input", ...campos} ou {"kind": "formula", "value": ...}

    Raises:
        TypeError: Se `output` não for InputTriple nem FormulaValue.
    """
    if isinstance(output, InputTriple):
        return {"kind": NodeKind.INPUT.value, **output.to_dict()}
    if isinstance(output, FormulaValue):
        return {"kind": NodeKind.FORMULA.value, "value": output.value}
    raise TypeError(f"Unsupported node output: {type(output).__name__}")
