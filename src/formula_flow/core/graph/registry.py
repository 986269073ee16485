"""
Registro estrutural de nós do Formula Flow.

Este módulo define o `NodeRegistry`, responsável por registrar nós e
validar a unicidade de seus nomes, e o `NodeCatalog`, o contexto de
registro explícito (de propriedade do chamador) que reúne dois registries
disjuntos: nós de entrada e nós de fórmula.

O catálogo substitui tabelas globais de processo: cada grafo (ou teste)
constrói o seu próprio catálogo e o passa explicitamente na construção
de templates, evitando contaminação cruzada.

Responsabilidades do módulo:
    - Validar unicidade de `node.name` (falha imediata, sem sobrescrita)
    - Expor uma superfície única de resolução (entradas + fórmulas)
    - Garantir leitura segura sob concorrência e escrita serializada

Decisões arquiteturais:
    - A validação ocorre no registro, antes de qualquer template
    - Erros estruturais são tratados como falhas fatais
    - Escritas são raras/administrativas e protegidas por lock

Invariantes:
    - Cada nome registrado é único no catálogo inteiro
    - Registries de entrada e de fórmula são disjuntos
    - Nenhum nó inválido é aceito

Limites explícitos:
    - Não planeja execução (não é planner)
    - Não executa nós
    - Não coleta fechamento de dependências (ver `template`)
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .node import InputAdapter, InputNode, Node
from .types import NodeKind


class DuplicateNodeError(ValueError):
    """
    Exceção levantada quando ocorre duplicidade de nome de nó.

    Decisões arquiteturais:
        - Nomes de nós devem ser únicos no catálogo e no template
        - A duplicidade é tratada como erro fatal de construção
        - A exceção é lançada no registro, antes da execução

    Invariantes:
        - Nenhum registro parcial é aceito após a detecção do erro
    """

    def __init__(self, message: str, *, node: Optional[str] = None):
        super().__init__(message)
        self.node = node


class UnknownNodeError(ValueError):
    """Exceção levantada quando um nome não corresponde a nenhum nó registrado."""

    def __init__(self, message: str, *, node: Optional[str] = None):
        super().__init__(message)
        self.node = node


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um nó referencia uma dependência inexistente.

    Esta exceção indica que um nó declarou em `requires` um nome que não
    corresponde a nenhum nó de entrada nem de fórmula conhecido.

    Decisões arquiteturais:
        - Todas as dependências devem ser explícitas e resolvíveis
        - Dependências inexistentes são erro de construção (nunca de avaliação)

    Limites explícitos:
        - Não tenta inferir ou criar nós ausentes
    """

    def __init__(self, message: str, *, node: Optional[str] = None, dependency: Optional[str] = None):
        super().__init__(message)
        self.node = node
        self.dependency = dependency


@dataclass
class NodeRegistry:
    """
    Registro de nós indexado por nome, seguro para leitura concorrente.

    Invariantes:
        - Cada `name` é único no registry
        - A lista de nós reflete a ordem de registro
    """

    label: str = "nodes"
    _nodes: Dict[str, Node] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def add(self, node: Node) -> None:
        name = getattr(node, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("node.name must be a non-empty string")
        with self._lock:
            if name in self._nodes:
                raise DuplicateNodeError(f"duplicate {self.label} node: {name}", node=name)
            self._nodes[name] = node

    def get(self, name: str) -> Node:
        with self._lock:
            return self._nodes[name]

    def find(self, name: str) -> Optional[Node]:
        with self._lock:
            return self._nodes.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._nodes)

    def list(self) -> List[Node]:
        with self._lock:
            return list(self._nodes.values())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._nodes

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())


@dataclass
class NodeCatalog:
    """
    Contexto de registro explícito: entradas + fórmulas.

    O catálogo é preenchido por chamadas de registro explícitas antes de
    qualquer template ser construído a partir dele. Leituras concorrentes
    após a inicialização são seguras; registros dinâmicos são serializados.

    Invariantes:
        - Um nome existe em no máximo um dos dois registries
        - `resolve` enxerga os dois registries como uma única superfície
    """

    inputs: NodeRegistry = field(default_factory=lambda: NodeRegistry(label="input"))
    formulas: NodeRegistry = field(default_factory=lambda: NodeRegistry(label="formula"))
    _write_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def register_input(self, name: str, adapter: InputAdapter) -> InputNode:
        node = InputNode(name=name, adapter=adapter)
        self.register_node(node)
        return node

    def register_formula(self, node: Node) -> Node:
        if getattr(node, "requires", None) is None:
            raise TypeError("formula node must declare `requires`")
        self._register(self.formulas, node)
        return node

    def register_node(self, node: Node) -> Node:
        """Registra o nó no registry correspondente ao seu `kind`."""
        if getattr(node, "kind", None) == NodeKind.INPUT:
            self._register(self.inputs, node)
            return node
        return self.register_formula(node)

    def _register(self, target: NodeRegistry, node: Node) -> None:
        name = getattr(node, "name", None)
        with self._write_lock:
            other = self.formulas if target is self.inputs else self.inputs
            if isinstance(name, str) and name in other:
                raise DuplicateNodeError(
                    f"duplicate node: {name} already registered as {other.label}",
                    node=name,
                )
            target.add(node)

    def find(self, name: str) -> Optional[Node]:
        node = self.inputs.find(name)
        if node is not None:
            return node
        return self.formulas.find(name)

    def resolve(self, name: str) -> Node:
        node = self.find(name)
        if node is None:
            raise UnknownNodeError(f"unknown node: {name}", node=name)
        return node

    def __contains__(self, name: object) -> bool:
        return name in self.inputs or name in self.formulas

    def input_names(self) -> List[str]:
        return sorted(self.inputs.names())

    def formula_names(self) -> List[str]:
        return sorted(self.formulas.names())

    def snapshot(self) -> Tuple[List[Node], List[Node]]:
        return self.inputs.list(), self.formulas.list()


_DEFAULT_CATALOG: Optional[NodeCatalog] = None
_DEFAULT_LOCK = threading.Lock()


def default_catalog() -> NodeCatalog:
    """Catálogo de processo, para chamadores que registram nós no startup."""
    global _DEFAULT_CATALOG
    with _DEFAULT_LOCK:
        if _DEFAULT_CATALOG is None:
            _DEFAULT_CATALOG = NodeCatalog()
        return _DEFAULT_CATALOG
