"""
Templates de cálculo e coleta de fechamento de dependências.

Este módulo define o `CalcTemplate`, um conjunto fechado de nós pronto
para planejamento: as raízes escolhidas pelo chamador mais todos os nós
transitivamente requeridos, resolvidos contra um `NodeCatalog`.

A coleta de fechamento é feita com worklist explícita (sem recursão),
com um conjunto `visited` indexado por nome, de modo que dependências em
diamante são processadas uma única vez e grafos profundos não consomem
pilha de chamadas.

Decisões arquiteturais:
    - Dependência não resolvível é erro fatal de construção
    - Nenhum template parcialmente construído escapa de uma falha
    - Raízes têm precedência sobre fórmulas do catálogo com o mesmo nome
      (override local ao template); colisão com nó de entrada é erro
    - O template nunca muta o catálogo do qual lê

Invariantes:
    - Todo nome em `requires` de qualquer nó do template existe no template
    - O template é imutável após a construção
    - A assinatura depende apenas da estrutura (nomes e dependências)

Limites explícitos:
    - Não ordena nós (ver `engine.planner`)
    - Não executa nós
    - Não detecta ciclos (o planner detecta)
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from formula_flow.core.config.hashing import canonical_hash

from .node import Node
from .registry import DuplicateNodeError, NodeCatalog, UnknownDependencyError, UnknownNodeError
from .types import NodeKind


RootSpec = Union[Node, str]


def _bind_roots(roots: Iterable[RootSpec], catalog: NodeCatalog) -> List[Node]:
    bound: List[Node] = []
    seen: Set[str] = set()
    for root in roots:
        node = catalog.resolve(root) if isinstance(root, str) else root
        name = getattr(node, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("node.name must be a non-empty string")
        if name in seen:
            raise DuplicateNodeError(f"duplicate node in template: {name}", node=name)
        registered_input = catalog.inputs.find(name)
        if registered_input is not None and registered_input is not node:
            raise DuplicateNodeError(f"duplicate node in template: {name}", node=name)
        seen.add(name)
        bound.append(node)
    return bound


def collect_closure(roots: Sequence[Node], catalog: NodeCatalog) -> Dict[str, Node]:
    """
    Coleta o fechamento transitivo de dependências das raízes.

    Algoritmo:
        - worklist (pilha) inicializada com as raízes
        - cada nome em `requires` é resolvido primeiro entre as raízes e,
          depois, no catálogo (entradas + fórmulas)
        - `visited` por nome evita reprocessamento em dependências em diamante

    Args:
        roots (Sequence[Node]): Raízes já vinculadas (nomes únicos).
        catalog (NodeCatalog): Catálogo usado para resolução.

    Returns:
        Dict[str, Node]: Registry do template (raízes + dependências).

    Raises:
        UnknownDependencyError: Se algum nome não for resolvível.
    """
    by_root: Dict[str, Node] = {n.name: n for n in roots}
    registry: Dict[str, Node] = {}
    visited: Set[str] = set()

    stack: List[Node] = list(reversed(roots))
    while stack:
        node = stack.pop()
        if node.name in visited:
            continue
        visited.add(node.name)
        registry[node.name] = node

        for dep in reversed(tuple(node.requires or ())):
            if dep in visited:
                continue
            resolved = by_root.get(dep)
            if resolved is None:
                try:
                    resolved = catalog.resolve(dep)
                except UnknownNodeError:
                    raise UnknownDependencyError(
                        f"unknown dependency {node.name} -> {dep}",
                        node=node.name,
                        dependency=dep,
                    ) from None
            stack.append(resolved)

    return registry


class CalcTemplate:
    """
    Conjunto fechado de nós (raízes + dependências) pronto para planejamento.

    Args:
        roots: nós (ou nomes registrados no catálogo) escolhidos pelo chamador
        catalog: catálogo de nós usado para resolver dependências
        include_all_inputs: inclui todos os nós de entrada do catálogo,
            mesmo os não requeridos pelas raízes

    Raises:
        DuplicateNodeError: raiz duplicada ou colidindo com nó de entrada
        UnknownDependencyError: dependência não resolvível
        UnknownNodeError: raiz informada por nome inexistente no catálogo
    """

    __slots__ = ("_roots", "_registry", "_signatures")

    def __init__(
        self,
        roots: Iterable[RootSpec],
        *,
        catalog: NodeCatalog,
        include_all_inputs: bool = False,
    ):
        bound = _bind_roots(roots, catalog)
        registry = collect_closure(bound, catalog)
        if include_all_inputs:
            for node in catalog.inputs.list():
                registry.setdefault(node.name, node)

        self._roots: Tuple[Node, ...] = tuple(bound)
        self._registry: Mapping[str, Node] = MappingProxyType(registry)
        self._signatures: Dict[bool, str] = {}

    @property
    def roots(self) -> Tuple[Node, ...]:
        return self._roots

    @property
    def registry(self) -> Mapping[str, Node]:
        return self._registry

    def names(self) -> List[str]:
        return sorted(self._registry)

    def nodes(self) -> List[Node]:
        return [self._registry[name] for name in self.names()]

    def input_names(self) -> List[str]:
        return [n for n in self.names() if getattr(self._registry[n], "kind", None) == NodeKind.INPUT]

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def signature(self, strict: bool = True) -> str:
        """
        Assinatura estrutural do template (chave do cache de planos).

        - strict: SHA-256 de [[nome, dependências ordenadas], ...] ordenado por nome
        - não strict: SHA-256 apenas da lista ordenada de nomes
        """
        cached = self._signatures.get(strict)
        if cached is not None:
            return cached
        if strict:
            payload: object = [
                [name, sorted(self._registry[name].requires or ())] for name in self.names()
            ]
        else:
            payload = self.names()
        value = canonical_hash(payload)
        self._signatures[strict] = value
        return value

    def __repr__(self) -> str:
        roots = ", ".join(n.name for n in self._roots)
        return f"CalcTemplate(roots=[{roots}], nodes={len(self._registry)})"


def full_template(catalog: NodeCatalog, *, include_all_inputs: bool = True) -> CalcTemplate:
    """Template com todas as fórmulas do catálogo como raízes (ordem por nome)."""
    roots = [catalog.formulas.get(name) for name in catalog.formula_names()]
    return CalcTemplate(roots, catalog=catalog, include_all_inputs=include_all_inputs)


def template_for(catalog: NodeCatalog, *names: str, extra: Optional[Sequence[Node]] = None) -> CalcTemplate:
    """Atalho: template a partir de nomes registrados mais nós ad-hoc opcionais."""
    roots: List[RootSpec] = list(names)
    roots.extend(extra or ())
    return CalcTemplate(roots, catalog=catalog)
