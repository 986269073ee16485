# src/formula_flow/core/engine/planner.py
"""
Planejador de execução de templates (DAG).

Este módulo é responsável por validar a estrutura de um conjunto de nós e
produzir uma ordem de avaliação topológica determinística.

O planner opera exclusivamente em nível estrutural, analisando:
    - nomes de nós
    - dependências declaradas
    - formação de ciclos

Decisões arquiteturais:
    - Algoritmo de referência: Kahn determinístico
    - Empates são resolvidos por ordem lexicográfica de `node.name`
    - Cada lote de nós liberados é ordenado antes de entrar na fila
    - Um planner DFS (três cores) existe como verificação cruzada;
      em caso de divergência, o plano de Kahn é a referência
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum nó aparece antes de suas dependências
    - Todos os nós aparecem exatamente uma vez
    - A mesma definição de nós produz sempre a mesma ordem
    - Conjunto vazio produz plano vazio (não é erro)

Limites explícitos:
    - Não executa nós
    - Não consulta nem popula cache de planos
"""

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from formula_flow.core.graph.node import Node
from formula_flow.core.graph.registry import UnknownDependencyError


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de dependências contém um ciclo.

    Atributos:
        - cycle_nodes: nomes (ordenados) dos nós envolvidos ou bloqueados pelo ciclo
        - node: primeiro nome de `cycle_nodes`, para identificação rápida

    Invariantes:
        - A existência de um ciclo invalida o planejamento
        - Nenhuma ordem parcial é retornada

    Limites explícitos:
        - Não tenta resolver ou quebrar ciclos automaticamente
        - Retry não resolve: o chamador deve corrigir o grafo
    """

    def __init__(self, message: str, *, cycle_nodes: Sequence[str] = ()):
        super().__init__(message)
        self.cycle_nodes: Tuple[str, ...] = tuple(cycle_nodes)
        self.node: Optional[str] = self.cycle_nodes[0] if self.cycle_nodes else None


def _index(nodes: Iterable[Node]) -> Tuple[Dict[str, Node], Dict[str, List[str]]]:
    by_name: Dict[str, Node] = {}
    for n in nodes:
        name = getattr(n, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("node.name must be a non-empty string")
        if name in by_name:
            raise ValueError(f"Duplicate node name: {name}")
        by_name[name] = n

    deps: Dict[str, List[str]] = {}
    for name, n in by_name.items():
        d = list(getattr(n, "requires", ()) or ())
        for dep in d:
            if dep not in by_name:
                raise UnknownDependencyError(
                    f"unknown dependency {name} -> {dep}", node=name, dependency=dep
                )
        deps[name] = d
    return by_name, deps


def plan_execution(nodes: Iterable[Node]) -> List[Node]:
    """
    Valida e produz uma ordem de avaliação topológica determinística.

    Algoritmo (Kahn determinístico):
        - grau de entrada = número de dependências declaradas (distintas)
        - fronteira inicial: nós com grau zero, em ordem lexicográfica
        - a cada nó retirado, os dependentes liberados formam um lote
          ordenado lexicograficamente antes de entrar na fila
        - se sobrarem nós não visitados, há ciclo

    Args:
        nodes (Iterable[Node]): Nós do template (ordem de entrada irrelevante).

    Returns:
        List[Node]: Nós em ordem topológica determinística.

    Raises:
        ValueError: Se algum nó possuir nome inválido ou duplicado.
        UnknownDependencyError: Se um nó declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo (inclui auto-dependência).
    """
    by_name, deps = _index(nodes)

    incoming_count: Dict[str, int] = {name: 0 for name in by_name}
    outgoing: Dict[str, Set[str]] = {name: set() for name in by_name}

    for name, dlist in deps.items():
        unique = set(dlist)
        incoming_count[name] = len(unique)
        for dep in unique:
            outgoing[dep].add(name)

    queue = deque(sorted(name for name, c in incoming_count.items() if c == 0))
    order: List[str] = []

    while queue:
        name = queue.popleft()
        order.append(name)
        released: List[str] = []
        for child in outgoing[name]:
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                released.append(child)
        if released:
            released.sort()
            queue.extend(released)

    if len(order) != len(by_name):
        remaining = sorted(set(by_name) - set(order))
        raise CycleDetectedError(
            f"cycle detected among nodes: {', '.join(remaining)}",
            cycle_nodes=remaining,
        )

    return [by_name[name] for name in order]


_WHITE, _GRAY, _BLACK = 0, 1, 2


def plan_execution_dfs(nodes: Iterable[Node]) -> List[Node]:
    """
    Ordenação topológica por DFS com três cores (iterativa).

    Raízes e dependências são visitadas em ordem lexicográfica, de forma
    que a saída é determinística para o mesmo conjunto de nós. Revisitar
    um nó em progresso (cinza) sinaliza ciclo, reportado pelo nome.

    Raises:
        ValueError, UnknownDependencyError, CycleDetectedError: como `plan_execution`.
    """
    by_name, deps = _index(nodes)
    color: Dict[str, int] = {name: _WHITE for name in by_name}
    order: List[str] = []

    for root in sorted(by_name):
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack: List[Tuple[str, List[str]]] = [(root, sorted(set(deps[root]), reverse=True))]
        while stack:
            name, pending = stack[-1]
            if not pending:
                stack.pop()
                color[name] = _BLACK
                order.append(name)
                continue
            dep = pending.pop()
            if color[dep] == _GRAY:
                path = [frame[0] for frame in stack]
                cycle = path[path.index(dep):]
                raise CycleDetectedError(
                    f"cycle detected: {' -> '.join(cycle + [dep])}",
                    cycle_nodes=[dep] + sorted(set(cycle) - {dep}),
                )
            if color[dep] == _WHITE:
                color[dep] = _GRAY
                stack.append((dep, sorted(set(deps[dep]), reverse=True)))

    return [by_name[name] for name in order]


def validate_plan(plan: Sequence[Node]) -> None:
    """
    Verifica que cada nó aparece exatamente uma vez e após suas dependências.

    Raises:
        ValueError: Se o plano violar a ordem de dependências ou repetir nós.
    """
    position: Dict[str, int] = {}
    for i, node in enumerate(plan):
        if node.name in position:
            raise ValueError(f"node {node.name} appears more than once in plan")
        position[node.name] = i
    for node in plan:
        for dep in node.requires or ():
            if dep not in position:
                raise ValueError(f"node {node.name} requires {dep}, which is not in plan")
            if position[dep] >= position[node.name]:
                raise ValueError(f"node {node.name} planned before its dependency {dep}")
