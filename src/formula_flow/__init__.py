# src/formula_flow/__init__.py
"""
Formula Flow — motor de cálculo orientado a dependências.

Este pacote raiz define o namespace público do Formula Flow, um motor
projetado para avaliar conjuntos de nós de cálculo nomeados, onde cada nó
declara explicitamente os nomes dos nós dos quais depende.

Princípios centrais:
    - O conjunto de nós de um template forma um DAG explícito
    - A ordem de avaliação é determinística e reprodutível
    - Cada nó é avaliado exatamente uma vez por execução
    - Uma execução sucede ou falha como unidade (sem resultados parciais)

Arquitetura em alto nível:
    - core.graph        → nós, registries (catálogo) e templates
    - core.engine       → planejamento topológico, cache de planos e execução
    - core.cache        → cache genérico com TTL e expiração em background
    - core.config       → carregamento, merge e hashing de configuração
    - core.traceability → Event Log estruturado das execuções
    - arithmetic        → aritmética decimal usada por fórmulas
    - formulas          → suíte de fórmulas de liquidação (exemplo de consumidor)
    - report            → renderização de resultados (markdown / DataFrame)

Limites explícitos:
    - Não distribui nós entre máquinas
    - Não persiste grafos de cálculo
    - Não permite mutação do grafo durante uma execução
"""
# src/formula_flow/__init__.py
from .core.graph import CalcTemplate, FormulaNode, InputNode, NodeCatalog
from .core.engine import Engine, evaluate_batch

__all__ = [
    "CalcTemplate",
    "FormulaNode",
    "InputNode",
    "NodeCatalog",
    "Engine",
    "evaluate_batch",
]

__version__ = "0.1.0"
