"""
Engine — planejamento e execução de templates.

Componentes:
    - planner    → ordem topológica determinística (Kahn) e verificação DFS
    - plan_cache → memoização de planos por assinatura de template
    - engine     → executor sequencial (Engine, EvaluationResult)
    - batch      → execução concorrente de pares (contexto, template)
"""

from .batch import BatchResult, evaluate_batch
from .engine import Engine, EvaluationResult
from .plan_cache import PlanCache
from .planner import CycleDetectedError, plan_execution, plan_execution_dfs, validate_plan

__all__ = [
    "BatchResult",
    "evaluate_batch",
    "Engine",
    "EvaluationResult",
    "PlanCache",
    "CycleDetectedError",
    "plan_execution",
    "plan_execution_dfs",
    "validate_plan",
]
