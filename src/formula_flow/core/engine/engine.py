# src/formula_flow/core/engine/engine.py
"""
Engine de execução de templates do Formula Flow.

O Engine combina o cache de planos e o executor sequencial:
    - obtém (ou calcula) o plano do template
    - percorre os nós na ordem do plano
    - chama `compute(context, resultados_anteriores)` de cada nó
    - armazena cada saída sob o nome do nó

Decisões arquiteturais:
    - Falha de qualquer nó aborta a avaliação (fail-fast, sem skip)
    - A falha é encapsulada em `NodeComputeError` com o nome do nó e a
      causa original encadeada (`raise ... from exc`)
    - Nenhum mapa parcial é devolvido ao chamador em caso de falha
    - Os nós enxergam os resultados anteriores através de uma view somente
      leitura (`MappingProxyType`)
    - Erros de planejamento (ciclo, dependência desconhecida) propagam sem
      encapsulamento: não pertencem a um nó específico em execução

Invariantes:
    - Cada nó é computado no máximo uma vez por avaliação
    - Nenhum estado de cálculo é compartilhado entre avaliações
    - O mesmo (contexto, template) produz sempre o mesmo resultado

Limites explícitos:
    - Não há cancelamento nem timeout por nó
    - Não persiste resultados
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence

from formula_flow.core.cache.ttl import TTLCache
from formula_flow.core.config.settings import EngineSettings
from formula_flow.core.exceptions import EngineConfigurationError, NodeComputeError
from formula_flow.core.graph.template import CalcTemplate
from formula_flow.core.graph.types import FormulaValue, InputTriple, NodeKind, NodeOutput, describe_output
from formula_flow.core.traceability.events import EventLog

from .plan_cache import PlanCache
from .planner import validate_plan


class EvaluationResult(Mapping[str, NodeOutput]):
    """Resultado imutável de uma avaliação: nome do nó → saída."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, NodeOutput]):
        self._data: Dict[str, NodeOutput] = dict(data)

    def __getitem__(self, name: str) -> NodeOutput:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def numbers(self) -> Dict[str, float]:
        """Valores numéricos das saídas de fórmula."""
        return {k: v.value for k, v in self._data.items() if isinstance(v, FormulaValue)}

    def inputs(self) -> Dict[str, InputTriple]:
        return {k: v for k, v in self._data.items() if isinstance(v, InputTriple)}

    def value(self, name: str) -> float:
        out = self._data[name]
        if not isinstance(out, FormulaValue):
            raise TypeError(f"result '{name}' is not a formula value")
        return out.value

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Representação serializável (nomes ordenados)."""
        return {k: describe_output(self._data[k]) for k in sorted(self._data)}

    def __repr__(self) -> str:
        return f"EvaluationResult({self.to_dict()!r})"


def _check_plan_cache(plan_cache: PlanCache, settings: Optional[EngineSettings]) -> None:
    if plan_cache.cache.stopped:
        raise EngineConfigurationError(
            message="plan cache is stopped",
            details={"reason": "plan_cache_stopped"},
            hint="Informe um PlanCache ativo ou omita `plan_cache`.",
        )
    if settings is not None and plan_cache.strict_signature != settings.strict_signature:
        raise EngineConfigurationError(
            message="plan cache signature mode differs from settings",
            details={
                "reason": "strict_signature_mismatch",
                "plan_cache": plan_cache.strict_signature,
                "settings": settings.strict_signature,
            },
            hint="Use o mesmo `strict_signature` no PlanCache e em EngineSettings.",
        )


class Engine:
    """
    Engine canônico do Formula Flow (cache de planos + executor).

    Args:
        plan_cache: cache de planos compartilhado (criado a partir de
            `settings` quando omitido)
        events: EventLog opcional
        settings: EngineSettings (padrões quando omitido)

    Raises:
        EngineConfigurationError: Se o cache de planos informado já estiver
            encerrado ou usar um modo de assinatura diferente de `settings`.

    Exemplo:
        engine = Engine()
        result = engine.evaluate(context, template)
        result.value("C")
    """

    def __init__(
        self,
        *,
        plan_cache: Optional[PlanCache] = None,
        events: Optional[EventLog] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.settings: EngineSettings = settings or EngineSettings()
        self.events = events
        self._owns_plan_cache = plan_cache is None
        if plan_cache is not None:
            _check_plan_cache(plan_cache, settings)
        else:
            plan_cache = PlanCache(
                TTLCache(
                    self.settings.sweep_interval_seconds,
                    shards=self.settings.cache_shards,
                ),
                ttl=self.settings.plan_ttl_seconds,
                strict_signature=self.settings.strict_signature,
                events=events,
            )
        self.plan_cache: PlanCache = plan_cache

    def _log(self, event: str, *, level: str = "INFO", message: str = "", node: Optional[str] = None, **extra: Any) -> None:
        if self.events is not None:
            self.events.log(event=event, level=level, message=message, node=node, **extra)

    def evaluate(
        self,
        context: Any,
        template: CalcTemplate,
        *,
        include_inputs: Optional[bool] = None,
    ) -> EvaluationResult:
        """
        Avalia todos os nós do template contra um contexto.

        Args:
            context: contexto externo repassado a cada nó
            template: template fechado (raízes + dependências)
            include_inputs: inclui saídas dos nós de entrada no resultado
                (padrão: `settings.include_inputs`)

        Raises:
            NodeComputeError: falha de compute de um nó (causa em `__cause__`).
            CycleDetectedError, UnknownDependencyError: falhas de planejamento.
        """
        if include_inputs is None:
            include_inputs = self.settings.include_inputs

        ordered = self.plan_cache.get_ordered_nodes(template)
        if self.settings.validate_plans:
            validate_plan(ordered)

        self._log("evaluation.started", level="DEBUG", message="evaluation started", nodes=len(ordered))

        results: Dict[str, NodeOutput] = {}
        view = MappingProxyType(results)
        for node in ordered:
            try:
                out = node.compute(context, view)
                if not isinstance(out, (InputTriple, FormulaValue)):
                    raise TypeError(
                        f"node '{node.name}' returned {type(out).__name__}, expected a node output"
                    )
            except Exception as e:
                self._log(
                    "node.failed",
                    level="ERROR",
                    message=str(e),
                    node=node.name,
                    exception_class=e.__class__.__name__,
                )
                raise NodeComputeError.wrap(node.name, e) from e
            results[node.name] = out

        if not include_inputs:
            results = {k: v for k, v in results.items() if template.registry[k].kind != NodeKind.INPUT}

        self._log("evaluation.finished", level="DEBUG", message="evaluation finished", nodes=len(results))
        return EvaluationResult(results)

    def evaluate_batch(
        self,
        contexts: Sequence[Any],
        templates: Sequence[CalcTemplate],
        *,
        max_workers: Optional[int] = None,
        include_inputs: Optional[bool] = None,
    ):
        """Atalho para `evaluate_batch` usando este Engine."""
        from .batch import evaluate_batch

        return evaluate_batch(
            contexts,
            templates,
            engine=self,
            max_workers=max_workers,
            include_inputs=include_inputs,
        )

    def close(self) -> None:
        """Encerra o cache de planos quando ele foi criado por este Engine."""
        if self._owns_plan_cache:
            self.plan_cache.cache.stop()

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
