# src/formula_flow/core/engine/batch.py
"""
Executor em batch: avaliação concorrente de pares (contexto, template).

Cada item `i` avalia `templates[i]` contra `contexts[i]` de forma
independente, em um pool de threads. O cache de planos do Engine é
compartilhado entre os itens (templates iguais planejam uma única vez).

Decisões arquiteturais:
    - Tamanhos diferentes de `contexts` e `templates` são um erro único de
      topo (`BatchLengthMismatchError`), levantado antes de qualquer avaliação
    - Falhas são isoladas por item: qualquer exceção vira o slot de erro do
      item e não cancela, bloqueia nem afeta os demais
    - Uma única barreira (`wait`) separa o fan-out do fan-in
    - A saída é alinhada por índice com a entrada

Invariantes:
    - `len(results) == len(errors) == len(contexts)`
    - Para todo índice, exatamente um entre `results[i]` e `errors[i]` é None

Limites explícitos:
    - Não há ordem garantida de execução entre itens
    - Não há cancelamento nem timeout
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence

from formula_flow.core.errors import to_error_payload
from formula_flow.core.exceptions import BatchLengthMismatchError
from formula_flow.core.graph.template import CalcTemplate

from .engine import Engine, EvaluationResult


@dataclass
class BatchResult:
    """Saída de um batch: resultados e erros alinhados por índice."""

    results: List[Optional[EvaluationResult]] = field(default_factory=list)
    errors: List[Optional[BaseException]] = field(default_factory=list)

    def __iter__(self) -> Iterator[list]:
        # permite `results, errors = batch`
        yield self.results
        yield self.errors

    def __len__(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return all(e is None for e in self.errors)

    def failed_indices(self) -> List[int]:
        return [i for i, e in enumerate(self.errors) if e is not None]


def evaluate_batch(
    contexts: Sequence[Any],
    templates: Sequence[CalcTemplate],
    *,
    engine: Optional[Engine] = None,
    max_workers: Optional[int] = None,
    include_inputs: Optional[bool] = None,
) -> BatchResult:
    """
    Avalia N pares (contexts[i], templates[i]) concorrentemente.

    Args:
        contexts: contextos de entrada
        templates: templates, alinhados por índice com `contexts`
        engine: Engine compartilhado (um temporário é criado quando omitido)
        max_workers: tamanho do pool (padrão: `engine.settings.max_workers`)
        include_inputs: repassado a `Engine.evaluate`

    Returns:
        BatchResult: resultados e erros alinhados por índice.

    Raises:
        BatchLengthMismatchError: Se os tamanhos das sequências diferirem.
    """
    contexts = list(contexts)
    templates = list(templates)
    if len(contexts) != len(templates):
        raise BatchLengthMismatchError(
            message=f"contexts and templates length mismatch: {len(contexts)} != {len(templates)}",
            details={"contexts": len(contexts), "templates": len(templates)},
            hint="Informe um template para cada contexto (mesmo tamanho e ordem).",
        )

    n = len(contexts)
    batch = BatchResult(results=[None] * n, errors=[None] * n)
    if n == 0:
        return batch

    owns_engine = engine is None
    if engine is None:
        engine = Engine()
    if max_workers is None:
        max_workers = engine.settings.max_workers

    try:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="formula-flow-batch") as pool:
            futures = [
                pool.submit(engine.evaluate, contexts[i], templates[i], include_inputs=include_inputs)
                for i in range(n)
            ]
            wait(futures)
    finally:
        if owns_engine:
            engine.close()

    # fan-in: `exception()` also reports BaseException (SystemExit, ...) raised by a node
    for i, future in enumerate(futures):
        error = future.exception()
        if error is None:
            batch.results[i] = future.result()
            continue
        batch.errors[i] = error
        if engine.events is not None:
            payload = to_error_payload(error)
            engine.events.log(
                event="batch.item_failed",
                level="ERROR",
                message=payload.message,
                node=payload.details.get("node"),
                index=i,
                error_type=payload.type,
            )

    if engine.events is not None:
        engine.events.log(
            event="batch.finished",
            level="INFO",
            message="batch finished",
            items=n,
            failed=len(batch.failed_indices()),
        )
    return batch
