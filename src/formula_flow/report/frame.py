"""
src/formula_flow/report/frame.py

Conversão de um BatchResult em `pandas.DataFrame`.

Regras:
- Uma linha por item do batch, na ordem dos índices de entrada.
- Colunas: valores das fórmulas (nomes ordenados) + `error`.
- Itens com falha têm colunas de fórmula vazias (NaN) e `error` preenchido.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from formula_flow.core.engine.batch import BatchResult


ERROR_COLUMN = "error"


def batch_to_frame(batch: BatchResult, *, index: Optional[Sequence[Any]] = None):
    """
    Tabela de resultados numéricos do batch.

    Args:
        batch: resultado de `evaluate_batch`
        index: rótulos opcionais das linhas (mesmo tamanho do batch)

    Raises:
        ValueError: Se `index` tiver tamanho diferente do batch.
    """
    try:
        import pandas as pd  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("pandas is required for batch_to_frame") from e

    if index is not None and len(index) != len(batch):
        raise ValueError(f"index length {len(index)} != batch length {len(batch)}")

    rows: List[Dict[str, Any]] = []
    columns = set()
    for result, error in zip(batch.results, batch.errors):
        row: Dict[str, Any] = {}
        if result is not None:
            row.update(result.numbers())
            columns.update(row)
        row[ERROR_COLUMN] = str(error) if error is not None else None
        rows.append(row)

    ordered = sorted(columns) + [ERROR_COLUMN]
    df = pd.DataFrame(rows, columns=ordered)
    if index is not None:
        df.index = list(index)
    return df
