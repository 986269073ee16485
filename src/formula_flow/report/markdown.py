"""
src/formula_flow/report/markdown.py

Renderização de resultados de avaliação em markdown.

Regras:
- Derivado EXCLUSIVAMENTE do mapa de resultados (não recalcula nada).
- Mesmos resultados => mesmo markdown (nós ordenados por nome).
- Campos ausentes de entradas aparecem como `-`, nunca como zero.

Estrutura:
# <title>

## Summary
## Results
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from formula_flow.core.graph.types import NodeKind, NodeOutput, describe_output


REQUIRED_SECTIONS: List[str] = ["## Summary", "## Results"]

_MISSING = "-"


def _cell(value: Any) -> str:
    if value is None:
        return _MISSING
    return f"{value:g}" if isinstance(value, float) else str(value)


def render_results_md(results: Mapping[str, NodeOutput], *, title: str = "Evaluation Results") -> str:
    """Gera uma tabela markdown determinística de um resultado de avaliação."""
    rows: List[Dict[str, Any]] = [
        {"node": name, **describe_output(results[name])} for name in sorted(results)
    ]
    n_inputs = sum(1 for r in rows if r["kind"] == NodeKind.INPUT.value)

    lines: List[str] = [f"# {title}\n"]

    lines.append("## Summary")
    lines.append(f"- **Nodes**: `{len(rows)}`")
    lines.append(f"- **Inputs**: `{n_inputs}`")
    lines.append(f"- **Formulas**: `{len(rows) - n_inputs}`")
    lines.append("")

    lines.append("## Results")
    if rows:
        lines.append("| node | kind | quantity | price | fee | value |")
        lines.append("|---|---|---|---|---|---|")
        for r in rows:
            lines.append(
                "| {node} | {kind} | {q} | {p} | {f} | {v} |".format(
                    node=r["node"],
                    kind=r["kind"],
                    q=_cell(r.get("quantity")),
                    p=_cell(r.get("price")),
                    f=_cell(r.get("fee")),
                    v=_cell(r.get("value")),
                )
            )
    else:
        lines.append("No results.")
    lines.append("")

    content = "\n".join(lines)
    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Report generation failed: missing required section: {sec}")
    return content
