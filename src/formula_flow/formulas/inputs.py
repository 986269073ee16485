# src/formula_flow/formulas/inputs.py
"""
Nós de entrada da suíte de liquidação.

Cada chave `<grupo>_f` extrai a tripla `(q, p, f)` do grupo correspondente
em `MomentData`.
"""

from __future__ import annotations

from typing import Dict, List

from formula_flow.core.graph.node import InputAdapter, InputNode
from formula_flow.core.graph.registry import NodeCatalog


KEY_ACTUAL_F = "actual_f"
KEY_TOTAL_F = "total_f"
KEY_LONGTERM_F = "longterm_f"
KEY_DADEV_F = "dadev_f"
KEY_RTDEV_F = "rtdev_f"
KEY_TRANSFER_F = "transfer_f"

INPUT_GROUPS: Dict[str, str] = {
    KEY_ACTUAL_F: "actual",
    KEY_TOTAL_F: "total",
    KEY_LONGTERM_F: "longterm",
    KEY_DADEV_F: "dadev",
    KEY_RTDEV_F: "rtdev",
    KEY_TRANSFER_F: "transfer",
}


def _adapter(group: str) -> InputAdapter:
    def read(moment):
        return moment.triple(group)

    return read


def register_inputs(catalog: NodeCatalog) -> List[InputNode]:
    """Registra os seis nós de entrada no catálogo."""
    return [catalog.register_input(key, _adapter(group)) for key, group in INPUT_GROUPS.items()]
