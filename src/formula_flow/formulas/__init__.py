"""
Suíte de fórmulas de liquidação de desvio.

Exemplo de consumidor do core: nós de entrada sobre `MomentData` e
fórmulas de liquidação registradas em um `NodeCatalog` explícito.

Uso:
    catalog = build_catalog()
    template = CalcTemplate([KEY_FINAL_PROFIT], catalog=catalog)
    result = Engine().evaluate(moment, template)
"""

from formula_flow.core.graph.registry import NodeCatalog

from .inputs import (
    INPUT_GROUPS,
    KEY_ACTUAL_F,
    KEY_DADEV_F,
    KEY_LONGTERM_F,
    KEY_RTDEV_F,
    KEY_TOTAL_F,
    KEY_TRANSFER_F,
    register_inputs,
)
from .moment import MomentData
from .settlement import (
    KEY_ARBITRAGE,
    KEY_DEVIATION_PROFIT,
    KEY_DEVIATION_SETTLE,
    KEY_FINAL_PROFIT,
    KEY_ORIGINAL_F,
    KEY_TOTAL_FEE,
    register_formulas,
    settlement_nodes,
)


def build_catalog() -> NodeCatalog:
    """Catálogo novo com as entradas e fórmulas de liquidação registradas."""
    catalog = NodeCatalog()
    register_inputs(catalog)
    register_formulas(catalog)
    return catalog


__all__ = [
    "INPUT_GROUPS",
    "KEY_ACTUAL_F",
    "KEY_DADEV_F",
    "KEY_LONGTERM_F",
    "KEY_RTDEV_F",
    "KEY_TOTAL_F",
    "KEY_TRANSFER_F",
    "KEY_ARBITRAGE",
    "KEY_DEVIATION_PROFIT",
    "KEY_DEVIATION_SETTLE",
    "KEY_FINAL_PROFIT",
    "KEY_ORIGINAL_F",
    "KEY_TOTAL_FEE",
    "MomentData",
    "build_catalog",
    "register_formulas",
    "register_inputs",
    "settlement_nodes",
]
