# src/formula_flow/formulas/settlement.py
"""
Fórmulas de liquidação de desvio (camada consumidora do core).

Grafo:
    original_f        ← longterm_f, dadev_f, rtdev_f
    deviation_settle  ← actual_f, longterm_f, dadev_f, rtdev_f
    deviation_profit  ← original_f, deviation_settle
    total_fee         ← original_f, deviation_settle
    final_profit      ← deviation_profit, transfer_f
    arbitrage         ← final_profit, total_f

Regras:
    - Todo sub-campo lido de uma entrada é validado (`InputTriple.require`);
      ausência levanta MissingFieldError, nunca vira zero
    - Toda aritmética passa por `formula_flow.arithmetic`
    - `deviation_settle` escolhe o ramo por `dadev.p > rtdev.p` (estrito);
      preços iguais seguem o ramo "caso contrário"
"""

from __future__ import annotations

from typing import List

from formula_flow.arithmetic import decimal_add, decimal_divide, decimal_multiply, decimal_subtract
from formula_flow.core.graph.node import FormulaNode, Prior, prior_triple, prior_value
from formula_flow.core.graph.registry import NodeCatalog

from .inputs import (
    KEY_ACTUAL_F,
    KEY_DADEV_F,
    KEY_LONGTERM_F,
    KEY_RTDEV_F,
    KEY_TOTAL_F,
    KEY_TRANSFER_F,
)


KEY_ORIGINAL_F = "original_f"
KEY_DEVIATION_SETTLE = "deviation_settle"
KEY_DEVIATION_PROFIT = "deviation_profit"
KEY_TOTAL_FEE = "total_fee"
KEY_FINAL_PROFIT = "final_profit"
KEY_ARBITRAGE = "arbitrage"

ARBITRAGE_PLACES = 6


def _field(prior: Prior, key: str, field_name: str, *, node: str) -> float:
    return prior_triple(prior, key, node=node).require(field_name, node=key)


def original_fee(_moment, prior: Prior) -> float:
    node = KEY_ORIGINAL_F
    return decimal_add(
        _field(prior, KEY_LONGTERM_F, "fee", node=node),
        _field(prior, KEY_DADEV_F, "fee", node=node),
        _field(prior, KEY_RTDEV_F, "fee", node=node),
    )


def deviation_settle(_moment, prior: Prior) -> float:
    node = KEY_DEVIATION_SETTLE
    actual_q = _field(prior, KEY_ACTUAL_F, "quantity", node=node)
    longterm_q = _field(prior, KEY_LONGTERM_F, "quantity", node=node)
    dadev_q = _field(prior, KEY_DADEV_F, "quantity", node=node)
    dadev_p = _field(prior, KEY_DADEV_F, "price", node=node)
    rtdev_p = _field(prior, KEY_RTDEV_F, "price", node=node)

    if dadev_p > rtdev_p:
        deviation = decimal_subtract(decimal_subtract(actual_q, longterm_q), dadev_q)
        return decimal_multiply(deviation, rtdev_p)
    return decimal_subtract(
        decimal_multiply(decimal_subtract(actual_q, longterm_q), dadev_p),
        decimal_multiply(dadev_q, dadev_p),
    )


def deviation_profit(_moment, prior: Prior) -> float:
    node = KEY_DEVIATION_PROFIT
    return decimal_subtract(
        prior_value(prior, KEY_ORIGINAL_F, node=node),
        prior_value(prior, KEY_DEVIATION_SETTLE, node=node),
    )


def total_fee(_moment, prior: Prior) -> float:
    node = KEY_TOTAL_FEE
    return decimal_add(
        prior_value(prior, KEY_ORIGINAL_F, node=node),
        prior_value(prior, KEY_DEVIATION_SETTLE, node=node),
    )


def final_profit(_moment, prior: Prior) -> float:
    node = KEY_FINAL_PROFIT
    return decimal_subtract(
        prior_value(prior, KEY_DEVIATION_PROFIT, node=node),
        _field(prior, KEY_TRANSFER_F, "fee", node=node),
    )


def arbitrage(_moment, prior: Prior) -> float:
    """Lucro final por unidade de quantidade total (0 quando total.q == 0)."""
    node = KEY_ARBITRAGE
    return decimal_divide(
        prior_value(prior, KEY_FINAL_PROFIT, node=node),
        _field(prior, KEY_TOTAL_F, "quantity", node=node),
        ARBITRAGE_PLACES,
    )


def settlement_nodes() -> List[FormulaNode]:
    return [
        FormulaNode(KEY_ORIGINAL_F, (KEY_LONGTERM_F, KEY_DADEV_F, KEY_RTDEV_F), original_fee),
        FormulaNode(
            KEY_DEVIATION_SETTLE,
            (KEY_ACTUAL_F, KEY_LONGTERM_F, KEY_DADEV_F, KEY_RTDEV_F),
            deviation_settle,
        ),
        FormulaNode(KEY_DEVIATION_PROFIT, (KEY_ORIGINAL_F, KEY_DEVIATION_SETTLE), deviation_profit),
        FormulaNode(KEY_TOTAL_FEE, (KEY_ORIGINAL_F, KEY_DEVIATION_SETTLE), total_fee),
        FormulaNode(KEY_FINAL_PROFIT, (KEY_DEVIATION_PROFIT, KEY_TRANSFER_F), final_profit),
        FormulaNode(KEY_ARBITRAGE, (KEY_FINAL_PROFIT, KEY_TOTAL_F), arbitrage),
    ]


def register_formulas(catalog: NodeCatalog) -> List[FormulaNode]:
    """Registra as fórmulas de liquidação no catálogo."""
    nodes = settlement_nodes()
    for node in nodes:
        catalog.register_formula(node)
    return nodes
