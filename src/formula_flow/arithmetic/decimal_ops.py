# src/formula_flow/arithmetic/decimal_ops.py
"""
Aritmética decimal para corpos de fórmula.

As fórmulas trabalham com magnitudes em ponto flutuante, mas as operações
são feitas em `Decimal` para evitar deriva de arredondamento binário
(ex.: 2.232 + 7.83707177 + 6.46049599 == 16.52956776 exatamente).

Regras:
    - Cada float é convertido por `Decimal(repr(x))` (texto de ida-e-volta
      mais curto), nunca pelo valor binário exato
    - O resultado volta a float com `float(...)`
    - Multiplicação por zero e divisão por zero retornam exatamente 0.0
      (curto-circuito explícito, não fallback silencioso)
    - Divisão é arredondada em `places` casas com ROUND_HALF_UP
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext


def _d(value: float) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {type(value).__name__}")
    return Decimal(repr(value))


def decimal_add(*values: float) -> float:
    total = Decimal(0)
    for value in values:
        total += _d(value)
    return float(total)


def decimal_subtract(a: float, b: float) -> float:
    return float(_d(a) - _d(b))


def decimal_multiply(a: float, b: float) -> float:
    """Produto decimal; `b == 0` retorna exatamente 0.0."""
    if b == 0:
        return 0.0
    return float(_d(a) * _d(b))


def decimal_divide(a: float, b: float, places: int) -> float:
    """
    Quociente decimal arredondado em `places` casas (ROUND_HALF_UP).

    `b == 0` retorna exatamente 0.0.
    """
    if b == 0:
        return 0.0
    if isinstance(places, bool) or not isinstance(places, int) or places < 0:
        raise ValueError(f"places must be a non-negative integer, got {places!r}")
    with localcontext() as ctx:
        ctx.prec = 50
        quotient = _d(a) / _d(b)
        return float(quotient.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
