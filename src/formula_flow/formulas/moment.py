# src/formula_flow/formulas/moment.py
"""
Contexto de entrada da suíte de liquidação: um "momento" (período) de dados.

Cada grupo de campos corresponde a um nó de entrada e carrega a tripla
quantidade (q), preço (p) e valor (f). Campos ausentes são `None`; a
presença é validada pela fórmula que os consome, nunca substituída por zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class MomentData:
    period: int = 0

    actual_q: Optional[float] = None
    actual_p: Optional[float] = None
    actual_f: Optional[float] = None

    total_q: Optional[float] = None
    total_p: Optional[float] = None
    total_f: Optional[float] = None

    longterm_q: Optional[float] = None
    longterm_p: Optional[float] = None
    longterm_f: Optional[float] = None

    dadev_q: Optional[float] = None
    dadev_p: Optional[float] = None
    dadev_f: Optional[float] = None

    rtdev_q: Optional[float] = None
    rtdev_p: Optional[float] = None
    rtdev_f: Optional[float] = None

    transfer_q: Optional[float] = None
    transfer_p: Optional[float] = None
    transfer_f: Optional[float] = None

    def triple(self, group: str) -> Tuple[Optional[float], Optional[float], Optional[float]]:
        """Retorna `(q, p, f)` do grupo (ex.: "dadev")."""
        return (
            getattr(self, f"{group}_q"),
            getattr(self, f"{group}_p"),
            getattr(self, f"{group}_f"),
        )
