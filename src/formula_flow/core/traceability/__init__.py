"""
Traceability — Event Log do Formula Flow.

Este pacote concentra o registro estruturado de eventos de execução
(engine, cache de planos e batch), consumido por testes, relatórios e
operadores.

Componentes:
    - events → EventLog (thread-safe, append-only)
"""

from .events import LEVELS, EventLog

__all__ = ["LEVELS", "EventLog"]
