# src/formula_flow/core/traceability/events.py
"""
Event Log estruturado do Formula Flow.

Este módulo define o `EventLog`, o registro canônico de eventos de
execução do Engine, do cache de planos e do executor em batch.

Cada evento é um dicionário com:
    - run_id: identificador do log (execução, serviço ou teste)
    - node: nome do nó relacionado (ou None para eventos de engine/cache)
    - level: nível textual (DEBUG, INFO, WARNING, ERROR)
    - event: código estável do evento (ex.: "node.failed", "plan.cache_hit")
    - message: texto humano curto
    - timestamp: ISO 8601 em UTC
    - campos extras livres (serializáveis)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente fora das APIs do core
    - A ordem dos eventos reflete a ordem real de registro
    - O registro é seguro para uso concorrente (batch)

Limites explícitos:
    - Não persiste eventos automaticamente
    - Não decide políticas de execução
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class EventLog:
    """
    Registro append-only de eventos estruturados.

    Invariantes:
        - `events` preserva a ordem de registro
        - Eventos abaixo de `min_level` não são armazenados
        - Warnings são agrupados por nó
    """

    run_id: str = "formula-flow"
    min_level: str = "DEBUG"
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.min_level not in LEVELS:
            raise ValueError(f"min_level must be one of {LEVELS}, got {self.min_level!r}")

    def log(
        self,
        *,
        event: str,
        level: str = "INFO",
        message: str = "",
        node: Optional[str] = None,
        **extra: Any,
    ) -> None:
        if level not in LEVELS:
            raise ValueError(f"level must be one of {LEVELS}, got {level!r}")
        if LEVELS.index(level) < LEVELS.index(self.min_level):
            return
        record = {
            "run_id": self.run_id,
            "node": node,
            "level": level,
            "event": event,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        record.update(extra)
        with self._lock:
            self.events.append(record)

    def add_warning(self, *, node: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(node, []).append(message)
        self.log(event="node.warning", level="WARNING", message=message, node=node)

    def filter(
        self,
        *,
        event: Optional[str] = None,
        level: Optional[str] = None,
        node: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        out = []
        for record in self.snapshot():
            if event is not None and record["event"] != event:
                continue
            if level is not None and record["level"] != level:
                continue
            if node is not None and record["node"] != node:
                continue
            out.append(record)
        return out

    def snapshot(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self.events]

    def __len__(self) -> int:
        with self._lock:
            return len(self.events)
