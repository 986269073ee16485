# src/formula_flow/core/cache/ttl.py
"""
Cache genérico chave-valor com TTL e expiração em background.

Este módulo define o `TTLCache`, usado pelo Engine para memoizar planos de
execução, mas genérico o suficiente para qualquer valor.

Semântica de expiração:
    - Cada entrada guarda `(value, expires_at)`, com `expires_at = now + ttl`
    - Uma entrada está expirada quando `now > expires_at` (estrito)
    - Expiração preguiçosa: `get` remove a entrada expirada que encontrar
    - Expiração ativa: uma thread de varredura remove entradas expiradas
      periodicamente, mesmo que nunca sejam lidas
    - As duas formas usam o mesmo critério

Concorrência:
    - O armazenamento é particionado em shards (dict + lock cada), escolhidos
      por `hash(key)`; chaves independentes não disputam o mesmo lock
    - A varredura percorre um shard por vez e nunca segura mais de um lock
    - `set` apenas sinaliza a thread de varredura (sinal coalescido, não bloqueante)

Ciclo de vida:
    - `stop()` encerra a varredura, aguarda a thread e descarta todas as entradas
    - Após `stop()`, `set` levanta CacheStoppedError (cache terminal)

Limites explícitos:
    - Não limita tamanho (sem LRU)
    - Não persiste entradas
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, Union

from formula_flow.core.exceptions import CacheStoppedError, InvalidTTLError


TTL = Union[int, float, timedelta]


@dataclass
class CacheEntry:
    value: Any
    expires_at: float

    def expired(self, now: float) -> bool:
        return now > self.expires_at


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: Dict[Hashable, CacheEntry] = {}


def _ttl_seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        seconds = ttl.total_seconds()
    elif isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise InvalidTTLError(
            message=f"invalid TTL: {ttl!r}",
            details={"ttl": repr(ttl)},
            hint="Informe o TTL em segundos (número) ou timedelta.",
        )
    else:
        seconds = float(ttl)
    if not seconds > 0:
        raise InvalidTTLError(
            message=f"invalid TTL: {seconds}",
            details={"ttl_seconds": seconds},
            hint="O TTL deve ser estritamente positivo.",
        )
    return seconds


class TTLCache:
    """
    Cache com TTL por entrada, particionado e com varredura em background.

    Args:
        sweep_interval: intervalo (segundos) da expiração ativa
        shards: número de partições do armazenamento
        clock: relógio monotônico em segundos (injetável em testes)
        start: inicia a thread de varredura na construção

    Exemplo:
        cache = TTLCache(sweep_interval=60)
        cache.set("plan:abc", plan, ttl=1800)
        value, found = cache.get("plan:abc")
        cache.stop()
    """

    def __init__(
        self,
        sweep_interval: float = 60.0,
        *,
        shards: int = 16,
        clock: Callable[[], float] = time.monotonic,
        start: bool = True,
    ):
        if isinstance(sweep_interval, bool) or not isinstance(sweep_interval, (int, float)) or sweep_interval <= 0:
            raise ValueError(f"sweep_interval must be > 0, got {sweep_interval!r}")
        if isinstance(shards, bool) or not isinstance(shards, int) or shards < 1:
            raise ValueError(f"shards must be an integer >= 1, got {shards!r}")

        self._sweep_interval = float(sweep_interval)
        self._clock = clock
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]
        self._wake = threading.Event()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()
        if start:
            self.start()

    # -----------------------------
    # Ciclo de vida
    # -----------------------------
    def start(self) -> None:
        """Inicia a thread de varredura (idempotente)."""
        with self._thread_lock:
            if self._stopped.is_set():
                raise CacheStoppedError(message="cache is stopped", details={})
            if self._thread is not None and self._thread.is_alive():
                return
            self._thread = threading.Thread(
                target=self._sweep_loop,
                name="formula-flow-ttl-sweeper",
                daemon=True,
            )
            self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Encerra a varredura e descarta todas as entradas (idempotente)."""
        self._stopped.set()
        self._wake.set()
        with self._thread_lock:
            thread = self._thread
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def __enter__(self) -> "TTLCache":
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    # -----------------------------
    # Operações
    # -----------------------------
    def _shard(self, key: Hashable) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def set(self, key: Hashable, value: Any, ttl: TTL) -> None:
        """
        Armazena `value` sob `key` por `ttl` (segundos ou timedelta).

        Raises:
            InvalidTTLError: Se o TTL não for estritamente positivo.
            CacheStoppedError: Se o cache já foi encerrado.
        """
        seconds = _ttl_seconds(ttl)
        if self._stopped.is_set():
            raise CacheStoppedError(
                message="cache is stopped",
                details={"key": str(key)},
                hint="Crie um novo cache; um cache encerrado é terminal.",
            )
        entry = CacheEntry(value=value, expires_at=self._clock() + seconds)
        shard = self._shard(key)
        with shard.lock:
            shard.entries[key] = entry
        self._wake.set()

    def get(self, key: Hashable) -> Tuple[Any, bool]:
        """Retorna `(value, True)` ou `(None, False)` para chave ausente/expirada."""
        shard = self._shard(key)
        with shard.lock:
            entry = shard.entries.get(key)
            if entry is None:
                return None, False
            if entry.expired(self._clock()):
                del shard.entries[key]
                return None, False
            return entry.value, True

    def delete(self, key: Hashable) -> bool:
        """Remove a chave. Retorna True se ela existia."""
        shard = self._shard(key)
        with shard.lock:
            return shard.entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Remove todas as entradas expiradas; retorna a quantidade removida."""
        removed = 0
        for shard in self._shards:
            with shard.lock:
                now = self._clock()
                expired = [k for k, e in shard.entries.items() if e.expired(now)]
                for k in expired:
                    del shard.entries[k]
            removed += len(expired)
        return removed

    def __len__(self) -> int:
        """Número de entradas armazenadas (inclui expiradas ainda não varridas)."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key)[1]

    # -----------------------------
    # Expiração ativa
    # -----------------------------
    def _sweep_loop(self) -> None:
        while not self._stopped.is_set():
            self._wake.wait(self._sweep_interval)
            self._wake.clear()
            if self._stopped.is_set():
                return
            self.sweep()
