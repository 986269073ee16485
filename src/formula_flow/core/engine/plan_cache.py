# src/formula_flow/core/engine/plan_cache.py
"""
Memoização de planos de execução por assinatura de template.

Um plano é a ordem topológica dos nós de um template. Como depende apenas
da estrutura (nomes e dependências), pode ser reaproveitado entre execuções
e entre templates estruturalmente idênticos.

Decisões arquiteturais:
    - A chave é `template.signature(strict)`; com `strict=True` a assinatura
      inclui as dependências de cada nó
    - O cache armazena a tupla de NOMES ordenados (imutável), não os objetos
      de nó; cada chamada vincula os nomes ao registry do próprio template,
      de modo que dois templates com a mesma estrutura nunca trocam
      implementações de nó
    - Misses concorrentes para a mesma assinatura planejam uma única vez
      (lock por assinatura); assinaturas diferentes não se bloqueiam
    - Locks por assinatura vivem apenas enquanto há threads usando-os
      (referências fracas), então o mapa não cresce com templates efêmeros
    - Erros de planejamento (ciclo, dependência desconhecida) não são
      memoizados: cada tentativa replaneja e falha novamente

Invariantes:
    - Um hit retorna exatamente o mesmo objeto de plano armazenado
    - `hits + misses` é igual ao número de consultas bem-sucedidas

Limites explícitos:
    - Não executa nós
    - Não invalida planos manualmente (expiração apenas por TTL)
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Tuple
from weakref import WeakValueDictionary

from formula_flow.core.cache.ttl import TTL, TTLCache
from formula_flow.core.exceptions import CacheError, PlanCacheError
from formula_flow.core.graph.node import Node
from formula_flow.core.graph.template import CalcTemplate
from formula_flow.core.traceability.events import EventLog

from .planner import plan_execution


PlanNames = Tuple[str, ...]


class PlanCache:
    """
    Cache de planos sobre um `TTLCache`.

    Args:
        cache: TTLCache subjacente (um novo é criado quando omitido)
        ttl: validade de cada plano memoizado
        strict_signature: usa a assinatura estrita do template como chave
        events: EventLog opcional para eventos de hit/miss
    """

    def __init__(
        self,
        cache: Optional[TTLCache] = None,
        *,
        ttl: TTL = 1800.0,
        strict_signature: bool = True,
        events: Optional[EventLog] = None,
    ):
        self._owns_cache = cache is None
        self.cache: TTLCache = cache if cache is not None else TTLCache()
        self.ttl = ttl
        self.strict_signature = strict_signature
        self.events = events
        self.hits = 0
        self.misses = 0
        self._counter_lock = threading.Lock()
        self._locks: "WeakValueDictionary[str, threading.Lock]" = WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _key(self, template: CalcTemplate) -> str:
        return "plan:" + template.signature(self.strict_signature)

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def _count(self, *, hit: bool) -> None:
        with self._counter_lock:
            if hit:
                self.hits += 1
            else:
                self.misses += 1

    def _log(self, event: str, key: str, **extra: object) -> None:
        if self.events is not None:
            self.events.log(event=event, level="DEBUG", message=event, signature=key, **extra)

    def get_plan_names(self, template: CalcTemplate) -> PlanNames:
        """
        Retorna a tupla de nomes ordenados do plano (memoizada).

        Raises:
            UnknownDependencyError, CycleDetectedError: falhas de planejamento.
            PlanCacheError: falha ao armazenar o plano no cache.
        """
        key = self._key(template)
        cached, found = self.cache.get(key)
        if found:
            self._count(hit=True)
            self._log("plan.cache_hit", key)
            return cached

        with self._lock_for(key):
            # outra thread pode ter planejado enquanto esperávamos o lock
            cached, found = self.cache.get(key)
            if found:
                self._count(hit=True)
                self._log("plan.cache_hit", key)
                return cached

            self._count(hit=False)
            self._log("plan.cache_miss", key)
            names: PlanNames = tuple(n.name for n in plan_execution(template.nodes()))
            try:
                self.cache.set(key, names, self.ttl)
            except CacheError as e:
                raise PlanCacheError(
                    message=f"failed to store plan: {e}",
                    details={"signature": key, "exception_class": e.__class__.__name__},
                    hint="Verifique o TTL configurado e se o cache não foi encerrado.",
                ) from e
            self._log("plan.computed", key, nodes=len(names))
            return names

    def get_ordered_nodes(self, template: CalcTemplate) -> List[Node]:
        """Plano memoizado vinculado aos nós do próprio template."""
        registry = template.registry
        return [registry[name] for name in self.get_plan_names(template)]

    def stats(self) -> Dict[str, int]:
        with self._counter_lock:
            return {"hits": self.hits, "misses": self.misses}

    def close(self) -> None:
        """Encerra o TTLCache subjacente quando ele foi criado por este PlanCache."""
        if self._owns_cache:
            self.cache.stop()
