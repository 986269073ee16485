"""
Cache — armazenamento chave-valor com TTL.

Componentes:
    - ttl → TTLCache (particionado, expiração preguiçosa + varredura em background)
"""

from .ttl import TTL, CacheEntry, TTLCache

__all__ = ["TTL", "CacheEntry", "TTLCache"]
