"""
Core do Formula Flow.

Subpacotes:
    - graph        → contratos de nó, catálogo e templates
    - engine       → planner, cache de planos, executor e batch
    - cache        → TTLCache genérico
    - config       → configuração (YAML/JSON), merge, hashing e settings
    - traceability → Event Log estruturado

Módulos:
    - errors     → payload canônico de erro e catálogo de códigos
    - exceptions → exceções tipadas internas
"""
