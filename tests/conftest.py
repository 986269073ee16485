# tests/conftest.py
"""
Fixtures compartilhados para testes do Formula Flow.

Este módulo define fixtures reutilizáveis que fornecem:
- catálogos de nós mínimos e determinísticos (A, B → C)
- o catálogo da suíte de liquidação e um momento de dados completo
- Event Log isolado por teste
- relógio falso para testes de expiração de cache
- TTLCache e Engine encerrados no teardown

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Cada teste recebe catálogos novos (nunca o catálogo de processo)
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture realiza I/O
    - Nenhuma thread de background sobrevive ao teste que a criou
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest


# =====================================================
# Grafo mínimo: A, B (entradas) → C = A + B
# =====================================================

def _fee_adapter(key):
    def read(ctx):
        return (None, None, ctx.get(key))

    return read


@pytest.fixture
def catalog():
    """
    Catálogo novo com duas entradas (`A`, `B`) e a fórmula `C = A + B`.

    O contexto esperado é um dict `{"A": <float>, "B": <float>}`; o valor
    de cada entrada é exposto no campo `fee` da tripla. Uma chave ausente
    produz `fee=None`, validado pela fórmula `C` (MissingFieldError).

    Returns:
        NodeCatalog: catálogo isolado para o teste.
    """
    from formula_flow.core.graph import FormulaNode, NodeCatalog, prior_triple

    def _sum(ctx, prior):
        a = prior_triple(prior, "A", node="C").require("fee", node="A")
        b = prior_triple(prior, "B", node="C").require("fee", node="B")
        return a + b

    cat = NodeCatalog()
    cat.register_input("A", _fee_adapter("A"))
    cat.register_input("B", _fee_adapter("B"))
    cat.register_formula(FormulaNode("C", ("A", "B"), _sum))
    return cat


@pytest.fixture
def sum_template(catalog):
    from formula_flow.core.graph import CalcTemplate

    return CalcTemplate(["C"], catalog=catalog)


# =====================================================
# Suíte de liquidação
# =====================================================

@pytest.fixture
def settlement_catalog():
    from formula_flow.formulas import build_catalog

    return build_catalog()


@pytest.fixture
def moment():
    """
    Momento de dados com todos os campos preenchidos.

    Valores escolhidos para o ramo "dadev.p > rtdev.p":
        original_f       = 5 + 5 + 5                = 15
        deviation_settle = (12 - 5 - 5) * 35        = 70
        deviation_profit = 15 - 70                  = -55
        total_fee        = 15 + 70                  = 85
        final_profit     = -55 - 2                  = -57
        arbitrage        = -57 / 30 (6 casas)       = -1.9
    """
    from formula_flow.formulas import MomentData

    return MomentData(
        period=1,
        actual_q=12.0, actual_p=40.0, actual_f=5.0,
        total_q=30.0, total_p=40.0, total_f=5.0,
        longterm_q=5.0, longterm_p=40.0, longterm_f=5.0,
        dadev_q=5.0, dadev_p=38.0, dadev_f=5.0,
        rtdev_q=5.0, rtdev_p=35.0, rtdev_f=5.0,
        transfer_q=1.0, transfer_p=2.0, transfer_f=2.0,
    )


# =====================================================
# Infraestrutura: eventos, relógio, cache, engine
# =====================================================

@pytest.fixture
def events():
    from formula_flow.core.traceability import EventLog

    return EventLog(run_id="test")


class _FakeClock:
    """Relógio monotônico controlado manualmente (segundos)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock():
    return _FakeClock()


@pytest.fixture
def ttl_cache(fake_clock):
    """TTLCache sem thread de varredura, sobre o relógio falso; encerrado no teardown."""
    from formula_flow.core.cache import TTLCache

    cache = TTLCache(clock=fake_clock, start=False)
    yield cache
    cache.stop()


@pytest.fixture
def engine(events):
    from formula_flow.core.engine import Engine

    eng = Engine(events=events)
    yield eng
    eng.close()
