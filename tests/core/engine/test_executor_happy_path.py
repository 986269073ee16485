# tests/core/engine/test_executor_happy_path.py
"""
Testes do caminho feliz do executor (Engine.evaluate).

Este módulo valida o fluxo principal de avaliação: planejamento (com
cache), execução sequencial na ordem do plano e montagem do resultado.

Os testes asseguram que:
- o cenário canônico A=2, B=3 → C=5 (e B=3.5 → C=5.5) é reproduzido
- cada nó é computado exatamente uma vez por avaliação
- `include_inputs=False` remove as saídas de nós de entrada
- o plano é reutilizado entre avaliações do mesmo template
- o resultado é imutável e serializável

Limites explícitos:
    - Não valida falhas (ver test_executor_fail_fast.py)
"""

import pytest

try:
    from formula_flow.core.config import EngineSettings
    from formula_flow.core.engine import Engine, EvaluationResult
    from formula_flow.core.graph import CalcTemplate, FormulaNode, InputTriple, prior_value
except Exception as e:  # noqa: BLE001
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que a implementação do Engine esteja disponível para os testes.

    Decisões arquiteturais:
        - Falha antecipada e explícita quando o contrato do Engine está ausente
        - Mensagem de erro aponta diretamente para o módulo e classe esperados
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing Engine. Implement:\n"
            "- src/formula_flow/core/engine/engine.py (Engine, EvaluationResult)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_sum_scenario(engine, sum_template):
    """
    Cenário canônico: C = A + B.

    Invariantes:
        - A=2, B=3 → C=5
        - Alterar apenas o contexto (B=3.5) → C=5.5, com o mesmo template
    """
    _require_imports()
    result = engine.evaluate({"A": 2, "B": 3}, sum_template)
    assert isinstance(result, EvaluationResult)
    assert result.value("C") == 5.0

    result = engine.evaluate({"A": 2, "B": 3.5}, sum_template)
    assert result.value("C") == 5.5


def test_result_contains_inputs_by_default(engine, sum_template):
    _require_imports()
    result = engine.evaluate({"A": 2, "B": 3}, sum_template)
    assert set(result) == {"A", "B", "C"}
    assert result["A"] == InputTriple(quantity=None, price=None, fee=2)
    assert result.inputs() == {"A": result["A"], "B": result["B"]}
    assert result.numbers() == {"C": 5.0}


def test_include_inputs_false_filters_input_nodes(engine, sum_template):
    _require_imports()
    result = engine.evaluate({"A": 2, "B": 3}, sum_template, include_inputs=False)
    assert list(result) == ["C"]


def test_settings_control_include_inputs_default(events, sum_template):
    _require_imports()
    with Engine(events=events, settings=EngineSettings(include_inputs=False, validate_plans=True)) as eng:
        assert set(eng.evaluate({"A": 1, "B": 1}, sum_template)) == {"C"}
        assert set(eng.evaluate({"A": 1, "B": 1}, sum_template, include_inputs=True)) == {"A", "B", "C"}


def test_each_node_computed_once(engine, catalog):
    """
    D1 e D2 dependem de C; E depende de D1 e D2. C é computado uma única vez.
    """
    _require_imports()
    calls = []

    def counted(name, value):
        def formula(ctx, prior):
            calls.append(name)
            return value

        return formula

    c = FormulaNode("C", ("A", "B"), counted("C", 1))
    d1 = FormulaNode("D1", ("C",), lambda ctx, prior: prior_value(prior, "C", node="D1") + 1)
    d2 = FormulaNode("D2", ("C",), lambda ctx, prior: prior_value(prior, "C", node="D2") + 2)
    e = FormulaNode(
        "E",
        ("D1", "D2"),
        lambda ctx, prior: prior_value(prior, "D1", node="E") * prior_value(prior, "D2", node="E"),
    )
    t = CalcTemplate([c, d1, d2, e], catalog=catalog)

    result = engine.evaluate({"A": 0, "B": 0}, t)
    assert calls == ["C"]
    assert result.value("E") == 6.0


def test_plan_is_reused_across_evaluations(engine, sum_template):
    _require_imports()
    engine.evaluate({"A": 1, "B": 1}, sum_template)
    engine.evaluate({"A": 2, "B": 2}, sum_template)
    assert engine.plan_cache.misses == 1
    assert engine.plan_cache.hits == 1


def test_empty_template_produces_empty_result(engine, catalog):
    _require_imports()
    result = engine.evaluate({}, CalcTemplate([], catalog=catalog))
    assert len(result) == 0
    assert result.to_dict() == {}


def test_result_is_serializable_and_read_only(engine, sum_template):
    _require_imports()
    result = engine.evaluate({"A": 2, "B": 3}, sum_template)
    assert result.to_dict() == {
        "A": {"kind": "input", "quantity": None, "price": None, "fee": 2},
        "B": {"kind": "input", "quantity": None, "price": None, "fee": 3},
        "C": {"kind": "formula", "value": 5.0},
    }
    with pytest.raises(TypeError):
        result["C"] = None  # type: ignore[index]
    with pytest.raises(TypeError):
        result.value("A")


def test_events_bracket_the_evaluation(engine, sum_template, events):
    _require_imports()
    engine.evaluate({"A": 2, "B": 3}, sum_template)
    names = [e["event"] for e in events.snapshot()]
    assert names[0] == "plan.cache_miss"
    assert "evaluation.started" in names
    assert names[-1] == "evaluation.finished"
