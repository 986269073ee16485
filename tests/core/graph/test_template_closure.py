# tests/core/graph/test_template_closure.py
"""
Testes de construção de templates e coleta de fechamento de dependências.

Os testes asseguram que:
- o template contém as raízes e todas as dependências transitivas
- dependências em diamante são incluídas uma única vez
- dependências desconhecidas falham na construção (nunca na avaliação)
- raízes podem sobrepor fórmulas do catálogo, mas não entradas
- a construção nunca muta o catálogo

Decisões arquiteturais:
    - Erros de construção são fatais e imediatos
    - Nenhum template parcial é retornado
"""

import pytest

try:
    from formula_flow.core.graph import (
        CalcTemplate,
        DuplicateNodeError,
        FormulaNode,
        NodeKind,
        UnknownDependencyError,
        UnknownNodeError,
        full_template,
        prior_triple,
        prior_value,
        template_for,
    )
    from formula_flow.core.engine import Engine, plan_execution, plan_execution_dfs
except Exception as e:  # noqa: BLE001
    CalcTemplate = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing calc template. Implement:\n"
            "- src/formula_flow/core/graph/template.py (CalcTemplate, collect_closure)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _const(value):
    return lambda ctx, prior: value


def test_closure_includes_transitive_dependencies(catalog):
    _require_imports()
    t = CalcTemplate(["C"], catalog=catalog)
    assert t.names() == ["A", "B", "C"]
    assert t.input_names() == ["A", "B"]
    assert len(t) == 3
    assert "A" in t and "Z" not in t


def test_diamond_dependency_is_collected_once(catalog):
    """
    D1 e D2 dependem de C; E depende de D1 e D2. C (e A, B) aparecem uma vez.
    """
    _require_imports()
    catalog.register_formula(FormulaNode("D1", ("C",), _const(1)))
    catalog.register_formula(FormulaNode("D2", ("C",), _const(2)))
    catalog.register_formula(FormulaNode("E", ("D1", "D2"), _const(3)))

    t = template_for(catalog, "E")
    assert t.names() == ["A", "B", "C", "D1", "D2", "E"]
    assert [n.name for n in t.roots] == ["E"]


def test_unknown_dependency_fails_at_construction(catalog):
    """
    Verifica que uma dependência não resolvível é erro fatal de construção.

    Invariantes:
        - A exceção identifica o nó e a dependência ausente
        - A exceção é um ValueError (erro estrutural)
    """
    _require_imports()
    bad = FormulaNode("X", ("C", "missing"), _const(0))
    with pytest.raises(UnknownDependencyError) as exc:
        CalcTemplate([bad], catalog=catalog)
    assert exc.value.node == "X"
    assert exc.value.dependency == "missing"
    assert isinstance(exc.value, ValueError)


def test_unknown_root_name_raises(catalog):
    _require_imports()
    with pytest.raises(UnknownNodeError):
        CalcTemplate(["nope"], catalog=catalog)


def test_duplicate_roots_raise(catalog):
    _require_imports()
    with pytest.raises(DuplicateNodeError):
        CalcTemplate(["C", "C"], catalog=catalog)


def test_root_colliding_with_input_raises(catalog):
    _require_imports()
    with pytest.raises(DuplicateNodeError):
        CalcTemplate([FormulaNode("A", (), _const(1))], catalog=catalog)


def test_root_overrides_catalog_formula_without_mutating_catalog(catalog):
    """
    Uma raiz ad-hoc com o nome de uma fórmula do catálogo tem precedência
    dentro do template; o catálogo permanece inalterado.
    """
    _require_imports()
    original = catalog.formulas.get("C")
    override = FormulaNode("C", ("A",), _const(42))
    dependent = FormulaNode("D", ("C",), _const(0))

    t = CalcTemplate([override, dependent], catalog=catalog)
    assert t.registry["C"] is override
    assert t.names() == ["A", "C", "D"]
    assert catalog.formulas.get("C") is original
    assert "D" not in catalog


def test_include_all_inputs_adds_unrequired_inputs(catalog):
    _require_imports()
    catalog.register_input("Z", lambda ctx: (None, None, None))
    narrow = CalcTemplate(["C"], catalog=catalog)
    wide = CalcTemplate(["C"], catalog=catalog, include_all_inputs=True)
    assert "Z" not in narrow
    assert "Z" in wide
    assert wide.registry["Z"].kind == NodeKind.INPUT


def test_full_template_covers_every_formula(settlement_catalog):
    _require_imports()
    t = full_template(settlement_catalog)
    for name in settlement_catalog.formula_names():
        assert name in t
    for name in settlement_catalog.input_names():
        assert name in t


def test_registry_view_is_read_only(catalog):
    _require_imports()
    t = CalcTemplate(["C"], catalog=catalog)
    with pytest.raises(TypeError):
        t.registry["X"] = None  # type: ignore[index]


def _chain_link(name, previous):
    if previous is None:
        return FormulaNode(name, ("A",), lambda ctx, prior: prior_triple(prior, "A", node=name).require("fee"))
    return FormulaNode(name, (previous,), lambda ctx, prior: prior_value(prior, previous, node=name) + 1)


def test_deep_chain_does_not_hit_recursion_limit(catalog, events):
    """
    Cadeia linear de 3000 fórmulas: fechamento, planejamento e execução
    percorrem o grafo sem recursão.
    """
    _require_imports()
    depth = 3000
    previous = None
    for i in range(depth):
        name = f"N{i:04d}"
        catalog.register_formula(_chain_link(name, previous))
        previous = name

    t = CalcTemplate([previous], catalog=catalog)
    assert len(t) == depth + 1

    plan = [n.name for n in plan_execution(t.nodes())]
    assert plan[0] == "A"
    assert plan[1:] == [f"N{i:04d}" for i in range(depth)]
    assert [n.name for n in plan_execution_dfs(t.nodes())] == plan

    with Engine(events=events) as eng:
        result = eng.evaluate({"A": 1.0}, t, include_inputs=False)
    assert len(result) == depth
    assert result.value(previous) == float(depth)
