# tests/core/graph/test_registry_unique_node_name.py
"""
Testes de unicidade de nomes no registry e no catálogo de nós.

Este módulo valida que o catálogo aplica a regra de unicidade de nomes
entre os registries de entrada e de fórmula, tratando duplicidade como
erro de construção (fatal e imediato).

Decisões arquiteturais:
    - Duplicidade nunca é resolvida por sobrescrita silenciosa
    - Um nome existe em no máximo um dos dois registries
    - Erros de grafo são subclasses de ValueError

Limites explícitos:
    - Não valida templates nem planejamento
"""

import uuid

import pytest

try:
    from formula_flow.core.graph import (
        DuplicateNodeError,
        FormulaNode,
        InputNode,
        NodeCatalog,
        NodeRegistry,
        UnknownNodeError,
        default_catalog,
    )
except Exception as e:  # noqa: BLE001
    NodeCatalog = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing node registry. Implement:\n"
            "- src/formula_flow/core/graph/registry.py (NodeRegistry, NodeCatalog, DuplicateNodeError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _noop_input(ctx):
    return (None, None, None)


def test_registry_rejects_duplicate_name():
    _require_imports()
    reg = NodeRegistry(label="input")
    reg.add(InputNode("A", _noop_input))
    with pytest.raises(DuplicateNodeError) as exc:
        reg.add(InputNode("A", _noop_input))
    assert exc.value.node == "A"
    assert isinstance(exc.value, ValueError)
    assert len(reg) == 1


def test_registry_preserves_registration_order():
    _require_imports()
    reg = NodeRegistry()
    for name in ("b", "a", "c"):
        reg.add(InputNode(name, _noop_input))
    assert reg.names() == ["b", "a", "c"]
    assert list(reg) == ["b", "a", "c"]
    assert "a" in reg and "z" not in reg


def test_catalog_rejects_name_across_registries(catalog):
    """
    Verifica que uma fórmula não pode reutilizar o nome de uma entrada (e vice-versa).
    """
    _require_imports()
    with pytest.raises(DuplicateNodeError):
        catalog.register_formula(FormulaNode("A", (), lambda c, p: 0))
    with pytest.raises(DuplicateNodeError):
        catalog.register_input("C", _noop_input)
    with pytest.raises(DuplicateNodeError):
        catalog.register_input("A", _noop_input)


def test_catalog_routes_by_kind_and_resolves(catalog):
    _require_imports()
    assert catalog.input_names() == ["A", "B"]
    assert catalog.formula_names() == ["C"]

    node = catalog.register_node(InputNode("D", _noop_input))
    assert catalog.inputs.get("D") is node
    assert catalog.resolve("C") is catalog.formulas.get("C")
    assert "D" in catalog

    with pytest.raises(UnknownNodeError):
        catalog.resolve("nope")


def test_catalogs_are_isolated():
    _require_imports()
    first = NodeCatalog()
    second = NodeCatalog()
    first.register_input("A", _noop_input)
    assert "A" in first
    assert "A" not in second


def test_default_catalog_is_process_wide_and_fail_fast():
    """
    O catálogo de processo é sempre a mesma instância e mantém a regra de
    unicidade de nomes entre chamadas.
    """
    _require_imports()
    shared = default_catalog()
    assert default_catalog() is shared

    name = f"startup_{uuid.uuid4().hex}"
    shared.register_input(name, _noop_input)
    assert name in default_catalog()
    with pytest.raises(DuplicateNodeError):
        default_catalog().register_formula(FormulaNode(name, (), lambda ctx, prior: 0))
