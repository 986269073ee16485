# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config).

Este módulo valida o carregamento da configuração efetiva do Engine a
partir do `defaults.yaml` distribuído com o pacote (ou de um arquivo de
defaults explícito) e de overrides locais opcionais.

Os testes asseguram que:
- os defaults empacotados são carregados sem argumentos
- overrides locais (YAML ou JSON) têm prioridade sobre defaults
- a ausência do arquivo local é tolerada
- erros estruturais são tipados (defaults ausente, raiz inválida, formato)

Decisões arquiteturais:
    - Arquivos são criados em `tmp_path` (sem depender do ambiente)
    - Nenhum teste depende de variáveis de ambiente

Limites explícitos:
    - Não valida settings tipados (ver test_settings.py)
    - Não valida hashing de configuração
"""

import json
from pathlib import Path

import pytest

try:
    from formula_flow.core.config.loader import PACKAGED_DEFAULTS, load_config
    from formula_flow.core.config.errors import (
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    PACKAGED_DEFAULTS = None
    DefaultsNotFoundError = None
    InvalidConfigRootTypeError = None
    UnsupportedConfigFormatError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha explicitamente quando o loader ou suas exceções não podem ser importados."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config loader. Implement:\n"
            "- src/formula_flow/core/config/loader.py (load_config)\n"
            "- src/formula_flow/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


DEFAULTS_YAML = """\
engine:
  include_inputs: true
plan_cache:
  ttl_seconds: 1800
  strict_signature: true
"""


def test_packaged_defaults_are_loaded_without_arguments():
    """
    Verifica que `load_config()` sem argumentos usa o defaults.yaml do pacote.

    Invariantes:
        - O arquivo empacotado existe
        - Os valores padrão documentados estão presentes
    """
    _require_imports()
    assert PACKAGED_DEFAULTS.exists()

    cfg = load_config()
    assert cfg["engine"]["include_inputs"] is True
    assert cfg["engine"]["validate_plans"] is False
    assert cfg["plan_cache"]["ttl_seconds"] == 1800
    assert cfg["plan_cache"]["sweep_interval_seconds"] == 60
    assert cfg["plan_cache"]["shards"] == 16
    assert cfg["plan_cache"]["strict_signature"] is True
    assert cfg["batch"]["max_workers"] is None


def test_missing_defaults_raises(tmp_path: Path):
    _require_imports()
    missing = tmp_path / "nope.yaml"
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(missing))


def test_missing_local_is_ok(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))
    assert out["plan_cache"]["ttl_seconds"] == 1800
    assert out["engine"]["include_inputs"] is True


def test_local_yaml_overrides_defaults(tmp_path: Path):
    """
    Verifica que o override local substitui apenas as chaves informadas.

    Invariantes:
        - Chaves sobrescritas refletem o override
        - Chaves não sobrescritas preservam os defaults
        - int → float é aceito para valores numéricos
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(DEFAULTS_YAML, encoding="utf-8")
    local = tmp_path / "local.yaml"
    local.write_text("plan_cache:\n  ttl_seconds: 0.5\n", encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))
    assert out["plan_cache"]["ttl_seconds"] == 0.5
    assert out["plan_cache"]["strict_signature"] is True
    assert out["engine"]["include_inputs"] is True


def test_local_json_overrides_packaged_defaults(tmp_path: Path):
    _require_imports()
    local = tmp_path / "local.json"
    local.write_text(json.dumps({"batch": {"max_workers": 4}}), encoding="utf-8")

    out = load_config(local_path=str(local))
    assert out["batch"]["max_workers"] == 4
    assert out["plan_cache"]["shards"] == 16


def test_invalid_root_type_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults))


def test_unsupported_extension_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("a = 1\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults))
