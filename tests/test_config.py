import os

import pytest

from qnet.config import BASELINE_PATH, DEFAULTS, apply_overrides, load_cfg, validate
from qnet.errors import ConfigurationError


def test_defaults_without_path():
    cfg = load_cfg()
    assert cfg == DEFAULTS
    assert cfg is not DEFAULTS


def test_overrides_merge_recursively_without_mutation():
    base = {"sim": {"seed": 1, "end_time": 10.0}, "tag": "a"}
    new = apply_overrides(base, {"sim": {"seed": 2}, "tag": "b"})
    assert new == {"sim": {"seed": 2, "end_time": 10.0}, "tag": "b"}
    assert base["sim"]["seed"] == 1


def test_baseline_yaml_resolves_paths():
    cfg = load_cfg(BASELINE_PATH)
    assert cfg["sim"]["seed"] == 0
    assert cfg["sim"]["end_time"] == 1000.0
    assert os.path.isabs(cfg["network"]["path"])
    assert os.path.exists(cfg["network"]["path"])


def test_partial_yaml_keeps_defaults(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("sim:\n  end_time: 50\n")
    cfg = load_cfg(str(path))
    assert cfg["sim"]["end_time"] == 50.0
    assert cfg["network"]["route_layout"] == "grouped"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("sim: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_cfg(str(path))


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        load_cfg(str(path))


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_cfg(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("overrides", [
    {"sim": {"end_time": -1}},
    {"sim": {"end_time": "soon"}},
    {"sim": {"seed": 1.5}},
    {"network": {"route_layout": "diagonal"}},
    {"experiments": {"replications": 0}},
    {"experiments": {"confidence_level": 1.0}},
    {"sim": {"max_customers": "lots"}},
    {"sim": {"max_customers": 2.5}},
    {"network": {"probability_tolerance": "tight"}},
    {"experiments": {"replications": "many"}},
    {"sim": {"drain": "no"}},
    {"sim": {"seed": True}},
    {"experiments": {"plot": "yes"}},
])
def test_validate_rejects(overrides):
    with pytest.raises(ConfigurationError):
        validate(apply_overrides(DEFAULTS, overrides))


def test_quoted_boolean_in_yaml_is_rejected(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("sim:\n  drain: 'no'\n")
    with pytest.raises(ConfigurationError, match="sim.drain"):
        load_cfg(str(path))


def test_numeric_strings_are_converted():
    cfg = validate(apply_overrides(DEFAULTS, {"sim": {"end_time": "25", "max_customers": "40"}}))
    assert cfg["sim"]["end_time"] == 25.0
    assert cfg["sim"]["max_customers"] == 40
