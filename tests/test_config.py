"""
Tests for the session configuration layers.
"""

from dataclasses import FrozenInstanceError

import pytest

from chc_interface.chc.config import DEFAULT_RESOURCE_LIMIT, SPACER_PARAMS, SessionConfig


def test_defaults():
    config = SessionConfig()
    assert config.resource_limit == DEFAULT_RESOURCE_LIMIT
    assert config.timeout_ms is None
    assert config.counterexample_marker == "summary"


def test_config_is_immutable():
    config = SessionConfig()
    with pytest.raises(FrozenInstanceError):
        config.resource_limit = 5


@pytest.mark.parametrize("kwargs", [
    {"resource_limit": 0},
    {"resource_limit": -1},
    {"timeout_ms": 0},
])
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        SessionConfig(**kwargs)


def test_global_params_carry_resource_limit():
    params = dict(SessionConfig(resource_limit=1234).global_params())
    assert params == {"rewriter.pull_cheap_ite": True, "rlimit": 1234}


def test_spacer_policy_is_fixed():
    params = dict(SPACER_PARAMS)
    assert params == {
        "fp.spacer.q3.use_qgen": True,
        "fp.spacer.mbqi": False,
        "fp.spacer.ground_pobs": False,
        "fp.xform.slice": False,
        "fp.xform.inline_linear": False,
        "fp.xform.inline_eager": False,
    }


def test_global_and_engine_params_do_not_overlap():
    config = SessionConfig(timeout_ms=500)
    global_keys = {k for k, _ in config.global_params()}
    engine_keys = {k for k, _ in config.engine_params()}
    assert not global_keys & engine_keys


def test_timeout_only_in_engine_params_when_set():
    assert "timeout" not in dict(SessionConfig().engine_params())
    assert dict(SessionConfig(timeout_ms=500).engine_params())["timeout"] == 500


def test_load_missing_file_gives_defaults(tmp_path):
    assert SessionConfig.load(tmp_path) == SessionConfig()


def test_load_kebab_case(tmp_path):
    (tmp_path / ".chc.yml").write_text(
        "resource-limit: 5000\n"
        "timeout-ms: 250\n"
        "counterexample-marker: block\n"
    )
    config = SessionConfig.load(tmp_path)
    assert config == SessionConfig(resource_limit=5000, timeout_ms=250,
                                   counterexample_marker="block")


def test_load_snake_case_yaml_extension(tmp_path):
    (tmp_path / ".chc.yaml").write_text("resource_limit: 42\n")
    config = SessionConfig.load(tmp_path)
    assert config.resource_limit == 42
    assert config.timeout_ms is None


def test_load_empty_file(tmp_path):
    (tmp_path / ".chc.yml").write_text("")
    assert SessionConfig.load(tmp_path) == SessionConfig()


def test_yaml_round_trip(tmp_path):
    config = SessionConfig(resource_limit=777, timeout_ms=1000)
    (tmp_path / ".chc.yml").write_text(config.to_yaml())
    assert SessionConfig.load(tmp_path) == config
