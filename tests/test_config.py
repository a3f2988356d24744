#!/usr/bin/env python3
"""
Tests for server configuration
"""

import pytest

from gitignore_ls.config import ServerConfig


def test_defaults():
    config = ServerConfig()
    assert config.log_level == "INFO"
    assert config.log_format == "text"
    assert config.disabled_checks == frozenset()
    assert config.max_completion_items == 50
    assert config.analysis_workers == 2


def test_from_env():
    config = ServerConfig.from_env({
        "GITIGNORE_LS_LOG_LEVEL": "debug",
        "GITIGNORE_LS_LOG_FILE": "/tmp/gitignore-ls.log",
        "GITIGNORE_LS_LOG_FORMAT": "JSON",
        "GITIGNORE_LS_DISABLED_CHECKS": "trailing-whitespace, shadowed-rule",
        "GITIGNORE_LS_MAX_COMPLETIONS": "10",
        "GITIGNORE_LS_WORKERS": "4",
    })
    assert config.log_level == "DEBUG"
    assert config.log_file == "/tmp/gitignore-ls.log"
    assert config.log_format == "json"
    assert config.disabled_checks == frozenset({"trailing-whitespace", "shadowed-rule"})
    assert config.max_completion_items == 10
    assert config.analysis_workers == 4


def test_from_env_ignores_unrelated_variables():
    assert ServerConfig.from_env({"LOG_LEVEL": "DEBUG"}) == ServerConfig()


@pytest.mark.parametrize("kwargs", [
    {"log_level": "LOUD"},
    {"log_format": "xml"},
    {"disabled_checks": ["no-such-check"]},
    {"max_completion_items": 0},
    {"analysis_workers": -1},
])
def test_invalid_values_raise(kwargs):
    with pytest.raises(ValueError):
        ServerConfig(**kwargs)


def test_non_integer_environment_value():
    with pytest.raises(ValueError, match="GITIGNORE_LS_WORKERS"):
        ServerConfig.from_env({"GITIGNORE_LS_WORKERS": "many"})


def test_overrides_skip_none():
    config = ServerConfig().with_overrides(log_level="trace", log_file=None)
    assert config.log_level == "TRACE"
    assert config.log_file is None


def test_client_options_top_level_and_nested():
    base = ServerConfig()
    top = base.with_options({"maxCompletionItems": 5, "disabledChecks": ["duplicate-rule"]})
    assert top.max_completion_items == 5
    assert top.disabled_checks == frozenset({"duplicate-rule"})

    nested = base.with_options({"gitignore": {"logLevel": "warning"}})
    assert nested.log_level == "WARNING"


def test_invalid_client_options_keep_current_config():
    base = ServerConfig(max_completion_items=7)
    assert base.with_options({"maxCompletionItems": -3}) is base
    assert base.with_options({"logLevel": 3}) is base
    assert base.with_options(None) is base
    assert base.with_options({"unrelated": True}) is base
