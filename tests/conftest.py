"""
Shared fixtures for gitignore-ls tests
"""

import logging

import pytest

from gitignore_ls.core.ignore import Rule, RuleSet, parse_lines


def build_rule_set(lines):
    """Parse lines into a RuleSet, dropping comments and parse errors"""
    return RuleSet(entry for entry in parse_lines(list(lines)) if isinstance(entry, Rule))


@pytest.fixture
def rule_set_from():
    return build_rule_set


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() side effects on the root logger"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
