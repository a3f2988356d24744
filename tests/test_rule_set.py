#!/usr/bin/env python3
"""
Tests for last-match-wins evaluation across a document
"""

import pytest

from gitignore_ls.core.ignore import MatchOutcome, OutcomeStatus, RuleSet, parse_line


def test_negation_round_trip(rule_set_from):
    """`*.log` then `!keep.log`: keep.log included, other logs ignored"""
    rules = rule_set_from(["*.log", "!keep.log"])
    assert rules.effective_outcome("keep.log") == MatchOutcome.included(1)
    assert rules.effective_outcome("other.log") == MatchOutcome.ignored(0)
    assert rules.effective_outcome("main.py") == MatchOutcome.unmatched()


def test_last_matching_rule_wins_regardless_of_specificity(rule_set_from):
    rules = rule_set_from(["debug.log", "!*.log", "*.log"])
    assert rules.effective_outcome("debug.log") == MatchOutcome.ignored(2)

    rules = rule_set_from(["*.log", "!debug.log"])
    assert rules.effective_outcome("logs/debug.log").status is OutcomeStatus.INCLUDED


def test_removing_non_matching_rules_keeps_the_outcome(rule_set_from):
    lines = ["*.log", "build/", "!keep.log", "*.tmp"]
    full = rule_set_from(lines)
    trimmed = RuleSet(r for r in full if r.line_number in (0, 2))
    for path in ("keep.log", "a.log"):
        assert full.effective_outcome(path) == trimmed.effective_outcome(path)


def test_ignored_directory_covers_its_contents(rule_set_from):
    rules = rule_set_from(["node_modules/"])
    assert rules.effective_outcome("node_modules", is_directory=True) == MatchOutcome.ignored(0)
    assert rules.effective_outcome("node_modules/react/index.js") == MatchOutcome.ignored(0)
    assert rules.effective_outcome("node_modules") == MatchOutcome.unmatched()


def test_reinclusion_under_an_ignored_directory_reports_the_block(rule_set_from):
    """The deciding rule is the negation, and the excluded parent is reported"""
    rules = rule_set_from(["node_modules/", "!node_modules/keep/"])
    outcome = rules.effective_outcome("node_modules/keep/file.js", is_directory=False)
    assert outcome.status is OutcomeStatus.INCLUDED
    assert outcome.line_number == 1
    assert outcome.blocked_by == 0
    assert outcome.blocked_directory == "node_modules"
    assert "never looks inside" in outcome.describe()


def test_reincluded_directory_is_not_blocked(rule_set_from):
    rules = rule_set_from(["build/", "!build/"])
    outcome = rules.effective_outcome("build/app.js")
    assert outcome == MatchOutcome.included(1)


def test_all_matching_rules_in_document_order(rule_set_from):
    rules = rule_set_from(["*.log", "# comment", "logs/", "!logs/keep.log", "*.tmp"])
    matching = rules.all_matching_rules("logs/keep.log")
    assert [rule.line_number for rule in matching] == [0, 2, 3]
    assert rules.all_matching_rules("") == []


def test_lookup_by_line(rule_set_from):
    rules = rule_set_from(["a", "", "b"])
    assert len(rules) == 2
    assert rules.get(2).pattern == "b"
    assert rules.get(1) is None


def test_rules_must_be_in_line_order():
    with pytest.raises(ValueError):
        RuleSet([parse_line("b", 3), parse_line("a", 1)])


def test_describe_uses_one_based_lines():
    assert MatchOutcome.ignored(0).describe() == "ignored by line 1"
    assert MatchOutcome.included(4).describe() == "included by line 5"
    assert MatchOutcome.unmatched().describe() == "not matched by any rule"
