#!/usr/bin/env python3
"""
Tests for structural rule relations and sample path synthesis
"""

import pytest

from gitignore_ls.core.ignore import matches, parse_line, rule_subsumes, sample_path
from gitignore_ls.core.ignore.parser import _tokenize
from gitignore_ls.core.ignore.relations import minimum_depth, tokens_subsume


def rule(text):
    return parse_line(text, 0)


@pytest.mark.parametrize("outer,inner", [
    ("*.log", "debug.log"),
    ("*.log", "logs/*.log"),
    ("**/foo", "a/foo"),
    ("*", "a/b"),
    ("build", "build/"),
    ("a/**", "a/b/c"),
    ("?.txt", "[ab].txt"),
    ("[a-z]*", "abc"),
])
def test_subsumption_holds(outer, inner):
    assert rule_subsumes(rule(outer), rule(inner))


@pytest.mark.parametrize("outer,inner", [
    ("debug.log", "*.log"),
    ("a/foo", "foo"),
    ("build/", "build"),
    ("a/**", "a"),
    ("*.txt", "**/x.txt/**"),
    ("[ab].txt", "?.txt"),
])
def test_subsumption_is_not_claimed(outer, inner):
    assert not rule_subsumes(rule(outer), rule(inner))


def test_token_inclusion():
    assert tokens_subsume(_tokenize("a*"), _tokenize("ab*"))
    assert tokens_subsume(_tokenize("*"), _tokenize("a?c"))
    assert not tokens_subsume(_tokenize("a?"), _tokenize("a*"))


def test_minimum_depth_ignores_any_depth_segments():
    assert minimum_depth(rule("a/**/b").effective_segments) == 2
    assert minimum_depth(rule("foo").effective_segments) == 1


@pytest.mark.parametrize("text,expected", [
    ("*.log", "example.log"),
    ("logs/", "logs"),
    ("abc/**", "abc/example"),
    ("**/foo", "foo"),
    ("[[:digit:]]x", "0x"),
    ("file?.txt", "filex.txt"),
])
def test_sample_path_matches_its_rule(text, expected):
    pattern = rule(text)
    path = sample_path(pattern)
    assert path == expected
    assert matches(pattern, path, pattern.directory_only)
