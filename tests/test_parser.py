#!/usr/bin/env python3
"""
Tests for the ignore-pattern line parser
"""

import pytest

from gitignore_ls.core.ignore import (
    ParseError,
    ParseErrorReason,
    Rule,
    SegmentKind,
    parse_line,
    parse_lines,
)
from gitignore_ls.core.ignore.parser import renumber, split_segments


@pytest.mark.parametrize("line", ["", "   ", "\t", "# comment", "#!not negation", "\r"])
def test_blank_and_comment_lines_parse_to_none(line):
    """Blank lines and comments carry no semantics"""
    assert parse_line(line, 0) is None


def test_escaped_hash_is_a_pattern():
    rule = parse_line("\\#notes", 0)
    assert isinstance(rule, Rule)
    assert rule.segments[0].kind is SegmentKind.LITERAL
    assert rule.segments[0].text == "#notes"


def test_negation():
    """A leading ! re-includes, an escaped one is literal"""
    rule = parse_line("!keep.log", 4)
    assert rule.negated
    assert rule.pattern == "keep.log"
    assert rule.line_number == 4
    assert rule.display == "!keep.log"

    literal = parse_line("\\!important", 0)
    assert not literal.negated
    assert literal.segments[0].text == "!important"


def test_directory_only_and_anchoring():
    logs = parse_line("logs/", 0)
    assert logs.directory_only
    assert not logs.anchored

    rooted = parse_line("/build", 0)
    assert rooted.anchored
    assert not rooted.directory_only
    assert [s.text for s in rooted.segments] == ["build"]

    nested = parse_line("doc/frotz", 0)
    assert nested.anchored
    assert [s.text for s in nested.segments] == ["doc", "frotz"]


def test_segment_kinds():
    rule = parse_line("src/**/*.py", 0)
    kinds = [segment.kind for segment in rule.segments]
    assert kinds == [SegmentKind.LITERAL, SegmentKind.ANY_DEPTH, SegmentKind.WILDCARD]


def test_mid_segment_double_star_is_an_ordinary_wildcard():
    """Only a whole `**` segment matches across directories"""
    rule = parse_line("a**b", 0)
    assert len(rule.segments) == 1
    assert rule.segments[0].kind is SegmentKind.WILDCARD


def test_escaped_wildcards_become_literals():
    rule = parse_line("\\*.txt", 0)
    assert rule.segments[0].kind is SegmentKind.LITERAL
    assert rule.segments[0].text == "*.txt"


def test_trailing_whitespace_is_stripped_unless_escaped():
    rule = parse_line("foo   ", 0)
    assert rule.pattern == "foo"
    assert rule.trailing_whitespace
    assert rule.span == (0, 3)

    escaped = parse_line("foo\\ ", 0)
    assert not escaped.trailing_whitespace
    assert escaped.segments[0].text == "foo "

    directory = parse_line("foo/  ", 0)
    assert directory.directory_only


def test_carriage_return_is_dropped():
    rule = parse_line("build\r", 0)
    assert rule.pattern == "build"
    assert not rule.trailing_whitespace


def test_leading_whitespace_is_significant():
    rule = parse_line("  foo", 0)
    assert rule.segments[0].text == "  foo"


@pytest.mark.parametrize("line,reason", [
    ("!", ParseErrorReason.EMPTY_PATTERN),
    ("!   ", ParseErrorReason.EMPTY_PATTERN),
    ("/", ParseErrorReason.ROOT_ONLY),
    ("a//b", ParseErrorReason.EMPTY_SEGMENT),
    ("foo\\bar", ParseErrorReason.INVALID_ESCAPE),
    ("foo\\", ParseErrorReason.TRAILING_BACKSLASH),
    ("[abc", ParseErrorReason.UNTERMINATED_CLASS),
    ("a[b/c", ParseErrorReason.UNTERMINATED_CLASS),
    ("[[:nope:]]", ParseErrorReason.INVALID_CLASS),
    ("[z-a]", ParseErrorReason.INVALID_CLASS),
])
def test_malformed_patterns(line, reason):
    """Malformed lines become ParseError values, never exceptions"""
    result = parse_line(line, 7)
    assert isinstance(result, ParseError)
    assert result.reason is reason
    assert result.line_number == 7
    assert result.raw_text == line
    assert result.message


def test_invalid_escape_points_at_the_backslash():
    error = parse_line("dir\\sub", 0)
    assert error.start_column == 3
    assert error.end_column == 5
    assert "'/'" in error.message


def test_parse_is_total_and_idempotent():
    """Every line yields exactly one result and re-parsing yields an equal one"""
    lines = ["*.log", "!keep.log", "# c", "", "/", "a/**/b", "[a-c]?.txt", "foo\\"]
    first = parse_lines(lines)
    second = parse_lines(lines)
    assert len(first) == len(lines)
    assert first == second
    for entry in first:
        assert entry is None or isinstance(entry, (Rule, ParseError))


def test_equivalent_spellings_share_a_key():
    """Structural identity ignores how anchoring was spelled"""
    assert parse_line("foo", 0).key == parse_line("**/foo", 1).key
    assert parse_line("/a/b", 0).key == parse_line("a/b", 1).key
    assert parse_line("a/**/**/b", 0).key == parse_line("a/**/b", 1).key
    assert parse_line("foo", 0).key != parse_line("foo/", 1).key
    assert parse_line("foo", 0).key != parse_line("!foo", 1).key


def test_renumber_moves_entries():
    rule = parse_line("*.tmp", 2)
    moved = renumber(rule, 5)
    assert moved.line_number == 5
    assert moved.pattern == rule.pattern
    assert rule.line_number == 2
    assert renumber(None, 3) is None


def test_slash_inside_a_closed_class_does_not_split():
    """`a[b/c]d` is one component, anchored because it contains a slash"""
    rule = parse_line("a[b/c]d", 0)
    assert isinstance(rule, Rule)
    assert len(rule.segments) == 1
    assert rule.segments[0].kind is SegmentKind.WILDCARD
    assert rule.anchored


def test_split_segments_respects_escapes_and_classes():
    assert split_segments("a/b") == ["a", "b"]
    assert split_segments("x[/]y/z") == ["x[/]y", "z"]
    assert split_segments("[!]/]a/b") == ["[!]/]a", "b"]
    assert split_segments("a[b/c") == ["a[b", "c"]
