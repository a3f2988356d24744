"""
Pattern engine for .gitignore-style ignore files

This package provides:
- A line parser producing immutable Rule values or ParseError values
- A per-rule matcher with `**`, anchoring and directory-only semantics
- A RuleSet applying last-match-wins across a document
- A diagnostic analyzer for shadowed, duplicate and always-negated rules
"""

from .parser import (
    GlobToken,
    ParseError,
    ParseErrorReason,
    Rule,
    Segment,
    SegmentKind,
    TokenKind,
    parse_line,
    parse_lines,
)
from .matcher import matches, split_path
from .rule_set import MatchOutcome, OutcomeStatus, RuleSet
from .relations import rule_subsumes, sample_path
from .analyzer import Diagnostic, DiagnosticKind, Severity, analyze

__all__ = [
    'GlobToken',
    'ParseError',
    'ParseErrorReason',
    'Rule',
    'Segment',
    'SegmentKind',
    'TokenKind',
    'parse_line',
    'parse_lines',
    'matches',
    'split_path',
    'MatchOutcome',
    'OutcomeStatus',
    'RuleSet',
    'rule_subsumes',
    'sample_path',
    'Diagnostic',
    'DiagnosticKind',
    'Severity',
    'analyze',
]
