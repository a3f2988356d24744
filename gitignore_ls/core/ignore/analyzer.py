"""
Diagnostic analyzer: derives editor-facing findings from a parsed document

Relationship checks are structural (anchoring, segment sequence, `**`
placement) and never enumerate paths. When a relationship cannot be proven
no diagnostic is produced.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence, Tuple

from .parser import ParseError, Rule, SegmentKind
from .relations import minimum_depth, rule_subsumes
from .rule_set import RuleSet
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)


class DiagnosticKind(Enum):
    PARSE_ERROR = "parse-error"
    SHADOWED_RULE = "shadowed-rule"
    ALWAYS_NEGATED_RULE = "always-negated-rule"
    DUPLICATE_RULE = "duplicate-rule"
    REDUNDANT_NEGATION = "redundant-negation"
    TRAILING_WHITESPACE = "trailing-whitespace"


class Severity(IntEnum):
    """Values follow the protocol's severity numbering"""
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


SEVERITIES = {
    DiagnosticKind.PARSE_ERROR: Severity.ERROR,
    DiagnosticKind.SHADOWED_RULE: Severity.WARNING,
    DiagnosticKind.ALWAYS_NEGATED_RULE: Severity.WARNING,
    DiagnosticKind.DUPLICATE_RULE: Severity.WARNING,
    DiagnosticKind.REDUNDANT_NEGATION: Severity.INFORMATION,
    DiagnosticKind.TRAILING_WHITESPACE: Severity.HINT,
}


@dataclass(frozen=True)
class Diagnostic:
    """
    One finding at a line. Columns are code-point offsets into the line;
    ``end_column`` of None means the end of the line.
    """
    line_number: int
    severity: Severity
    kind: DiagnosticKind
    message: str
    start_column: int = 0
    end_column: Optional[int] = None
    related_line: Optional[int] = None


def _rule_diagnostic(rule: Rule, kind: DiagnosticKind, message: str,
                     related_line: Optional[int] = None) -> Diagnostic:
    start, end = rule.span
    return Diagnostic(
        line_number=rule.line_number,
        severity=SEVERITIES[kind],
        kind=kind,
        message=message,
        start_column=start,
        end_column=end,
        related_line=related_line,
    )


def _parse_error_diagnostic(error: ParseError) -> Diagnostic:
    return Diagnostic(
        line_number=error.line_number,
        severity=Severity.ERROR,
        kind=DiagnosticKind.PARSE_ERROR,
        message=error.message,
        start_column=error.start_column,
        end_column=error.end_column,
    )


def find_overriding_rule(rule: Rule, later: Sequence[Rule]) -> Optional[Tuple[DiagnosticKind, Rule]]:
    """
    Find a later rule that decides every path this rule matches

    Args:
        rule: Earlier rule
        later: Rules after it, in document order

    Returns:
        (kind, later rule) or None when no relationship can be proven
    """
    for other in later:
        if other.key == rule.key:
            return DiagnosticKind.DUPLICATE_RULE, other
    for other in later:
        if other.negated != rule.negated and rule_subsumes(other, rule):
            return DiagnosticKind.ALWAYS_NEGATED_RULE, other
    for other in later:
        if other.negated == rule.negated and rule_subsumes(other, rule):
            return DiagnosticKind.SHADOWED_RULE, other
    return None


def _override_message(kind: DiagnosticKind, rule: Rule, other: Rule) -> str:
    where = f"line {other.line_number + 1} ('{other.display}')"
    if kind is DiagnosticKind.DUPLICATE_RULE:
        return f"Duplicate of {where}; this earlier rule has no effect"
    if kind is DiagnosticKind.ALWAYS_NEGATED_RULE:
        verb = "re-included" if other.negated else "re-excluded"
        return f"Every path matched by '{rule.display}' is {verb} by {where}"
    return f"Rule '{rule.display}' is shadowed by {where}, which matches every path this rule matches"


def find_blocking_directory(rule_set: RuleSet, rule: Rule) -> Optional[Tuple[str, int]]:
    """
    Detect a negation that can never take effect because every path it
    matches lies inside a top-level directory the rule set ignores.

    Only top-level directories are considered, which no nested ignore file
    can override.

    Returns:
        (directory, line number of the excluding rule) or None
    """
    if not rule.negated:
        return None
    elements = rule.effective_segments
    head = elements[0]
    if head.kind is not SegmentKind.LITERAL or minimum_depth(elements[1:]) < 1:
        return None
    outcome = rule_set.effective_outcome(head.text, is_directory=True)
    if not outcome.is_ignored:
        return None
    return head.text, outcome.line_number


def analyze(rule_set: RuleSet, parse_errors: Iterable[ParseError] = ()) -> List[Diagnostic]:
    """
    Produce all diagnostics for a document

    Args:
        rule_set: Rules of the document
        parse_errors: Parse errors encountered while parsing it

    Returns:
        Diagnostics ordered by line and column
    """
    diagnostics = [_parse_error_diagnostic(error) for error in parse_errors]
    rules = rule_set.rules

    for index, rule in enumerate(rules):
        if rule.trailing_whitespace:
            diagnostics.append(Diagnostic(
                line_number=rule.line_number,
                severity=Severity.HINT,
                kind=DiagnosticKind.TRAILING_WHITESPACE,
                message="Trailing whitespace is ignored; escape it as '\\ ' to match it literally",
                start_column=rule.span[1],
                end_column=len(rule.raw_text.rstrip('\r\n')),
            ))

        found = find_overriding_rule(rule, rules[index + 1:])
        if found is not None:
            kind, other = found
            diagnostics.append(_rule_diagnostic(
                rule, kind, _override_message(kind, rule, other), other.line_number
            ))

        blocking = find_blocking_directory(rule_set, rule)
        if blocking is not None:
            directory, line_number = blocking
            diagnostics.append(_rule_diagnostic(
                rule,
                DiagnosticKind.REDUNDANT_NEGATION,
                f"Negation has no effect: directory '{directory}' is ignored by line "
                f"{line_number + 1} and git does not re-include files inside an ignored directory",
                line_number,
            ))

    diagnostics.sort(key=lambda d: (d.line_number, d.start_column, d.severity))
    logger.debug(f"Analyzed {len(rules)} rules: {len(diagnostics)} diagnostics")
    return diagnostics
