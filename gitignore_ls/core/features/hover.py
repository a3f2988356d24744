"""
Hover explanations for rule lines
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..ignore.analyzer import Diagnostic, Severity
from ..ignore.parser import ParseError, Rule, Segment, SegmentKind
from ..ignore.relations import sample_path

if TYPE_CHECKING:
    from ..session.document import DocumentSnapshot

_SEGMENT_LABELS = {
    SegmentKind.LITERAL: "literal",
    SegmentKind.WILDCARD: "wildcard",
    SegmentKind.ANY_DEPTH: "any depth",
}


@dataclass(frozen=True)
class HoverInfo:
    """Markdown explanation anchored to a code-point column range of one line"""
    line_number: int
    contents: str
    start_column: int
    end_column: int


def _describe_segment(segment: Segment) -> str:
    return f"`{segment.text}` ({_SEGMENT_LABELS[segment.kind]})"


def _describe_rule(rule: Rule) -> List[str]:
    if rule.negated:
        heading = f"**Negated rule** `{rule.display}`: re-includes matching paths"
    else:
        heading = f"**Ignore rule** `{rule.display}`: excludes matching paths"
    scope = "directories only" if rule.directory_only else "files and directories"
    if rule.anchored:
        anchoring = "anchored to the directory containing this file"
    else:
        anchoring = "matches a name at any depth"
    return [
        heading,
        "",
        f"- Scope: {scope}",
        f"- Anchoring: {anchoring}",
        f"- Segments: {', '.join(_describe_segment(s) for s in rule.segments)}",
    ]


def _describe_example(snapshot: 'DocumentSnapshot', rule: Rule) -> List[str]:
    path = sample_path(rule)
    if path is None:
        return []
    rule_set = snapshot.rule_set
    outcome = rule_set.effective_outcome(path, rule.directory_only)
    covering = rule_set.all_matching_rules(path, rule.directory_only)
    shown = f"{path}/" if rule.directory_only else path
    lines = ["", f"**Example:** `{shown}` is {outcome.describe()}"]
    if covering:
        listed = ', '.join(f"line {r.line_number + 1} `{r.display}`" for r in covering)
        lines.append(f"Rules covering it: {listed}")
    return lines


def _describe_diagnostics(diagnostics: Sequence[Diagnostic]) -> List[str]:
    if not diagnostics:
        return []
    lines = ["", "**Diagnostics**"]
    for diagnostic in diagnostics:
        lines.append(f"- {Severity(diagnostic.severity).name.title()}: {diagnostic.message}")
    return lines


def generate_hover(snapshot: 'DocumentSnapshot', line: int, column: int,
                   diagnostics: Sequence[Diagnostic] = ()) -> Optional[HoverInfo]:
    """
    Explain the rule under the cursor

    Args:
        snapshot: Document snapshot
        line: 0-based line of the cursor
        column: Code-point column of the cursor
        diagnostics: Diagnostics for the document, filtered to the line here

    Returns:
        HoverInfo, or None on blank and comment lines
    """
    entry = snapshot.entry(line)
    if entry is None:
        return None
    on_line = [d for d in diagnostics if d.line_number == line]
    text = snapshot.line(line).rstrip('\r\n')

    if isinstance(entry, ParseError):
        contents = [
            f"**Invalid pattern** ({entry.reason.value})",
            "",
            entry.message,
            "",
            "This line is ignored by git.",
        ]
        return HoverInfo(line, '\n'.join(contents), 0, len(text))

    start, end = entry.span
    contents = _describe_rule(entry)
    contents.extend(_describe_diagnostics(on_line))
    contents.extend(_describe_example(snapshot, entry))
    return HoverInfo(line, '\n'.join(contents), start, end)
