"""
Completion candidates for a position in an ignore file
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Tuple

from ..constants import COMMON_PATTERNS
from ..ignore.parser import SegmentKind
from gitignore_ls.utils import get_logger

if TYPE_CHECKING:
    from ..session.document import DocumentSnapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class CompletionCandidate:
    """
    One pattern fragment offered at the cursor.

    ``insert_text`` replaces the line from ``replace_start`` (a code-point
    column) up to the cursor.
    """
    label: str
    insert_text: str
    detail: str
    kind: str
    replace_start: int


def _split_typed(line: str, column: int) -> Tuple[str, int, str]:
    """Return (lead, start, prefix): the typed '!' and '/' markers and the text after them"""
    typed = line[:column]
    start = 0
    if typed.startswith('!'):
        start = 1
    if typed[start:start + 1] == '/':
        start += 1
    return typed[:start], start, typed[start:]


def directory_prefixes(snapshot: 'DocumentSnapshot', exclude_line: int = -1) -> Dict[str, int]:
    """
    Literal directory paths spelled out by rules in the document

    Args:
        snapshot: Document to scan
        exclude_line: Line whose own rule is skipped (the line being edited)

    Returns:
        Mapping of "dir/sub/" to the first line that uses it
    """
    found: Dict[str, int] = {}
    for rule in snapshot.rule_set:
        if rule.line_number == exclude_line:
            continue
        parts: List[str] = []
        for index, segment in enumerate(rule.segments):
            if segment.kind is not SegmentKind.LITERAL:
                break
            parts.append(segment.text)
            is_last = index == len(rule.segments) - 1
            if is_last and not rule.directory_only:
                break
            found.setdefault('/'.join(parts) + '/', rule.line_number)
    return found


def generate_completions(snapshot: 'DocumentSnapshot', line: int, column: int) -> List[CompletionCandidate]:
    """
    Build completion candidates for the cursor position

    Path continuations come first, then common idioms. Both are filtered by
    the text typed on the line so far, ignoring a leading '!' or '/'.

    Args:
        snapshot: Document snapshot
        line: 0-based line of the cursor
        column: Code-point column of the cursor

    Returns:
        Ordered, de-duplicated candidates
    """
    text = snapshot.line(line).rstrip('\r')
    if text.startswith('#'):
        return []
    lead, start, prefix = _split_typed(text, column)

    candidates: List[CompletionCandidate] = []
    seen = set()

    for path, used_on in directory_prefixes(snapshot, exclude_line=line).items():
        if path == prefix or not path.startswith(prefix) or path in seen:
            continue
        seen.add(path)
        candidates.append(CompletionCandidate(
            label=path,
            insert_text=path,
            detail=f"Directory used on line {used_on + 1}",
            kind="path",
            replace_start=start,
        ))

    for group, entries in COMMON_PATTERNS.items():
        for pattern, description in entries:
            core = pattern.lstrip('!')
            if not core.startswith(prefix) or core == prefix:
                continue
            insert_text = pattern if pattern != core and not lead else core
            if insert_text in seen:
                continue
            seen.add(insert_text)
            candidates.append(CompletionCandidate(
                label=pattern,
                insert_text=insert_text,
                detail=f"{group}: {description}",
                kind="idiom",
                replace_start=start,
            ))

    logger.trace(f"{len(candidates)} completions for '{prefix}' at {line}:{column}")
    return candidates
