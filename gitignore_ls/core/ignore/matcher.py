"""
Pattern matcher: decides whether a single Rule matches a candidate path

Matching is case-sensitive regardless of the host filesystem, and never
touches the filesystem; callers say whether the candidate is a directory.
"""

import re
from functools import lru_cache
from typing import Dict, Pattern, Sequence, Tuple

from pathspec.util import normalize_file

from .parser import GlobToken, Rule, Segment, SegmentKind, TokenKind

# Character sets for POSIX bracket classes, already escaped for a regex class
_POSIX_SETS = {
    'alnum': 'a-zA-Z0-9',
    'alpha': 'a-zA-Z',
    'blank': ' \\t',
    'cntrl': '\\x00-\\x1f\\x7f',
    'digit': '0-9',
    'graph': '!-~',
    'lower': 'a-z',
    'print': ' -~',
    'punct': '!-/:-@\\[-`{-~',
    'space': ' \\t\\n\\r\\f\\v',
    'upper': 'A-Z',
    'xdigit': '0-9A-Fa-f',
}


def split_path(candidate_path: str) -> Tuple[str, ...]:
    """
    Normalize a candidate path into its components

    Args:
        candidate_path: Path relative to the directory holding the ignore file

    Returns:
        Tuple of non-empty path components
    """
    normalized = normalize_file(candidate_path)
    return tuple(part for part in normalized.strip('/').split('/') if part and part != '.')


def _class_regex(token: GlobToken) -> str:
    body = []
    for low, high in token.ranges:
        if low == high:
            body.append(re.escape(low))
        else:
            body.append(f"{re.escape(low)}-{re.escape(high)}")
    for name in token.named:
        body.append(_POSIX_SETS[name])
    return f"[{'^' if token.negated else ''}{''.join(body)}]"


@lru_cache(maxsize=1024)
def _class_pattern(token: GlobToken) -> Pattern:
    return re.compile(_class_regex(token), re.DOTALL)


def char_matches(token: GlobToken, char: str) -> bool:
    """Whether a non-star token matches a single character"""
    if token.kind is TokenKind.CHAR:
        return char == token.value
    if token.kind is TokenKind.ANY_CHAR:
        return char != '/'
    if token.kind is TokenKind.CLASS:
        return char != '/' and _class_pattern(token).fullmatch(char) is not None
    return False


def tokens_match(tokens: Sequence[GlobToken], name: str) -> bool:
    """
    Match wildcard tokens against one path component.

    Runs in O(len(tokens) * len(name)) for any number of stars.
    """
    # reachable[j]: the tokens consumed so far can match name[:j]
    reachable = [True] + [False] * len(name)
    for token in tokens:
        if token.kind is TokenKind.STAR:
            seen = False
            step = []
            for j, ok in enumerate(reachable):
                seen = seen or ok
                step.append(seen)
        else:
            step = [False] + [
                reachable[j] and char_matches(token, char) for j, char in enumerate(name)
            ]
        reachable = step
        if not any(reachable):
            return False
    return reachable[-1]


def segment_matches(segment: Segment, name: str) -> bool:
    """Match one path component against a single-segment matcher"""
    if segment.kind is SegmentKind.LITERAL:
        return name == segment.text
    if segment.kind is SegmentKind.WILDCARD:
        return tokens_match(segment.tokens, name)
    return True


def match_sequence(elements: Sequence[Segment], parts: Sequence[str]) -> bool:
    """
    Align a segment sequence against path components.

    Any-depth elements consume zero or more components, with backtracking.
    """
    memo: Dict[Tuple[int, int], bool] = {}

    def walk(i: int, j: int) -> bool:
        key = (i, j)
        if key in memo:
            return memo[key]
        if i == len(elements):
            result = j == len(parts)
        elif elements[i].kind is SegmentKind.ANY_DEPTH:
            result = any(walk(i + 1, k) for k in range(j, len(parts) + 1))
        elif j == len(parts):
            result = False
        else:
            result = segment_matches(elements[i], parts[j]) and walk(i + 1, j + 1)
        memo[key] = result
        return result

    return walk(0, 0)


def matches_parts(rule: Rule, parts: Sequence[str], is_directory: bool) -> bool:
    """Like matches() for a path that is already split into components"""
    if not parts:
        return False
    if rule.directory_only and not is_directory:
        return False
    return match_sequence(rule.effective_segments, parts)


def matches(rule: Rule, candidate_path: str, is_directory: bool) -> bool:
    """
    Decide whether a rule matches a path, independent of other rules

    Args:
        rule: Parsed rule
        candidate_path: Path relative to the ignore file's directory
        is_directory: Whether the path names a directory

    Returns:
        True if the rule matches the path itself
    """
    return matches_parts(rule, split_path(candidate_path), is_directory)
