"""
Structural relations between rules

Every check here is sound but incomplete: a True answer is a proof over the
pattern structure, a False answer only means the relation could not be shown.
"""

from functools import lru_cache
from typing import Dict, List, Optional, Sequence, Tuple

from .matcher import char_matches, matches, tokens_match
from .parser import GlobToken, Rule, Segment, SegmentKind, TokenKind


def _token_subsumes(outer: GlobToken, inner: GlobToken) -> bool:
    """Whether every single character matched by inner is matched by outer"""
    if outer.kind is TokenKind.ANY_CHAR:
        return inner.kind in (TokenKind.ANY_CHAR, TokenKind.CHAR, TokenKind.CLASS)
    if outer.kind is TokenKind.CHAR:
        return inner.kind is TokenKind.CHAR and inner.value == outer.value
    if inner.kind is TokenKind.CHAR:
        return char_matches(outer, inner.value)
    return inner == outer


def tokens_subsume(outer: Sequence[GlobToken], inner: Sequence[GlobToken]) -> bool:
    """Glob inclusion by token simulation; a star in outer absorbs any run of inner"""
    memo: Dict[Tuple[int, int], bool] = {}

    def walk(i: int, j: int) -> bool:
        key = (i, j)
        if key in memo:
            return memo[key]
        if i == len(outer):
            result = j == len(inner)
        elif outer[i].kind is TokenKind.STAR:
            result = any(walk(i + 1, k) for k in range(j, len(inner) + 1))
        elif j == len(inner) or inner[j].kind is TokenKind.STAR:
            result = False
        else:
            result = _token_subsumes(outer[i], inner[j]) and walk(i + 1, j + 1)
        memo[key] = result
        return result

    return walk(0, 0)


def segment_subsumes(outer: Segment, inner: Segment) -> bool:
    """Whether every path component matched by inner is matched by outer"""
    if outer.kind is SegmentKind.LITERAL:
        return inner.kind is SegmentKind.LITERAL and inner.text == outer.text
    if inner.kind is SegmentKind.LITERAL:
        return tokens_match(outer.tokens, inner.text)
    return outer == inner or tokens_subsume(outer.tokens, inner.tokens)


@lru_cache(maxsize=8192)
def sequence_subsumes(outer: Tuple[Segment, ...], inner: Tuple[Segment, ...]) -> bool:
    """
    Language inclusion over effective segment sequences.

    An any-depth element of outer may absorb any number of inner elements.
    An any-depth element of inner facing a fixed element of outer cannot be
    proven and yields False.
    """
    memo: Dict[Tuple[int, int], bool] = {}

    def walk(i: int, j: int) -> bool:
        key = (i, j)
        if key in memo:
            return memo[key]
        if j == len(inner):
            result = all(element.is_any_depth for element in outer[i:])
        elif i == len(outer):
            result = False
        elif outer[i].is_any_depth:
            result = any(walk(i + 1, k) for k in range(j, len(inner) + 1))
        elif inner[j].is_any_depth:
            result = False
        else:
            result = segment_subsumes(outer[i], inner[j]) and walk(i + 1, j + 1)
        memo[key] = result
        return result

    return walk(0, 0)


def rule_subsumes(outer: Rule, inner: Rule) -> bool:
    """
    Whether outer matches every path that inner matches, ignoring sign

    Args:
        outer: Candidate broader rule
        inner: Candidate narrower rule
    """
    if outer.directory_only and not inner.directory_only:
        return False
    return sequence_subsumes(outer.effective_segments, inner.effective_segments)


def minimum_depth(elements: Sequence[Segment]) -> int:
    return sum(1 for element in elements if not element.is_any_depth)


def _sample_class_char(token: GlobToken) -> Optional[str]:
    candidates = [low for low, _ in token.ranges] + list('xyzabc019_-.')
    for candidate in candidates:
        if char_matches(token, candidate):
            return candidate
    return None


def _sample_component(segment: Segment) -> Optional[str]:
    if segment.kind is SegmentKind.LITERAL:
        return segment.text
    pieces: List[str] = []
    star_used = False
    for token in segment.tokens:
        if token.kind is TokenKind.CHAR:
            pieces.append(token.value)
        elif token.kind is TokenKind.STAR:
            if not star_used:
                pieces.append("example")
                star_used = True
        elif token.kind is TokenKind.ANY_CHAR:
            pieces.append("x")
        else:
            char = _sample_class_char(token)
            if char is None:
                return None
            pieces.append(char)
    return ''.join(pieces) or None


def sample_path(rule: Rule) -> Optional[str]:
    """
    Synthesize a concrete path the rule matches

    Args:
        rule: Rule to instantiate

    Returns:
        A relative path verified to match the rule, or None
    """
    components: List[str] = []
    last = len(rule.segments) - 1
    for index, segment in enumerate(rule.segments):
        if segment.is_any_depth:
            if index == last:
                components.append("example")
            continue
        component = _sample_component(segment)
        if component is None:
            return None
        components.append(component)

    if not components:
        return None
    path = '/'.join(components)
    if not matches(rule, path, rule.directory_only):
        return None
    return path
