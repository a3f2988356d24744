"""
Pattern parser: turns one line of ignore-file text into a Rule or a ParseError

Blank lines and comments carry no semantics and parse to None, but they still
occupy a line number so later rules keep their position in the document.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import List, Optional, Tuple, Union

from ..constants import ESCAPABLE_CHARACTERS
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)


class SegmentKind(Enum):
    """The three kinds of path-component matcher"""
    LITERAL = "literal"
    WILDCARD = "wildcard"
    ANY_DEPTH = "any-depth"


class TokenKind(Enum):
    """Building blocks of a wildcard segment"""
    CHAR = "char"
    STAR = "star"
    ANY_CHAR = "any-char"
    CLASS = "class"


# POSIX bracket classes accepted inside [...]
POSIX_CLASSES = frozenset([
    'alnum', 'alpha', 'blank', 'cntrl', 'digit', 'graph',
    'lower', 'print', 'punct', 'space', 'upper', 'xdigit',
])


@dataclass(frozen=True)
class GlobToken:
    """One element of a wildcard segment"""
    kind: TokenKind
    value: str = ""
    negated: bool = False
    ranges: Tuple[Tuple[str, str], ...] = ()
    named: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Segment:
    """A path-component matcher: literal text, an in-segment glob, or `**`"""
    kind: SegmentKind
    text: str
    tokens: Tuple[GlobToken, ...] = ()

    @property
    def is_any_depth(self) -> bool:
        return self.kind is SegmentKind.ANY_DEPTH


ANY_DEPTH_SEGMENT = Segment(SegmentKind.ANY_DEPTH, "**")
STAR_SEGMENT = Segment(SegmentKind.WILDCARD, "*", (GlobToken(TokenKind.STAR),))


@dataclass(frozen=True)
class Rule:
    """
    One pattern line of an ignore file.

    Rules are immutable; an edit always produces a new Rule for the line.
    ``span`` holds the columns of the effective pattern (including a leading
    ``!``) within ``raw_text``.
    """
    raw_text: str
    line_number: int
    negated: bool
    directory_only: bool
    anchored: bool
    segments: Tuple[Segment, ...]
    pattern: str
    span: Tuple[int, int]
    trailing_whitespace: bool = False

    @cached_property
    def effective_segments(self) -> Tuple[Segment, ...]:
        """
        Segment sequence with uniform `**` semantics.

        Unanchored rules get an implicit leading `**`, runs of `**` collapse,
        and a trailing `**` (one or more segments) becomes `*` followed by
        `**`, so every any-depth element matches zero or more segments.
        """
        elements = list(self.segments)
        if not self.anchored:
            elements.insert(0, ANY_DEPTH_SEGMENT)

        collapsed: List[Segment] = []
        for element in elements:
            if element.is_any_depth and collapsed and collapsed[-1].is_any_depth:
                continue
            collapsed.append(element)

        if collapsed[-1].is_any_depth:
            collapsed[-1:] = [STAR_SEGMENT, ANY_DEPTH_SEGMENT]
        return tuple(collapsed)

    @property
    def key(self) -> Tuple[bool, bool, Tuple[Segment, ...]]:
        """Normalized identity: sign, directory scope and effective segments"""
        return (self.negated, self.directory_only, self.effective_segments)

    @property
    def display(self) -> str:
        return f"!{self.pattern}" if self.negated else self.pattern


class ParseErrorReason(Enum):
    EMPTY_PATTERN = "empty-pattern"
    ROOT_ONLY = "root-only"
    EMPTY_SEGMENT = "empty-segment"
    INVALID_ESCAPE = "invalid-escape"
    TRAILING_BACKSLASH = "trailing-backslash"
    UNTERMINATED_CLASS = "unterminated-class"
    INVALID_CLASS = "invalid-class"


@dataclass(frozen=True)
class ParseError:
    """A pattern line that cannot be turned into a Rule"""
    line_number: int
    raw_text: str
    reason: ParseErrorReason
    message: str
    start_column: int = 0
    end_column: Optional[int] = None


ParseResult = Union[Rule, ParseError, None]


class _PatternSyntaxError(Exception):
    """Internal signal carrying the reason a segment could not be tokenized"""

    def __init__(self, reason: ParseErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


def _is_escaped(text: str, index: int, floor: int = 0) -> bool:
    """True if the character at index is preceded by an odd run of backslashes"""
    backslashes = 0
    position = index - 1
    while position >= floor and text[position] == '\\':
        backslashes += 1
        position -= 1
    return backslashes % 2 == 1


def _strip_trailing_spaces(text: str, floor: int) -> int:
    """Return the end index after dropping unescaped trailing spaces"""
    end = len(text)
    while end > floor and text[end - 1] == ' ' and not _is_escaped(text, end - 1, floor):
        end -= 1
    return end


def _parse_class(raw: str, start: int) -> Tuple[GlobToken, int]:
    """Parse a bracket expression beginning at raw[start] == '['"""
    position = start + 1
    negated = False
    if position < len(raw) and raw[position] in '!^':
        negated = True
        position += 1

    ranges: List[Tuple[str, str]] = []
    named: List[str] = []
    first = True
    while True:
        if position >= len(raw):
            raise _PatternSyntaxError(
                ParseErrorReason.UNTERMINATED_CLASS,
                f"Unterminated character class in '{raw}'"
            )
        char = raw[position]
        if char == ']' and not first:
            return GlobToken(TokenKind.CLASS, negated=negated,
                             ranges=tuple(ranges), named=tuple(named)), position + 1
        first = False

        if raw.startswith('[:', position):
            close = raw.find(':]', position + 2)
            if close != -1:
                name = raw[position + 2:close]
                if name not in POSIX_CLASSES:
                    raise _PatternSyntaxError(
                        ParseErrorReason.INVALID_CLASS,
                        f"Unknown character class '[:{name}:]'"
                    )
                named.append(name)
                position = close + 2
                continue

        if char == '\\':
            low = raw[position + 1]
            position += 2
        else:
            low = char
            position += 1

        if position + 1 < len(raw) and raw[position] == '-' and raw[position + 1] != ']':
            high = raw[position + 1]
            position += 2
            if high == '\\':
                high = raw[position]
                position += 1
            if high < low:
                raise _PatternSyntaxError(
                    ParseErrorReason.INVALID_CLASS,
                    f"Empty character range '{low}-{high}'"
                )
            ranges.append((low, high))
        else:
            ranges.append((low, low))


def _tokenize(raw: str) -> Tuple[GlobToken, ...]:
    tokens: List[GlobToken] = []
    position = 0
    while position < len(raw):
        char = raw[position]
        if char == '\\':
            tokens.append(GlobToken(TokenKind.CHAR, raw[position + 1]))
            position += 2
        elif char == '*':
            tokens.append(GlobToken(TokenKind.STAR))
            position += 1
        elif char == '?':
            tokens.append(GlobToken(TokenKind.ANY_CHAR))
            position += 1
        elif char == '[':
            token, position = _parse_class(raw, position)
            tokens.append(token)
        else:
            tokens.append(GlobToken(TokenKind.CHAR, char))
            position += 1
    return tuple(tokens)


def _class_end(text: str, start: int) -> int:
    """Index just past the bracket expression opening at text[start], or -1 if unclosed"""
    position = start + 1
    if position < len(text) and text[position] in '!^':
        position += 1
    first = True
    while position < len(text):
        char = text[position]
        if char == ']' and not first:
            return position + 1
        first = False
        if text.startswith('[:', position):
            close = text.find(':]', position + 2)
            if close != -1:
                position = close + 2
                continue
        position += 2 if char == '\\' else 1
    return -1


def split_segments(body: str) -> List[str]:
    """
    Split a pattern body into path components.

    A `/` inside a closed bracket expression stays in its component, as git
    does for `a[b/c]d`; such a class member can never match a path character.
    """
    pieces = []
    piece_start = 0
    position = 0
    while position < len(body):
        char = body[position]
        if char == '\\':
            position += 2
        elif char == '[':
            close = _class_end(body, position)
            position = close if close != -1 else position + 1
        elif char == '/':
            pieces.append(body[piece_start:position])
            piece_start = position + 1
            position += 1
        else:
            position += 1
    pieces.append(body[piece_start:])
    return pieces


def build_segment(raw: str) -> Segment:
    """
    Build the matcher for one slash-free piece of a pattern.

    Only a segment that is exactly ``**`` is an any-depth matcher; ``a**b``
    is an ordinary wildcard segment.
    """
    if raw == '**':
        return ANY_DEPTH_SEGMENT
    tokens = _tokenize(raw)
    if all(token.kind is TokenKind.CHAR for token in tokens):
        return Segment(SegmentKind.LITERAL, ''.join(token.value for token in tokens))
    return Segment(SegmentKind.WILDCARD, raw, tokens)


def parse_line(line_text: str, line_number: int) -> ParseResult:
    """
    Parse one line of an ignore file

    Args:
        line_text: The line, with or without its line terminator
        line_number: 0-based line index within the document

    Returns:
        Rule for a pattern line, ParseError for a malformed pattern,
        None for blank and comment lines
    """
    text = line_text.rstrip('\r\n')
    if not text.strip() or text.startswith('#'):
        return None

    def error(reason: ParseErrorReason, message: str,
              start: int = 0, end: Optional[int] = None) -> ParseError:
        logger.debug(f"line {line_number + 1}: {message}")
        return ParseError(
            line_number=line_number,
            raw_text=line_text,
            reason=reason,
            message=message,
            start_column=start,
            end_column=len(text) if end is None else end,
        )

    negated = text.startswith('!')
    offset = 1 if negated else 0
    end = _strip_trailing_spaces(text, offset)
    trailing_whitespace = end < len(text)
    body = text[offset:end]

    if not body:
        return error(ParseErrorReason.EMPTY_PATTERN, "Negation '!' is not followed by a pattern")

    position = 0
    while position < len(body):
        if body[position] != '\\':
            position += 1
            continue
        column = offset + position
        if position + 1 >= len(body):
            return error(ParseErrorReason.TRAILING_BACKSLASH,
                         "Pattern ends with a backslash that escapes nothing",
                         column, column + 1)
        escaped = body[position + 1]
        if escaped not in ESCAPABLE_CHARACTERS:
            hint = "; use '/' as the path separator" if escaped != '/' else ""
            return error(ParseErrorReason.INVALID_ESCAPE,
                         f"Invalid escape sequence '\\{escaped}'{hint}",
                         column, column + 2)
        position += 2

    pattern = body
    directory_only = body.endswith('/')
    if directory_only:
        body = body[:-1]
    rooted = body.startswith('/')
    if rooted:
        body = body[1:]

    if not body:
        if directory_only or rooted:
            return error(ParseErrorReason.ROOT_ONLY,
                         "Pattern '/' matches only the repository root and has no effect")
        return error(ParseErrorReason.EMPTY_PATTERN, "Pattern is empty")

    pieces = split_segments(body)
    if any(piece == '' for piece in pieces):
        return error(ParseErrorReason.EMPTY_SEGMENT,
                     "Pattern contains an empty path segment ('//')")

    try:
        segments = tuple(build_segment(piece) for piece in pieces)
    except _PatternSyntaxError as e:
        return error(e.reason, e.message)

    return Rule(
        raw_text=line_text,
        line_number=line_number,
        negated=negated,
        directory_only=directory_only,
        anchored=rooted or '/' in body,
        segments=segments,
        pattern=pattern,
        span=(0, end),
        trailing_whitespace=trailing_whitespace,
    )


def renumber(entry: ParseResult, line_number: int) -> ParseResult:
    """Return the same parse result moved to another line"""
    if entry is None or entry.line_number == line_number:
        return entry
    return dataclasses.replace(entry, line_number=line_number)


def parse_lines(lines: List[str]) -> List[ParseResult]:
    """Parse every line of a document, keeping one entry per line"""
    return [parse_line(line, number) for number, line in enumerate(lines)]
