"""
Per-document session: text buffer, parsed lines, rule set and cached diagnostics
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..errors import StaleVersionError
from ..ignore.analyzer import Diagnostic, analyze
from ..ignore.parser import ParseError, ParseResult, Rule, parse_line, parse_lines, renumber
from ..ignore.rule_set import RuleSet
from .text_buffer import Position, TextBuffer, TextEdit, to_character, to_column
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)


class DocumentState(Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a session at one version, safe to analyze on any thread"""
    uri: str
    version: int
    lines: Tuple[str, ...]
    entries: Tuple[ParseResult, ...]
    rule_set: RuleSet
    parse_errors: Tuple[ParseError, ...]
    encoding: str
    generation: int = 0

    def line(self, line_number: int) -> str:
        if 0 <= line_number < len(self.lines):
            return self.lines[line_number]
        return ""

    def entry(self, line_number: int) -> ParseResult:
        if 0 <= line_number < len(self.entries):
            return self.entries[line_number]
        return None

    def resolve(self, position: Position) -> Tuple[int, int]:
        """Clamp a client position to (line, code-point column)"""
        if position.line < 0:
            return 0, 0
        if position.line >= len(self.lines):
            last = len(self.lines) - 1
            return last, len(self.lines[last])
        return position.line, to_column(self.lines[position.line], position.character, self.encoding)

    def encode_column(self, line_number: int, column: int) -> int:
        """Convert a code-point column into the client's position encoding"""
        return to_character(self.line(line_number), column, self.encoding)


def analyze_snapshot(snapshot: DocumentSnapshot) -> List[Diagnostic]:
    return analyze(snapshot.rule_set, snapshot.parse_errors)


class DocumentSession:
    """
    Single-writer record for one open document.

    Mutated only through apply_changes(), in the order the protocol delivers
    changes; the version must strictly increase.
    """

    def __init__(self, uri: str, text: str, version: int, encoding: str, generation: int = 0):
        self.uri = uri
        self.version = version
        self.generation = generation
        self.state = DocumentState.OPEN
        self._lock = threading.Lock()
        self._buffer = TextBuffer(text, encoding)
        self._entries: List[ParseResult] = parse_lines(list(self._buffer.lines))
        self._rule_set = RuleSet()
        self._parse_errors: Tuple[ParseError, ...] = ()
        self._diagnostics: Optional[List[Diagnostic]] = None
        self._diagnostics_version: Optional[int] = None
        self._rebuild()

    @property
    def encoding(self) -> str:
        return self._buffer.encoding

    @property
    def text(self) -> str:
        with self._lock:
            return self._buffer.text

    def _rebuild(self):
        self._rule_set = RuleSet(entry for entry in self._entries if isinstance(entry, Rule))
        self._parse_errors = tuple(entry for entry in self._entries if isinstance(entry, ParseError))
        self._diagnostics = None
        self._diagnostics_version = None

    def _snapshot(self) -> DocumentSnapshot:
        return DocumentSnapshot(
            uri=self.uri,
            version=self.version,
            lines=tuple(self._buffer.lines),
            entries=tuple(self._entries),
            rule_set=self._rule_set,
            parse_errors=self._parse_errors,
            encoding=self._buffer.encoding,
            generation=self.generation,
        )

    def snapshot(self) -> DocumentSnapshot:
        with self._lock:
            return self._snapshot()

    def _apply_edit(self, edit: TextEdit):
        span = self._buffer.apply(edit)
        lines = self._buffer.lines
        fresh = [
            parse_line(lines[span.start + offset], span.start + offset)
            for offset in range(span.inserted)
        ]
        tail = self._entries[span.start + span.removed:]
        if span.delta:
            first = span.start + span.inserted
            tail = [renumber(entry, first + offset) for offset, entry in enumerate(tail)]
        self._entries[span.start:] = fresh + tail
        logger.trace(
            f"{self.uri}: reparsed lines {span.start}-{span.start + span.inserted - 1}, "
            f"shifted {len(tail) if span.delta else 0} lines by {span.delta}"
        )

    def apply_changes(self, version: int, edits: Sequence[TextEdit]) -> DocumentSnapshot:
        """
        Apply ordered edits and re-parse only the touched lines

        Args:
            version: Editor-supplied version, must exceed the current one
            edits: Edits in the order the editor sent them

        Returns:
            Snapshot at the new version

        Raises:
            StaleVersionError: If version is not newer than the session
        """
        with self._lock:
            if version <= self.version:
                raise StaleVersionError(self.uri, version, self.version)
            for edit in edits:
                self._apply_edit(edit)
            self.version = version
            self._rebuild()
            return self._snapshot()

    def diagnostics(self) -> List[Diagnostic]:
        """Diagnostics for the current version, computed on first request"""
        with self._lock:
            if self._diagnostics is None or self._diagnostics_version != self.version:
                self._diagnostics = analyze(self._rule_set, self._parse_errors)
                self._diagnostics_version = self.version
            return list(self._diagnostics)

    def _owns(self, snapshot: DocumentSnapshot) -> bool:
        return (
            self.state is DocumentState.OPEN
            and snapshot.generation == self.generation
            and snapshot.version == self.version
        )

    def is_current(self, snapshot: DocumentSnapshot) -> bool:
        """Whether the snapshot was taken from this session at its current version"""
        with self._lock:
            return self._owns(snapshot)

    def cached_diagnostics(self, snapshot: DocumentSnapshot) -> Optional[List[Diagnostic]]:
        """Diagnostics already computed for the snapshot's version, without analyzing"""
        with self._lock:
            if not self._owns(snapshot) or self._diagnostics_version != self.version:
                return None
            if self._diagnostics is None:
                return None
            return list(self._diagnostics)

    def store_diagnostics(self, snapshot: DocumentSnapshot, diagnostics: List[Diagnostic]) -> bool:
        """
        Cache diagnostics computed elsewhere from one of this session's snapshots

        A snapshot from an earlier session of the same URI is rejected even when
        the version numbers agree.

        Returns:
            True if the snapshot is still current and the result was stored
        """
        with self._lock:
            if not self._owns(snapshot):
                return False
            self._diagnostics = list(diagnostics)
            self._diagnostics_version = snapshot.version
            return True

    def close(self):
        with self._lock:
            self.state = DocumentState.CLOSED
            self._diagnostics = None
