"""
Session manager: the single owner of the URI -> DocumentSession mapping
"""

import threading
from typing import Dict, List, Optional, Sequence

from ..constants import DEFAULT_POSITION_ENCODING
from ..errors import StaleVersionError, UnknownDocumentError
from ..features.completions import CompletionCandidate, generate_completions
from ..features.hover import HoverInfo, generate_hover
from ..ignore.analyzer import Diagnostic
from ..ignore.rule_set import MatchOutcome
from .document import DocumentSession, DocumentSnapshot
from .text_buffer import Position, TextEdit
from gitignore_ls.utils import get_logger

logger = get_logger(__name__)


class SessionManager:
    """
    Tracks open documents and routes every per-document operation.

    The map itself is guarded by a re-entrant lock; each session carries its
    own lock, so distinct documents never contend beyond the lookup.
    """

    def __init__(self):
        self._sessions: Dict[str, DocumentSession] = {}
        self._lock = threading.RLock()
        self._stale_changes = 0
        self._published = 0
        self._superseded = 0
        self._generation = 0

    def _open_session(self, uri: str) -> Optional[DocumentSession]:
        with self._lock:
            return self._sessions.get(uri)

    def _session(self, uri: str) -> DocumentSession:
        session = self._open_session(uri)
        if session is None:
            raise UnknownDocumentError(uri)
        return session

    def open_document(self, uri: str, text: str, version: int,
                      position_encoding: Optional[str] = None) -> DocumentSnapshot:
        """
        Create a session from the full document text

        Args:
            uri: Document URI
            text: Full text
            version: Editor-supplied version
            position_encoding: Encoding of client positions, utf-16 by default

        Returns:
            Snapshot of the new session
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
        session = DocumentSession(
            uri, text, version, position_encoding or DEFAULT_POSITION_ENCODING, generation
        )
        with self._lock:
            previous = self._sessions.get(uri)
            if previous is not None:
                logger.warning(f"Document {uri} opened twice; replacing the existing session")
                previous.close()
            self._sessions[uri] = session
        snapshot = session.snapshot()
        logger.info(
            f"Opened {uri} (version {version}): {len(snapshot.rule_set)} rules, "
            f"{len(snapshot.parse_errors)} parse errors"
        )
        return snapshot

    def change_document(self, uri: str, version: int, edits: Sequence[TextEdit]) -> DocumentSnapshot:
        """
        Apply ordered edits to an open document

        Args:
            uri: Document URI
            version: New version, must exceed the current one
            edits: Range replacements in the order the editor sent them

        Returns:
            Snapshot at the new version

        Raises:
            UnknownDocumentError: If the document is not open
            StaleVersionError: If version is not newer than the session
        """
        session = self._session(uri)
        try:
            return session.apply_changes(version, edits)
        except StaleVersionError:
            with self._lock:
                self._stale_changes += 1
            raise

    def close_document(self, uri: str):
        """
        Destroy the session for a document

        Raises:
            UnknownDocumentError: If the document is not open
        """
        with self._lock:
            session = self._sessions.pop(uri, None)
        if session is None:
            raise UnknownDocumentError(uri)
        session.close()
        logger.info(f"Closed {uri}")

    def get_snapshot(self, uri: str) -> DocumentSnapshot:
        return self._session(uri).snapshot()

    def get_diagnostics(self, uri: str) -> List[Diagnostic]:
        """Ordered diagnostics for the current version of a document"""
        return self._session(uri).diagnostics()

    def is_current(self, snapshot: DocumentSnapshot) -> bool:
        """Whether the snapshot still describes the open document"""
        session = self._open_session(snapshot.uri)
        return session is not None and session.is_current(snapshot)

    def cached_diagnostics(self, snapshot: DocumentSnapshot) -> Optional[List[Diagnostic]]:
        """Diagnostics already computed for a current snapshot, or None"""
        session = self._open_session(snapshot.uri)
        if session is None:
            return None
        return session.cached_diagnostics(snapshot)

    def commit_diagnostics(self, snapshot: DocumentSnapshot, diagnostics: List[Diagnostic]) -> bool:
        """
        Store diagnostics computed from a snapshot, unless superseded

        A result is superseded when the document has a newer version, or was
        closed or reopened after the snapshot was taken.

        Args:
            snapshot: Snapshot the diagnostics were computed from
            diagnostics: Computed diagnostics

        Returns:
            True if the result is current and may be published
        """
        session = self._open_session(snapshot.uri)
        stored = session is not None and session.store_diagnostics(snapshot, diagnostics)
        with self._lock:
            if stored:
                self._published += 1
            else:
                self._superseded += 1
        if not stored:
            logger.debug(f"Discarding diagnostics for {snapshot.uri} version {snapshot.version}: superseded")
        return stored

    def get_completions(self, uri: str, position: Position) -> List[CompletionCandidate]:
        snapshot = self.get_snapshot(uri)
        line, column = snapshot.resolve(position)
        return generate_completions(snapshot, line, column)

    def get_hover(self, uri: str, position: Position) -> Optional[HoverInfo]:
        """
        Explain the rule at a position

        Returns:
            HoverInfo, or None for blank and comment lines
        """
        session = self._session(uri)
        snapshot = session.snapshot()
        line, column = snapshot.resolve(position)
        return generate_hover(snapshot, line, column, session.diagnostics())

    def explain_path(self, uri: str, candidate_path: str, is_directory: bool = False) -> MatchOutcome:
        """
        Report which rule decides a path

        Args:
            uri: Document URI
            candidate_path: Path relative to the ignore file's directory
            is_directory: Whether the path names a directory

        Returns:
            MatchOutcome attributed to the deciding rule
        """
        snapshot = self.get_snapshot(uri)
        outcome = snapshot.rule_set.effective_outcome(candidate_path, is_directory)
        logger.debug(f"explain {candidate_path} in {uri}: {outcome.describe()}")
        return outcome

    def open_uris(self) -> List[str]:
        with self._lock:
            return list(self._sessions.keys())

    def get_stats(self) -> Dict[str, int]:
        """
        Get session statistics

        Returns:
            Dictionary with session stats
        """
        with self._lock:
            sessions = list(self._sessions.values())
            stats = {
                'open_documents': len(sessions),
                'rejected_changes': self._stale_changes,
                'published_diagnostics': self._published,
                'superseded_diagnostics': self._superseded,
            }
        stats['total_rules'] = sum(len(s.snapshot().rule_set) for s in sessions)
        return stats
