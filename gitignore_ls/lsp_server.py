"""
Language Server Protocol adapter for gitignore-ls.

Translates protocol notifications and requests into SessionManager
operations and converts results into lsprotocol types. Edits are applied on
the event loop thread in delivery order; diagnostics are computed from
immutable snapshots in a worker pool and only published while their version
is still current.
"""

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from lsprotocol import types
from pygls.exceptions import JsonRpcInvalidParams
from pygls.lsp.server import LanguageServer

from gitignore_ls import __version__
from gitignore_ls.config import ServerConfig
from gitignore_ls.core.constants import (
    COMPLETION_TRIGGER_CHARACTERS,
    DEFAULT_POSITION_ENCODING,
    DIAGNOSTIC_SOURCE,
)
from gitignore_ls.core.errors import StaleVersionError, UnknownDocumentError
from gitignore_ls.core.features import generate_hover
from gitignore_ls.core.ignore.analyzer import Diagnostic, DiagnosticKind
from gitignore_ls.core.ignore.rule_set import MatchOutcome
from gitignore_ls.core.session import (
    DocumentSnapshot,
    Position,
    SessionManager,
    TextEdit,
    TextRange,
    analyze_snapshot,
)
from gitignore_ls.utils import get_logger, log_with_context
from gitignore_ls.utils.logging_setup import resolve_level

logger = get_logger(__name__)

SERVER_NAME = "gitignore-ls"
EXPLAIN_PATH_COMMAND = "gitignore.explainPath"

_UNNECESSARY_KINDS = (DiagnosticKind.DUPLICATE_RULE, DiagnosticKind.SHADOWED_RULE)

PublishFn = Callable[[str, int, List[types.Diagnostic]], None]


def _line_range(snapshot: DocumentSnapshot, line: int, start: int, end: Optional[int]) -> types.Range:
    text = snapshot.line(line).rstrip('\r\n')
    end = len(text) if end is None else end
    return types.Range(
        start=types.Position(line=line, character=snapshot.encode_column(line, start)),
        end=types.Position(line=line, character=snapshot.encode_column(line, end)),
    )


def to_lsp_diagnostic(snapshot: DocumentSnapshot, diagnostic: Diagnostic) -> types.Diagnostic:
    """Convert a core diagnostic into the protocol shape"""
    related = None
    if diagnostic.related_line is not None:
        related_line = diagnostic.related_line
        related = [types.DiagnosticRelatedInformation(
            location=types.Location(
                uri=snapshot.uri,
                range=_line_range(snapshot, related_line, 0, None),
            ),
            message=f"Related rule on line {related_line + 1}",
        )]
    tags = [types.DiagnosticTag.Unnecessary] if diagnostic.kind in _UNNECESSARY_KINDS else None
    return types.Diagnostic(
        range=_line_range(snapshot, diagnostic.line_number, diagnostic.start_column, diagnostic.end_column),
        message=diagnostic.message,
        severity=types.DiagnosticSeverity(int(diagnostic.severity)),
        code=diagnostic.kind.value,
        source=DIAGNOSTIC_SOURCE,
        tags=tags,
        related_information=related,
    )


def to_text_edit(change: Any) -> TextEdit:
    """Convert a content change event; changes without a range replace the document"""
    change_range = getattr(change, "range", None)
    if change_range is None:
        return TextEdit(None, change.text)
    return TextEdit(
        TextRange(
            Position(change_range.start.line, change_range.start.character),
            Position(change_range.end.line, change_range.end.character),
        ),
        change.text,
    )


def outcome_to_dict(outcome: MatchOutcome, snapshot: DocumentSnapshot) -> Dict[str, Any]:
    rule = snapshot.rule_set.get(outcome.line_number) if outcome.line_number is not None else None
    return {
        "status": outcome.status.value,
        "line": outcome.line_number,
        "pattern": rule.display if rule else None,
        "blockedBy": outcome.blocked_by,
        "blockedDirectory": outcome.blocked_directory,
        "description": outcome.describe(),
    }


class DiagnosticsPublisher:
    """
    Computes diagnostics off the event loop and publishes the current ones.

    A result is committed and published with no await in between, so a
    superseded computation can never be published after a newer one.
    """

    def __init__(self, sessions: SessionManager, publish: PublishFn, executor: Executor,
                 disabled_checks: FrozenSet[str] = frozenset()):
        self.sessions = sessions
        self.executor = executor
        self.disabled_checks = disabled_checks
        self._publish = publish

    async def refresh(self, snapshot: DocumentSnapshot) -> bool:
        """
        Analyze a snapshot and publish its diagnostics if still current

        Args:
            snapshot: Snapshot to analyze

        Returns:
            True if diagnostics were published
        """
        if not self.sessions.is_current(snapshot):
            logger.debug(f"Skipping analysis of {snapshot.uri} v{snapshot.version}: already superseded")
            return False
        diagnostics = await self._analyze(snapshot)
        if not self.sessions.commit_diagnostics(snapshot, diagnostics):
            return False
        visible = [d for d in diagnostics if d.kind.value not in self.disabled_checks]
        self._publish(
            snapshot.uri,
            snapshot.version,
            [to_lsp_diagnostic(snapshot, d) for d in visible],
        )
        logger.debug(f"Published {len(visible)} diagnostics for {snapshot.uri} v{snapshot.version}")
        return True

    async def _analyze(self, snapshot: DocumentSnapshot) -> List[Diagnostic]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, analyze_snapshot, snapshot)

    async def diagnostics_for(self, snapshot: DocumentSnapshot) -> List[Diagnostic]:
        """Cached diagnostics for the snapshot, else a fresh analysis in the worker pool"""
        cached = self.sessions.cached_diagnostics(snapshot)
        if cached is not None:
            return cached
        return await self._analyze(snapshot)

    def clear(self, uri: str):
        self._publish(uri, None, [])


class GitignoreLanguageServer(LanguageServer):
    """pygls server holding the session manager and configuration"""

    def __init__(self, config: Optional[ServerConfig] = None):
        super().__init__(
            name=SERVER_NAME,
            version=__version__,
            text_document_sync_kind=types.TextDocumentSyncKind.Incremental,
        )
        self.config = config or ServerConfig()
        self.sessions = SessionManager()
        self.executor = ThreadPoolExecutor(
            max_workers=self.config.analysis_workers,
            thread_name_prefix="gitignore-analysis",
        )
        self.publisher = DiagnosticsPublisher(
            self.sessions, self.publish, self.executor, self.config.disabled_checks
        )

    def publish(self, uri: str, version: Optional[int], diagnostics: List[types.Diagnostic]):
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, version=version, diagnostics=diagnostics)
        )

    def log_to_client(self, message: str, message_type: types.MessageType = types.MessageType.Info):
        self.window_log_message(types.LogMessageParams(type=message_type, message=message))

    def client_position_encoding(self) -> str:
        try:
            encoding = getattr(self.workspace, "position_encoding", None)
        except RuntimeError:
            return DEFAULT_POSITION_ENCODING
        if encoding is None:
            return DEFAULT_POSITION_ENCODING
        return str(getattr(encoding, "value", encoding))

    def apply_config(self, config: ServerConfig):
        if config.log_level != self.config.log_level:
            logging.getLogger().setLevel(resolve_level(config.log_level))
        self.config = config
        self.publisher.disabled_checks = config.disabled_checks
        log_with_context(
            logger, logging.INFO, "Configuration updated",
            log_level=config.log_level,
            disabled_checks=sorted(config.disabled_checks),
            max_completion_items=config.max_completion_items,
        )


def initialize(ls: GitignoreLanguageServer, params: types.InitializeParams):
    client = params.client_info.name if params.client_info else "unknown client"
    logger.info(f"Initializing for {client}")
    if params.initialization_options:
        ls.apply_config(ls.config.with_options(params.initialization_options))


def initialized(ls: GitignoreLanguageServer, params: types.InitializedParams):
    ls.log_to_client(f"{SERVER_NAME} {__version__} server initialized successfully")


async def did_open(ls: GitignoreLanguageServer, params: types.DidOpenTextDocumentParams):
    document = params.text_document
    snapshot = ls.sessions.open_document(
        document.uri, document.text, document.version, ls.client_position_encoding()
    )
    await ls.publisher.refresh(snapshot)


async def did_change(ls: GitignoreLanguageServer, params: types.DidChangeTextDocumentParams):
    uri = params.text_document.uri
    edits = [to_text_edit(change) for change in params.content_changes]
    try:
        snapshot = ls.sessions.change_document(uri, params.text_document.version, edits)
    except StaleVersionError as e:
        logger.debug(str(e))
        return
    except UnknownDocumentError as e:
        logger.error(str(e))
        ls.log_to_client(str(e), types.MessageType.Error)
        return
    await ls.publisher.refresh(snapshot)


def did_close(ls: GitignoreLanguageServer, params: types.DidCloseTextDocumentParams):
    uri = params.text_document.uri
    try:
        ls.sessions.close_document(uri)
    except UnknownDocumentError as e:
        logger.error(str(e))
        ls.log_to_client(str(e), types.MessageType.Error)
    ls.publisher.clear(uri)


def completion(ls: GitignoreLanguageServer, params: types.CompletionParams) -> Optional[types.CompletionList]:
    uri = params.text_document.uri
    position = Position(params.position.line, params.position.character)
    try:
        candidates = ls.sessions.get_completions(uri, position)
        snapshot = ls.sessions.get_snapshot(uri)
    except UnknownDocumentError as e:
        logger.error(str(e))
        return None

    line, column = snapshot.resolve(position)
    cursor = snapshot.encode_column(line, column)
    limit = ls.config.max_completion_items
    items = []
    for index, candidate in enumerate(candidates[:limit]):
        kind = types.CompletionItemKind.Folder if candidate.kind == "path" else types.CompletionItemKind.Value
        items.append(types.CompletionItem(
            label=candidate.label,
            kind=kind,
            detail=candidate.detail,
            sort_text=f"{index:04d}",
            text_edit=types.TextEdit(
                range=types.Range(
                    start=types.Position(line=line, character=snapshot.encode_column(line, candidate.replace_start)),
                    end=types.Position(line=line, character=cursor),
                ),
                new_text=candidate.insert_text,
            ),
        ))
    return types.CompletionList(is_incomplete=len(candidates) > limit, items=items)


async def hover(ls: GitignoreLanguageServer, params: types.HoverParams) -> Optional[types.Hover]:
    uri = params.text_document.uri
    position = Position(params.position.line, params.position.character)
    try:
        snapshot = ls.sessions.get_snapshot(uri)
    except UnknownDocumentError as e:
        logger.error(str(e))
        return None
    line, column = snapshot.resolve(position)
    diagnostics = await ls.publisher.diagnostics_for(snapshot)
    info = generate_hover(snapshot, line, column, diagnostics)
    if info is None:
        return None
    return types.Hover(
        contents=types.MarkupContent(kind=types.MarkupKind.Markdown, value=info.contents),
        range=_line_range(snapshot, info.line_number, info.start_column, info.end_column),
    )


async def did_change_configuration(ls: GitignoreLanguageServer, params: types.DidChangeConfigurationParams):
    ls.apply_config(ls.config.with_options(params.settings))
    for uri in ls.sessions.open_uris():
        try:
            snapshot = ls.sessions.get_snapshot(uri)
        except UnknownDocumentError:
            continue
        await ls.publisher.refresh(snapshot)


def _command_arguments(args: tuple) -> Dict[str, Any]:
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        args = tuple(args[0])
    if len(args) == 1 and isinstance(args[0], dict):
        payload = args[0]
        return {
            "uri": payload.get("uri"),
            "path": payload.get("path"),
            "is_directory": bool(payload.get("isDirectory", False)),
        }
    if len(args) < 2:
        raise JsonRpcInvalidParams(
            message=f"{EXPLAIN_PATH_COMMAND} expects (uri, path, isDirectory)"
        )
    return {
        "uri": args[0],
        "path": args[1],
        "is_directory": bool(args[2]) if len(args) > 2 else False,
    }


def explain_path_command(ls: GitignoreLanguageServer, *args) -> Dict[str, Any]:
    """Report which rule of an open ignore file decides a path"""
    arguments = _command_arguments(args)
    uri, path = arguments["uri"], arguments["path"]
    if not isinstance(uri, str) or not isinstance(path, str):
        raise JsonRpcInvalidParams(message=f"{EXPLAIN_PATH_COMMAND} requires string uri and path")
    try:
        outcome = ls.sessions.explain_path(uri, path, arguments["is_directory"])
        snapshot = ls.sessions.get_snapshot(uri)
    except UnknownDocumentError as e:
        raise JsonRpcInvalidParams(message=str(e))
    return outcome_to_dict(outcome, snapshot)


def shutdown(ls: GitignoreLanguageServer, params: Any = None):
    logger.info(f"Shutting down; session stats: {ls.sessions.get_stats()}")
    ls.executor.shutdown(wait=False)


def create_server(config: Optional[ServerConfig] = None) -> GitignoreLanguageServer:
    """
    Build a server with every handler registered

    Args:
        config: Server configuration, defaults when omitted

    Returns:
        GitignoreLanguageServer ready for start_io() or start_tcp()
    """
    server = GitignoreLanguageServer(config)
    server.feature(types.INITIALIZE)(initialize)
    server.feature(types.INITIALIZED)(initialized)
    server.feature(types.TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(types.TEXT_DOCUMENT_DID_CHANGE)(did_change)
    server.feature(types.TEXT_DOCUMENT_DID_CLOSE)(did_close)
    server.feature(
        types.TEXT_DOCUMENT_COMPLETION,
        types.CompletionOptions(trigger_characters=COMPLETION_TRIGGER_CHARACTERS),
    )(completion)
    server.feature(types.TEXT_DOCUMENT_HOVER)(hover)
    server.feature(types.WORKSPACE_DID_CHANGE_CONFIGURATION)(did_change_configuration)
    server.feature(types.SHUTDOWN)(shutdown)
    server.command(EXPLAIN_PATH_COMMAND)(explain_path_command)
    return server
