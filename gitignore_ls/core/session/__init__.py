"""
Document sessions: incremental text buffers, versioned snapshots and the
manager that owns them
"""

from .text_buffer import EditSpan, Position, TextBuffer, TextEdit, TextRange
from .document import DocumentSession, DocumentSnapshot, DocumentState, analyze_snapshot
from .manager import SessionManager

__all__ = [
    'EditSpan',
    'Position',
    'TextBuffer',
    'TextEdit',
    'TextRange',
    'DocumentSession',
    'DocumentSnapshot',
    'DocumentState',
    'analyze_snapshot',
    'SessionManager',
]
